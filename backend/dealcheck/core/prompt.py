from dealcheck.schemas.listing import ListingData

SYSTEM_PROMPT = "You are an expert at evaluating secondhand clothing deals. Be concise and helpful."

IMAGE_NOTE = (
    "\nA photo of the item is attached. Use it to judge visible condition, "
    "materials and labels, and flag anything that looks inconsistent with the brand.\n"
)

PROMPT_TEMPLATE = """Analyze this Vinted listing and provide a deal rating.

LISTING:
- Title: {title}
- Brand: {brand}
- Price: {price}
- Description: {description}
- Condition: {condition}

Provide:
1. RATING (1-5):
   5 = Absolute steal
   4 = Great deal
   3 = Fair price
   2 = Slightly overpriced
   1 = Overpriced

2. ASSESSMENT (2-4 sentences): Compare to market value. Say how confident you are that the item is authentic and note if it's a budget/diffusion line (e.g., Armani Exchange vs Giorgio Armani). Mention quality indicators.

IMPORTANT: Watch for budget lines being priced as luxury (Armani Exchange, DKNY, Marc by Marc Jacobs, etc.)
{image_note}
Format your response EXACTLY like this:
RATING: [number]
ASSESSMENT: [your text]"""


def build_prompt(listing: ListingData, image_attached: bool = False) -> str:
    """image_attached: a photo part goes out with this prompt."""
    return PROMPT_TEMPLATE.format(
        title=listing.title or "Unknown",
        brand=listing.brand or "Unknown",
        price=listing.price or "Unknown",
        description=listing.description or "No description",
        condition=listing.condition or "Unknown",
        image_note=IMAGE_NOTE if image_attached else "",
    )
