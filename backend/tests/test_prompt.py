from conftest import IMAGE_1, LISTING_URL
from dealcheck.core.prompt import IMAGE_NOTE, build_prompt
from dealcheck.schemas.listing import ListingData


def test_fields_are_embedded():
    listing = ListingData(
        title="Max Mara Wool Coat",
        brand="Max Mara",
        price="€45",
        description="Camel wool coat, size 38",
        condition="UsedCondition",
        source_url=LISTING_URL,
    )
    prompt = build_prompt(listing)

    assert "- Title: Max Mara Wool Coat" in prompt
    assert "- Brand: Max Mara" in prompt
    assert "- Price: €45" in prompt
    assert "- Description: Camel wool coat, size 38" in prompt
    assert "- Condition: UsedCondition" in prompt


def test_missing_fields_use_placeholders():
    prompt = build_prompt(ListingData(price="€10", source_url=LISTING_URL))

    assert "- Title: Unknown" in prompt
    assert "- Brand: Unknown" in prompt
    assert "- Description: No description" in prompt
    assert "- Condition: Unknown" in prompt


def test_rubric_and_reply_format():
    prompt = build_prompt(ListingData(title="Coat", source_url=LISTING_URL))

    for line in (
        "5 = Absolute steal",
        "4 = Great deal",
        "3 = Fair price",
        "2 = Slightly overpriced",
        "1 = Overpriced",
    ):
        assert line in prompt
    assert "Armani Exchange vs Giorgio Armani" in prompt
    assert prompt.endswith("RATING: [number]\nASSESSMENT: [your text]")


def test_image_note_only_when_photo_attached():
    listing = ListingData(title="Coat", images=[IMAGE_1], source_url=LISTING_URL)

    assert IMAGE_NOTE in build_prompt(listing, image_attached=True)
    # photos on the page alone do not mean one was sent
    assert IMAGE_NOTE not in build_prompt(listing)
    assert IMAGE_NOTE not in build_prompt(listing, image_attached=False)


def test_braces_in_listing_text_are_kept_literally():
    listing = ListingData(title="Coat {size 38}", description="{}", source_url=LISTING_URL)
    prompt = build_prompt(listing)
    assert "- Title: Coat {size 38}" in prompt
    assert "- Description: {}" in prompt
