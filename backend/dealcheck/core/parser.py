import re
from typing import Dict

from dealcheck.core.errors import NoAnalysisError
from dealcheck.schemas.listing import AnalysisResult

DEFAULT_RATING = 3  # "Fair Price"
MIN_RATING = 1
MAX_RATING = 5

# Display labels for the front end (not part of the wire response)
RATING_LABELS: Dict[int, str] = {
    5: "Absolute Steal!",
    4: "Great Deal",
    3: "Fair Price",
    2: "Slightly Overpriced",
    1: "Overpriced",
}

_RATING_RE = re.compile(r"RATING:\s*(\d)", re.IGNORECASE)
_ASSESSMENT_RE = re.compile(r"ASSESSMENT:\s*(.+)", re.IGNORECASE | re.DOTALL)
_LEADING_PUNCT_RE = re.compile(r"^\s*[-:]\s*")


def parse_analysis(text: str) -> AnalysisResult:
    """
    Turn the model's free-text reply into a bounded rating and an assessment.

    Expected shape:
        RATING: 4
        ASSESSMENT: Good price for a wool coat in this condition.

    A missing rating reads as 3. A missing ASSESSMENT marker means the whole
    reply (minus the rating line) is the assessment. A reply that leaves
    nothing to show raises NoAnalysisError.
    """
    text = text or ""

    m = _RATING_RE.search(text)
    rating = int(m.group(1)) if m else DEFAULT_RATING

    m = _ASSESSMENT_RE.search(text)
    if m:
        assessment = m.group(1).strip()
    else:
        assessment = _RATING_RE.sub("", text, count=1).strip()

    assessment = _LEADING_PUNCT_RE.sub("", assessment, count=1)
    if not assessment:
        raise NoAnalysisError()

    return AnalysisResult(
        rating=min(MAX_RATING, max(MIN_RATING, rating)),
        assessment=assessment,
    )
