from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List


class ListingData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    brand: Optional[str] = None
    price: Optional[str] = None          # e.g. "€45"
    description: Optional[str] = None
    condition: Optional[str] = None      # e.g. "UsedCondition"
    images: List[str] = Field(default_factory=list)  # up to 5, deduplicated
    source_url: str = Field(alias="sourceUrl")


class AnalysisResult(BaseModel):
    rating: int = Field(ge=1, le=5)
    assessment: str
