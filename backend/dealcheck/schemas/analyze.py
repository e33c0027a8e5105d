from pydantic import BaseModel
from typing import Optional


class AnalyzeRequest(BaseModel):
    url: Optional[str] = None


class ItemSummary(BaseModel):
    title: Optional[str] = None
    brand: Optional[str] = None
    price: Optional[str] = None
    image: Optional[str] = None


class AnalyzeResponse(BaseModel):
    rating: int
    assessment: str
    item: ItemSummary


class ErrorResponse(BaseModel):
    error: str
