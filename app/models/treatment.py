from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class TreatmentCategory(str, Enum):
    CHEMICAL = "chemical"
    BIOLOGICAL = "biological"
    CULTURAL = "cultural"


class TreatmentItem(BaseModel):
    """One catalog entry: a product, a biological method or a cultural practice."""

    category: TreatmentCategory
    title: str = Field(description="Display heading of the group the item belongs to")
    name: str
    description: Optional[str] = None
    active_ingredient: Optional[str] = None
    manufacturer: Optional[str] = None
    dosage: Optional[str] = None
    usage: Optional[str] = None
    materials: Optional[str] = None
    effectiveness: Optional[str] = None
    timeframe: Optional[str] = None
    priority: Optional[str] = None
    image_url: Optional[str] = None
    source: Optional[str] = None
