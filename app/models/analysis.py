from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import AliasChoices, BaseModel, Field

from app.models.plant import PlantAnalysis


class AnalysisRecord(BaseModel):
    """Stored plant/disease identification, linked from the user's chat message."""

    id: str = Field(
        default_factory=lambda: uuid4().hex,
        validation_alias=AliasChoices("id", "_id"),
        serialization_alias="_id",
    )
    user_id: Optional[str] = Field(default=None)
    session_id: Optional[str] = Field(default=None)
    source: str = Field(default="plantid")
    input_images: List[str] = Field(default_factory=list)
    result_top: PlantAnalysis
    raw: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=datetime.utcnow)
