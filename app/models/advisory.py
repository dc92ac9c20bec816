from enum import Enum
from typing import Any, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_serializer

from app.models.chat_session import Message
from app.models.llm import LLMMeta
from app.models.plant import DiseaseInfo, PlantAnalysis, PlantIdentity
from app.models.province import ArticleEvidence
from app.models.treatment import TreatmentItem
from app.models.weather import WeatherAlert, WeatherSnapshot

MAX_MESSAGE_LENGTH = 4000


class Region(str, Enum):
    NORTH = "north"
    CENTRAL = "central"
    SOUTH = "south"
    HIGHLANDS = "highlands"
    UNKNOWN = "unknown"


class InteractionType(str, Enum):
    TEXT_ONLY = "text-only"
    IMAGE_ONLY = "image-only"
    IMAGE_TEXT = "image-text"


class InteractionRequest(BaseModel):
    """A chat-analyze request as accepted from the client."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    text: Optional[str] = Field(
        default=None,
        max_length=MAX_MESSAGE_LENGTH,
        validation_alias=AliasChoices("text", "message"),
    )
    image_ref: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("image_ref", "imageRef", "imageUrl", "imageData"),
        serialization_alias="imageRef",
    )
    weather_hint: Optional[WeatherSnapshot] = Field(
        default=None,
        validation_alias=AliasChoices("weather_hint", "weatherHint", "weather"),
        serialization_alias="weatherHint",
    )
    session_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("session_id", "sessionId"),
        serialization_alias="sessionId",
    )
    user_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("user_id", "userId"),
        serialization_alias="userId",
    )

    @field_validator("text", "image_ref", mode="before")
    @classmethod
    def _blank_is_absent(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @property
    def interaction_type(self) -> Optional[InteractionType]:
        if self.image_ref and self.text:
            return InteractionType.IMAGE_TEXT
        if self.image_ref:
            return InteractionType.IMAGE_ONLY
        if self.text:
            return InteractionType.TEXT_ONLY
        return None


class CandidateSet(BaseModel):
    """Allowed crop names for one province and month."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    planting: Tuple[str, ...] = ()
    harvesting: Tuple[str, ...] = ()
    region: Region = Region.UNKNOWN
    has_authoritative_data: bool = Field(
        default=False,
        validation_alias=AliasChoices("has_authoritative_data", "hasAuthoritativeData"),
        serialization_alias="hasAuthoritativeData",
    )


class NoteLink(BaseModel):
    text: str
    url: str


class Note(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str
    links: Optional[List[NoteLink]] = None
    has_links: bool = Field(
        default=False,
        validation_alias=AliasChoices("has_links", "hasLinks"),
        serialization_alias="hasLinks",
    )

    @model_serializer(mode="wrap")
    def _omit_missing_links(self, handler):
        data = handler(self)
        if self.links is None:
            data.pop("links", None)
        return data


class StructuredRecommendation(BaseModel):
    season: Optional[str] = None
    crops: List[str] = Field(default_factory=list)
    harvesting: List[str] = Field(default_factory=list)
    weather: Optional[str] = None
    notes: List[Note] = Field(default_factory=list)


class ContextBundle(BaseModel):
    """Optional context gathered for one request; any field may be missing."""

    plant: Optional[PlantIdentity] = None
    disease: Optional[DiseaseInfo] = None
    is_healthy: Optional[bool] = None
    analysis: Optional[PlantAnalysis] = None
    weather: Optional[WeatherSnapshot] = None
    alerts: Optional[List[WeatherAlert]] = None
    products: Optional[List[TreatmentItem]] = None
    history: Optional[List[Message]] = None
    articles: Optional[List[ArticleEvidence]] = None


class ContextSummary(BaseModel):
    has_history: bool = False
    history_message_count: int = 0
    has_image_analysis: bool = False
    has_product_context: bool = False
    has_weather_context: bool = False
    confidence: Optional[float] = None


class ChatAnalyzeResult(BaseModel):
    """Flow-specific payload of the ``complete`` stream event."""

    type: InteractionType
    response: str
    analysis: Optional[PlantAnalysis] = None
    products: List[TreatmentItem] = Field(default_factory=list)
    weather: Optional[WeatherSnapshot] = None
    context: ContextSummary = Field(default_factory=ContextSummary)
    meta: Optional[LLMMeta] = None
