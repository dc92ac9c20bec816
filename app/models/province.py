from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.models.weather import ForecastEntry

DEFAULT_DATA_SOURCE = "Open Development Mekong - CC-BY-SA-4.0"


class SoilType(BaseModel):
    type: str
    domsoil: Optional[str] = None
    faosoil: Optional[str] = None


class CropMonth(BaseModel):
    month: int = Field(ge=1, le=12)
    planting: List[str] = Field(default_factory=list)
    harvesting: List[str] = Field(default_factory=list)


class Article(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    url: str
    source: Optional[str] = None
    date: Optional[datetime] = None
    image_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("image_url", "imageUrl"),
        serialization_alias="imageUrl",
    )


class ArticleEvidence(BaseModel):
    """Article reference handed to the model as supporting evidence."""

    title: str
    source: str
    url: str
    summary: str


class GeoPoint(BaseModel):
    lat: float
    lon: float = Field(validation_alias=AliasChoices("lon", "lng"))


class Province(BaseModel):
    """Stored agricultural profile of one province (``province_agriculture``)."""

    model_config = ConfigDict(populate_by_name=True)

    province_code: str = Field(
        validation_alias=AliasChoices("province_code", "provinceCode"),
        serialization_alias="provinceCode",
    )
    province_name: str = Field(
        validation_alias=AliasChoices("province_name", "provinceName"),
        serialization_alias="provinceName",
    )
    coordinates: Optional[GeoPoint] = None
    soil_types: List[SoilType] = Field(
        default_factory=list,
        validation_alias=AliasChoices("soil_types", "soilTypes"),
        serialization_alias="soilTypes",
    )
    crop_calendar: List[CropMonth] = Field(
        default_factory=list,
        validation_alias=AliasChoices("crop_calendar", "cropCalendar"),
        serialization_alias="cropCalendar",
    )
    articles: List[Article] = Field(default_factory=list)
    source: str = DEFAULT_DATA_SOURCE

    def calendar_for(self, month: int) -> Optional[CropMonth]:
        for entry in self.crop_calendar:
            if entry.month == month:
                return entry
        return None


class ProvinceSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    province_code: str = Field(
        validation_alias=AliasChoices("province_code", "provinceCode"),
        serialization_alias="provinceCode",
    )
    province_name: str = Field(
        validation_alias=AliasChoices("province_name", "provinceName"),
        serialization_alias="provinceName",
    )


class ProvinceInfo(BaseModel):
    province_code: str
    province_name: str
    temperature: Optional[float] = None
    weather_description: Optional[str] = None
    weather_forecast: Optional[List[ForecastEntry]] = None
    soil_types: List[str] = Field(default_factory=list)
    soil_details: List[SoilType] = Field(default_factory=list)
    current_month: CropMonth
    articles: List[Article] = Field(default_factory=list)
    source: str = DEFAULT_DATA_SOURCE
