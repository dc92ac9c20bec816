from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

RELIABLE_CONFIDENCE = 0.7


class PlantIdentity(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    common_name: str = Field(
        validation_alias=AliasChoices("common_name", "commonName"),
        serialization_alias="commonName",
    )
    scientific_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("scientific_name", "scientificName"),
        serialization_alias="scientificName",
    )
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)

    @property
    def reliable(self) -> bool:
        return self.confidence >= RELIABLE_CONFIDENCE

    @property
    def confidence_percent(self) -> int:
        return round(self.confidence * 100)


class DiseaseInfo(BaseModel):
    name: str
    description: Optional[str] = None
    probability: float = Field(default=0.0, ge=0.0, le=1.0)


class PlantAnalysis(BaseModel):
    """Normalized plant identification result for one image."""

    model_config = ConfigDict(populate_by_name=True)

    plant: Optional[PlantIdentity] = None
    disease: Optional[DiseaseInfo] = None
    is_healthy: bool = Field(
        default=True,
        validation_alias=AliasChoices("is_healthy", "isHealthy"),
        serialization_alias="isHealthy",
    )
    confidence: float = 0.0
    error: Optional[str] = None

    @property
    def identified(self) -> bool:
        return self.plant is not None and self.error is None
