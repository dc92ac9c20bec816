from datetime import datetime, timezone
from typing import List, Optional

import pytest

from app.models.advisory import CandidateSet, Region
from app.models.llm import LLMMeta, LLMResult, TokenUsage
from app.models.plant import DiseaseInfo, PlantAnalysis, PlantIdentity
from app.models.province import Article, CropMonth, GeoPoint, Province, SoilType
from app.models.weather import (
    CurrentConditions,
    ForecastEntry,
    TemperatureRange,
    WeatherSnapshot,
)


def make_snapshot(
    humidity: float = 70,
    wind_speed: float = 3.0,
    first_min: float = 22,
    first_rain: float = 0.0,
) -> WeatherSnapshot:
    return WeatherSnapshot(
        location_name="Hà Nội",
        current=CurrentConditions(
            temperature=28.5,
            humidity=humidity,
            description="mây rải rác",
            wind_speed=wind_speed,
        ),
        forecast=[
            ForecastEntry(
                date=datetime(2024, 3, 2, tzinfo=timezone.utc),
                temperature=TemperatureRange(min=first_min, max=31),
                description="mưa nhẹ",
                rain=first_rain,
            ),
            ForecastEntry(
                date=datetime(2024, 3, 3, tzinfo=timezone.utc),
                temperature=TemperatureRange(min=23, max=30),
                description="nắng",
            ),
        ],
    )


def make_province(
    code: str = "HN",
    name: str = "Hà Nội",
    calendar: Optional[List[CropMonth]] = None,
    articles: Optional[List[Article]] = None,
    coordinates: Optional[GeoPoint] = None,
) -> Province:
    return Province(
        province_code=code,
        province_name=name,
        coordinates=coordinates,
        soil_types=[SoilType(type="Đất phù sa")],
        crop_calendar=calendar or [],
        articles=articles or [],
    )


def make_analysis(
    name: str = "Cà chua",
    confidence: float = 0.92,
    disease: Optional[str] = None,
) -> PlantAnalysis:
    return PlantAnalysis(
        plant=PlantIdentity(common_name=name, scientific_name="Solanum lycopersicum", confidence=confidence),
        disease=DiseaseInfo(name=disease, probability=0.8) if disease else None,
        is_healthy=disease is None,
        confidence=confidence,
    )


def make_llm_result(content: str) -> LLMResult:
    return LLMResult(
        content=content,
        meta=LLMMeta(model="gemini-test", tokens=TokenUsage(prompt=10, completion=20, total=30)),
    )


class FakeGateway:
    """Stands in for LLMGateway; replays a fixed answer as chunks."""

    def __init__(self, content: str = "", chunks: Optional[List[str]] = None, error: Optional[Exception] = None):
        self.content = content
        self.chunks = chunks if chunks is not None else ([content] if content else [])
        self.error = error
        self.calls = []

    async def generate(self, messages, on_chunk=None) -> LLMResult:
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        if on_chunk is not None:
            for chunk in self.chunks:
                await on_chunk(chunk)
        return make_llm_result(self.content)


@pytest.fixture
def north_candidates() -> CandidateSet:
    return CandidateSet(
        planting=("cà chua", "dưa chuột", "đậu đũa", "rau muống", "rau cải"),
        harvesting=("cải bắp", "cải thìa", "hành tây"),
        region=Region.NORTH,
        has_authoritative_data=False,
    )


@pytest.fixture
def snapshot() -> WeatherSnapshot:
    return make_snapshot()
