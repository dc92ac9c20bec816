"""Concurrent, failure-tolerant collection of the context one request needs.

Every source is optional: a source that raises is logged and its field is
left as ``None`` so the caller can still answer with whatever arrived.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from app.collections.chat_session import get_recent_messages
from app.core.background import spawn_detached
from app.core.config import settings
from app.core.province_locations import get_province_location
from app.models.advisory import ContextBundle, InteractionRequest
from app.models.chat_session import Message
from app.models.plant import PlantAnalysis
from app.models.province import Province
from app.models.treatment import TreatmentItem
from app.models.weather import WeatherSnapshot
from app.services.article_service import article_evidence, needs_refresh, refresh_province_articles
from app.services.plant_id_service import identify_plant
from app.services.treatment_service import get_treatment_recommendations
from app.services.weather_service import derive_weather_alerts, get_weather_snapshot

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 10

WeatherFetcher = Callable[[float, float], Awaitable[Optional[WeatherSnapshot]]]
PlantIdentifier = Callable[[str], Awaitable[PlantAnalysis]]
TreatmentLookup = Callable[[Optional[str], Optional[str]], Awaitable[List[TreatmentItem]]]
HistoryLoader = Callable[[str, int], Awaitable[List[Message]]]
ArticleRefresher = Callable[[Province], Awaitable[Any]]


async def _value(value: Any) -> Any:
    return value


class ContextAggregator:
    def __init__(
        self,
        weather_fetcher: WeatherFetcher = get_weather_snapshot,
        plant_identifier: PlantIdentifier = identify_plant,
        treatment_lookup: TreatmentLookup = get_treatment_recommendations,
        history_loader: HistoryLoader = get_recent_messages,
        article_refresher: ArticleRefresher = refresh_province_articles,
        default_location: Optional[Tuple[float, float]] = None,
    ) -> None:
        self._weather_fetcher = weather_fetcher
        self._plant_identifier = plant_identifier
        self._treatment_lookup = treatment_lookup
        self._history_loader = history_loader
        self._article_refresher = article_refresher
        self.default_location = default_location or (
            settings.DEFAULT_WEATHER_LAT,
            settings.DEFAULT_WEATHER_LON,
        )

    @staticmethod
    def _settle(label: str, result: Any) -> Any:
        if isinstance(result, BaseException):
            logger.warning("Context source '%s' unavailable: %r", label, result)
            return None
        return result

    async def _collect(self, fetches: Dict[str, Awaitable[Any]]) -> Dict[str, Any]:
        labels = list(fetches)
        results = await asyncio.gather(*fetches.values(), return_exceptions=True)
        return {label: self._settle(label, result) for label, result in zip(labels, results)}

    async def gather_chat_context(
        self,
        request: InteractionRequest,
        *,
        identify_image: bool,
        crop_hint: Optional[str] = None,
    ) -> ContextBundle:
        fetches: Dict[str, Awaitable[Any]] = {}
        if request.session_id:
            fetches["history"] = self._history_loader(request.session_id, HISTORY_LIMIT)
        if request.weather_hint is not None:
            fetches["weather"] = _value(request.weather_hint)
        else:
            fetches["weather"] = self._weather_fetcher(*self.default_location)
        if identify_image and request.image_ref:
            fetches["analysis"] = self._plant_identifier(request.image_ref)
        elif crop_hint:
            fetches["products"] = self._treatment_lookup(None, crop_hint)

        settled = await self._collect(fetches)
        analysis: Optional[PlantAnalysis] = settled.get("analysis")
        weather: Optional[WeatherSnapshot] = settled.get("weather")

        products = settled.get("products")
        if analysis is not None and analysis.identified:
            disease_name = analysis.disease.name if analysis.disease else None
            products = (
                await self._collect(
                    {"products": self._treatment_lookup(disease_name, analysis.plant.common_name)}
                )
            )["products"]
        elif crop_hint and "products" not in fetches:
            products = (
                await self._collect({"products": self._treatment_lookup(None, crop_hint)})
            )["products"]

        return ContextBundle(
            plant=analysis.plant if analysis and analysis.identified else None,
            disease=analysis.disease if analysis else None,
            is_healthy=analysis.is_healthy if analysis else None,
            analysis=analysis,
            weather=weather,
            alerts=derive_weather_alerts(weather) if weather is not None else None,
            products=products,
            history=settled.get("history"),
        )

    def province_location(self, province: Province) -> Optional[Tuple[float, float]]:
        if province.coordinates is not None:
            return province.coordinates.lat, province.coordinates.lon
        location = get_province_location(province.province_code)
        if location is None:
            return None
        return location.lat, location.lon

    def schedule_article_refresh(self, province: Province) -> Optional[asyncio.Task]:
        if not needs_refresh(province):
            return None
        logger.info("Articles for %s are stale, refreshing in background", province.province_name)
        return spawn_detached(
            self._article_refresher(province),
            name=f"article-refresh-{province.province_code}",
        )

    async def gather_province_context(self, province: Province) -> ContextBundle:
        self.schedule_article_refresh(province)

        location = self.province_location(province)
        weather = None
        if location is None:
            logger.warning("No coordinates for province %s", province.province_code)
        else:
            settled = await self._collect({"weather": self._weather_fetcher(*location)})
            weather = settled["weather"]

        return ContextBundle(
            weather=weather,
            alerts=derive_weather_alerts(weather) if weather is not None else [],
            articles=article_evidence(province),
        )
