"""
Tests for ContextAggregator: concurrent fetches that tolerate failing sources
"""
import asyncio
from datetime import datetime, timezone

import httpx
import pytest

from app.core.background import drain_detached
from app.models.advisory import InteractionRequest
from app.models.chat_session import Message
from app.models.province import Article, GeoPoint
from app.models.treatment import TreatmentCategory, TreatmentItem
from app.services.context_aggregator import ContextAggregator
from conftest import make_analysis, make_province, make_snapshot

IMAGE = "data:image/jpeg;base64,/9j/4AAQSkZJRg=="


class Sources:
    """Recording fakes for every upstream the aggregator talks to."""

    def __init__(self, weather=True, plant=True, treatment=True, history=True):
        self.ok = {"weather": weather, "plant": plant, "treatment": treatment, "history": history}
        self.weather_calls = []
        self.treatment_calls = []
        self.history_calls = []
        self.refreshed = []

    async def weather(self, lat, lon):
        self.weather_calls.append((lat, lon))
        if not self.ok["weather"]:
            raise httpx.ConnectError("weather service down")
        return make_snapshot(humidity=25)

    async def identify(self, image_ref):
        if not self.ok["plant"]:
            raise RuntimeError("plant id quota exceeded")
        return make_analysis(disease="Bệnh mốc sương")

    async def treatments(self, disease, crop):
        self.treatment_calls.append((disease, crop))
        if not self.ok["treatment"]:
            raise RuntimeError("catalog unavailable")
        return [TreatmentItem(category=TreatmentCategory.CHEMICAL, title="Thuốc Hóa học", name="Ridomil Gold")]

    async def history(self, session_id, limit):
        self.history_calls.append((session_id, limit))
        if not self.ok["history"]:
            raise RuntimeError("mongo timeout")
        return [Message(session_id=session_id, content="Xin chào")]

    async def refresh(self, province):
        self.refreshed.append(province.province_code)

    def aggregator(self):
        return ContextAggregator(
            weather_fetcher=self.weather,
            plant_identifier=self.identify,
            treatment_lookup=self.treatments,
            history_loader=self.history,
            article_refresher=self.refresh,
            default_location=(21.0, 105.8),
        )


# =============================================================================
# Chat context
# =============================================================================
class TestChatContext:

    async def test_all_sources_available(self):
        sources = Sources()
        request = InteractionRequest(text="Cây bị bệnh gì?", image_ref=IMAGE, session_id="s1")
        bundle = await sources.aggregator().gather_chat_context(request, identify_image=True)

        assert bundle.plant.common_name == "Cà chua"
        assert bundle.disease.name == "Bệnh mốc sương"
        assert bundle.is_healthy is False
        assert bundle.weather is not None
        assert [alert.type for alert in bundle.alerts] == ["drought_warning"]
        assert [item.name for item in bundle.products] == ["Ridomil Gold"]
        assert len(bundle.history) == 1
        assert sources.treatment_calls == [("Bệnh mốc sương", "Cà chua")]
        assert sources.history_calls == [("s1", 10)]
        assert sources.weather_calls == [(21.0, 105.8)]

    @pytest.mark.parametrize("failing", ["weather", "plant", "treatment", "history"])
    async def test_one_failing_source_leaves_the_rest(self, failing):
        sources = Sources(**{failing: False})
        request = InteractionRequest(text="Cây bị bệnh gì?", image_ref=IMAGE, session_id="s1")
        bundle = await sources.aggregator().gather_chat_context(request, identify_image=True)

        assert (bundle.weather is None) == (failing == "weather")
        assert (bundle.alerts is None) == (failing == "weather")
        assert (bundle.analysis is None) == (failing == "plant")
        assert (bundle.history is None) == (failing == "history")
        assert (bundle.products is None) == (failing in ("plant", "treatment"))

    async def test_everything_failing_still_returns_a_bundle(self):
        sources = Sources(weather=False, plant=False, treatment=False, history=False)
        request = InteractionRequest(text="Cây bị bệnh gì?", image_ref=IMAGE, session_id="s1")
        bundle = await sources.aggregator().gather_chat_context(request, identify_image=True)
        assert bundle.model_dump(exclude_none=True) == {}

    async def test_text_only_uses_crop_hint_for_products(self):
        sources = Sources()
        request = InteractionRequest(text="Cách chăm sóc cà chua?")
        bundle = await sources.aggregator().gather_chat_context(
            request, identify_image=False, crop_hint="cà chua"
        )
        assert bundle.analysis is None
        assert sources.treatment_calls == [(None, "cà chua")]
        assert bundle.products
        assert sources.history_calls == []
        assert bundle.history is None

    async def test_crop_hint_lookup_runs_alongside_weather(self):
        sources = Sources()
        lookup_started = asyncio.Event()
        record_treatments = sources.treatments

        async def slow_weather(lat, lon):
            await asyncio.wait_for(lookup_started.wait(), timeout=1)
            return make_snapshot(humidity=60)

        async def treatments(disease, crop):
            lookup_started.set()
            return await record_treatments(disease, crop)

        sources.weather = slow_weather
        sources.treatments = treatments
        bundle = await sources.aggregator().gather_chat_context(
            InteractionRequest(text="Bón phân cho lúa"), identify_image=False, crop_hint="lúa"
        )
        assert bundle.weather is not None
        assert sources.treatment_calls == [(None, "lúa")]
        assert bundle.products

    async def test_failed_identification_falls_back_to_crop_hint(self):
        sources = Sources(plant=False)
        request = InteractionRequest(text="Cây cà chua bị gì?", image_ref=IMAGE)
        bundle = await sources.aggregator().gather_chat_context(
            request, identify_image=True, crop_hint="cà chua"
        )
        assert bundle.analysis is None
        assert sources.treatment_calls == [(None, "cà chua")]

    async def test_weather_hint_skips_the_fetch(self):
        sources = Sources()
        hint = make_snapshot(humidity=80)
        request = InteractionRequest(text="Trời thế nào?", weather_hint=hint)
        bundle = await sources.aggregator().gather_chat_context(request, identify_image=False)
        assert bundle.weather == hint
        assert sources.weather_calls == []

    async def test_image_is_ignored_when_not_requested(self):
        sources = Sources()
        request = InteractionRequest(text="Xin chào", image_ref=IMAGE)
        bundle = await sources.aggregator().gather_chat_context(request, identify_image=False)
        assert bundle.analysis is None
        assert sources.treatment_calls == []


# =============================================================================
# Province context
# =============================================================================
class TestProvinceContext:

    async def test_stored_coordinates_win(self):
        sources = Sources()
        province = make_province(coordinates=GeoPoint(lat=21.5, lon=105.5))
        bundle = await sources.aggregator().gather_province_context(province)
        assert sources.weather_calls == [(21.5, 105.5)]
        assert bundle.weather is not None

    async def test_location_table_is_used_without_coordinates(self):
        sources = Sources()
        await sources.aggregator().gather_province_context(make_province(code="HN"))
        assert sources.weather_calls == [(21.0285, 105.8542)]

    async def test_unknown_location_means_no_weather(self):
        sources = Sources()
        bundle = await sources.aggregator().gather_province_context(make_province(code="ZZ"))
        assert sources.weather_calls == []
        assert bundle.weather is None
        assert bundle.alerts == []

    async def test_weather_failure_is_tolerated(self):
        sources = Sources(weather=False)
        bundle = await sources.aggregator().gather_province_context(make_province(code="HN"))
        assert bundle.weather is None
        assert bundle.alerts == []

    async def test_stale_articles_trigger_a_background_refresh(self):
        sources = Sources()
        bundle = await sources.aggregator().gather_province_context(make_province(code="HN"))
        await drain_detached(timeout=1)
        assert sources.refreshed == ["HN"]
        assert bundle.articles == []

    async def test_fresh_articles_are_used_as_evidence(self):
        sources = Sources()
        now = datetime.now(timezone.utc)
        articles = [
            Article(title=f"Hà Nội xuống giống vụ xuân {i}", url=f"https://vnexpress.net/{i}", source="VnExpress", date=now)
            for i in range(6)
        ]
        bundle = await sources.aggregator().gather_province_context(
            make_province(code="HN", articles=articles)
        )
        await drain_detached(timeout=1)
        assert sources.refreshed == []
        assert len(bundle.articles) == 5
        assert bundle.articles[0].source == "VnExpress"
