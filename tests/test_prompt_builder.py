"""
Tests for the advisory and chat prompts
"""
import json

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from app.core.langchain_message_adapter import text_to_message_content, user_message_content
from app.models.advisory import CandidateSet, ContextBundle, Region
from app.models.chat_session import Message
from app.models.province import ArticleEvidence
from app.models.treatment import TreatmentCategory, TreatmentItem
from app.services.prompt_builder import (
    build_advisory_input,
    build_advisory_prompt,
    build_chat_prompt,
    month_name,
    opening_sentence,
)
from app.services.weather_service import derive_weather_alerts
from conftest import make_analysis, make_snapshot


def _input_block(user_prompt: str) -> dict:
    start = user_prompt.index("{")
    end = user_prompt.rindex("}") + 1
    return json.loads(user_prompt[start:end])


# =============================================================================
# Province advisory prompt
# =============================================================================
class TestAdvisoryPrompt:

    def test_input_block_carries_candidates_and_weather(self, north_candidates):
        weather = make_snapshot(first_rain=35)
        bundle = ContextBundle(weather=weather, alerts=derive_weather_alerts(weather), articles=[])
        prompt = build_advisory_prompt("Hà Nội", 3, north_candidates, bundle, soils=["Đất phù sa"])

        data = _input_block(prompt.user)
        assert data["province"] == "Hà Nội"
        assert data["monthName"] == "Tháng 3"
        assert data["region"] == "north"
        assert data["hasDatabaseData"] is False
        assert data["candidates"]["plant_now"] == list(north_candidates.planting)
        assert data["candidates"]["harvest_now"] == list(north_candidates.harvesting)
        assert data["weather"]["forecast_3d"][0]["date"] == "2/3/2024"
        assert [alert["type"] for alert in data["alerts"]] == ["heavy_rain"]
        assert data["soils"] == ["Đất phù sa"]

    def test_missing_weather_is_null(self, north_candidates):
        data = build_advisory_input("Hà Nội", 3, north_candidates, ContextBundle())
        assert data["weather"] is None
        assert data["alerts"] == []
        assert data["evidence"] == []

    def test_evidence_is_capped(self, north_candidates):
        articles = [
            ArticleEvidence(title=f"Tin {i}", source="VnExpress", url=f"https://vnexpress.net/{i}", summary=f"Tin {i}")
            for i in range(8)
        ]
        data = build_advisory_input("Hà Nội", 3, north_candidates, ContextBundle(articles=articles))
        assert len(data["evidence"]) == 5

    def test_harvest_section_numbering(self, north_candidates):
        with_harvest = build_advisory_prompt("Hà Nội", 3, north_candidates, ContextBundle())
        assert "3. **Có thể thu hoạch:**" in with_harvest.system
        assert "4. **Đánh giá điều kiện thời tiết" in with_harvest.system
        assert "5. **Lưu ý và khuyến nghị:**" in with_harvest.system

        no_harvest = CandidateSet(planting=("cà chua",), region=Region.NORTH)
        without = build_advisory_prompt("Hà Nội", 3, no_harvest, ContextBundle())
        assert "Có thể thu hoạch" not in without.system
        assert "3. **Đánh giá điều kiện thời tiết" in without.system
        assert "4. **Lưu ý và khuyến nghị:**" in without.system

    def test_messages_are_system_then_human(self, north_candidates):
        messages = build_advisory_prompt("Hà Nội", 3, north_candidates, ContextBundle()).to_messages()
        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[1], HumanMessage)
        assert "Tháng 3" in messages[0].content

    @pytest.mark.parametrize("month,name", [(1, "Tháng 1"), (12, "Tháng 12")])
    def test_month_names(self, month, name):
        assert month_name(month) == name


# =============================================================================
# Chat prompt
# =============================================================================
class TestChatPrompt:

    @pytest.mark.parametrize("confidence,expected", [
        (0.92, "Đây là Cà chua (độ tin cậy 92%)."),
        (0.41, "Có thể đây là Cà chua (độ tin cậy 41% - chưa chắc chắn)."),
    ])
    def test_opening_sentence_reflects_confidence(self, confidence, expected):
        assert opening_sentence(make_analysis(confidence=confidence)) == expected

    def test_no_opening_without_identification(self):
        assert opening_sentence(None) is None
        assert opening_sentence(make_analysis(name="Không xác định được")) is None

    def test_knowledge_mode_prompt_has_history_and_question(self, snapshot):
        history = [
            Message(session_id="s1", content=user_message_content("Cây lúa trồng tháng mấy?")),
            Message(session_id="s1", content=text_to_message_content("Vụ chiêm xuân bắt đầu tháng 1.")),
        ]
        prompt = build_chat_prompt(ContextBundle(weather=snapshot, history=history), "Còn cây ngô?")

        system, first, second, question = prompt.messages
        assert isinstance(system, SystemMessage)
        assert "không gửi ảnh" in system.content.lower()
        assert "Nhiệt độ: 28.5°C" in system.content
        assert isinstance(first, HumanMessage)
        assert isinstance(second, AIMessage)
        assert question.content == "Còn cây ngô?"
        assert prompt.opening is None

    def test_image_prompt_includes_analysis_products_and_opening(self):
        analysis = make_analysis(disease="Bệnh mốc sương")
        products = [
            TreatmentItem(category=TreatmentCategory.CHEMICAL, title="Thuốc Hóa học", name="Ridomil Gold"),
        ]
        prompt = build_chat_prompt(ContextBundle(analysis=analysis, products=products), "Cây bị sao vậy?")

        system = prompt.messages[0].content
        assert "Plant.id" in system
        assert "Bệnh mốc sương (độ tin cậy 80%)" in system
        assert "Ridomil Gold" in system
        assert prompt.opening == "Đây là Cà chua (độ tin cậy 92%)."
        assert prompt.opening in system
