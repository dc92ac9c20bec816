"""
Tests for province recommendations and province info
"""
from datetime import datetime

import pytest
from fastapi import HTTPException

from app.models.advisory import ContextBundle
from app.models.province import Article, CropMonth
from app.services.province_service import (
    PROVINCE_NOT_FOUND,
    ProvinceAdvisoryService,
    article_priority,
    current_month,
    is_valid_article,
    rank_articles,
)
from app.services.weather_service import derive_weather_alerts
from conftest import FakeGateway, make_province, make_snapshot

ANSWER = """1. Mùa vụ hiện tại (Tháng 3) tại Hà Nội: Theo dữ liệu, đây là giai đoạn gieo cấy lúa xuân muộn và trồng rau màu.
2. Các loại cây trồng phổ biến phù hợp với thời điểm này:
- Ngô (theo dữ liệu)
- Thanh long
3. Có thể thu hoạch:
- Rau cải
4. Đánh giá điều kiện thời tiết hiện tại: Trời ấm, độ ẩm cao, thuận lợi cho sinh trưởng.
5. Lưu ý và khuyến nghị:
- Không thấy cảnh báo thiên tai, thời tiết ấm → có thể xuống giống."""


class FakeAggregator:
    def __init__(self):
        self.provinces = []

    async def gather_province_context(self, province):
        self.provinces.append(province.province_code)
        weather = make_snapshot()
        return ContextBundle(weather=weather, alerts=derive_weather_alerts(weather), articles=[])


def service_for(provinces, gateway):
    async def lookup(code):
        return provinces.get(code.upper())

    async def lister():
        return []

    return ProvinceAdvisoryService(FakeAggregator(), gateway, province_lookup=lookup, province_lister=lister)


HANOI = make_province(
    calendar=[CropMonth(month=3, planting=["Ngô", "Lúa xuân"], harvesting=["Rau cải"])]
)


# =============================================================================
# Recommendation
# =============================================================================
class TestRecommendation:

    async def test_unknown_province_is_404(self):
        with pytest.raises(HTTPException) as exc_info:
            await service_for({}, FakeGateway("x")).get_recommendation("XX", 3)
        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == PROVINCE_NOT_FOUND

    async def test_answer_is_restricted_to_calendar_crops(self):
        gateway = FakeGateway(ANSWER)
        result = await service_for({"HN": HANOI}, gateway).get_recommendation("hn", 3)

        assert result.crops == ["Ngô"]
        assert result.harvesting == ["Rau cải"]
        assert result.season.startswith("Theo dữ liệu")
        assert result.weather.startswith("Trời ấm")
        assert result.notes[0].text.startswith("Không thấy cảnh báo thiên tai")

        system, user = gateway.calls[0]
        assert "Hà Nội" in system.content
        assert '"hasDatabaseData": true' in user.content
        assert '"ngô"' in user.content

    async def test_generation_failure_still_answers(self):
        gateway = FakeGateway(error=HTTPException(status_code=503, detail="down"))
        result = await service_for({"HN": HANOI}, gateway).get_recommendation("HN", 3)

        assert result.crops == ["ngô", "lúa xuân"]
        assert result.harvesting == ["rau cải"]
        assert result.season == "Tháng 3 tại Hà Nội là thời điểm phù hợp cho các hoạt động nông nghiệp."
        assert result.weather is None
        assert result.notes == []

    async def test_province_without_calendar_uses_region_table(self):
        gateway = FakeGateway(error=HTTPException(status_code=503, detail="down"))
        result = await service_for({"HN": make_province()}, gateway).get_recommendation("HN", 3)
        assert result.crops == ["cà chua", "dưa chuột", "đậu đũa", "rau muống", "rau cải"]
        assert result.season.startswith("Gợi ý tham khảo: Tháng 3 tại miền Bắc")

    def test_current_month_defaults_to_now(self):
        assert current_month(datetime(2024, 11, 5)) == 11


# =============================================================================
# Province info
# =============================================================================
def _article(title, url="https://vnexpress.net/a"):
    return Article(title=title, url=url)


class TestProvinceInfo:

    @pytest.mark.parametrize("article,valid", [
        (_article("Hà Nội vào vụ"), True),
        (_article("No title"), False),
        (_article("ab"), False),
        (_article("Hà Nội vào vụ", url="#"), False),
    ])
    def test_is_valid_article(self, article, valid):
        assert is_valid_article(article) is valid

    def test_priority_scoring(self):
        assert article_priority(_article("Hà Nội: mưa lớn gây ngập"), "Hà Nội", []) == 17
        assert article_priority(_article("Giá nông sản tăng"), "Hà Nội", []) == 5
        assert article_priority(_article("Giá vàng Hà Nội tăng"), "Hà Nội", []) == 5
        assert article_priority(_article("Bóng đá"), "Hà Nội", []) is None

    def test_region_keywords_for_hue(self):
        province = make_province(
            code="TTH",
            name="Thừa Thiên Huế",
            articles=[
                _article("Miền Trung mưa lớn", "https://vnexpress.net/1"),
                _article("Bóng đá", "https://vnexpress.net/2"),
            ],
        )
        assert [article.title for article in rank_articles(province)] == ["Miền Trung mưa lớn"]

    def test_ranking_falls_back_to_valid_articles(self):
        province = make_province(articles=[_article("Bóng đá hôm nay"), _article("No title")])
        assert [article.title for article in rank_articles(province)] == ["Bóng đá hôm nay"]

    async def test_info_combines_weather_calendar_and_news(self):
        province = make_province(
            calendar=[CropMonth(month=current_month(), planting=["Ngô"])],
            articles=[
                _article("Giá vàng tăng", "https://vnexpress.net/1"),
                _article("Hà Nội: bão số 3 gây ngập", "https://vnexpress.net/2"),
            ],
        )
        info = await service_for({"HN": province}, FakeGateway("x")).get_info("HN")

        assert info.province_name == "Hà Nội"
        assert info.temperature == 28.5
        assert len(info.weather_forecast) == 2
        assert info.soil_types == ["Đất phù sa"]
        assert info.current_month.planting == ["Ngô"]
        assert info.articles[0].title == "Hà Nội: bão số 3 gây ngập"
