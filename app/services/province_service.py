import logging
from datetime import datetime
from typing import Awaitable, Callable, List, Optional
from zoneinfo import ZoneInfo

from fastapi import HTTPException, status

from app.collections.province import get_province_by_code, list_province_summaries
from app.models.advisory import StructuredRecommendation
from app.models.province import Article, CropMonth, Province, ProvinceInfo, ProvinceSummary
from app.services.candidate_guard import get_crop_candidates
from app.services.context_aggregator import ContextAggregator
from app.services.llm_gateway import LLMGateway
from app.services.prompt_builder import build_advisory_prompt
from app.services.response_parser import ParserContext, parse_recommendation

logger = logging.getLogger(__name__)

LOCAL_TIMEZONE = ZoneInfo("Asia/Ho_Chi_Minh")
PROVINCE_NOT_FOUND = "Tỉnh không tồn tại trong hệ thống"
MAX_INFO_ARTICLES = 10
MAX_INFO_FORECAST = 5

INVALID_TITLES = ("không có tiêu đề", "no title", "untitled")
INFO_DISASTER_KEYWORDS = (
    "lũ", "ngập", "bão", "thiên tai", "sạt lở", "cứu hộ", "sơ tán", "thiệt hại",
    "mưa lớn", "thời tiết", "cảnh báo",
)
INFO_AGRICULTURE_KEYWORDS = (
    "nông nghiệp", "mùa vụ", "cây trồng", "nông dân", "nông sản", "canh tác",
    "trồng trọt", "chăn nuôi",
)
INFO_ECONOMIC_KEYWORDS = (
    "kinh tế", "giá", "thị trường", "xuất khẩu", "nhập khẩu", "doanh nghiệp", "đầu tư",
)

ProvinceLookup = Callable[[str], Awaitable[Optional[Province]]]
ProvinceLister = Callable[[], Awaitable[List[ProvinceSummary]]]


def current_month(now: Optional[datetime] = None) -> int:
    return (now or datetime.now(LOCAL_TIMEZONE)).month


def is_valid_article(article: Article) -> bool:
    title = (article.title or "").strip()
    url = (article.url or "").strip()
    return len(title) >= 3 and title.lower() not in INVALID_TITLES and len(url) > 5 and url != "#"


def region_keywords(province_name: str) -> List[str]:
    name = province_name.lower()
    if "huế" in name or "thừa thiên" in name:
        return ["miền trung", "bắc trung bộ", "thừa thiên huế"]
    return []


def article_priority(article: Article, province_name: str, regions: List[str]) -> Optional[int]:
    """Relevance score, or None when the article matches nothing at all."""
    haystacks = (article.title.lower(), article.url.lower())

    def mentions(keywords) -> bool:
        return any(keyword in text for keyword in keywords for text in haystacks)

    has_province = bool(province_name) and mentions([province_name.lower()])
    has_disaster = mentions(INFO_DISASTER_KEYWORDS)
    has_agriculture = mentions(INFO_AGRICULTURE_KEYWORDS)
    has_region = mentions(regions)
    if not (has_province or has_disaster or has_agriculture or has_region):
        return None

    priority = 0
    if has_province:
        priority += 10
    if has_disaster:
        priority += 7
    if has_agriculture:
        priority += 5
    if has_region:
        priority += 3
    if mentions(INFO_ECONOMIC_KEYWORDS) and not has_disaster and not has_agriculture:
        priority -= 5
    return priority


def rank_articles(province: Province, limit: int = MAX_INFO_ARTICLES) -> List[Article]:
    valid = [article for article in province.articles if is_valid_article(article)]
    regions = region_keywords(province.province_name)
    scored = []
    for article in valid:
        priority = article_priority(article, province.province_name, regions)
        if priority is not None:
            scored.append((priority, article))
    # sorted() is stable, so equal scores keep their stored (newest first) order.
    ranked = [article for _, article in sorted(scored, key=lambda pair: -pair[0])]
    return (ranked or valid)[:limit]


class ProvinceAdvisoryService:
    def __init__(
        self,
        aggregator: ContextAggregator,
        gateway: LLMGateway,
        province_lookup: ProvinceLookup = get_province_by_code,
        province_lister: ProvinceLister = list_province_summaries,
    ) -> None:
        self.aggregator = aggregator
        self.gateway = gateway
        self._province_lookup = province_lookup
        self._province_lister = province_lister

    async def _get_province(self, province_code: str) -> Province:
        province = await self._province_lookup(province_code)
        if province is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=PROVINCE_NOT_FOUND,
            )
        return province

    async def list_provinces(self) -> List[ProvinceSummary]:
        return await self._province_lister()

    async def get_recommendation(
        self, province_code: str, month: Optional[int] = None
    ) -> StructuredRecommendation:
        province = await self._get_province(province_code)
        month = month or current_month()

        calendar = province.calendar_for(month)
        candidates = get_crop_candidates(
            province.province_name,
            month,
            db_planting=calendar.planting if calendar else (),
            db_harvesting=calendar.harvesting if calendar else (),
        )
        bundle = await self.aggregator.gather_province_context(province)
        prompt = build_advisory_prompt(
            province.province_name,
            month,
            candidates,
            bundle,
            soils=[soil.type for soil in province.soil_types],
        )

        try:
            result = await self.gateway.generate(prompt.to_messages())
            text = result.content
        except HTTPException as exc:
            logger.warning(
                "Advisory generation failed for %s (%s); answering from candidates only",
                province.province_code,
                exc.detail,
            )
            text = ""

        context = ParserContext(
            province_name=province.province_name,
            month=month,
            candidates=candidates,
        )
        return parse_recommendation(text, context)

    async def get_info(self, province_code: str) -> ProvinceInfo:
        province = await self._get_province(province_code)
        bundle = await self.aggregator.gather_province_context(province)
        month = current_month()
        weather = bundle.weather

        return ProvinceInfo(
            province_code=province.province_code,
            province_name=province.province_name,
            temperature=weather.current.temperature if weather else None,
            weather_description=weather.current.description if weather else None,
            weather_forecast=weather.forecast[:MAX_INFO_FORECAST] if weather else None,
            soil_types=[soil.type for soil in province.soil_types],
            soil_details=province.soil_types,
            current_month=province.calendar_for(month) or CropMonth(month=month),
            articles=rank_articles(province),
            source=province.source,
        )
