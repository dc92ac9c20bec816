"""News articles per province, fetched from Google News RSS and cached on the province document."""

import asyncio
import logging
import xml.etree.ElementTree as ET
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Dict, Iterable, List, Optional
from urllib.parse import quote

import httpx
from bs4 import BeautifulSoup

from app.collections.province import list_provinces, save_province_articles
from app.core.config import settings
from app.models.province import Article, ArticleEvidence, Province

logger = logging.getLogger(__name__)

GOOGLE_NEWS_RSS = "https://news.google.com/rss/search"
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
DEFAULT_SOURCE = "Google News"

GENERAL_QUERY_KEYWORDS = (
    "nông nghiệp", "thời tiết", "mùa vụ", "cây trồng", "lũ", "ngập", "bão", "thiên tai",
)
WEATHER_QUERY_KEYWORDS = (
    "thời tiết", "cảnh báo", "thiên tai", "bão", "lũ lụt", "hạn hán", "mưa lớn",
    "sương giá", "gió mạnh", "dự báo thời tiết", "ngập lụt", "lũ quét", "sạt lở",
)
DISASTER_KEYWORDS = (
    "lũ", "ngập", "bão", "thiên tai", "sạt lở", "cứu hộ", "sơ tán", "thiệt hại",
    "mưa lớn", "thời tiết", "cảnh báo", "nông nghiệp", "mùa vụ",
)
ECONOMIC_KEYWORDS = (
    "kinh tế", "giá", "thị trường", "xuất khẩu", "nhập khẩu", "doanh nghiệp",
    "đầu tư", "cổ phiếu", "chứng khoán",
)
REGION_TITLES = ("miền trung", "miền bắc", "miền nam")

PER_FEED_LIMIT = 5
MAX_CACHED_ARTICLES = 30
MIN_FRESH_ARTICLES = 5
FRESHNESS_WINDOW = timedelta(days=7)
MAX_EVIDENCE = 5


def build_feed_url(province_name: str, keywords: Iterable[str]) -> str:
    query = f"{province_name} ({' OR '.join(keywords)})"
    return f"{GOOGLE_NEWS_RSS}?q={quote(query)}&hl=vi&gl=VN&ceid=VN:vi"


def extract_image_url(item: ET.Element, description_html: str) -> Optional[str]:
    if description_html:
        image = BeautifulSoup(description_html, "html.parser").find("img", src=True)
        if image is not None:
            return image["src"]
    for child in item:
        if child.tag.endswith("}content") or child.tag.endswith("}thumbnail"):
            if child.get("url"):
                return child.get("url")
    return None


def _published_at(raw: Optional[str]) -> Optional[datetime]:
    if not raw:
        return None
    try:
        return parsedate_to_datetime(raw)
    except (TypeError, ValueError):
        return None


def is_relevant(province_name: str, title: str, description: str) -> bool:
    """Province mentioned, or a hazard story naming the province or its region; never pure economy."""
    province = province_name.lower()
    title_lower = title.lower()
    description_lower = description.lower()

    has_disaster = any(k in title_lower or k in description_lower for k in DISASTER_KEYWORDS)
    is_pure_economic = any(k in title_lower for k in ECONOMIC_KEYWORDS) and not has_disaster
    if is_pure_economic:
        return False
    if province in title_lower or province in description_lower:
        return True
    return has_disaster and any(region in title_lower for region in REGION_TITLES)


def parse_feed(xml_text: str, province_name: str, limit: int) -> List[Article]:
    root = ET.fromstring(xml_text)
    articles: List[Article] = []
    for item in root.iter("item"):
        description_html = item.findtext("description") or ""
        description = BeautifulSoup(description_html, "html.parser").get_text(" ").strip()
        title = (item.findtext("title") or "").strip() or description[:100]
        url = (item.findtext("link") or "").strip()
        if len(title) <= 5 or not url:
            continue
        if not is_relevant(province_name, title, description):
            continue
        articles.append(
            Article(
                title=title,
                url=url,
                source=(item.findtext("source") or "").strip() or DEFAULT_SOURCE,
                date=_published_at(item.findtext("pubDate")) or datetime.now(timezone.utc),
                image_url=extract_image_url(item, description_html),
            )
        )
        if len(articles) == limit:
            break
    return articles


async def fetch_feed(
    client: httpx.AsyncClient, province_name: str, keywords: Iterable[str], limit: int
) -> List[Article]:
    url = build_feed_url(province_name, keywords)
    try:
        response = await client.get(url, headers={"User-Agent": USER_AGENT})
        response.raise_for_status()
        return parse_feed(response.text, province_name, limit)
    except (httpx.HTTPError, ET.ParseError) as exc:
        logger.warning("News feed fetch failed for %s: %s", province_name, exc)
        return []


def _sort_key(article: Article) -> datetime:
    if article.date is None:
        return datetime.min.replace(tzinfo=timezone.utc)
    if article.date.tzinfo is None:
        return article.date.replace(tzinfo=timezone.utc)
    return article.date


def merge_articles(existing: Iterable[Article], fetched: Iterable[Article], keep: int) -> List[Article]:
    """Dedupe by URL (existing entries win), newest first, at most ``keep``."""
    by_url: Dict[str, Article] = {}
    for article in [*existing, *fetched]:
        if article.url and article.url not in by_url:
            by_url[article.url] = article
    return sorted(by_url.values(), key=_sort_key, reverse=True)[:keep]


async def fetch_province_articles(province_name: str, limit: int = PER_FEED_LIMIT) -> List[Article]:
    async with httpx.AsyncClient(timeout=settings.ARTICLE_FETCH_TIMEOUT_SECONDS) as client:
        general, weather = await asyncio.gather(
            fetch_feed(client, province_name, GENERAL_QUERY_KEYWORDS, limit),
            fetch_feed(client, province_name, WEATHER_QUERY_KEYWORDS, limit),
        )
    return merge_articles([], [*general, *weather], keep=limit * 2)


def needs_refresh(province: Province, now: Optional[datetime] = None) -> bool:
    articles = province.articles
    if len(articles) < MIN_FRESH_ARTICLES:
        return True
    now = now or datetime.now(timezone.utc)
    return not any(
        article.date is not None and now - _sort_key(article) <= FRESHNESS_WINDOW
        for article in articles
    )


def article_evidence(province: Province, limit: int = MAX_EVIDENCE) -> List[ArticleEvidence]:
    return [
        ArticleEvidence(
            title=article.title,
            source=article.source or "Nguồn",
            url=article.url,
            summary=article.title,
        )
        for article in province.articles[:limit]
        if article.title and article.url
    ]


async def store_new_articles(province: Province, fetched: List[Article], keep: int) -> int:
    known = {article.url for article in province.articles}
    added = [article for article in fetched if article.url not in known]
    if not added:
        logger.info("No new articles for %s", province.province_name)
        return 0

    merged = merge_articles(province.articles, added, keep=keep)
    await save_province_articles(province.province_code, merged)
    logger.info("Stored %d new articles for %s", len(added), province.province_name)
    return len(added)


async def refresh_province_articles(province: Province, keep: int = MAX_CACHED_ARTICLES) -> int:
    """Fetch, merge into the cached list and store; returns how many articles were new."""
    fetched = await fetch_province_articles(province.province_name)
    return await store_new_articles(province, fetched, keep)


async def refresh_all_province_articles(
    keep: int = 20, delay_seconds: float = 1.0
) -> Dict[str, int]:
    """Scheduled job: refresh every province in turn, pausing between feeds."""
    total_fetched = 0
    total_added = 0
    provinces = await list_provinces()
    logger.info("Article refresh started for %d provinces", len(provinces))
    for province in provinces:
        try:
            fetched = await fetch_province_articles(province.province_name)
            total_fetched += len(fetched)
            total_added += await store_new_articles(province, fetched, keep)
        except Exception:
            logger.exception("Article refresh failed for %s", province.province_name)
        await asyncio.sleep(delay_seconds)

    logger.info(
        "Article refresh finished: %d fetched, %d added", total_fetched, total_added
    )
    return {"total_fetched": total_fetched, "total_added": total_added}
