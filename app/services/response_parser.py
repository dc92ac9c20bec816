"""Turns the advisory model's numbered Vietnamese answer into a structured record.

The model is prompted into a fixed numbered layout (season, crops, optional
harvest, weather assessment, notes) but cannot be trusted to follow it. Each
section is read by its own extractor over the same cleaned text; an extractor
returns ``None`` when its section is missing or unusable and the section's
fallback is used instead. Crop and harvest items only survive when they
overlap the candidate set, which is what keeps invented crops away from the
client.
"""

import logging
import re
import unicodedata
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple

from app.models.advisory import CandidateSet, Note, NoteLink, StructuredRecommendation
from app.services.candidate_guard import region_display_name

logger = logging.getLogger(__name__)

MAX_SEASON_CHARS = 500
MAX_WEATHER_CHARS = 300
MIN_SECTION_CHARS = 20
MAX_CROP_ITEMS = 8
MAX_HARVEST_ITEMS = 5
FALLBACK_ITEMS = 5
MAX_NOTES = 2
MAX_NOTE_CHARS = 80
NOTE_MIN_CUTOFF = 30

SEASON_BLOCKED_CROPS = ("cây lúa", "cây điều", "cây cao su", "cây cà phê", "cây tiêu")
HAZARD_KEYWORDS = ("thiên tai", "lũ", "ngập", "bão", "hạn hán", "sương giá", "cảnh báo")

_FLAGS = re.IGNORECASE | re.DOTALL
_NEXT_SECTION = r"(?=\n\s*\d+\.|\Z)"

SEASON_SECTION = re.compile(
    r"(?:^|\n)\s*\d+\.\s*mùa vụ[^:]*:\s*(.*?)(?=\n\s*\d+\.\s*các loại|\Z)", _FLAGS
)
CROPS_SECTION = re.compile(
    r"(?:^|\n)\s*\d+\.\s*các loại cây trồng[^:]*:\s*(.*?)" + _NEXT_SECTION, _FLAGS
)
HARVEST_SECTION = re.compile(
    r"(?:^|\n)\s*\d+\.\s*có thể thu hoạch[^:]*:\s*(.*?)" + _NEXT_SECTION, _FLAGS
)
WEATHER_SECTION = re.compile(
    r"(?:^|\n)\s*\d+\.\s*đánh giá[^:]*:\s*(.*?)" + _NEXT_SECTION, _FLAGS
)
NOTES_SECTION = re.compile(
    r"(?:^|\n)\s*\d+\.\s*lưu ý[^:]*:\s*(.*?)(?=mong rằng|\Z)", _FLAGS
)

BULLET = re.compile(r"^[-•·*+]\s*")
INSTRUCTION_LINE = re.compile(r"^(như|có thể|liệt kê|nếu|\[)", re.IGNORECASE)
CROP_PREFIX = re.compile(r"^cây\s+", re.IGNORECASE)
TRAILING_DETAIL = re.compile(r":\s*.*$")
PARENTHETICAL = re.compile(r"\s*\([^)]*\)\s*")
BRACKETED = re.compile(r"\s*\[[^\]]*\]\s*")
WEATHER_CROP_MENTION = re.compile(
    r"cây\s+(lúa|điều|tiêu|cà phê|cao su|ngô|đậu)[^,.]*", re.IGNORECASE
)
MARKDOWN_LINK = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
BARE_URL = re.compile(r"(https?://[^\s)]+)")
WHITESPACE = re.compile(r"\s+")

_LINK_LEAD_INS: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r'Đề xuất đọc bài[^"]*"[^"]*"[^:]*:\s*', re.IGNORECASE), "Đọc thêm: "),
    (re.compile(r"Đọc thêm thông tin về[^:]*:\s*", re.IGNORECASE), "Đọc thêm: "),
    (re.compile(r"Xem thêm tại:\s*", re.IGNORECASE), ""),
    (re.compile(r"Chi tiết tại:\s*", re.IGNORECASE), ""),
    (re.compile(r"Tham khảo tại:\s*", re.IGNORECASE), ""),
    (re.compile(r"trên\s*(?=\[)", re.IGNORECASE), ""),
)
_TRAILING_COLON = (
    re.compile(r"tại:\s*$", re.IGNORECASE),
    re.compile(r":\s*$"),
)


@dataclass(frozen=True)
class ParserContext:
    province_name: str
    month: int
    candidates: CandidateSet

    @property
    def month_name(self) -> str:
        return f"Tháng {self.month}"


SectionExtractor = Callable[[str, ParserContext], Optional[Any]]


@dataclass(frozen=True)
class SectionRule:
    field: str
    extract: SectionExtractor
    fallback: Callable[[ParserContext], Any]


def _collapse(text: str) -> str:
    return WHITESPACE.sub(" ", text).strip()


def _section(pattern: re.Pattern, text: str) -> Optional[str]:
    match = pattern.search(text)
    if not match:
        return None
    return match.group(1)


def _strip_bullet(line: str) -> str:
    return BULLET.sub("", line.strip()).strip()


def overlaps(item: str, candidates: Sequence[str]) -> bool:
    """Substring match in either direction, case-insensitive."""
    needle = item.lower()
    return any(c.lower() in needle or needle in c.lower() for c in candidates)


def _crop_lines(body: str, *, skip_instructions: bool) -> List[str]:
    items: List[str] = []
    for line in body.split("\n"):
        stripped = _strip_bullet(line)
        if not 2 < len(stripped) < 50:
            continue
        if skip_instructions and INSTRUCTION_LINE.match(stripped):
            continue
        crop = CROP_PREFIX.sub("", stripped)
        crop = TRAILING_DETAIL.sub("", crop)
        crop = PARENTHETICAL.sub(" ", crop)
        crop = BRACKETED.sub(" ", crop)
        crop = _collapse(crop).rstrip(".,;")
        if len(crop) >= 2 and crop not in items:
            items.append(crop)
    return items


# --- extractors ---


def extract_season(text: str, context: ParserContext) -> Optional[str]:
    body = _section(SEASON_SECTION, text)
    if body is None:
        return None
    season = _collapse(body)
    lowered = season.lower()
    if any(blocked in lowered for blocked in SEASON_BLOCKED_CROPS):
        logger.info("Season section rejected for %s: mentions a blocked crop", context.province_name)
        return None
    if len(season) <= MIN_SECTION_CHARS:
        return None
    return season[:MAX_SEASON_CHARS]


def extract_crops(text: str, context: ParserContext) -> Optional[List[str]]:
    body = _section(CROPS_SECTION, text)
    if body is None:
        return None
    items = _crop_lines(body, skip_instructions=True)[:MAX_CROP_ITEMS]
    allowed = [item for item in items if overlaps(item, context.candidates.planting)]
    return allowed or None


def extract_harvesting(text: str, context: ParserContext) -> Optional[List[str]]:
    if not context.candidates.harvesting:
        return None
    body = _section(HARVEST_SECTION, text)
    if body is None:
        return None
    items = _crop_lines(body, skip_instructions=False)[:MAX_HARVEST_ITEMS]
    allowed = [item for item in items if overlaps(item, context.candidates.harvesting)]
    return allowed or None


def extract_weather(text: str, context: ParserContext) -> Optional[str]:
    body = _section(WEATHER_SECTION, text)
    if body is None:
        return None
    weather = _collapse(WEATHER_CROP_MENTION.sub("", body))
    if len(weather) <= MIN_SECTION_CHARS:
        return None
    return weather[:MAX_WEATHER_CHARS]


def extract_links(line: str) -> List[NoteLink]:
    links = [
        NoteLink(text=label.strip() or "Xem chi tiết", url=url.strip())
        for label, url in MARKDOWN_LINK.findall(line)
        if url.strip().startswith(("http://", "https://"))
    ]
    if links:
        return links
    return [NoteLink(text="Xem chi tiết", url=url) for url in BARE_URL.findall(line)]


def clip_note(text: str) -> str:
    if len(text) <= MAX_NOTE_CHARS:
        return text
    head = text[:MAX_NOTE_CHARS]
    cutoff = max(head.rfind("."), head.rfind(","), head.rfind("→"))
    if cutoff > NOTE_MIN_CUTOFF:
        return head[: cutoff + 1].strip()
    return head.strip() + "..."


def simplify_linked_note(line: str) -> str:
    simplified = line
    for pattern, replacement in _LINK_LEAD_INS:
        simplified = pattern.sub(replacement, simplified)
    simplified = simplified.strip()
    for pattern in _TRAILING_COLON:
        simplified = pattern.sub("", simplified).strip()
    simplified = MARKDOWN_LINK.sub("", simplified)
    simplified = BARE_URL.sub("", simplified)
    simplified = _collapse(simplified.strip().strip("\"'"))
    simplified = clip_note(simplified)
    if len(simplified) < 5:
        return "Tham khảo thêm:"
    return simplified


def parse_note(line: str) -> Note:
    links = extract_links(line)
    if not links:
        return Note(text=clip_note(line), has_links=False)
    return Note(text=simplify_linked_note(line), links=links, has_links=True)


def _mentions_hazard(note: Note) -> bool:
    lowered = note.text.lower()
    return any(keyword in lowered for keyword in HAZARD_KEYWORDS)


def extract_notes(text: str, context: ParserContext) -> Optional[List[Note]]:
    body = _section(NOTES_SECTION, text)
    if body is None:
        return None
    lines = [_strip_bullet(line) for line in body.split("\n")]
    notes = [parse_note(line) for line in lines if 10 < len(line) < 300]
    # sorted() is stable, so hazard notes move up without reordering the rest.
    notes = sorted(notes, key=lambda note: not _mentions_hazard(note))
    return notes[:MAX_NOTES]


# --- fallbacks ---


def season_fallback(context: ParserContext) -> str:
    if context.candidates.has_authoritative_data:
        return (
            f"{context.month_name} tại {context.province_name} là thời điểm phù hợp "
            "cho các hoạt động nông nghiệp."
        )
    region_name = region_display_name(context.candidates.region)
    return (
        f"Gợi ý tham khảo: Tháng {context.month} tại {region_name} thường là mùa "
        "trồng các loại rau màu và cây ngắn ngày."
    )


RECOMMENDATION_SECTIONS: Tuple[SectionRule, ...] = (
    SectionRule("season", extract_season, season_fallback),
    SectionRule(
        "crops",
        extract_crops,
        lambda ctx: list(ctx.candidates.planting[:FALLBACK_ITEMS]),
    ),
    SectionRule(
        "harvesting",
        extract_harvesting,
        lambda ctx: list(ctx.candidates.harvesting[:FALLBACK_ITEMS]),
    ),
    SectionRule("weather", extract_weather, lambda ctx: None),
    SectionRule("notes", extract_notes, lambda ctx: []),
)


def clean_response_text(text: Optional[str]) -> str:
    return unicodedata.normalize("NFC", (text or "").replace("**", "")).strip()


def parse_recommendation(
    text: Optional[str],
    context: ParserContext,
    sections: Sequence[SectionRule] = RECOMMENDATION_SECTIONS,
) -> StructuredRecommendation:
    """Parse a model answer; never raises, missing sections use their fallback."""
    cleaned = clean_response_text(text)
    values = {}
    for rule in sections:
        try:
            value = rule.extract(cleaned, context)
        except Exception:
            logger.exception("Section extractor '%s' failed", rule.field)
            value = None
        values[rule.field] = value if value is not None else rule.fallback(context)
    return StructuredRecommendation(**values)
