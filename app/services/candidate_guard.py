"""Allowed crop names per province and month.

The model is only ever allowed to mention crops from the set built here, so
everything in this module is deterministic: no I/O, no clock, no randomness.
"""

import unicodedata
from typing import Dict, Iterable, List, Sequence, Tuple

from app.models.advisory import CandidateSet, Region

MAX_CANDIDATES = 5

_REGION_GAZETTEER: Tuple[Tuple[Region, Tuple[str, ...]], ...] = (
    (
        Region.NORTH,
        (
            "hà nội", "hải phòng", "quảng ninh", "bắc giang", "bắc ninh",
            "hải dương", "hưng yên", "thái bình", "hà nam", "nam định",
            "ninh bình", "lào cai", "yên bái", "tuyên quang", "hà giang",
            "cao bằng", "bắc kạn", "lạng sơn", "thái nguyên", "phú thọ",
            "vĩnh phúc", "sơn la", "điện biên", "lai châu", "hoà bình",
            "hòa bình",
        ),
    ),
    (
        Region.CENTRAL,
        (
            "thanh hóa", "thanh hoá", "nghệ an", "hà tĩnh", "quảng bình",
            "quảng trị", "thừa thiên huế", "đà nẵng", "quảng nam",
            "quảng ngãi", "bình định", "phú yên", "khánh hòa", "khánh hoà",
            "ninh thuận", "bình thuận",
        ),
    ),
    (
        Region.SOUTH,
        (
            "hồ chí minh", "bình dương", "đồng nai", "tây ninh", "bình phước",
            "bà rịa", "long an", "tiền giang", "bến tre", "trà vinh",
            "vĩnh long", "đồng tháp", "an giang", "kiên giang", "cần thơ",
            "hậu giang", "sóc trăng", "bạc liêu", "cà mau",
        ),
    ),
    (
        Region.HIGHLANDS,
        ("kon tum", "gia lai", "đắk lắk", "đắk nông", "lâm đồng"),
    ),
)

# (planting, harvesting) per region and month. Generic, plausible crops used
# only when the province has no calendar of its own.
_CropLists = Tuple[Tuple[str, ...], Tuple[str, ...]]

_WINTER_GREENS = ("cải bắp", "cải thìa", "cải xanh", "xà lách", "cà rốt", "hành tây")
_SPRING_FRUITING = ("cà chua", "dưa chuột", "đậu đũa", "rau muống", "rau cải")
_RAINY_SEASON = ("rau muống", "mướp", "bí đỏ", "đậu đũa")

_CROP_TABLE: Dict[Region, Dict[int, _CropLists]] = {
    Region.NORTH: {
        1: (_WINTER_GREENS, ("cải bắp", "cải thìa", "su hào")),
        2: (_WINTER_GREENS, ("cải bắp", "cải thìa", "su hào")),
        3: (_SPRING_FRUITING, ("cải bắp", "cải thìa", "hành tây")),
        4: (_SPRING_FRUITING + ("mướp",), ("cải bắp", "cải thìa")),
        5: (("cà chua", "dưa chuột", "đậu đũa", "rau muống", "mướp", "bí đỏ"), ("cà chua", "dưa chuột")),
        6: (_RAINY_SEASON, ("cà chua", "dưa chuột", "đậu đũa")),
        7: (_RAINY_SEASON, ("cà chua", "dưa chuột", "mướp")),
        8: (_RAINY_SEASON + ("cải bắp",), ("mướp", "bí đỏ")),
        9: (_WINTER_GREENS[:5], ("mướp", "bí đỏ", "đậu đũa")),
        10: (_WINTER_GREENS, ("mướp", "bí đỏ")),
        11: (_WINTER_GREENS, ("cải bắp", "cải thìa")),
        12: (_WINTER_GREENS, ("cải bắp", "cải thìa", "su hào")),
    },
    Region.CENTRAL: {
        1: (_WINTER_GREENS + ("dưa hấu",), ("cải bắp", "cải thìa", "dưa hấu")),
        2: (_WINTER_GREENS[:5] + ("dưa hấu",), ("cải bắp", "cải thìa", "dưa hấu")),
        3: (_SPRING_FRUITING + ("dưa hấu",), ("cải bắp", "cải thìa")),
        4: (_SPRING_FRUITING + ("mướp", "dưa hấu"), ("cải bắp", "cải thìa", "dưa hấu")),
        5: (("cà chua", "dưa chuột", "đậu đũa", "rau muống", "mướp", "bí đỏ"), ("cà chua", "dưa chuột", "dưa hấu")),
        6: (_RAINY_SEASON, ("cà chua", "dưa chuột", "đậu đũa")),
        7: (_RAINY_SEASON, ("cà chua", "dưa chuột", "mướp")),
        8: (_RAINY_SEASON + ("cải bắp",), ("mướp", "bí đỏ")),
        9: (_WINTER_GREENS[:5], ("mướp", "bí đỏ", "đậu đũa")),
        10: (_WINTER_GREENS, ("mướp", "bí đỏ")),
        11: (_WINTER_GREENS + ("dưa hấu",), ("cải bắp", "cải thìa")),
        12: (_WINTER_GREENS + ("dưa hấu",), ("cải bắp", "cải thìa", "dưa hấu")),
    },
    Region.SOUTH: {
        1: (_WINTER_GREENS[:5] + ("dưa hấu", "dưa leo"), ("cải bắp", "cải thìa", "dưa hấu")),
        2: (_WINTER_GREENS[:5] + ("dưa hấu", "dưa leo"), ("cải bắp", "cải thìa", "dưa hấu")),
        3: (_SPRING_FRUITING + ("dưa hấu", "dưa leo"), ("cải bắp", "cải thìa", "dưa hấu")),
        4: (_SPRING_FRUITING + ("mướp", "dưa hấu"), ("cải bắp", "cải thìa", "dưa hấu")),
        5: (("cà chua", "dưa chuột", "đậu đũa", "rau muống", "mướp", "bí đỏ"), ("cà chua", "dưa chuột", "dưa hấu")),
        6: (_RAINY_SEASON, ("cà chua", "dưa chuột", "đậu đũa")),
        7: (_RAINY_SEASON, ("cà chua", "dưa chuột", "mướp")),
        8: (_RAINY_SEASON + ("cải bắp",), ("mướp", "bí đỏ")),
        9: (_WINTER_GREENS[:5], ("mướp", "bí đỏ", "đậu đũa")),
        10: (_WINTER_GREENS, ("mướp", "bí đỏ")),
        11: (_WINTER_GREENS + ("dưa hấu",), ("cải bắp", "cải thìa")),
        12: (_WINTER_GREENS + ("dưa hấu",), ("cải bắp", "cải thìa", "dưa hấu")),
    },
    Region.HIGHLANDS: {
        1: (_WINTER_GREENS, ("cải bắp", "cải thìa")),
        2: (_WINTER_GREENS, ("cải bắp", "cải thìa")),
        3: (_SPRING_FRUITING, ("cải bắp", "cải thìa", "hành tây")),
        4: (_SPRING_FRUITING + ("mướp",), ("cải bắp", "cải thìa")),
        5: (("cà chua", "dưa chuột", "đậu đũa", "rau muống", "mướp", "bí đỏ"), ("cà chua", "dưa chuột")),
        6: (_RAINY_SEASON, ("cà chua", "dưa chuột", "đậu đũa")),
        7: (_RAINY_SEASON, ("cà chua", "dưa chuột", "mướp")),
        8: (_RAINY_SEASON + ("cải bắp",), ("mướp", "bí đỏ")),
        9: (_WINTER_GREENS[:5], ("mướp", "bí đỏ", "đậu đũa")),
        10: (_WINTER_GREENS, ("mướp", "bí đỏ")),
        11: (_WINTER_GREENS, ("cải bắp", "cải thìa")),
        12: (_WINTER_GREENS, ("cải bắp", "cải thìa", "su hào")),
    },
}

REGION_DISPLAY_NAMES = {
    Region.NORTH: "miền Bắc",
    Region.CENTRAL: "miền Trung",
    Region.SOUTH: "miền Nam",
}


def normalize_crop_name(name: str) -> str:
    return " ".join(unicodedata.normalize("NFC", name).lower().split())


def resolve_region(province_name: str) -> Region:
    name = normalize_crop_name(province_name or "")
    for region, names in _REGION_GAZETTEER:
        if any(candidate in name for candidate in names):
            return region
    return Region.UNKNOWN


def region_display_name(region: Region) -> str:
    return REGION_DISPLAY_NAMES.get(region, "khu vực")


def region_month_crops(region: Region, month: int) -> _CropLists:
    return _CROP_TABLE.get(region, {}).get(month, ((), ()))


def _bounded_unique(names: Iterable[str]) -> Tuple[str, ...]:
    result: List[str] = []
    for raw in names:
        if not isinstance(raw, str):
            continue
        name = normalize_crop_name(raw)
        if name and name not in result:
            result.append(name)
        if len(result) == MAX_CANDIDATES:
            break
    return tuple(result)


def get_crop_candidates(
    province_name: str,
    month: int,
    db_planting: Sequence[str] = (),
    db_harvesting: Sequence[str] = (),
) -> CandidateSet:
    """Build the candidate set, preferring the province's stored calendar."""
    region = resolve_region(province_name)
    table_planting, table_harvesting = region_month_crops(region, month)

    db_planting = list(db_planting or [])
    db_harvesting = list(db_harvesting or [])

    return CandidateSet(
        planting=_bounded_unique(db_planting or table_planting),
        harvesting=_bounded_unique(db_harvesting or table_harvesting),
        region=region,
        has_authoritative_data=bool(db_planting or db_harvesting),
    )
