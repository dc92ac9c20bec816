import asyncio
import logging
import re
from typing import Any, Dict, List, Optional

from app.collections.treatment import (
    find_biological_methods,
    find_cultural_practices,
    find_products,
)
from app.models.treatment import TreatmentCategory, TreatmentItem

logger = logging.getLogger(__name__)

CHEMICAL_TITLE = "Thuốc Hóa học"
BIOLOGICAL_TITLE = "Phương pháp Sinh học"
CULTURAL_TITLE = "Biện pháp Canh tác"
CARE_TITLE = "Biện pháp Chăm sóc"

_DISEASE_STOPWORDS = re.compile(r"bệnh|disease|gây hại|trên|của|cây", re.IGNORECASE)
_CROP_STOPWORDS = re.compile(r"cây|plant", re.IGNORECASE)
_SEPARATORS = re.compile(r"[\s,]+")
_PRIORITY_ORDER = {"High": 1, "Medium": 2, "Low": 3}


def extract_keywords(name: Optional[str], stopwords: re.Pattern) -> List[str]:
    if not name:
        return []
    cleaned = stopwords.sub("", name.lower()).strip()
    keywords = [word for word in _SEPARATORS.split(cleaned) if len(word) > 2]
    return keywords or [name.lower().strip()]


def product_item(product: Dict[str, Any]) -> TreatmentItem:
    ingredient = product.get("activeIngredient")
    manufacturer = product.get("manufacturer")
    return TreatmentItem(
        category=TreatmentCategory.CHEMICAL,
        title=CHEMICAL_TITLE,
        name=product.get("name") or "",
        description=" - ".join(part for part in (ingredient, manufacturer) if part) or None,
        active_ingredient=ingredient,
        manufacturer=manufacturer,
        dosage=product.get("dosage"),
        usage=product.get("usage"),
        image_url=product.get("imageUrl"),
        source=product.get("source"),
    )


def biological_item(method: Dict[str, Any]) -> TreatmentItem:
    return TreatmentItem(
        category=TreatmentCategory.BIOLOGICAL,
        title=BIOLOGICAL_TITLE,
        name=method.get("name") or "",
        description=method.get("steps"),
        materials=method.get("materials"),
        effectiveness=method.get("effectiveness"),
        timeframe=method.get("timeframe"),
        source=method.get("source"),
    )


def cultural_item(practice: Dict[str, Any], title: str) -> TreatmentItem:
    return TreatmentItem(
        category=TreatmentCategory.CULTURAL,
        title=title,
        name=practice.get("action") or "",
        description=practice.get("description"),
        priority=practice.get("priority"),
        source=practice.get("source"),
    )


def sort_by_priority(practices: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(practices, key=lambda practice: _PRIORITY_ORDER.get(practice.get("priority"), 4))


async def get_treatment_recommendations(
    disease_name: Optional[str], crop_name: Optional[str] = None
) -> List[TreatmentItem]:
    """
    Catalog entries for a disease on a crop.

    A healthy plant (no disease) only gets care practices. Lookup failures
    yield an empty list.
    """
    disease_keywords = extract_keywords(disease_name, _DISEASE_STOPWORDS)
    crop_keywords = extract_keywords(crop_name, _CROP_STOPWORDS)

    try:
        if not disease_name:
            practices = await find_cultural_practices(crop_keywords)
            return [cultural_item(p, CARE_TITLE) for p in sort_by_priority(practices)]

        products, methods, practices = await asyncio.gather(
            find_products(disease_keywords, crop_keywords),
            find_biological_methods(disease_keywords),
            find_cultural_practices(crop_keywords),
        )
    except Exception:
        logger.exception(
            "Treatment lookup failed for disease=%s crop=%s", disease_name, crop_name
        )
        return []

    logger.info(
        "Treatment lookup for disease=%s crop=%s: %d products, %d biological, %d cultural",
        disease_name,
        crop_name,
        len(products),
        len(methods),
        len(practices),
    )
    return (
        [product_item(p) for p in products]
        + [biological_item(m) for m in methods]
        + [cultural_item(p, CULTURAL_TITLE) for p in sort_by_priority(practices)]
    )
