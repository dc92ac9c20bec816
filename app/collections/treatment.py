import re
from typing import Any, Dict, List, Sequence

from motor.motor_asyncio import AsyncIOMotorCollection

from app.core.mongodb import (
    get_biological_method_collection,
    get_cultural_practice_collection,
    get_product_collection,
)

PRODUCT_LIMIT = 5
BIOLOGICAL_LIMIT = 5
CULTURAL_LIMIT = 10


def keyword_clause(field: str, keywords: Sequence[str]) -> Dict[str, Any]:
    """Match documents whose ``field`` array contains any keyword (case-insensitive)."""
    conditions = [
        {field: {"$elemMatch": {"$regex": re.escape(keyword), "$options": "i"}}}
        for keyword in keywords
    ]
    if len(conditions) == 1:
        return conditions[0]
    return {"$or": conditions}


def _verified_query(*clauses: Dict[str, Any]) -> Dict[str, Any]:
    present = [clause for clause in clauses if clause]
    if not present:
        return {"verified": True}
    if len(present) == 1:
        return {"verified": True, **present[0]}
    return {"verified": True, "$and": present}


async def find_products(
    disease_keywords: Sequence[str], crop_keywords: Sequence[str]
) -> List[Dict[str, Any]]:
    collection: AsyncIOMotorCollection = get_product_collection()
    query = _verified_query(
        keyword_clause("targetDiseases", disease_keywords) if disease_keywords else {},
        keyword_clause("targetCrops", crop_keywords) if crop_keywords else {},
    )
    return await collection.find(query).limit(PRODUCT_LIMIT).to_list(length=PRODUCT_LIMIT)


async def find_biological_methods(disease_keywords: Sequence[str]) -> List[Dict[str, Any]]:
    collection: AsyncIOMotorCollection = get_biological_method_collection()
    query = _verified_query(
        keyword_clause("targetDiseases", disease_keywords) if disease_keywords else {},
    )
    return await collection.find(query).limit(BIOLOGICAL_LIMIT).to_list(length=BIOLOGICAL_LIMIT)


async def find_cultural_practices(crop_keywords: Sequence[str]) -> List[Dict[str, Any]]:
    collection: AsyncIOMotorCollection = get_cultural_practice_collection()
    query = _verified_query(
        keyword_clause("applicableTo", crop_keywords) if crop_keywords else {},
    )
    return await collection.find(query).limit(CULTURAL_LIMIT).to_list(length=CULTURAL_LIMIT)
