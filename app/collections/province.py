from typing import List, Optional

from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorCollection

from app.core.mongodb import get_province_collection
from app.models.province import Article, Province, ProvinceSummary


async def get_province_by_code(province_code: str) -> Optional[Province]:
    province_collection: AsyncIOMotorCollection = get_province_collection()
    try:
        response = await province_collection.find_one({"provinceCode": province_code.upper()})
        if not response:
            return None
        return Province.model_validate(response)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e) + " - get_province_by_code")


async def list_provinces() -> List[Province]:
    province_collection: AsyncIOMotorCollection = get_province_collection()
    try:
        provinces = province_collection.find({}).sort("provinceCode", 1)
        return [Province.model_validate(province) async for province in provinces]
    except Exception:
        raise HTTPException(status_code=500, detail="Internal Server Error")


async def list_province_summaries() -> List[ProvinceSummary]:
    province_collection: AsyncIOMotorCollection = get_province_collection()
    try:
        provinces = province_collection.find(
            {}, projection={"_id": 0, "provinceCode": 1, "provinceName": 1}
        ).sort("provinceName", 1)
        return [ProvinceSummary.model_validate(province) async for province in provinces]
    except Exception:
        raise HTTPException(status_code=500, detail="Internal Server Error")


async def save_province_articles(province_code: str, articles: List[Article]) -> None:
    province_collection: AsyncIOMotorCollection = get_province_collection()
    try:
        payload = [
            article.model_dump(mode="json", exclude_none=True, by_alias=True)
            for article in articles
        ]
        await province_collection.update_one(
            {"provinceCode": province_code.upper()},
            {"$set": {"articles": payload}},
        )
    except Exception:
        raise HTTPException(status_code=500, detail="Internal Server Error")
