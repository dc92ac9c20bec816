from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorCollection

from app.core.mongodb import get_analysis_collection
from app.models.analysis import AnalysisRecord


async def save_analysis(analysis: AnalysisRecord) -> AnalysisRecord:
    analysis_collection: AsyncIOMotorCollection = get_analysis_collection()
    try:
        payload = analysis.model_dump(mode="json", exclude_none=True, by_alias=True)
        await analysis_collection.replace_one({"_id": analysis.id}, payload, upsert=True)
        return analysis
    except Exception:
        raise HTTPException(status_code=500, detail="Internal Server Error")
