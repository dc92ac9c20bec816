from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_province_service
from app.core.security import optional_user
from app.models.advisory import StructuredRecommendation
from app.models.province import ProvinceInfo, ProvinceSummary
from app.services.province_service import ProvinceAdvisoryService

router = APIRouter(prefix="/provinces", tags=["Provinces"], dependencies=[Depends(optional_user)])


@router.get("", response_model=List[ProvinceSummary])
async def list_provinces(
    service: ProvinceAdvisoryService = Depends(get_province_service),
):
    return await service.list_provinces()


@router.get(
    "/{province_code}/recommendation",
    response_model=StructuredRecommendation,
)
async def get_province_recommendation(
    province_code: str,
    month: Optional[int] = Query(
        default=None,
        ge=1,
        le=12,
        description="Month to advise for, defaults to the current month in Vietnam",
    ),
    service: ProvinceAdvisoryService = Depends(get_province_service),
):
    """
    Structured planting and harvesting advice for a province.
    Crops are always drawn from the province's calendar for the month.
    """
    return await service.get_recommendation(province_code, month)


@router.get("/{province_code}", response_model=ProvinceInfo, response_model_exclude_none=True)
async def get_province_info(
    province_code: str,
    service: ProvinceAdvisoryService = Depends(get_province_service),
):
    """
    Weather, soils, this month's calendar and ranked local news for a province.
    """
    return await service.get_info(province_code)
