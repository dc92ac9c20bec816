from fastapi import Request

from app.services.chat_analyze_service import ChatAnalyzeService
from app.services.persistence_sync import PersistenceSync
from app.services.province_service import ProvinceAdvisoryService
from app.services.stream_broadcaster import StreamBroadcaster


def get_province_service(request: Request) -> ProvinceAdvisoryService:
    return request.app.state.province_service


def get_chat_analyze_service(request: Request) -> ChatAnalyzeService:
    return request.app.state.chat_analyze_service


def get_stream_broadcaster(request: Request) -> StreamBroadcaster:
    return request.app.state.stream_broadcaster


def get_persistence_sync(request: Request) -> PersistenceSync:
    return request.app.state.persistence_sync
