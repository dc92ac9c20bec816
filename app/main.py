import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

from app.api.rest_routes.chat_analyze import router as chat_analyze_router
from app.api.rest_routes.provinces import router as provinces_router
from app.core.background import drain_detached
from app.core.config import settings
from app.core.mongodb import close_mongo_client, init_mongo_client
from app.services.article_scheduler import ArticleRefreshScheduler
from app.services.article_service import refresh_all_province_articles
from app.services.chat_analyze_service import ChatAnalyzeService
from app.services.context_aggregator import ContextAggregator
from app.services.llm_gateway import LLMGateway
from app.services.persistence_sync import PersistenceSync
from app.services.province_service import ProvinceAdvisoryService
from app.services.stream_broadcaster import StreamBroadcaster

load_dotenv()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

SHUTDOWN_DRAIN_SECONDS = 10.0


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_mongo_client()

    aggregator = ContextAggregator()
    advisory_gateway = LLMGateway(
        settings.ADVISORY_MODEL,
        temperature=settings.ADVISORY_TEMPERATURE,
        max_tokens=settings.ADVISORY_MAX_TOKENS,
    )
    chat_gateway = LLMGateway(
        settings.ADVISORY_MODEL,
        temperature=settings.CHAT_TEMPERATURE,
        max_tokens=settings.CHAT_MAX_TOKENS,
    )
    chat_service = ChatAnalyzeService(aggregator, chat_gateway)
    persistence = PersistenceSync()

    app.state.province_service = ProvinceAdvisoryService(aggregator, advisory_gateway)
    app.state.chat_analyze_service = chat_service
    app.state.persistence_sync = persistence
    app.state.stream_broadcaster = StreamBroadcaster(chat_service, persistence)

    scheduler = ArticleRefreshScheduler(
        refresh_all_province_articles,
        hour=settings.ARTICLE_REFRESH_HOUR,
        timezone=settings.ARTICLE_REFRESH_TIMEZONE,
    )
    app.state.article_scheduler = scheduler
    if settings.ARTICLE_REFRESH_ENABLED:
        scheduler.start()

    yield

    await scheduler.stop()
    await drain_detached(timeout=SHUTDOWN_DRAIN_SECONDS)
    await close_mongo_client()


app = FastAPI(lifespan=lifespan)

app.include_router(provinces_router)
app.include_router(chat_analyze_router)


@app.get("/")
async def root():
    return {"message": "Welcome to the GreenGrow Advisory API!"}
