import logging
from typing import Awaitable, Callable, Optional

from fastapi import HTTPException, status

from app.models.advisory import (
    ChatAnalyzeResult,
    ContextBundle,
    ContextSummary,
    InteractionRequest,
    InteractionType,
)
from app.services.context_aggregator import ContextAggregator
from app.services.llm_gateway import LLMGateway
from app.services.prompt_builder import build_chat_prompt

logger = logging.getLogger(__name__)

ChunkHandler = Callable[[str], Awaitable[None]]

MISSING_INPUT = "Either message or image is required"
PLANT_KEYWORDS = (
    "cây", "plant", "trồng", "chăm sóc", "lan", "cà chua", "dưa hấu", "lúa", "ngô",
    "khoai", "cà rốt", "rau",
)
UNRECOGNIZED_IMAGE_REPLY = (
    "Không thể nhận diện cây từ hình ảnh này. Vui lòng thử lại với hình ảnh rõ hơn."
)


def find_crop_hint(text: Optional[str]) -> Optional[str]:
    """Most specific plant keyword in the message, used to look up care products."""
    if not text:
        return None
    lowered = text.lower()
    matches = [keyword for keyword in PLANT_KEYWORDS if keyword in lowered]
    if not matches:
        return None
    return max(matches, key=len)


def image_only_reply(bundle: ContextBundle) -> str:
    analysis = bundle.analysis
    if analysis is None or not analysis.identified:
        return UNRECOGNIZED_IMAGE_REPLY

    plant = analysis.plant
    reply = "🌿 **Phân tích hình ảnh**\n\n"
    reply += f"Đây là cây **{plant.common_name}** (độ chính xác: {plant.confidence_percent}%)\n\n"
    if analysis.disease is not None:
        reply += (
            f"⚠️ **Cảnh báo bệnh**: {analysis.disease.name}\n"
            f"Xác suất: {round(analysis.disease.probability * 100)}%"
        )
    else:
        reply += "✅ **Tình trạng**: Cây khỏe mạnh, không phát hiện bệnh."
    if bundle.products:
        reply += (
            f"\n\n🛒 **Sản phẩm gợi ý**: {len(bundle.products)} sản phẩm phù hợp "
            f"với {plant.common_name}"
        )
    return reply


def summarize_context(bundle: ContextBundle) -> ContextSummary:
    history = bundle.history or []
    return ContextSummary(
        has_history=bool(history),
        history_message_count=len(history),
        has_image_analysis=bundle.analysis is not None,
        has_product_context=bool(bundle.products),
        has_weather_context=bundle.weather is not None,
        confidence=bundle.analysis.confidence if bundle.analysis is not None else None,
    )


class ChatAnalyzeService:
    """Answers one chat-analyze request along the text, image or image+text path."""

    def __init__(self, aggregator: ContextAggregator, gateway: LLMGateway) -> None:
        self.aggregator = aggregator
        self.gateway = gateway

    async def process(
        self,
        request: InteractionRequest,
        on_chunk: Optional[ChunkHandler] = None,
    ) -> ChatAnalyzeResult:
        interaction_type = request.interaction_type
        if interaction_type is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=MISSING_INPUT)

        if interaction_type == InteractionType.IMAGE_ONLY:
            bundle = await self.aggregator.gather_chat_context(request, identify_image=True)
            return ChatAnalyzeResult(
                type=interaction_type,
                response=image_only_reply(bundle),
                analysis=bundle.analysis,
                products=bundle.products or [],
                weather=bundle.weather,
                context=summarize_context(bundle),
            )

        if interaction_type == InteractionType.IMAGE_TEXT:
            bundle = await self.aggregator.gather_chat_context(request, identify_image=True)
        else:
            bundle = await self.aggregator.gather_chat_context(
                request,
                identify_image=False,
                crop_hint=find_crop_hint(request.text),
            )

        prompt = build_chat_prompt(bundle, request.text)
        if prompt.opening and on_chunk is not None:
            await on_chunk(prompt.opening + " ")
        result = await self.gateway.generate(prompt.messages, on_chunk=on_chunk)

        response = result.content.strip()
        if prompt.opening and not response.startswith(prompt.opening):
            response = f"{prompt.opening} {response}"

        logger.info(
            "Chat analyze %s answered (%s tokens)", interaction_type.value, result.meta.tokens.total
        )
        return ChatAnalyzeResult(
            type=interaction_type,
            response=response,
            analysis=bundle.analysis,
            products=bundle.products or [],
            weather=bundle.weather,
            context=summarize_context(bundle),
            meta=result.meta,
        )
