import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from langchain_core.messages import BaseMessage, HumanMessage
from langchain_core.prompts import ChatPromptTemplate

from app.core.langchain_message_adapter import chat_messages_to_langchain
from app.models.advisory import CandidateSet, ContextBundle
from app.models.plant import PlantAnalysis
from app.models.weather import WeatherSnapshot
from app.prompts.chat_assistant_system_prompt import (
    ANALYSIS_CONTEXT_TEMPLATE,
    IMAGE_ANALYSIS_SYSTEM_PROMPT,
    KNOWLEDGE_MODE_SYSTEM_PROMPT,
    OPENING_INSTRUCTION_TEMPLATE,
    PRODUCTS_CONTEXT_TEMPLATE,
    WEATHER_CONTEXT_TEMPLATE,
)
from app.prompts.province_advisory_system_prompt import (
    PROVINCE_ADVISORY_USER_TEMPLATE,
    build_province_advisory_system_prompt,
)
from app.services.candidate_guard import region_display_name

logger = logging.getLogger(__name__)

MONTH_NAMES = tuple(f"Tháng {month}" for month in range(1, 13))
MAX_EVIDENCE = 5
FORECAST_DAYS = 3
UNIDENTIFIED_PLANT = "Không xác định được"

_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", "{system_prompt}"),
        ("human", "{user_prompt}"),
    ]
)


@dataclass(frozen=True)
class AdvisoryPrompt:
    system: str
    user: str

    def to_messages(self) -> List[BaseMessage]:
        return _PROMPT.format_messages(system_prompt=self.system, user_prompt=self.user)


@dataclass(frozen=True)
class ChatPrompt:
    messages: List[BaseMessage]
    opening: Optional[str] = None


def month_name(month: int) -> str:
    return MONTH_NAMES[month - 1]


def _weather_input(weather: Optional[WeatherSnapshot]) -> Optional[Dict[str, Any]]:
    if weather is None:
        return None
    return {
        "temp_now": weather.current.temperature,
        "humidity": weather.current.humidity,
        "description": weather.current.description,
        "forecast_3d": [
            {
                "date": f"{entry.date.day}/{entry.date.month}/{entry.date.year}",
                "temp_min": entry.temperature.min,
                "temp_max": entry.temperature.max,
                "description": entry.description,
                "rain": entry.rain,
            }
            for entry in weather.forecast[:FORECAST_DAYS]
        ],
    }


def build_advisory_input(
    province_name: str,
    month: int,
    candidates: CandidateSet,
    bundle: ContextBundle,
    soils: Sequence[str] = (),
) -> Dict[str, Any]:
    """Structured INPUT block the advisory model is told to rely on exclusively."""
    return {
        "province": province_name,
        "month": month,
        "monthName": month_name(month),
        "region": candidates.region.value,
        "soils": list(soils),
        "hasDatabaseData": candidates.has_authoritative_data,
        "weather": _weather_input(bundle.weather),
        "alerts": [alert.model_dump(mode="json") for alert in bundle.alerts or []],
        "candidates": {
            "plant_now": list(candidates.planting),
            "harvest_now": list(candidates.harvesting),
        },
        "evidence": [
            evidence.model_dump(mode="json")
            for evidence in (bundle.articles or [])[:MAX_EVIDENCE]
        ],
    }


def build_advisory_prompt(
    province_name: str,
    month: int,
    candidates: CandidateSet,
    bundle: ContextBundle,
    soils: Sequence[str] = (),
) -> AdvisoryPrompt:
    system = build_province_advisory_system_prompt(
        province_name=province_name,
        month_name=month_name(month),
        region_name=region_display_name(candidates.region),
        has_harvest=bool(candidates.harvesting),
    )
    input_data = build_advisory_input(province_name, month, candidates, bundle, soils)
    user = PROVINCE_ADVISORY_USER_TEMPLATE.format(
        input_json=json.dumps(input_data, ensure_ascii=False, indent=2)
    )
    return AdvisoryPrompt(system=system, user=user)


# --- chat ---


def opening_sentence(analysis: Optional[PlantAnalysis]) -> Optional[str]:
    """Sentence the chat reply must start with when a plant was identified."""
    if analysis is None or analysis.plant is None:
        return None
    plant = analysis.plant
    if not plant.common_name or plant.common_name == UNIDENTIFIED_PLANT:
        return None
    if plant.reliable:
        return f"Đây là {plant.common_name} (độ tin cậy {plant.confidence_percent}%)."
    return (
        f"Có thể đây là {plant.common_name} "
        f"(độ tin cậy {plant.confidence_percent}% - chưa chắc chắn)."
    )


def _analysis_context(analysis: PlantAnalysis) -> str:
    plant = analysis.plant
    if analysis.disease is not None:
        disease = f"{analysis.disease.name} (độ tin cậy {round(analysis.disease.probability * 100)}%)"
    else:
        disease = "Không phát hiện bệnh rõ ràng"
    return ANALYSIS_CONTEXT_TEMPLATE.format(
        plant_name=plant.common_name if plant else UNIDENTIFIED_PLANT,
        scientific_name=(plant.scientific_name if plant else None) or "không rõ",
        confidence=plant.confidence_percent if plant else 0,
        reliability=(
            "✅ Đáng tin cậy (≥70%)" if plant and plant.reliable else "⚠️ KHÔNG đáng tin cậy (<70%)"
        ),
        disease=disease,
        health="Khỏe mạnh" if analysis.is_healthy else "Có dấu hiệu bệnh",
    )


def build_chat_system_prompt(bundle: ContextBundle, opening: Optional[str] = None) -> str:
    analysis = bundle.analysis
    sections = [
        (IMAGE_ANALYSIS_SYSTEM_PROMPT if analysis is not None else KNOWLEDGE_MODE_SYSTEM_PROMPT).strip()
    ]
    if bundle.weather is not None:
        current = bundle.weather.current
        sections.append(
            WEATHER_CONTEXT_TEMPLATE.format(
                temperature=current.temperature,
                humidity=current.humidity,
                description=current.description,
                wind_speed=current.wind_speed,
            ).strip()
        )
    if analysis is not None:
        sections.append(_analysis_context(analysis).strip())
    if bundle.products:
        sections.append(
            PRODUCTS_CONTEXT_TEMPLATE.format(
                product_names=", ".join(item.name for item in bundle.products)
            ).strip()
        )
    if opening:
        sections.append(OPENING_INSTRUCTION_TEMPLATE.format(opening=opening).strip())
    return "\n\n".join(sections)


def build_chat_prompt(bundle: ContextBundle, text: str) -> ChatPrompt:
    opening = opening_sentence(bundle.analysis)
    system_messages = ChatPromptTemplate.from_messages(
        [("system", "{system_prompt}")]
    ).format_messages(system_prompt=build_chat_system_prompt(bundle, opening))

    history = chat_messages_to_langchain(bundle.history or [])
    logger.debug("Chat prompt built with %d history messages", len(history))
    return ChatPrompt(
        messages=[*system_messages, *history, HumanMessage(content=text)],
        opening=opening,
    )
