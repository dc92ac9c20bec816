import base64
import logging
from typing import Any, Dict, Optional

import httpx

from app.core.config import settings
from app.models.plant import DiseaseInfo, PlantAnalysis, PlantIdentity

logger = logging.getLogger(__name__)

PLANT_ID_URL = "https://plant.id/api/v3/identification"
IMAGE_FETCH_TIMEOUT_SECONDS = 15.0
DISEASE_MIN_PROBABILITY = 0.5
UNIDENTIFIED_NAME = "Không xác định được"


class ImageReferenceError(ValueError):
    pass


def unidentified(error: str) -> PlantAnalysis:
    return PlantAnalysis(
        plant=PlantIdentity(common_name=UNIDENTIFIED_NAME, scientific_name="Unknown", confidence=0.0),
        disease=None,
        is_healthy=True,
        confidence=0.0,
        error=error,
    )


async def load_image_payload(image_ref: str) -> str:
    """Return the image in the form Plant.id accepts (base64 or a data URI)."""
    if image_ref.startswith("data:image"):
        return image_ref
    if image_ref.startswith("blob:"):
        raise ImageReferenceError("Blob URLs cannot be read by the server")
    if not image_ref.startswith(("http://", "https://")):
        raise ImageReferenceError("Unsupported image reference")

    async with httpx.AsyncClient(timeout=IMAGE_FETCH_TIMEOUT_SECONDS) as client:
        response = await client.get(image_ref, follow_redirects=True)
        response.raise_for_status()
        return base64.b64encode(response.content).decode("ascii")


def parse_identification(data: Dict[str, Any]) -> PlantAnalysis:
    result = data.get("result") or {}
    is_plant = (result.get("is_plant") or {}).get("binary", True)
    suggestions = (result.get("classification") or {}).get("suggestions") or []
    if not is_plant or not suggestions:
        return unidentified("No plant detected in the image")

    top = suggestions[0]
    probability = float(top.get("probability") or 0.0)
    details = top.get("details") or {}
    common_names = details.get("common_names") or []
    plant = PlantIdentity(
        common_name=common_names[0] if common_names else top.get("name") or UNIDENTIFIED_NAME,
        scientific_name=top.get("name"),
        confidence=probability,
    )

    is_healthy = (result.get("is_healthy") or {}).get("binary", True)
    disease = None
    if not is_healthy:
        for suggestion in (result.get("disease") or {}).get("suggestions") or []:
            disease_probability = float(suggestion.get("probability") or 0.0)
            if disease_probability > DISEASE_MIN_PROBABILITY:
                disease = DiseaseInfo(
                    name=suggestion.get("name") or "",
                    description=(suggestion.get("details") or {}).get("description"),
                    probability=disease_probability,
                )
                break

    return PlantAnalysis(
        plant=plant,
        disease=disease,
        is_healthy=is_healthy,
        confidence=probability,
    )


async def identify_plant(image_ref: str) -> PlantAnalysis:
    """
    Identifies the plant and its health from one image via Plant.id v3.

    Never raises: any failure yields the placeholder analysis with ``error`` set.
    """
    if not settings.PLANT_ID_API_KEY:
        logger.warning("PLANT_ID_API_KEY is not configured; skipping identification")
        return unidentified("Plant identification is not configured")

    try:
        image = await load_image_payload(image_ref)
        async with httpx.AsyncClient(timeout=settings.PLANT_ID_TIMEOUT_SECONDS) as client:
            response = await client.post(
                PLANT_ID_URL,
                params={"details": "common_names,description"},
                headers={"Api-Key": settings.PLANT_ID_API_KEY},
                json={
                    "images": [image],
                    "similar_images": True,
                    "health": "all",
                    "classification_level": "all",
                },
            )
            response.raise_for_status()
            return parse_identification(response.json())
    except ImageReferenceError as exc:
        logger.warning("Rejected image reference: %s", exc)
        return unidentified(str(exc))
    except httpx.HTTPStatusError as exc:
        logger.warning(
            "Plant identification returned %s: %s",
            exc.response.status_code,
            exc.response.text[:200],
        )
        return unidentified(f"Plant.id returned {exc.response.status_code}")
    except httpx.RequestError as exc:
        logger.warning("Plant identification request failed: %s", exc)
        return unidentified("Plant.id is unreachable")
