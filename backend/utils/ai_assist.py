"""
Gemini-backed AI assist: listing audits and category suggestions.

The model is an untrusted, optional oracle. Every failure surfaces as
ExternalServiceError so callers can degrade (listing stays unverified,
suggestion is omitted) instead of failing their own write.
"""
from google import genai
from google.genai import types
from config import GEMINI_API_KEY, GEMINI_MODEL, AI_TIMEOUT_SECONDS
from utils.exceptions import ExternalServiceError
from utils.storage import decode_image_data
from typing import Any, Dict, Optional
import asyncio
import json
import logging

logger = logging.getLogger(__name__)

CATEGORIES = ["Plastic", "Metal", "Paper", "Organic", "Electronic", "Glass", "Textile", "Other"]

AUDIT_PROMPT = """Act as a marketplace auditor. Analyze this waste material listing:
Title: {title}
Description: {description}
Category: {category}
Quality: {quality}

Check for:
1. Accuracy: Does description and image match the category?
2. Compliance: Is it prohibited (hazardous, illegal, or non-waste)?
3. Quality: Is the description and image quality sufficient for a buyer?

Return the result in JSON format."""

SUGGEST_PROMPT = (
    "Analyze this image of waste material and suggest the most appropriate primary "
    "category from the provided list. Return the result in JSON format."
)

AUDIT_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "is_verified": types.Schema(
            type=types.Type.BOOLEAN,
            description="Whether the listing is verified as accurate and compliant."
        ),
        "notes": types.Schema(
            type=types.Type.STRING,
            description="Audit notes explaining the verification status."
        ),
        "confidence": types.Schema(
            type=types.Type.NUMBER,
            description="Confidence score between 0 and 1."
        ),
    },
    required=["is_verified", "notes", "confidence"],
)

SUGGEST_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "category": types.Schema(
            type=types.Type.STRING,
            enum=CATEGORIES,
            description="The suggested category for the waste material."
        ),
        "confidence": types.Schema(
            type=types.Type.NUMBER,
            description="Confidence score between 0 and 1."
        ),
        "reasoning": types.Schema(
            type=types.Type.STRING,
            description="Brief explanation for the choice."
        ),
    },
    required=["category"],
)


def _clamp_confidence(value: Any) -> Optional[float]:
    try:
        return min(max(float(value), 0.0), 1.0)
    except (TypeError, ValueError):
        return None


class AIAssist:
    """Thin wrapper around the google-genai async client"""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, timeout: Optional[float] = None):
        self.api_key = api_key if api_key is not None else GEMINI_API_KEY
        self.model = model or GEMINI_MODEL
        self.timeout = timeout or AI_TIMEOUT_SECONDS
        self._client = None

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            if not self.api_key:
                raise ExternalServiceError("AI Key missing", status_code=500)
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def _generate_json(self, prompt: str, image_data: str, schema: types.Schema) -> Dict[str, Any]:
        mime_type, content = decode_image_data(image_data)
        client = self.client

        try:
            response = await asyncio.wait_for(
                client.aio.models.generate_content(
                    model=self.model,
                    contents=[
                        types.Part.from_text(text=prompt),
                        types.Part.from_bytes(data=content, mime_type=mime_type),
                    ],
                    config=types.GenerateContentConfig(
                        response_mime_type="application/json",
                        response_schema=schema,
                    ),
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            raise ExternalServiceError(f"AI request timed out after {self.timeout}s")
        except Exception as e:
            raise ExternalServiceError(f"AI request failed: {e}") from e

        try:
            result = json.loads(response.text or "{}")
        except (TypeError, json.JSONDecodeError) as e:
            raise ExternalServiceError(f"AI returned malformed JSON: {e}") from e

        if not isinstance(result, dict):
            raise ExternalServiceError("AI returned an unexpected payload")
        return result

    async def audit_listing(
        self,
        title: str,
        description: Optional[str],
        category: Optional[str],
        quality: Optional[str],
        image_data: str
    ) -> Dict[str, Any]:
        """Returns {is_verified, notes, confidence}"""
        prompt = AUDIT_PROMPT.format(
            title=title,
            description=description or "",
            category=category or "",
            quality=quality or "",
        )
        result = await self._generate_json(prompt, image_data, AUDIT_SCHEMA)

        return {
            "is_verified": bool(result.get("is_verified", False)),
            "notes": str(result.get("notes") or ""),
            "confidence": _clamp_confidence(result.get("confidence")) or 0.0,
        }

    async def suggest_category(self, image_data: str) -> Dict[str, Any]:
        """Returns {category, confidence, reasoning}; unknown categories become Other"""
        result = await self._generate_json(SUGGEST_PROMPT, image_data, SUGGEST_SCHEMA)

        category = result.get("category")
        if category not in CATEGORIES:
            category = "Other"

        return {
            "category": category,
            "confidence": _clamp_confidence(result.get("confidence")),
            "reasoning": result.get("reasoning"),
        }


ai_assist = AIAssist()

def get_ai_assist() -> AIAssist:
    return ai_assist
