"""Product description and specs drafting for the admin form, backed by Gemini."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional

from google import genai


logger = logging.getLogger(__name__)

DEFAULT_LLM = "gemini-2.5-flash"


def template_content(title: str) -> Dict[str, str]:
    """Canned copy used whenever the model is unavailable."""
    return {
        "description": (
            f"This is a high-quality {title} featuring cutting-edge technology and premium build quality. "
            "Perfect for professionals and enthusiasts who demand the best performance and reliability. "
            "With advanced features and sleek design, this product delivers exceptional value and user experience."
        ),
        "specs": (
            'Display: 15.6" Full HD, Processor: Intel Core i7, RAM: 16GB DDR4, Storage: 512GB SSD, '
            "Graphics: Dedicated GPU, Battery: 8+ hours, Weight: 2.1kg, Connectivity: Wi-Fi 6, "
            "Bluetooth 5.0, USB-C, HDMI"
        ),
    }


class ContentGenerator:
    def __init__(self, api_key: Optional[str], model_name: Optional[str] = None, client: Any = None) -> None:
        self.api_key = api_key
        self.model_name = model_name or DEFAULT_LLM
        self.client = client
        if self.client is None and self.api_key:
            try:
                self.client = genai.Client(api_key=self.api_key)
                logger.info(f"Gemini client initialised with model={self.model_name}")
            except Exception as exc:
                logger.warning(f"Failed to initialise Gemini client: {type(exc).__name__}: {exc}")
                self.client = None

    def is_enabled(self) -> bool:
        return self.client is not None

    def generate(self, title: str) -> Dict[str, Any]:
        """Return ``{"description", "specs", "source"}`` for a product title.

        ``source`` is ``"ai"`` when the model answered with usable JSON and
        ``"template"`` otherwise.
        """
        title = (title or "").strip()
        if not title:
            raise ValueError("Product title is required")

        fallback = dict(template_content(title), source="template")
        if not self.is_enabled():
            return fallback

        text = self._call_llm(self._build_prompt(title))
        parsed = self._parse_json_response(text)
        if not parsed:
            logger.warning("Product content JSON decode failed; using template copy")
            return fallback

        description = str(parsed.get("description") or "").strip()
        specs = parsed.get("specs")
        if isinstance(specs, list):
            specs = ", ".join(str(s).strip() for s in specs if str(s).strip())
        specs = str(specs or "").strip()
        if not description or not specs:
            return fallback
        return {"description": description, "specs": specs, "source": "ai"}

    @staticmethod
    def _build_prompt(title: str) -> str:
        return (
            "You write product listings for an online laptop store. "
            f"Product title: {title}\n"
            "Reply with a JSON object only, no extra text, with keys:\n"
            "- description (string): two or three sentences of marketing copy.\n"
            "- specs (string): comma-separated key specifications, e.g. "
            '"Display: 14\\" 2.8K OLED, Processor: ..., RAM: ..., Storage: ...".'
        )

    def _call_llm(self, prompt: str) -> str:
        try:
            response = self.client.models.generate_content(model=self.model_name, contents=prompt)
        except Exception as exc:
            logger.warning(f"Gemini call failed: {type(exc).__name__}: {exc}")
            return ""
        return self._strip_markdown_fences(self._extract_text(response))

    @staticmethod
    def _extract_text(response: Any) -> str:
        if response is None:
            return ""
        if getattr(response, "text", None):
            return str(response.text)
        candidates = getattr(response, "candidates", None)
        if candidates:
            content = getattr(candidates[0], "content", None)
            parts = getattr(content, "parts", None) or []
            return "".join(getattr(part, "text", "") or "" for part in parts)
        return ""

    @staticmethod
    def _strip_markdown_fences(text: str) -> str:
        if not text:
            return ""
        cleaned = text.strip()
        fence_match = re.match(r"```(?:json)?\s*(.*?)\s*```", cleaned, re.DOTALL | re.IGNORECASE)
        if fence_match:
            return fence_match.group(1).strip()
        return cleaned

    def _parse_json_response(self, text: str) -> Optional[Dict[str, Any]]:
        if not text:
            return None
        stripped = self._strip_markdown_fences(text)
        try:
            payload = json.loads(stripped)
        except json.JSONDecodeError:
            match = re.search(r"\{.*\}", stripped, re.DOTALL)
            if not match:
                return None
            try:
                payload = json.loads(match.group(0))
            except json.JSONDecodeError:
                return None
        return payload if isinstance(payload, dict) else None
