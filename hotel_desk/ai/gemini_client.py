"""
Google Gemini text service for the service desk.
Provides generative fallback replies using Google's Gemini models.
"""

import asyncio
from dataclasses import dataclass
from typing import Dict, Optional

try:
    import google.generativeai as genai
    from google.generativeai.types import HarmCategory, HarmBlockThreshold
    GEMINI_AVAILABLE = True
except ImportError:
    GEMINI_AVAILABLE = False

from ..core.errors import GenerationError
from ..utils.logger import get_logger
from .text_services import BaseTextService

logger = get_logger(__name__)


@dataclass
class GeminiConfig:
    """Configuration for the Gemini text service."""
    api_key: str
    model_name: str = "gemini-1.5-flash"
    temperature: float = 0.7
    max_tokens: int = 512
    top_p: float = 0.9
    top_k: int = 40
    safety_settings: Optional[Dict] = None


class GeminiTextService(BaseTextService):
    """Google Gemini client producing single-shot completions."""

    name = "gemini"

    def __init__(self, config: GeminiConfig):
        """Initialize Gemini client."""
        if not GEMINI_AVAILABLE:
            raise ImportError("google-generativeai package not installed")

        self.config = config
        self.model = None

        genai.configure(api_key=config.api_key)

        self.safety_settings = config.safety_settings or {
            HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
            HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
            HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
            HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
        }

        self._initialize_model()
        logger.info(f"Gemini text service initialized with model: {config.model_name}")

    def _initialize_model(self):
        """Initialize the Gemini model."""
        generation_config = {
            "temperature": self.config.temperature,
            "top_p": self.config.top_p,
            "top_k": self.config.top_k,
            "max_output_tokens": self.config.max_tokens,
        }
        self.model = genai.GenerativeModel(
            model_name=self.config.model_name,
            generation_config=generation_config,
            safety_settings=self.safety_settings,
        )

    async def complete(self, prompt: str) -> str:
        response = await asyncio.to_thread(self.model.generate_content, prompt)
        try:
            text = (response.text or "").strip()
        except ValueError as e:
            # Raised by the SDK when the candidate was blocked.
            raise GenerationError(f"Gemini returned no text: {e}", backend=self.name) from e

        if not text:
            raise GenerationError("Gemini returned an empty reply", backend=self.name)
        logger.info(f"Generated Gemini response: {len(text)} characters")
        return text


def create_gemini_client(api_key: str, model_name: str = "gemini-1.5-flash", **kwargs) -> Optional[GeminiTextService]:
    """Create a Gemini text service with the given configuration."""
    if not GEMINI_AVAILABLE:
        logger.warning("Gemini not available - google-generativeai package not installed")
        return None

    if not api_key:
        logger.warning("Gemini API key not provided")
        return None

    try:
        return GeminiTextService(GeminiConfig(api_key=api_key, model_name=model_name, **kwargs))
    except Exception as e:
        logger.error(f"Failed to create Gemini client: {e}")
        return None
