"""
Generative Text Services - Local and cloud language model backends.
Each backend turns a prompt into a reply; a cascade tries them in order.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

# AI client imports
try:
    import openai
except ImportError:
    openai = None

try:
    import anthropic
except ImportError:
    anthropic = None

import requests

from ..core.config import AIConfig
from ..core.errors import GenerationError

logger = logging.getLogger(__name__)


class BaseTextService(ABC):
    """A fallible prompt-to-text backend."""

    name = "base"

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Return the generated reply or raise on failure."""

    async def shutdown(self):
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class OpenAITextService(BaseTextService):
    """OpenAI chat completions backend."""

    name = "openai"

    def __init__(self, api_key: str, model: str = "gpt-4o-mini",
                 temperature: float = 0.7, max_tokens: int = 512):
        if not openai:
            raise ImportError("openai package not installed")
        self.client = openai.OpenAI(api_key=api_key)
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def complete(self, prompt: str) -> str:
        response = await asyncio.to_thread(
            self.client.chat.completions.create,
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        if not response.choices or not response.choices[0].message.content:
            raise GenerationError("OpenAI returned no choices", backend=self.name)
        return response.choices[0].message.content.strip()


class AnthropicTextService(BaseTextService):
    """Anthropic messages backend."""

    name = "anthropic"

    def __init__(self, api_key: str, model: str = "claude-3-haiku-20240307",
                 temperature: float = 0.7, max_tokens: int = 512):
        if not anthropic:
            raise ImportError("anthropic package not installed")
        self.client = anthropic.Anthropic(api_key=api_key)
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def complete(self, prompt: str) -> str:
        response = await asyncio.to_thread(
            self.client.messages.create,
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        if not response.content:
            raise GenerationError("Anthropic returned no content", backend=self.name)
        return response.content[0].text.strip()


class OllamaTextService(BaseTextService):
    """Local Ollama backend over its HTTP API."""

    name = "ollama"

    def __init__(self, base_url: str = "http://localhost:11434", model: str = "llama3.1:8b",
                 temperature: float = 0.7, max_tokens: int = 512, timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

    def _post(self, prompt: str) -> requests.Response:
        return requests.post(
            f"{self.base_url}/api/generate",
            json={
                "model": self.model,
                "prompt": prompt,
                "stream": False,
                "options": {
                    "temperature": self.temperature,
                    "num_predict": self.max_tokens,
                },
            },
            timeout=self.timeout,
        )

    async def complete(self, prompt: str) -> str:
        response = await asyncio.to_thread(self._post, prompt)
        if response.status_code != 200:
            raise GenerationError(f"Local AI request failed: {response.status_code}", backend=self.name)
        text = (response.json().get("response") or "").strip()
        if not text:
            raise GenerationError("Local AI returned an empty reply", backend=self.name)
        return text

    def is_reachable(self) -> bool:
        """Check that the Ollama server answers."""
        try:
            return requests.get(f"{self.base_url}/api/version", timeout=5).status_code == 200
        except requests.RequestException as e:
            logger.warning(f"Could not connect to local AI: {e}")
            return False


class CascadeTextService(BaseTextService):
    """Tries each backend in order and returns the first usable reply."""

    name = "cascade"

    def __init__(self, services: Sequence[BaseTextService]):
        if not services:
            raise ValueError("CascadeTextService needs at least one backend")
        self.services: List[BaseTextService] = list(services)

    async def complete(self, prompt: str) -> str:
        errors = []
        for service in self.services:
            try:
                text = await service.complete(prompt)
                if text and text.strip():
                    return text.strip()
                errors.append(f"{service.name}: empty reply")
            except Exception as e:
                logger.error(f"{service.name} API error: {e}")
                errors.append(f"{service.name}: {e}")
        raise GenerationError("All text backends failed: " + "; ".join(errors), backend=self.name)

    def __repr__(self) -> str:
        return f"CascadeTextService({[s.name for s in self.services]})"


def create_text_service(config: AIConfig) -> Optional[BaseTextService]:
    """Build the backend cascade from configuration.

    Local Ollama comes first when ``use_local_ai`` is set and the server
    answers, then Gemini, OpenAI and Anthropic for whichever keys are
    configured. Returns None
    when no backend is available, in which case replies are templated.
    """
    from .gemini_client import create_gemini_client

    services: List[BaseTextService] = []

    if config.use_local_ai:
        local = OllamaTextService(
            base_url=config.local_api_url,
            model=config.local_model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.request_timeout,
        )
        if local.is_reachable():
            services.append(local)
        else:
            logger.warning(f"Local AI not reachable at {config.local_api_url}, skipping it")

    if config.gemini_api_key:
        gemini = create_gemini_client(
            api_key=config.gemini_api_key,
            model_name=config.gemini_model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )
        if gemini:
            services.append(gemini)

    if config.openai_api_key:
        try:
            services.append(OpenAITextService(
                api_key=config.openai_api_key,
                model=config.openai_model,
                temperature=config.temperature,
                max_tokens=config.max_tokens,
            ))
        except ImportError as e:
            logger.warning(f"OpenAI backend unavailable: {e}")

    if config.anthropic_api_key:
        try:
            services.append(AnthropicTextService(
                api_key=config.anthropic_api_key,
                model=config.anthropic_model,
                temperature=config.temperature,
                max_tokens=config.max_tokens,
            ))
        except ImportError as e:
            logger.warning(f"Anthropic backend unavailable: {e}")

    if not services:
        logger.warning("No generative text backend configured - using templated fallback replies")
        return None

    logger.info(f"Text backends: {', '.join(s.name for s in services)}")
    return services[0] if len(services) == 1 else CascadeTextService(services)
