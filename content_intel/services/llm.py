"""
LLM service using an OpenAI-compatible API
Text completion, structured output with Instructor, and embeddings
"""
from typing import List, Optional, Type, TypeVar
from openai import OpenAI
import instructor
from loguru import logger
from pydantic import BaseModel

from content_intel.config import Settings
from content_intel.exceptions import LLMServiceError

ModelT = TypeVar("ModelT", bound=BaseModel)


class LLMService:
    """Text-in/text-out LLM backend plus the embedding backend"""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[OpenAI] = None):
        """
        Initialize LLM service

        Args:
            settings: Application settings (if None, will load from environment)
            client: Pre-built OpenAI client (if None, one is created from settings)
        """
        if settings is None:
            from content_intel.config import get_settings
            settings = get_settings()

        self.settings = settings
        self.base_url = settings.llm_base_url or None

        if client is None:
            logger.info(f"Initializing LLM service with base_url: {self.base_url or 'default'}")
            logger.info(f"Model: {settings.llm_model}, embeddings: {settings.embedding_model}")
            client = OpenAI(
                base_url=self.base_url,
                api_key=settings.llm_api_key,
                timeout=settings.llm_timeout,
            )

        self.client = client
        self._structured_client = None

    @property
    def structured_client(self):
        """Client patched with Instructor for structured output, built on first use"""
        if self._structured_client is None:
            self._structured_client = instructor.from_openai(self.client)
        return self._structured_client

    def complete(
        self,
        prompt: str,
        temperature: float = 0.3,
        model: Optional[str] = None,
    ) -> str:
        """
        Send a one-shot prompt and return the response text

        Args:
            prompt: Prompt text
            temperature: Sampling temperature
            model: Model override (defaults to LLM_MODEL)

        Returns:
            Stripped response text

        Raises:
            LLMServiceError: If the backend call fails
        """
        model = model or self.settings.llm_model
        logger.debug(f"Calling LLM - Model: {model}, prompt length: {len(prompt)} characters")

        try:
            response = self.client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=self.settings.llm_max_tokens,
            )
        except Exception as e:
            raise self._translate_error(e) from e

        content = response.choices[0].message.content
        if content is None:
            raise LLMServiceError("LLM returned an empty response")
        return content.strip()

    def extract(
        self,
        prompt: str,
        response_model: Type[ModelT],
        temperature: float = 0.1,
        model: Optional[str] = None,
    ) -> ModelT:
        """
        Ask the LLM for a response validated against a Pydantic model

        Args:
            prompt: Prompt text
            response_model: Pydantic model the response must satisfy
            temperature: Sampling temperature
            model: Model override (defaults to LLM_MODEL)

        Returns:
            Validated instance of response_model

        Raises:
            LLMServiceError: If the call fails or the response does not validate
        """
        model = model or self.settings.llm_model
        logger.debug(f"Calling LLM for structured output - Model: {model}, schema: {response_model.__name__}")

        try:
            return self.structured_client.chat.completions.create(
                model=model,
                response_model=response_model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_retries=self.settings.llm_max_retries,
            )
        except Exception as e:
            raise self._translate_error(e) from e

    def embed(self, text: str) -> List[float]:
        """
        Embed a single text

        Raises:
            LLMServiceError: If the embedding call fails
        """
        return self.embed_many([text])[0]

    def embed_many(self, texts: List[str]) -> List[List[float]]:
        """
        Embed a batch of texts, preserving order

        Raises:
            LLMServiceError: If the embedding call fails
        """
        if not texts:
            return []

        try:
            response = self.client.embeddings.create(
                model=self.settings.embedding_model,
                input=texts,
            )
        except Exception as e:
            raise self._translate_error(e) from e

        ordered = sorted(response.data, key=lambda item: item.index)
        return [list(item.embedding) for item in ordered]

    def test_connection(self) -> bool:
        """
        Test API connection with a simple request

        Returns:
            True if connection successful, False otherwise
        """
        try:
            logger.info(f"Testing API connection to: {self.base_url or 'default endpoint'}")
            self.client.chat.completions.create(
                model=self.settings.llm_model,
                messages=[{"role": "user", "content": "Hello"}],
                max_tokens=10,
            )
            logger.info("API connection test successful!")
            return True
        except Exception as e:
            logger.error(f"API connection test failed: {e}")
            logger.error(f"Check BASE_URL (current: {self.settings.llm_base_url or 'default'}) and OPENAI_API_KEY")
            return False

    def _translate_error(self, error: Exception) -> LLMServiceError:
        """Map a backend exception to an LLMServiceError with a helpful hint"""
        error_msg = str(error)
        lowered = error_msg.lower()

        if "404" in error_msg or "not found" in lowered:
            return LLMServiceError(
                f"API endpoint not found (404): {error_msg}\n"
                f"BASE_URL must point at an OpenAI-compatible endpoint ending in /v1 "
                f"(current: {self.base_url or 'default'})"
            )
        if "401" in error_msg or "unauthorized" in lowered:
            return LLMServiceError("API authentication failed (401): check OPENAI_API_KEY")
        if "timeout" in lowered or "timed out" in lowered:
            return LLMServiceError(
                f"API request timed out after {self.settings.llm_timeout}s: check the network or raise LLM_TIMEOUT"
            )
        return LLMServiceError(f"LLM call failed: {error_msg}")
