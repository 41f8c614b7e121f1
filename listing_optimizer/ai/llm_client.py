"""
OpenAI client for listing rewrites, returning schema-validated models.
"""
import json
import logging
from typing import Optional, Type, TypeVar

from openai import APIConnectionError, APITimeoutError, OpenAI, RateLimitError
from pydantic import BaseModel
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..config import OpenAIConfig, get_config


logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

TRANSIENT_ERRORS = (APIConnectionError, APITimeoutError, RateLimitError)


class LLMClient:
    """
    Chat-completions wrapper used by the AI suggestion service.
    Requests run in JSON mode; replies are validated against a pydantic model.
    """

    def __init__(self, config: Optional[OpenAIConfig] = None, model: Optional[str] = None):
        self.config = config or get_config().openai
        self.model = model or self.config.model

        if self.config.api_key:
            self.client = OpenAI(api_key=self.config.api_key)
        else:
            logger.warning("No OpenAI API key configured; AI suggestions disabled")
            self.client = None

    def is_available(self) -> bool:
        return self.client is not None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        before_sleep=lambda retry_state: logger.warning(
            f"OpenAI request failed, retry {retry_state.attempt_number}: "
            f"{retry_state.outcome.exception()}"
        ),
        reraise=True,
    )
    def complete_json(self, system_prompt: str, user_prompt: str) -> str:
        """
        Run one JSON-mode completion and return the raw reply text.

        Connection errors, timeouts and rate limits are retried.

        Raises:
            RuntimeError: if no API key is configured
        """
        if self.client is None:
            raise RuntimeError("LLM client not configured")

        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
            response_format={"type": "json_object"},
        )
        if response.usage is not None:
            logger.debug(
                f"{self.model}: {response.usage.prompt_tokens} prompt tokens, "
                f"{response.usage.completion_tokens} completion tokens"
            )
        return response.choices[0].message.content or ""

    def call_with_schema(
        self,
        system_prompt: str,
        user_prompt: str,
        response_model: Type[T],
    ) -> T:
        """
        Ask for a JSON reply and validate it as `response_model`.

        The model's JSON schema is appended to the system prompt.

        Raises:
            ValidationError: if the reply does not match the schema
            json.JSONDecodeError: if the reply is not JSON
            RuntimeError: if no API key is configured
        """
        schema = json.dumps(response_model.model_json_schema())
        reply = self.complete_json(
            f"{system_prompt}\n\nJSON schema of the reply:\n{schema}",
            user_prompt,
        )

        try:
            data = json.loads(reply)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON from {self.model}: {e}")
            raise

        return response_model.model_validate(data)
