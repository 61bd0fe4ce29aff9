"""Configuration for the OpenAI package classifier."""

from __future__ import annotations

import dataclasses
import math
import os

from shepherd.detection.errors import (
    ClassifierBackendConfigError,
    ClassifierConfigError,
)

_DEFAULT_ENDPOINT = "https://api.openai.com/v1/chat/completions"
_DEFAULT_MODEL = "gpt-4o-mini"
_DEFAULT_TIMEOUT_S = 60.0
_DEFAULT_TEMPERATURE = 0.0
_DEFAULT_MAX_TOKENS = 1024


def _parse_timeout_from_env() -> float:
    raw = os.environ.get("SHEPHERD_OPENAI_TIMEOUT_S")
    if raw is None:
        return _DEFAULT_TIMEOUT_S
    try:
        timeout_s = float(raw)
    except ValueError as exc:
        raise ClassifierBackendConfigError.invalid_parameter(
            "SHEPHERD_OPENAI_TIMEOUT_S", raw, "Must be a positive number"
        ) from exc
    if not math.isfinite(timeout_s) or timeout_s <= 0:
        raise ClassifierBackendConfigError.invalid_parameter(
            "SHEPHERD_OPENAI_TIMEOUT_S", raw, "Must be a positive number"
        )
    return timeout_s


@dataclasses.dataclass(frozen=True, slots=True)
class OpenAIClassifierConfig:
    """Configuration for an OpenAI-compatible chat completions backend.

    Attributes
    ----------
    api_key
        API key for authentication.
    endpoint
        Chat completions endpoint URL.
    model
        Model identifier to use for completions.
    timeout_s
        Request timeout in seconds.
    temperature
        Sampling temperature.
    max_tokens
        Maximum tokens in the completion response.

    """

    api_key: str
    endpoint: str = _DEFAULT_ENDPOINT
    model: str = _DEFAULT_MODEL
    timeout_s: float = _DEFAULT_TIMEOUT_S
    temperature: float = _DEFAULT_TEMPERATURE
    max_tokens: int = _DEFAULT_MAX_TOKENS

    @classmethod
    def from_env(cls) -> OpenAIClassifierConfig:
        """Build configuration from environment variables.

        Reads the following environment variables:

        - ``SHEPHERD_OPENAI_API_KEY``: Required API key
        - ``SHEPHERD_OPENAI_ENDPOINT``: Optional endpoint override
        - ``SHEPHERD_OPENAI_MODEL``: Optional model override
        - ``SHEPHERD_OPENAI_TIMEOUT_S``: Optional request timeout

        Raises
        ------
        ClassifierConfigError
            If the API key is missing or empty.
        ClassifierBackendConfigError
            If the timeout is malformed.

        """
        raw_api_key = os.environ.get("SHEPHERD_OPENAI_API_KEY")
        if raw_api_key is None:
            raise ClassifierConfigError.missing_api_key()
        api_key = raw_api_key.strip()
        if not api_key:
            raise ClassifierConfigError.empty_api_key()

        return cls(
            api_key=api_key,
            endpoint=os.environ.get("SHEPHERD_OPENAI_ENDPOINT", _DEFAULT_ENDPOINT),
            model=os.environ.get("SHEPHERD_OPENAI_MODEL", _DEFAULT_MODEL),
            timeout_s=_parse_timeout_from_env(),
        )
