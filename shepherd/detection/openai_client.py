"""OpenAI-compatible implementation of the PackageClassifier protocol."""

from __future__ import annotations

import typing as typ

import httpx
import msgspec

from shepherd.detection.errors import (
    ClassifierAPIError,
    ClassifierConfigError,
    ClassifierResponseShapeError,
)
from shepherd.detection.models import PackageUpdateDetection
from shepherd.detection.prompts import SYSTEM_PROMPT, build_user_prompt

if typ.TYPE_CHECKING:
    from shepherd.detection.config import OpenAIClassifierConfig

_HTTP_ERROR_STATUS_THRESHOLD = 400
_HTTP_RATE_LIMITED = 429


def _get_retry_after(response: httpx.Response) -> int | None:
    """Extract Retry-After header value if present and numeric."""
    retry_after = response.headers.get("Retry-After")
    if retry_after and retry_after.isdigit():
        return int(retry_after)
    return None


class _Message(msgspec.Struct):
    content: str | None = None


class _Choice(msgspec.Struct):
    message: _Message | None = None


class _ChatCompletion(msgspec.Struct):
    choices: list[_Choice] = msgspec.field(default_factory=list)


class OpenAIPackageClassifier:
    """Classify pull requests with an OpenAI-compatible chat completion.

    Parameters
    ----------
    config
        Configuration for the OpenAI API client.
    http_client
        Optional httpx.AsyncClient for testing. If not provided, the
        instance creates and owns its own client.

    """

    def __init__(
        self,
        config: OpenAIClassifierConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with configuration."""
        if not config.api_key.strip():
            raise ClassifierConfigError.empty_api_key()

        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_s,
            headers={
                "Authorization": f"Bearer {config.api_key}",
                "Content-Type": "application/json",
            },
        )

    @property
    def config(self) -> OpenAIClassifierConfig:
        """Read-only access to the client configuration."""
        return self._config

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def classify(self, title: str, body: str) -> PackageUpdateDetection:
        """Classify a pull request.

        Raises
        ------
        ClassifierAPIError
            If the API returns an error response, times out or is unreachable.
        ClassifierResponseShapeError
            If the response lacks content or the content is not a verdict.

        """
        payload = self._build_payload(build_user_prompt(title, body))
        response = await self._send_request(payload)
        self._check_response_errors(response)
        content = self._extract_content(response)
        return self._parse_verdict(content)

    def _build_payload(self, user_prompt: str) -> dict[str, object]:
        return {
            "model": self._config.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self._config.temperature,
            "max_tokens": self._config.max_tokens,
            "response_format": {"type": "json_object"},
        }

    async def _send_request(self, payload: dict[str, object]) -> httpx.Response:
        try:
            return await self._client.post(self._config.endpoint, json=payload)
        except httpx.TimeoutException as exc:
            raise ClassifierAPIError.timeout() from exc
        except httpx.RequestError as exc:
            raise ClassifierAPIError.network_error(str(exc)) from exc

    def _check_response_errors(self, response: httpx.Response) -> None:
        if response.status_code == _HTTP_RATE_LIMITED:
            raise ClassifierAPIError.rate_limited(_get_retry_after(response))
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise ClassifierAPIError.http_error(response.status_code)

    def _extract_content(self, response: httpx.Response) -> str:
        """Return the assistant message content of a completion response."""
        try:
            completion = msgspec.json.decode(response.content, type=_ChatCompletion)
        except msgspec.DecodeError as exc:
            raise ClassifierResponseShapeError.invalid_json(response.text) from exc

        if not completion.choices:
            raise ClassifierResponseShapeError.missing("choices")
        message = completion.choices[0].message
        if message is None or message.content is None:
            raise ClassifierResponseShapeError.missing("choices[0].message.content")
        return message.content

    def _parse_verdict(self, content: str) -> PackageUpdateDetection:
        try:
            return msgspec.json.decode(content, type=PackageUpdateDetection)
        except msgspec.DecodeError as exc:
            raise ClassifierResponseShapeError.invalid_json(content) from exc
