"""
Hugging Face text-generation client.

Sends one instruction prompt per call and returns the generated text.
Remote payloads come in several shapes (a list of generations, a single
generation object, or a bare string); they are all resolved here so the
rest of the pipeline only ever sees a string. HTTP and transport failures
are mapped onto the RecipeError taxonomy. Nothing is retried.
"""

import asyncio
import json
import logging
from typing import Any, Dict, NamedTuple, Optional

import httpx

from ..core.config import Settings, get_settings
from ..core.errors import ErrorKind, GenerationError

log = logging.getLogger(__name__)

DEFAULT_ESTIMATED_WAIT = 20


class StatusRule(NamedTuple):
    kind: ErrorKind
    message: str


STATUS_ERRORS: Dict[int, StatusRule] = {
    404: StatusRule(ErrorKind.REMOTE_NOT_FOUND, "Model not found. Verify the model name: {model}"),
    401: StatusRule(
        ErrorKind.REMOTE_UNAUTHORIZED,
        "Invalid Hugging Face token. Get a new token at https://huggingface.co/settings/tokens",
    ),
    403: StatusRule(
        ErrorKind.REMOTE_FORBIDDEN,
        "Access denied. You may need to accept the model license at https://huggingface.co/{model}",
    ),
    503: StatusRule(
        ErrorKind.REMOTE_UNAVAILABLE,
        "Model is loading. Estimated wait time: {wait} seconds. Please try again.",
    ),
    429: StatusRule(
        ErrorKind.REMOTE_RATE_LIMITED,
        "Rate limit exceeded. Please wait before making another request.",
    ),
    500: StatusRule(
        ErrorKind.REMOTE_SERVER_ERROR,
        "Hugging Face server error. Please try again in a moment.",
    ),
}

UNEXPECTED_STATUS = StatusRule(ErrorKind.REMOTE_UNEXPECTED_STATUS, "API Error ({status}): {reason}")


def _decode(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _estimated_wait(data: Any) -> int:
    if isinstance(data, dict) and data.get("estimated_time"):
        try:
            return int(round(float(data["estimated_time"])))
        except (TypeError, ValueError):
            pass
    return DEFAULT_ESTIMATED_WAIT


def _from_object(obj: Dict[str, Any]) -> str:
    text = obj.get("generated_text")
    if isinstance(text, str) and text:
        return text
    if obj.get("error"):
        raise GenerationError(
            f"HF API Error: {obj['error']}",
            kind=ErrorKind.REMOTE_UNEXPECTED_STATUS,
            detail=obj,
        )
    return ""


def extract_generated_text(data: Any) -> str:
    """Resolve a successful payload to its generated text ("" if none)."""
    if isinstance(data, list):
        first = data[0] if data else None
        if isinstance(first, dict):
            log.debug("📝 Response format: Array")
            return _from_object(first)
        return first if isinstance(first, str) else ""

    if isinstance(data, dict):
        log.debug("📝 Response format: Object")
        return _from_object(data)

    if isinstance(data, str):
        log.debug("📝 Response format: String")
        return data

    return ""


class GenerationClient:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        self.http_client = http_client

    def _payload(self, prompt: str) -> Dict[str, Any]:
        s = self.settings
        return {
            "inputs": prompt,
            "parameters": {
                "max_new_tokens": s.max_new_tokens,
                "temperature": s.temperature,
                "top_p": s.top_p,
                "top_k": s.top_k,
                "repetition_penalty": s.repetition_penalty,
                "do_sample": True,
                "return_full_text": False,
            },
            "options": {
                "use_cache": False,
                "wait_for_model": True,
            },
        }

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.hf_access_token}",
            "Content-Type": "application/json",
            "x-use-cache": "false",
        }

    async def _post(self, prompt: str) -> httpx.Response:
        # httpx timeouts are per phase; wait_for bounds the whole exchange
        return await asyncio.wait_for(self._send(prompt), self.settings.generation_timeout)

    async def _send(self, prompt: str) -> httpx.Response:
        kwargs = {
            "json": self._payload(prompt),
            "headers": self._headers(),
            "timeout": self.settings.generation_timeout,
        }
        if self.http_client is not None:
            return await self.http_client.post(self.settings.endpoint_url, **kwargs)
        async with httpx.AsyncClient() as client:
            return await client.post(self.settings.endpoint_url, **kwargs)

    async def generate(self, prompt: str) -> str:
        log.info(f"📤 Sending request to Hugging Face API ({self.settings.hf_model_id})...")
        try:
            response = await self._post(prompt)
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            log.error(f"❌ Generation timed out after {self.settings.generation_timeout}s")
            raise GenerationError(
                f"The recipe generator did not respond within {int(self.settings.generation_timeout)} seconds. Please try again.",
                kind=ErrorKind.REMOTE_TIMEOUT,
                detail=str(e) or "wall-clock timeout",
            ) from e
        except httpx.RequestError as e:
            log.error(f"❌ No response received from Hugging Face API: {e}")
            raise GenerationError(
                "Network error: Unable to reach Hugging Face API. Check your internet connection.",
                kind=ErrorKind.NETWORK_UNREACHABLE,
                detail=str(e),
            ) from e

        log.info(f"✅ HF Response Status: {response.status_code}")
        data = _decode(response)

        if not response.is_success:
            raise self._status_error(response, data)

        return extract_generated_text(data)

    def _status_error(self, response: httpx.Response, data: Any) -> GenerationError:
        status = response.status_code
        log.error(f"❌ HUGGING FACE API ERROR: HTTP {status}")
        log.debug(f"Response Data: {json.dumps(data, default=str)}")

        rule = STATUS_ERRORS.get(status, UNEXPECTED_STATUS)
        wait = _estimated_wait(data) if status == 503 else None
        remote_error = data.get("error") if isinstance(data, dict) else None
        message = rule.message.format(
            model=self.settings.hf_model_id,
            wait=wait,
            status=status,
            reason=remote_error or response.reason_phrase,
        )
        return GenerationError(
            message,
            kind=rule.kind,
            detail={"status": status, "response": data},
            retry_after=wait,
        )
