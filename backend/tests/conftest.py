import httpx
import pytest

from backend.app.core.config import Settings
from backend.app.services.generation_client import GenerationClient


class FakeRemote:
    """httpx transport standing in for the Hugging Face endpoint."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return httpx.Response(response.status_code, headers=response.headers, content=response.content)

    def client(self, settings: Settings) -> GenerationClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(self))
        return GenerationClient(settings, http_client=http)


def make_settings(**overrides) -> Settings:
    values = {
        "hf_access_token": "test-token",
        "api_tokens": {"alice-token": "alice", "bob-token": "bob"},
        "environment": "production",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()
