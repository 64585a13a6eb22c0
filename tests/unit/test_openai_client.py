from types import SimpleNamespace

import pytest

from backend.app.ai.openai_client import OpenAIClient


@pytest.mark.anyio
async def test_openai_client_without_key_is_unavailable() -> None:
    client = OpenAIClient(api_key=None)

    assert client.available is False
    with pytest.raises(RuntimeError):
        await client.complete(model="gpt-4o-mini", prompt="Provide support", max_tokens=120)


class _FakeCompletions:
    def __init__(self) -> None:
        self.kwargs: dict = {}

    async def create(self, **kwargs):
        self.kwargs = kwargs
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="  Take a walk.  "))],
            usage=SimpleNamespace(prompt_tokens=12, completion_tokens=18),
        )


@pytest.mark.anyio
async def test_openai_client_stubbed() -> None:
    completions = _FakeCompletions()
    client = OpenAIClient(api_key="fake")
    client._client = SimpleNamespace(chat=SimpleNamespace(completions=completions))  # type: ignore[attr-defined]

    text, tokens_in, tokens_out = await client.complete(
        model="gpt-4o-mini", prompt="Need help", max_tokens=60
    )

    assert client.available is True
    assert text == "Take a walk."
    assert tokens_in == 12 and tokens_out == 18
    assert completions.kwargs["max_tokens"] == 60
    assert completions.kwargs["messages"][-1] == {"role": "user", "content": "Need help"}


def test_openai_client_disables_sdk_retries() -> None:
    client = OpenAIClient(api_key="fake", timeout=5.0)

    assert client._client is not None  # type: ignore[attr-defined]
    assert client._client.max_retries == 0  # type: ignore[attr-defined]
