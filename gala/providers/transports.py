"""Default per-type transports used by the fallback chain."""

from typing import Awaitable, Callable, Optional

from gala.config import EngineConfig, ProviderType
from gala.providers.client import (
    AnthropicClient,
    OpenAIClient,
    ProviderError,
    _HTTPClient,
)
from gala.schemas import ChatOptions, ModelRequest, ModelResponse, ProviderConfig

Transport = Callable[[ProviderConfig, ModelRequest], Awaitable[ModelResponse]]

HUGGINGFACE_INFERENCE_URL = "https://api-inference.huggingface.co/models/"
DEFAULT_HF_MAX_NEW_TOKENS = 1024


class HTTPTransports(_HTTPClient):
    """Transports for hosted APIs, Hugging Face inference and Ollama."""

    def __init__(self, config: EngineConfig):
        super().__init__(config.request_timeout)
        self._config = config
        self._api_clients: dict[str, AnthropicClient | OpenAIClient] = {}

    def as_mapping(self) -> dict[ProviderType, Transport]:
        return {
            ProviderType.API: self.api,
            ProviderType.HUGGINGFACE: self.huggingface,
            ProviderType.LOCAL: self.local,
        }

    def _api_client(self, name: str) -> AnthropicClient | OpenAIClient:
        if name in self._api_clients:
            return self._api_clients[name]

        if name == "anthropic":
            if not self._config.anthropic_api_key:
                raise ProviderError("ANTHROPIC_API_KEY not configured")
            client = AnthropicClient(self._config.anthropic_api_key)
        elif name == "openai":
            if not self._config.openai_api_key:
                raise ProviderError("OPENAI_API_KEY not configured")
            client = OpenAIClient(self._config.openai_api_key)
        else:
            raise ProviderError(f"Unsupported API provider: {name}")

        self._api_clients[name] = client
        return client

    async def api(self, provider: ProviderConfig, request: ModelRequest) -> ModelResponse:
        client = self._api_client(provider.name)
        response = await client.chat(
            request.messages,
            ChatOptions(
                model=provider.model,
                temperature=request.temperature,
                max_tokens=request.max_tokens,
            ),
        )
        return ModelResponse(
            content=response.content,
            model=provider.model,
            provider=provider.name,
            usage=response.usage,
        )

    async def huggingface(self, provider: ProviderConfig, request: ModelRequest) -> ModelResponse:
        api_key = self._config.huggingface_api_key
        if not api_key:
            raise ProviderError("HUGGINGFACE_API_KEY not configured")

        prompt = "\n".join(
            f"{'User' if m.role == 'user' else 'Assistant'}: {m.content}"
            for m in request.messages
        )
        payload = {
            "inputs": prompt,
            "parameters": {
                "temperature": request.temperature if request.temperature is not None else 0.7,
                "max_new_tokens": request.max_tokens or DEFAULT_HF_MAX_NEW_TOKENS,
                "return_full_text": False,
            },
        }
        endpoint = provider.endpoint or HUGGINGFACE_INFERENCE_URL
        data = await self._post(
            f"{endpoint}{provider.model}",
            payload,
            {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
        )

        try:
            content = data[0]["generated_text"] if isinstance(data, list) else data["generated_text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"Unexpected Hugging Face response shape: {e}") from e

        return ModelResponse(content=content, model=provider.model, provider="huggingface", cost=0.0)

    async def local(self, provider: ProviderConfig, request: ModelRequest) -> ModelResponse:
        endpoint = (provider.endpoint or self._config.ollama_endpoint).rstrip("/")
        payload = {
            "model": provider.model.removeprefix("ollama/"),
            "messages": [{"role": m.role, "content": m.content} for m in request.messages],
            "stream": False,
        }
        data = await self._post(f"{endpoint}/api/chat", payload)

        try:
            content = data["message"]["content"]
        except (KeyError, TypeError) as e:
            raise ProviderError(f"Unexpected Ollama response shape: {e}") from e

        return ModelResponse(content=content, model=provider.model, provider="local", cost=0.0)


def default_transports(config: Optional[EngineConfig] = None) -> dict[ProviderType, Transport]:
    """Build the HTTP transports for every provider type."""
    return HTTPTransports(config or EngineConfig()).as_mapping()
