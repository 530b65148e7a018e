"""HTTP clients for model backends (transport only)."""

import json
import logging
from typing import Any, Optional

import httpx

from gala.config import AIProvider, EngineConfig, ProviderClient
from gala.schemas import AgentResponse, ChatOptions, Message, TokenUsage, ToolCall

logger = logging.getLogger(__name__)

ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
OPENAI_API_URL = "https://api.openai.com/v1"
DEFAULT_MAX_TOKENS = 4096
DEFAULT_TEMPERATURE = 0.7
REQUEST_TIMEOUT = 60.0  # seconds


class ProviderError(Exception):
    """Network, auth or decoding failure from a model backend."""

    pass


class _HTTPClient:
    """Shared lazy httpx.AsyncClient handling.

    No retries here: failover and retry policy belong to the fallback
    chain and the helpers layered around it.
    """

    def __init__(self, timeout: float = REQUEST_TIMEOUT):
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def _post(self, url: str, payload: dict, headers: Optional[dict] = None) -> Any:
        client = self._get_client()
        try:
            response = await client.post(url, headers=headers, json=payload)
        except httpx.RequestError as e:
            raise ProviderError(f"Request failed: {e}") from e

        if response.status_code != 200:
            raise ProviderError(f"HTTP {response.status_code}: {response.text}")

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(f"Invalid JSON in response: {e}") from e

    async def aclose(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()


class AnthropicClient(_HTTPClient):
    """Client for the Anthropic Messages API."""

    def __init__(
        self,
        api_key: str,
        default_model: str = "claude-3-5-sonnet-20241022",
        timeout: float = REQUEST_TIMEOUT,
    ):
        super().__init__(timeout)
        self._api_key = api_key
        self._default_model = default_model

    async def chat(
        self,
        messages: list[Message],
        options: Optional[ChatOptions] = None,
    ) -> AgentResponse:
        options = options or ChatOptions()
        system = "\n".join(m.content for m in messages if m.role == "system")

        payload: dict[str, Any] = {
            "model": options.model or self._default_model,
            "max_tokens": options.max_tokens or DEFAULT_MAX_TOKENS,
            "messages": [
                {"role": m.role, "content": m.content}
                for m in messages
                if m.role != "system"
            ],
        }
        if system:
            payload["system"] = system
        if options.temperature is not None:
            payload["temperature"] = options.temperature
        if options.tools:
            payload["tools"] = [
                {
                    "name": tool.name,
                    "description": tool.description,
                    "input_schema": tool.to_function_schema()["function"]["parameters"],
                }
                for tool in options.tools
            ]

        headers = {
            "x-api-key": self._api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "Content-Type": "application/json",
        }
        data = await self._post(ANTHROPIC_API_URL, payload, headers)

        try:
            blocks = data["content"]
            text = next((b["text"] for b in blocks if b.get("type") == "text"), "")
            tool_calls = [
                ToolCall(id=b["id"], name=b["name"], parameters=b.get("input") or {})
                for b in blocks
                if b.get("type") == "tool_use"
            ]
            usage = data.get("usage") or {}
        except (KeyError, TypeError) as e:
            raise ProviderError(f"Unexpected Anthropic response shape: {e}") from e

        input_tokens = usage.get("input_tokens", 0)
        output_tokens = usage.get("output_tokens", 0)
        return AgentResponse(
            content=text,
            tool_calls=tool_calls,
            finish_reason=data.get("stop_reason"),
            usage=TokenUsage(
                prompt_tokens=input_tokens,
                completion_tokens=output_tokens,
                total_tokens=input_tokens + output_tokens,
            ),
        )


class OpenAICompatibleClient(_HTTPClient):
    """Client for any server speaking the OpenAI chat completions format."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        default_model: str = "gpt-4-turbo-preview",
        timeout: float = REQUEST_TIMEOUT,
    ):
        super().__init__(timeout)
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._default_model = default_model

    async def chat(
        self,
        messages: list[Message],
        options: Optional[ChatOptions] = None,
    ) -> AgentResponse:
        options = options or ChatOptions()
        payload: dict[str, Any] = {
            "model": options.model or self._default_model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": (
                options.temperature if options.temperature is not None else DEFAULT_TEMPERATURE
            ),
            "max_tokens": options.max_tokens or DEFAULT_MAX_TOKENS,
            "stream": False,
        }
        if options.tools:
            payload["tools"] = [tool.to_function_schema() for tool in options.tools]

        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        data = await self._post(f"{self._base_url}/chat/completions", payload, headers)
        return _parse_openai_response(data)


class OpenAIClient(OpenAICompatibleClient):
    """Client for the hosted OpenAI API."""

    def __init__(self, api_key: str, default_model: str = "gpt-4-turbo-preview"):
        super().__init__(OPENAI_API_URL, api_key=api_key, default_model=default_model)


class OllamaClient(OpenAICompatibleClient):
    """Client for a local Ollama server via its OpenAI-compatible endpoint."""

    def __init__(self, base_url: str = "http://localhost:11434", default_model: str = "llama2"):
        super().__init__(f"{base_url.rstrip('/')}/v1", default_model=default_model)


class DockerModelClient(OpenAICompatibleClient):
    """Client for a model served from a Docker container."""

    def __init__(
        self,
        container_name: str,
        base_url: str = "http://localhost:8000",
        default_model: str = "custom-model",
    ):
        super().__init__(f"{base_url.rstrip('/')}/v1", default_model=default_model, timeout=60.0)
        self.container_name = container_name


def _parse_openai_response(data: dict) -> AgentResponse:
    """Normalize an OpenAI-format completion into an AgentResponse."""
    try:
        choice = data["choices"][0]
        message = choice["message"]
        tool_calls = [
            ToolCall(
                id=tc["id"],
                name=tc["function"]["name"],
                parameters=json.loads(tc["function"].get("arguments") or "{}"),
            )
            for tc in message.get("tool_calls") or []
        ]
    except (KeyError, IndexError, TypeError) as e:
        raise ProviderError(f"Unexpected completion response shape: {e}") from e
    except json.JSONDecodeError as e:
        raise ProviderError(f"Tool call arguments are not valid JSON: {e}") from e

    usage = data.get("usage")
    return AgentResponse(
        content=message.get("content") or "",
        tool_calls=tool_calls,
        finish_reason=choice.get("finish_reason"),
        usage=TokenUsage(
            prompt_tokens=usage.get("prompt_tokens", 0),
            completion_tokens=usage.get("completion_tokens", 0),
            total_tokens=usage.get("total_tokens", 0),
        ) if usage else None,
    )


def create_provider(
    provider: AIProvider,
    config: EngineConfig,
    model: Optional[str] = None,
) -> ProviderClient:
    """Build a client for the given backend.

    Raises:
        ProviderError: If required credentials or settings are missing
    """
    if provider == AIProvider.ANTHROPIC:
        if not config.anthropic_api_key:
            raise ProviderError("Anthropic API key required")
        return AnthropicClient(config.anthropic_api_key, timeout=config.request_timeout)

    if provider == AIProvider.OPENAI:
        if not config.openai_api_key:
            raise ProviderError("OpenAI API key required")
        return OpenAIClient(config.openai_api_key)

    if provider == AIProvider.OLLAMA:
        return OllamaClient(config.ollama_endpoint, default_model=model or "llama2")

    if provider == AIProvider.DOCKER:
        if not config.docker_providers:
            raise ProviderError("No Docker providers configured")
        entry = config.docker_providers[0]
        return DockerModelClient(
            container_name=entry["container_name"],
            base_url=entry.get("base_url", "http://localhost:8000"),
            default_model=entry.get("model", "custom-model"),
        )

    raise ProviderError(f"Unsupported provider: {provider}")
