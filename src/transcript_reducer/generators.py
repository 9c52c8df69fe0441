"""Text generation backends used to produce transcript summaries."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Literal, Protocol

from transcript_reducer.config import GeneratorPolicy
from transcript_reducer.messages import Message, Role


@dataclass(frozen=True)
class ExecutionOptions:
    tool_choice: Literal["none", "auto"] = "none"
    tools: tuple[dict[str, Any], ...] = ()
    max_tokens: int | None = None
    temperature: float | None = None

    @property
    def tools_enabled(self) -> bool:
        return self.tool_choice != "none" and bool(self.tools)


SUMMARY_EXECUTION_OPTIONS = ExecutionOptions(tool_choice="none")


class Generator(Protocol):
    async def generate(
        self,
        messages: Sequence[Message],
        options: ExecutionOptions,
    ) -> Message: ...


class AnthropicGenerator:
    def __init__(self, policy: GeneratorPolicy, client: Any | None = None) -> None:
        self._policy = policy
        self._client = client

    @property
    def model(self) -> str:
        return self._policy.model

    def _resolve_client(self) -> Any:
        if self._client is None:
            import anthropic

            self._client = anthropic.AsyncAnthropic()
        return self._client

    def build_request(
        self,
        messages: Sequence[Message],
        options: ExecutionOptions,
    ) -> dict[str, Any]:
        system_parts = [
            message.content for message in messages if message.role is Role.SYSTEM
        ]
        conversation = [
            {"role": message.role.value, "content": message.content}
            for message in messages
            if message.role is not Role.SYSTEM
        ]

        request: dict[str, Any] = {
            "model": self.model,
            "max_tokens": options.max_tokens or self._policy.max_tokens,
            "messages": conversation,
        }
        if system_parts:
            request["system"] = "\n\n".join(system_parts)

        temperature = (
            options.temperature
            if options.temperature is not None
            else self._policy.temperature
        )
        if temperature is not None:
            request["temperature"] = temperature

        if options.tools_enabled:
            request["tools"] = list(options.tools)
            request["tool_choice"] = {"type": options.tool_choice}
        return request

    async def generate(
        self,
        messages: Sequence[Message],
        options: ExecutionOptions,
    ) -> Message:
        client = self._resolve_client()
        response = await client.messages.create(**self.build_request(messages, options))
        return Message(role=Role.ASSISTANT, content=self._extract_llm_text(response))

    def _extract_llm_text(self, response: object) -> str:
        content = getattr(response, "content", None)
        if not isinstance(content, list):
            return ""
        parts: list[str] = []
        for block in content:
            text = getattr(block, "text", None)
            if isinstance(text, str) and text.strip():
                parts.append(text)
        return "\n".join(parts).strip()
