"""Replaceable steps of a summarizing reduction.

Every step is a plain function so alternative policies can be composed by
swapping one field of :class:`ReductionSteps` instead of subclassing the
reducer.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from transcript_reducer.messages import Message, Role, Transcript


SUMMARY_DIRECTIVE = (
    "Summarize the key facts and decisions from these earlier conversation turns "
    "into a concise bullet list:"
)
SUMMARIZER_PERSONA = "You are a concise summarization assistant."
SUMMARY_HEADER = "[Summary of earlier conversation]"
BULLET = "• "
NO_SUMMARY_PLACEHOLDER = f"{BULLET}(No summary generated)"


def accounting_text(message: Message) -> str:
    return f"{message.role.value}: {message.content}"


def select_oldest_turns(transcript: Sequence[Message], collapse_turn_count: int) -> list[Message]:
    return list(transcript[: max(collapse_turn_count, 0)])


def format_turn(message: Message) -> str:
    return f"[{message.role.value}] {message.content}"


def build_summarization_prompt(turn_lines: Sequence[str]) -> str:
    return f"{SUMMARY_DIRECTIVE}\n\n" + "\n\n".join(turn_lines)


def build_summary_request(prompt: str) -> list[Message]:
    return [
        Message(role=Role.SYSTEM, content=SUMMARIZER_PERSONA),
        Message(role=Role.USER, content=prompt),
    ]


def format_summary_message(summary_text: str) -> Message:
    if not summary_text or summary_text == NO_SUMMARY_PLACEHOLDER:
        body = NO_SUMMARY_PLACEHOLDER
    else:
        body = BULLET + summary_text.replace("\n", f"\n{BULLET}")
    return Message(role=Role.ASSISTANT, content=f"{SUMMARY_HEADER}\n{body}")


def splice_summary(transcript: Transcript, remove_count: int, summary_message: Message) -> None:
    # One slice assignment: removal and insertion are never observed apart.
    transcript[:remove_count] = [summary_message]


@dataclass(frozen=True)
class ReductionSteps:
    select_turns: Callable[[Sequence[Message], int], list[Message]] = select_oldest_turns
    format_turn: Callable[[Message], str] = format_turn
    build_prompt: Callable[[Sequence[str]], str] = build_summarization_prompt
    build_request: Callable[[str], list[Message]] = build_summary_request
    format_summary: Callable[[str], Message] = format_summary_message
    splice: Callable[[Transcript, int, Message], None] = splice_summary


DEFAULT_STEPS = ReductionSteps()
