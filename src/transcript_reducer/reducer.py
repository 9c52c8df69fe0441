from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import Protocol, TypeVar

from transcript_reducer.config import ReducerConfig
from transcript_reducer.error_handling import ReducerConfigurationError, ReductionCancelledError
from transcript_reducer.generators import SUMMARY_EXECUTION_OPTIONS, Generator
from transcript_reducer.messages import Transcript
from transcript_reducer.steps import (
    DEFAULT_STEPS,
    NO_SUMMARY_PLACEHOLDER,
    ReductionSteps,
    accounting_text,
)
from transcript_reducer.tokenizers import Tokenizer
from transcript_reducer.trace import trace


LOGGER = logging.getLogger(__name__)

_T = TypeVar("_T")


class CancellationSignal(Protocol):
    def is_set(self) -> bool: ...


class MessageReducer(Protocol):
    async def reduce(
        self,
        transcript: Transcript,
        cancellation: CancellationSignal | None = None,
    ) -> bool: ...


class SummarizingReducer:
    """Collapses the oldest turns of a transcript into one generated summary.

    ``reduce`` counts the transcript, and only when the total is above
    ``config.effective_threshold`` asks the generator to summarize the oldest
    ``config.collapse_turn_count`` messages. The summary replaces them at
    index 0 in a single splice that happens after generation succeeded, so
    tokenizer or generator failures and cancellation leave the transcript as
    it was.
    """

    def __init__(
        self,
        generator: Generator,
        tokenizer: Tokenizer,
        config: ReducerConfig,
        *,
        steps: ReductionSteps | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if generator is None:
            raise ReducerConfigurationError("generator is required")
        if tokenizer is None:
            raise ReducerConfigurationError("tokenizer is required")
        if config is None:
            raise ReducerConfigurationError("config is required")
        if not isinstance(config, ReducerConfig):
            raise ReducerConfigurationError(
                f"config must be a ReducerConfig, got {type(config).__name__}"
            )

        self._generator = generator
        self._tokenizer = tokenizer
        self._config = config
        self._steps = steps or DEFAULT_STEPS
        self._logger = logger or LOGGER

        if config.is_degenerate:
            self._logger.warning(
                "buffer_tokens (%s) exceeds max_context_tokens (%s); "
                "every non-empty transcript will be reduced.",
                config.buffer_tokens,
                config.max_context_tokens,
            )
            trace(
                "reducer",
                event="degenerate_threshold",
                threshold=config.effective_threshold,
            )

    @property
    def config(self) -> ReducerConfig:
        return self._config

    @property
    def steps(self) -> ReductionSteps:
        return self._steps

    def count_tokens(self, transcript: Transcript) -> int:
        return sum(
            self._tokenizer.count_tokens(
                accounting_text(message),
                consider_pre_tokenization=True,
                consider_normalization=True,
            )
            for message in transcript
        )

    def needs_reduction(self, total_tokens: int) -> bool:
        return total_tokens > self._config.effective_threshold

    async def generate_summary(
        self,
        prompt: str,
        cancellation: CancellationSignal | None = None,
    ) -> str:
        _raise_if_cancelled(cancellation)
        result = await _await_unless_cancelled(
            self._generator.generate(
                self._steps.build_request(prompt),
                SUMMARY_EXECUTION_OPTIONS,
            ),
            cancellation,
        )
        _raise_if_cancelled(cancellation)

        content = getattr(result, "content", None)
        summary = content.strip() if isinstance(content, str) else ""
        return summary or NO_SUMMARY_PLACEHOLDER

    async def reduce(
        self,
        transcript: Transcript,
        cancellation: CancellationSignal | None = None,
    ) -> bool:
        if transcript is None:
            raise TypeError("transcript must be a list of messages, not None")
        if not transcript:
            return False

        total_tokens = self.count_tokens(transcript)
        threshold = self._config.effective_threshold
        if not self.needs_reduction(total_tokens):
            self._logger.debug(
                "Token count %s under threshold %s; skipping.",
                total_tokens,
                threshold,
            )
            trace(
                "reducer",
                event="below_threshold",
                token_count=total_tokens,
                threshold=threshold,
            )
            return False

        selected = self._steps.select_turns(transcript, self._config.collapse_turn_count)
        prompt = self._steps.build_prompt([self._steps.format_turn(message) for message in selected])
        summary = await self.generate_summary(prompt, cancellation)

        summary_message = self._steps.format_summary(summary)
        remove_count = len(selected)
        self._steps.splice(transcript, remove_count, summary_message)

        self._logger.info("Pruned %s turns, inserted summary.", remove_count)
        trace(
            "reducer",
            event="reduced",
            removed_count=remove_count,
            message_count=len(transcript),
        )
        return True


def _raise_if_cancelled(cancellation: CancellationSignal | None) -> None:
    if cancellation is not None and cancellation.is_set():
        raise ReductionCancelledError("reduction cancelled; transcript unchanged")


async def _await_unless_cancelled(
    awaitable: Awaitable[_T],
    cancellation: CancellationSignal | None,
) -> _T:
    """Await ``awaitable``, abandoning it as soon as an asyncio.Event is set.

    Other signals cannot be awaited and are only polled around the call.
    """
    if not isinstance(cancellation, asyncio.Event):
        return await awaitable

    work = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(cancellation.wait())
    try:
        done, _ = await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        work.cancel()
        waiter.cancel()
        raise

    waiter.cancel()
    if work in done:
        return work.result()

    work.cancel()
    await asyncio.gather(work, return_exceptions=True)
    raise ReductionCancelledError("reduction cancelled; transcript unchanged")
