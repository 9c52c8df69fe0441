"""
Root conftest.py — shared reducer fixtures built from fake collaborators.
No real Anthropic or tiktoken calls are made anywhere in the suite.
"""
from pathlib import Path

import pytest

from fakes import FakeGenerator, LengthTokenizer
from transcript_reducer.config import ReducerConfig
from transcript_reducer.reducer import SummarizingReducer


REPO_ROOT = Path(__file__).parent.parent


@pytest.fixture
def repo_root() -> Path:
    """Returns the absolute path to the repository root."""
    return REPO_ROOT


@pytest.fixture
def reducer_config() -> ReducerConfig:
    return ReducerConfig(max_context_tokens=50, buffer_tokens=10, collapse_turn_count=3)


@pytest.fixture
def tokenizer() -> LengthTokenizer:
    return LengthTokenizer()


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def reducer(
    generator: FakeGenerator,
    tokenizer: LengthTokenizer,
    reducer_config: ReducerConfig,
) -> SummarizingReducer:
    return SummarizingReducer(generator, tokenizer, reducer_config)
