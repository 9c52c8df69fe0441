from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from transcript_reducer.error_handling import ReducerConfigurationError


FAST_MODE_MODEL = "claude-haiku-4-5"
DEFAULT_ENCODING = "cl100k_base"
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "reducer.yaml"


class ReducerConfig(BaseModel):
    """Token budget and collapse size for a summarizing reducer.

    Reduction triggers when the accounted token total is strictly greater
    than ``max_context_tokens - buffer_tokens``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_context_tokens: int = Field(ge=0)
    buffer_tokens: int = Field(default=0, ge=0)
    collapse_turn_count: int = Field(ge=1)

    @property
    def effective_threshold(self) -> int:
        return self.max_context_tokens - self.buffer_tokens

    @property
    def is_degenerate(self) -> bool:
        # Negative threshold: every non-empty transcript gets reduced.
        return self.buffer_tokens > self.max_context_tokens


class GeneratorPolicy(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    configured_model: str = Field(alias="model")
    max_tokens: int = 512
    temperature: float | None = None

    @property
    def model(self) -> str:
        if os.environ.get("FAST_MODE") == "1":
            return FAST_MODE_MODEL
        return self.configured_model

    @field_validator("configured_model")
    @classmethod
    def validate_model(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must be non-empty")
        return value.strip()

    @field_validator("max_tokens")
    @classmethod
    def validate_max_tokens(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    @field_validator("temperature")
    @classmethod
    def validate_temperature(cls, value: float | None) -> float | None:
        if value is None:
            return None
        if not 0.0 <= float(value) <= 1.0:
            raise ValueError("must be in [0.0, 1.0]")
        return float(value)


def load_yaml_mapping(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if not isinstance(data, dict):
        raise ReducerConfigurationError(f"{path} must contain a YAML mapping/object")
    return data


def _read_config(path: Path) -> dict[str, Any]:
    try:
        return load_yaml_mapping(path)
    except (OSError, yaml.YAMLError) as exc:
        raise ReducerConfigurationError(f"{path} could not be read: {exc}") from exc


def _section(path: Path, name: str) -> dict[str, Any]:
    section = _read_config(path).get(name)
    if not isinstance(section, dict):
        raise ReducerConfigurationError(f"{path} must contain a '{name}' mapping")
    return section


def load_reducer_config(path: Path | None = None) -> ReducerConfig:
    config_path = path or DEFAULT_CONFIG_PATH
    raw = _section(config_path, "reducer")
    try:
        return ReducerConfig.model_validate(raw)
    except ValidationError as exc:
        raise ReducerConfigurationError(
            f"{config_path} failed ReducerConfig validation: {exc.errors(include_url=False)}"
        ) from exc


def load_generator_policy(path: Path | None = None) -> GeneratorPolicy:
    config_path = path or DEFAULT_CONFIG_PATH
    raw = _section(config_path, "generator")
    try:
        return GeneratorPolicy.model_validate(raw)
    except ValidationError as exc:
        raise ReducerConfigurationError(
            f"{config_path} failed GeneratorPolicy validation: {exc.errors(include_url=False)}"
        ) from exc


def load_tokenizer_encoding(path: Path | None = None) -> str:
    config_path = path or DEFAULT_CONFIG_PATH
    section = _read_config(config_path).get("tokenizer")
    if section is None:
        return DEFAULT_ENCODING
    if not isinstance(section, dict):
        raise ReducerConfigurationError(f"{config_path} 'tokenizer' must be a mapping")

    encoding = str(section.get("encoding") or "").strip()
    return encoding or DEFAULT_ENCODING
