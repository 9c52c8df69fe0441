from __future__ import annotations

import os
import sys
from pathlib import Path


ALLOWED_MODEL_PREFIXES = (
    "claude-opus-4-6",
    "claude-sonnet-4-6",
    "claude-haiku-4-5",
)
CHECK_NAMES = (
    "check_python_version",
    "check_anthropic_api_key_present",
    "check_reducer_config_schema",
    "check_degenerate_threshold",
    "check_generator_model_allowlist",
    "check_tokenizer_encoding",
)


def _resolve_repo_root(repo_root: Path | str | None = None) -> Path:
    if repo_root is None:
        return Path(__file__).resolve().parent
    return Path(repo_root).resolve()


def _ensure_src_on_path(root: Path) -> None:
    src_path = str(root / "src")
    if src_path not in sys.path:
        sys.path.insert(0, src_path)


def _config_path(repo_root: Path | str | None = None) -> Path:
    return _resolve_repo_root(repo_root) / "config" / "reducer.yaml"


def check_python_version(repo_root: Path | str | None = None) -> list[str]:
    del repo_root
    if tuple(sys.version_info[:2]) >= (3, 11):
        return []
    current = ".".join(map(str, sys.version_info[:3]))
    return [f"Python 3.11+ required. Current version: {current}. Install Python 3.11 or newer."]


def check_anthropic_api_key_present(repo_root: Path | str | None = None) -> list[str]:
    del repo_root
    api_key = os.environ.get("ANTHROPIC_API_KEY", "").strip()
    if api_key:
        return []
    return [
        "ANTHROPIC_API_KEY is missing. Set ANTHROPIC_API_KEY in your environment or .env file."
    ]


def check_reducer_config_schema(repo_root: Path | str | None = None) -> list[str]:
    from transcript_reducer.config import load_generator_policy, load_reducer_config
    from transcript_reducer.error_handling import ReducerConfigurationError

    path = _config_path(repo_root)
    if not path.exists():
        return [f"{path} is missing"]

    errors: list[str] = []
    for loader in (load_reducer_config, load_generator_policy):
        try:
            loader(path)
        except ReducerConfigurationError as exc:
            errors.append(str(exc))
    return errors


def check_degenerate_threshold(repo_root: Path | str | None = None) -> list[str]:
    from transcript_reducer.config import load_reducer_config
    from transcript_reducer.error_handling import ReducerConfigurationError

    try:
        config = load_reducer_config(_config_path(repo_root))
    except ReducerConfigurationError:
        return []

    if config.is_degenerate:
        return [
            "reducer.buffer_tokens must not exceed reducer.max_context_tokens "
            f"(got buffer_tokens={config.buffer_tokens}, "
            f"max_context_tokens={config.max_context_tokens})"
        ]
    return []


def check_generator_model_allowlist(repo_root: Path | str | None = None) -> list[str]:
    from transcript_reducer.config import load_generator_policy
    from transcript_reducer.error_handling import ReducerConfigurationError

    if os.environ.get("FAST_MODE") == "1":
        return []

    try:
        policy = load_generator_policy(_config_path(repo_root))
    except ReducerConfigurationError:
        return []

    if policy.model.startswith(ALLOWED_MODEL_PREFIXES):
        return []
    return [
        f"config/reducer.yaml has unsupported generator model {policy.model!r}. "
        f"Use one of families: {', '.join(ALLOWED_MODEL_PREFIXES)}."
    ]


def check_tokenizer_encoding(repo_root: Path | str | None = None) -> list[str]:
    from transcript_reducer.config import load_tokenizer_encoding
    from transcript_reducer.error_handling import ReducerConfigurationError

    try:
        encoding = load_tokenizer_encoding(_config_path(repo_root))
    except ReducerConfigurationError:
        return []

    try:
        import tiktoken
    except ImportError as exc:  # pragma: no cover - environment dependent
        return [f"tiktoken import failed: {exc}. Install the project dependencies."]

    if encoding in tiktoken.list_encoding_names():
        return []
    return [f"tokenizer.encoding {encoding!r} is not a known tiktoken encoding"]


def run_checks(repo_root: Path | str | None = None) -> None:
    resolved_root = _resolve_repo_root(repo_root)
    _ensure_src_on_path(resolved_root)
    failures: list[str] = []

    for check_name in CHECK_NAMES:
        check_fn = globals()[check_name]
        failures.extend(check_fn(repo_root=resolved_root))

    if failures:
        print("[CONFIG ERROR] One or more configuration checks failed:", file=sys.stderr)
        for index, message in enumerate(failures, start=1):
            print(f"{index}. {message}", file=sys.stderr)
        raise SystemExit(1)


def main() -> int:
    run_checks()
    print("[CONFIG OK]")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
