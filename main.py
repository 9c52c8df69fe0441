from __future__ import annotations

import argparse
import asyncio
import importlib
import os
import sys
from pathlib import Path
from typing import Any


_MIN_PYTHON = (3, 11)
_FAST_MODE_BANNER = "[FAST MODE] Using claude-haiku-4-5 for summaries"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Reduce a conversation transcript with a generated summary")
    parser.add_argument("transcript", type=Path, help="JSON array of {role, content} messages")
    parser.add_argument("--config", type=Path, default=None, help="Reducer YAML configuration")
    parser.add_argument("--output", type=Path, default=None, help="Write the resulting transcript here")
    parser.add_argument(
        "--fast-mode",
        action="store_true",
        help="Use claude-haiku-4-5 for faster development iterations.",
    )
    return parser


def _ensure_supported_python() -> bool:
    if tuple(sys.version_info[:2]) >= _MIN_PYTHON:
        return True
    print("Python 3.11+ required", file=sys.stderr)
    return False


def _ensure_src_on_path() -> None:
    repo_root = Path(__file__).resolve().parent
    src_path = str(repo_root / "src")
    if src_path not in sys.path:
        sys.path.insert(0, src_path)


def build_reducer(config_path: Path | None = None) -> Any:
    _ensure_src_on_path()
    config_module = importlib.import_module("transcript_reducer.config")
    generators_module = importlib.import_module("transcript_reducer.generators")
    tokenizers_module = importlib.import_module("transcript_reducer.tokenizers")
    reducer_module = importlib.import_module("transcript_reducer.reducer")

    return reducer_module.SummarizingReducer(
        generator=generators_module.AnthropicGenerator(
            config_module.load_generator_policy(config_path)
        ),
        tokenizer=tokenizers_module.TiktokenTokenizer(
            config_module.load_tokenizer_encoding(config_path)
        ),
        config=config_module.load_reducer_config(config_path),
    )


def main(argv: list[str] | None = None) -> int:
    if not _ensure_supported_python():
        return 1

    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.fast_mode:
        os.environ["FAST_MODE"] = "1"
        print(_FAST_MODE_BANNER, file=sys.stderr)

    _ensure_src_on_path()
    messages_module = importlib.import_module("transcript_reducer.messages")
    error_module = importlib.import_module("transcript_reducer.error_handling")
    trace_module = importlib.import_module("transcript_reducer.trace")

    try:
        transcript = messages_module.load_transcript(args.transcript)
    except (OSError, ValueError) as exc:
        print(f"Could not read transcript: {exc}", file=sys.stderr)
        return 1

    # stdout carries only the transcript JSON.
    previous_writer = trace_module.set_trace_writer(sys.stderr)
    try:
        reducer = build_reducer(args.config)
        reduced = asyncio.run(reducer.reduce(transcript))
    except Exception as exc:
        print(error_module.describe_reduction_failure(exc), file=sys.stderr)
        return 1
    finally:
        trace_module.set_trace_writer(previous_writer)

    print(f"reduced={'true' if reduced else 'false'}", file=sys.stderr)
    rendered = messages_module.dump_transcript(transcript)
    if args.output is None:
        print(rendered)
    else:
        args.output.write_text(rendered + "\n", encoding="utf-8")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
