from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    role: Role
    content: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Message:
        role_raw = str(data.get("role") or "").strip().lower()
        try:
            role = Role(role_raw)
        except ValueError as exc:
            raise ValueError(f"unsupported message role {role_raw!r}") from exc

        content = data.get("content")
        if content is None:
            content = ""
        if not isinstance(content, str):
            raise ValueError(
                f"message content must be a string, got {type(content).__name__}"
            )
        return cls(role=role, content=content)

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


# Oldest first. Reducers mutate the caller's list in place.
Transcript = list[Message]


def load_transcript(path: Path) -> Transcript:
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)

    if not isinstance(payload, list):
        raise ValueError(f"{path} must contain a JSON array of messages")

    transcript: Transcript = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise ValueError(f"{path} entry [{index}] must be an object")
        transcript.append(Message.from_dict(item))
    return transcript


def dump_transcript(transcript: Transcript) -> str:
    return json.dumps(
        [message.to_dict() for message in transcript],
        indent=2,
        ensure_ascii=False,
    )
