from __future__ import annotations

from transcript_reducer.messages import Message, Role
from transcript_reducer import steps


def test_accounting_and_turn_formats_are_fixed() -> None:
    message = Message(Role.ASSISTANT, "Booked the 9am slot.")

    assert steps.accounting_text(message) == "assistant: Booked the 9am slot."
    assert steps.format_turn(message) == "[assistant] Booked the 9am slot."


def test_selection_is_an_oldest_first_prefix_that_never_overruns() -> None:
    transcript = [Message(Role.USER, f"m{index}") for index in range(4)]

    assert steps.select_oldest_turns(transcript, 2) == transcript[:2]
    assert steps.select_oldest_turns(transcript, 10) == transcript
    assert steps.select_oldest_turns([], 3) == []


def test_selection_returns_a_copy() -> None:
    transcript = [Message(Role.USER, "a"), Message(Role.USER, "b")]

    selected = steps.select_oldest_turns(transcript, 2)
    selected.clear()

    assert len(transcript) == 2


def test_prompt_joins_turns_with_blank_lines_after_directive() -> None:
    prompt = steps.build_summarization_prompt(["[user] hi", "[assistant] hello"])

    assert prompt == (
        "Summarize the key facts and decisions from these earlier conversation turns "
        "into a concise bullet list:\n\n[user] hi\n\n[assistant] hello"
    )


def test_summary_request_is_system_persona_then_user_prompt() -> None:
    request = steps.build_summary_request("PROMPT")

    assert request == [
        Message(Role.SYSTEM, "You are a concise summarization assistant."),
        Message(Role.USER, "PROMPT"),
    ]


def test_summary_message_bullets_every_line() -> None:
    message = steps.format_summary_message("User wants a refund\nAgent opened ticket 42")

    assert message.role is Role.ASSISTANT
    assert message.content == (
        "[Summary of earlier conversation]\n"
        "• User wants a refund\n"
        "• Agent opened ticket 42"
    )


def test_summary_message_prefixes_lines_without_rewriting_them() -> None:
    summary = "Facts:\n  - nested detail\n\n• pre-bulleted"

    message = steps.format_summary_message(summary)

    assert message.content == (
        "[Summary of earlier conversation]\n"
        "• Facts:\n"
        "•   - nested detail\n"
        "• \n"
        "• • pre-bulleted"
    )
    assert message.content.replace("\n• ", "\n").endswith(summary)


def test_empty_summary_falls_back_to_placeholder() -> None:
    message = steps.format_summary_message("")

    assert message.content == "[Summary of earlier conversation]\n• (No summary generated)"


def test_placeholder_is_not_double_bulleted() -> None:
    message = steps.format_summary_message(steps.NO_SUMMARY_PLACEHOLDER)

    assert message.content == "[Summary of earlier conversation]\n• (No summary generated)"


def test_splice_replaces_prefix_with_single_message_in_place() -> None:
    transcript = [Message(Role.USER, f"m{index}") for index in range(4)]
    handle = transcript
    summary = Message(Role.ASSISTANT, "[Summary of earlier conversation]\n• s")

    steps.splice_summary(transcript, 3, summary)

    assert handle is transcript
    assert transcript == [summary, Message(Role.USER, "m3")]


def test_default_steps_wire_the_module_functions() -> None:
    defaults = steps.ReductionSteps()

    assert defaults.select_turns is steps.select_oldest_turns
    assert defaults.format_turn is steps.format_turn
    assert defaults.build_prompt is steps.build_summarization_prompt
    assert defaults.build_request is steps.build_summary_request
    assert defaults.format_summary is steps.format_summary_message
    assert defaults.splice is steps.splice_summary
