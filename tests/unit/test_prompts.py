"""Unit tests for chat prompt construction."""

import uuid

from backend.docchat.llm.prompts import SYSTEM_PROMPT, build_user_prompt, format_sources
from backend.docchat.models.docs import Source


def test_system_prompt_describes_output_contract() -> None:
    assert '{"content": string, "citations": []}' in SYSTEM_PROMPT
    assert "```chart" in SYSTEM_PROMPT
    assert "```table" in SYSTEM_PROMPT


def test_format_sources_numbers_from_one() -> None:
    first = Source(id=uuid.uuid4(), title="Revenue", snippet="Up 12%")
    second = Source(id=uuid.uuid4(), title="Costs", snippet="Flat")

    text = format_sources([first, second])

    assert text == f"[#1] ({first.id}) Revenue\nUp 12%\n\n[#2] ({second.id}) Costs\nFlat"


def test_user_prompt_with_sources() -> None:
    source = Source(id=uuid.uuid4(), title="Revenue", snippet="Up 12%")

    prompt = build_user_prompt("How is revenue?", [source])

    assert prompt.startswith("Question: How is revenue?\n\nRelevant Information:\n[#1]")
    assert "Up 12%" in prompt


def test_user_prompt_without_sources() -> None:
    prompt = build_user_prompt("Hello?", [])

    assert prompt.startswith("Question: Hello?\n\n")
    assert "Relevant Information" not in prompt
