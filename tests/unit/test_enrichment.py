"""Unit tests for the enrichment stages and takeaway parsing."""

from __future__ import annotations

import pytest

from content_intel.exceptions import LLMServiceError
from content_intel.services.enrichment import (
    EnrichmentStage,
    Summarizer,
    TakeawayExtractor,
    parse_takeaways,
    truncate_content,
)


# ---------------------------------------------------------------------------
# parse_takeaways
# ---------------------------------------------------------------------------


class TestParseTakeaways:

    def test_numbered_list(self) -> None:
        assert parse_takeaways("1. A\n2. B\n3. C") == ["A", "B", "C"]

    def test_unstructured_text_is_single_entry(self) -> None:
        assert parse_takeaways("just one idea") == ["just one idea"]

    def test_never_more_than_three(self) -> None:
        text = "\n".join(f"{i}. point {i}" for i in range(1, 8))
        assert parse_takeaways(text) == ["point 1", "point 2", "point 3"]

    def test_ignores_preamble_and_blank_lines(self) -> None:
        text = "Here are the takeaways:\n\n1. First\n\n2.Second\n  3.   Third  \n"
        assert parse_takeaways(text) == ["First", "Second", "Third"]

    def test_empty_response_yields_nothing(self) -> None:
        assert parse_takeaways("   \n ") == []


def test_truncate_content() -> None:
    assert truncate_content("short", 10) == "short"
    assert truncate_content("x" * 12, 10) == "x" * 10 + "..."


# ---------------------------------------------------------------------------
# Summarizer
# ---------------------------------------------------------------------------


class TestSummarizer:

    def test_length_and_order_preserved(self, settings, make_record, llm_factory) -> None:
        items = [make_record(url=f"https://example.com/{i}", title=f"Title {i}") for i in range(4)]
        summarizer = Summarizer(llm=llm_factory(reply="A short summary."), settings=settings)

        result = summarizer.enrich(items)

        assert result.success
        assert len(result.data) == len(items)
        assert [item.url for item in result.data] == [item.url for item in items]
        assert all(item.summary == "A short summary." for item in result.data)
        assert result.metadata["summarized_count"] == 4
        assert result.metadata["total_items"] == 4

    def test_failed_item_is_returned_unchanged(self, settings, make_record, llm_factory) -> None:
        def reply(prompt: str) -> str:
            if "Broken" in prompt:
                raise LLMServiceError("rate limited")
            return "Fine summary."

        items = [make_record(url="https://a.com", title="Good"), make_record(url="https://b.com", title="Broken")]
        summarizer = Summarizer(llm=llm_factory(reply=reply), settings=settings)

        result = summarizer.enrich(items)

        assert result.success
        assert result.data[0].summary == "Fine summary."
        assert result.data[1] == items[1]
        assert result.data[1].summary is None
        assert result.metadata["summarized_count"] == 1
        assert result.metadata["failures"] == [{"key": "https://b.com", "reason": "rate limited"}]

    def test_single_failure_keeps_item(self, settings, make_record, llm_factory) -> None:
        def reply(prompt: str) -> str:
            raise RuntimeError("down")

        item = make_record()
        result = Summarizer(llm=llm_factory(reply=reply), settings=settings).enrich([item])

        assert result.data == [item]

    def test_input_is_not_mutated(self, settings, make_record, llm_factory) -> None:
        item = make_record()
        Summarizer(llm=llm_factory(reply="S"), settings=settings).enrich([item])
        assert item.summary is None

    def test_non_list_input_fails(self, settings, llm_factory) -> None:
        result = Summarizer(llm=llm_factory(), settings=settings).enrich("not a list")

        assert not result.success
        assert "array" in result.error

    def test_body_is_truncated_in_prompt(self, settings, make_record, llm_factory) -> None:
        llm = llm_factory(reply="S")
        body = "a" * 3000 + "TAIL"
        Summarizer(llm=llm, settings=settings).enrich([make_record(body=body)])

        assert "a" * 3000 + "..." in llm.prompts[0]
        assert "TAIL" not in llm.prompts[0]

    def test_parallel_run_preserves_order(self, settings, make_record, llm_factory) -> None:
        settings.enrich_concurrency = 4
        items = [make_record(url=f"https://example.com/{i}", title=f"T{i}") for i in range(10)]

        def reply(prompt: str) -> str:
            return prompt.split("Title: ")[1].split("\n")[0]

        result = Summarizer(llm=llm_factory(reply=reply), settings=settings).enrich(items)

        assert [item.summary for item in result.data] == [f"T{i}" for i in range(10)]


# ---------------------------------------------------------------------------
# TakeawayExtractor
# ---------------------------------------------------------------------------


class TestTakeawayExtractor:

    def test_takeaways_attached(self, settings, make_record, llm_factory) -> None:
        extractor = TakeawayExtractor(llm=llm_factory(reply="1. One\n2. Two\n3. Three\n4. Four"), settings=settings)

        result = extractor.enrich([make_record()])

        assert result.data[0].takeaways == ["One", "Two", "Three"]
        assert result.metadata["processed_count"] == 1

    def test_unstructured_reply_becomes_single_takeaway(self, settings, make_record, llm_factory) -> None:
        extractor = TakeawayExtractor(llm=llm_factory(reply="Everything is connected."), settings=settings)

        result = extractor.enrich([make_record()])

        assert result.data[0].takeaways == ["Everything is connected."]

    def test_keeps_existing_summary(self, settings, make_record, llm_factory) -> None:
        item = make_record(summary="Already summarized.")
        result = TakeawayExtractor(llm=llm_factory(reply="1. X"), settings=settings).enrich([item])

        assert result.data[0].summary == "Already summarized."
        assert result.data[0].takeaways == ["X"]

    @pytest.mark.parametrize("count", [0, 1, 5])
    def test_length_preserved(self, count: int, settings, make_record, llm_factory) -> None:
        items = [make_record(url=f"https://example.com/{i}") for i in range(count)]
        result = TakeawayExtractor(llm=llm_factory(reply="1. X"), settings=settings).enrich(items)

        assert [item.url for item in result.data] == [item.url for item in items]


def test_enrichment_stage_requires_a_field_to_derive(settings, llm_factory) -> None:
    with pytest.raises(TypeError):
        EnrichmentStage(llm=llm_factory(), settings=settings)
