"""
Unit tests for the SynonymExpander.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from financial_query.synonym_mapper import SynonymExpander, expand, load_custom_synonyms
from financial_query.vocabulary import SYNONYMS


@pytest.fixture
def expander() -> SynonymExpander:
    return SynonymExpander()


# ======================================================================
# Lookup
# ======================================================================

class TestLookup:
    def test_acronym_hit(self, expander: SynonymExpander) -> None:
        assert expander.lookup("gp") == "gross profit"

    def test_wip_means_audit_report(self, expander: SynonymExpander) -> None:
        assert expander.lookup("wip") == "audit report"

    def test_miss_returns_none(self, expander: SynonymExpander) -> None:
        assert expander.lookup("dividend") is None

    def test_size_matches_table(self, expander: SynonymExpander) -> None:
        assert expander.size == len(SYNONYMS)


# ======================================================================
# Expansion
# ======================================================================

class TestExpand:
    def test_replaces_whole_words(self, expander: SynonymExpander) -> None:
        assert expander.expand("what is the projected gp") == (
            "what is the projection gross profit"
        )

    def test_lower_cases_and_collapses_whitespace(self, expander: SynonymExpander) -> None:
        assert expander.expand("  What IS   the GP ") == "what is the gross profit"

    def test_partial_words_untouched(self, expander: SynonymExpander) -> None:
        assert expander.expand("gpx subtotal") == "gpx subtotal"

    def test_multi_word_phrase_inserted(self, expander: SynonymExpander) -> None:
        assert expander.expand("monthly plant") == "monthly plant and machinery"

    def test_existing_phrase_not_reexpanded(self, expander: SynonymExpander) -> None:
        assert expander.expand("cash flow for march") == "cash flow for march"
        assert expander.expand("plant and machinery") == "plant and machinery"

    def test_single_word_still_expanded(self, expander: SynonymExpander) -> None:
        assert expander.expand("cash") == "cash flow"
        assert expander.expand("machinery") == "plant and machinery"

    def test_empty_text(self, expander: SynonymExpander) -> None:
        assert expander.expand("") == ""

    def test_module_level_expand(self) -> None:
        assert expand("np for 2025") == "net profit for 2025"


class TestIdempotence:
    @pytest.mark.parametrize("word", sorted(SYNONYMS))
    def test_every_key(self, expander: SynonymExpander, word: str) -> None:
        once = expander.expand(word)
        assert expander.expand(once) == once

    @pytest.mark.parametrize("phrase", sorted(set(SYNONYMS.values())))
    def test_every_phrase(self, expander: SynonymExpander, phrase: str) -> None:
        assert expander.expand(phrase) == phrase

    def test_sentence(self, expander: SynonymExpander) -> None:
        once = expander.expand("wip gp and cash for staff plus lab and plant")
        assert expander.expand(once) == once


# ======================================================================
# Custom synonyms
# ======================================================================

class TestCustomSynonyms:
    def test_extra_synonyms_merged(self) -> None:
        expander = SynonymExpander(extra_synonyms={"EBIT": "Operating Profit"})
        assert expander.lookup("ebit") == "operating profit"
        assert expander.expand("ebit for march") == "operating profit for march"
        assert expander.size == len(SYNONYMS) + 1

    def test_extra_synonym_overrides(self) -> None:
        expander = SynonymExpander(extra_synonyms={"gp": "gross margin"})
        assert expander.lookup("gp") == "gross margin"

    def test_multi_word_key_rejected(self) -> None:
        with pytest.raises(ValueError):
            SynonymExpander(extra_synonyms={"gross p": "gross profit"})

    def test_all_synonyms_is_a_copy(self, expander: SynonymExpander) -> None:
        table = expander.all_synonyms()
        table["gp"] = "changed"
        assert expander.lookup("gp") == "gross profit"

    def test_load_from_json(self, tmp_path: Path) -> None:
        path = tmp_path / "synonyms.json"
        path.write_text(json.dumps({"bp": "business plan"}), encoding="utf-8")
        assert load_custom_synonyms(path) == {"bp": "business plan"}

    def test_load_rejects_list(self, tmp_path: Path) -> None:
        path = tmp_path / "synonyms.json"
        path.write_text(json.dumps(["bp", "business plan"]), encoding="utf-8")
        with pytest.raises(ValueError):
            load_custom_synonyms(path)

    def test_load_rejects_non_string_phrase(self, tmp_path: Path) -> None:
        path = tmp_path / "synonyms.json"
        path.write_text(json.dumps({"bp": 3}), encoding="utf-8")
        with pytest.raises(ValueError):
            load_custom_synonyms(path)
