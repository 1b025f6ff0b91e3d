"""Tests for per-word attribute derivation."""

import logging

import pytest

from lexistore.build.attributes import (
    AttributeDeriver,
    alphagram,
    count_anagrams,
    derive_attributes,
    num_unique_letters,
    num_vowels,
    resolve_lexicon_styles,
)
from lexistore.core import LetterTable, WordListOracle
from lexistore.core.models import LexiconStyle

CSW = ["ARE", "CAR", "CARE", "CARES", "SCARE", "RACE", "ACRE", "EAT", "ATE", "TEA"]
TWL = ["ARE", "CAR", "CARE", "CARES", "RACE", "ACRE", "EAT", "ATE", "TEA"]


@pytest.fixture
def oracle():
    o = WordListOracle()
    o.add_lexicon("CSW", CSW)
    o.add_lexicon("TWL", TWL)
    return o


@pytest.fixture
def not_in_twl():
    return LexiconStyle(
        lexicon="CSW", compare_lexicon="TWL", in_compare_lexicon=False, symbol="#"
    )


class TestWordStatistics:
    """Functions that depend only on the word."""

    def test_alphagram(self):
        assert alphagram("care") == "ACER"
        assert alphagram("EAT") == alphagram("TEA") == "AET"

    def test_unique_letters(self):
        assert num_unique_letters("LETTER") == 4

    def test_vowels(self):
        assert num_vowels("QUEUE") == 4
        assert num_vowels("RHYTHM") == 0


class TestAttributeDeriver:
    """Hooks, hook status and point values from the oracle."""

    def test_derive_care(self, oracle):
        record = derive_attributes("care", "CSW", oracle, LetterTable.standard())
        assert record.word == "CARE"
        assert record.length == 4
        assert record.alphagram == "ACER"
        assert record.num_unique_letters == 4
        assert record.num_vowels == 2
        assert record.point_value == 6
        assert record.front_hooks == "s"
        assert record.back_hooks == "s"
        assert record.is_front_hook is True  # ARE
        assert record.is_back_hook is True  # CAR
        assert record.num_anagrams == 0

    def test_no_hooks(self, oracle):
        record = derive_attributes("TEA", "CSW", oracle, LetterTable.standard())
        assert record.front_hooks == ""
        assert record.back_hooks == ""
        assert record.is_front_hook is False
        assert record.is_back_hook is False

    def test_hook_letters_alphabetical(self):
        o = WordListOracle()
        o.add_lexicon("L", ["AT", "BAT", "CAT", "OAT", "ATE"])
        deriver = AttributeDeriver("L", o, LetterTable.standard())
        assert deriver.hook_letters("AT", front=True) == "BCO"
        assert deriver.hook_letters("AT", front=False) == "E"

    def test_single_letter_word(self):
        o = WordListOracle()
        o.add_lexicon("L", ["A", "AA"])
        record = derive_attributes("A", "L", o, LetterTable.standard())
        assert record.front_hooks == "a"
        assert record.back_hooks == "a"
        assert record.is_front_hook is False
        assert record.is_back_hook is False

    def test_style_symbol_after_hook_letter(self, oracle, not_in_twl):
        """SCARE is CSW-only, so CARE's S front hook is marked."""
        deriver = AttributeDeriver(
            "CSW", oracle, LetterTable.standard(), [not_in_twl]
        )
        record = deriver.derive("CARE")
        assert record.front_hooks == "s#"
        assert record.back_hooks == "s"
        assert record.lexicon_symbols == ""

    def test_word_symbol(self, oracle, not_in_twl):
        deriver = AttributeDeriver(
            "CSW", oracle, LetterTable.standard(), [not_in_twl]
        )
        assert deriver.derive("SCARE").lexicon_symbols == "#"

    def test_symbols_in_style_order(self, oracle, not_in_twl):
        in_twl = LexiconStyle(
            lexicon="CSW", compare_lexicon="TWL", in_compare_lexicon=True, symbol="+"
        )
        also_missing = not_in_twl.model_copy(update={"symbol": "$"})
        deriver = AttributeDeriver(
            "CSW", oracle, LetterTable.standard(), [not_in_twl, in_twl, also_missing]
        )
        assert deriver.derive("SCARE").lexicon_symbols == "#$"
        assert deriver.derive("CARE").lexicon_symbols == "+"


class TestResolveStyles:
    """Selecting styles that apply to a lexicon."""

    def test_other_lexicon_ignored(self, oracle, not_in_twl):
        assert resolve_lexicon_styles([not_in_twl], "TWL", oracle) == []

    def test_unloaded_compare_lexicon_skipped(self, oracle, caplog):
        style = LexiconStyle(
            lexicon="CSW", compare_lexicon="NWL", in_compare_lexicon=False, symbol="*"
        )
        with caplog.at_level(logging.WARNING, logger="lexistore.build.attributes"):
            assert resolve_lexicon_styles([style], "CSW", oracle) == []
        assert "NWL" in caplog.text

    def test_matching_style_kept(self, oracle, not_in_twl):
        assert resolve_lexicon_styles([not_in_twl], "CSW", oracle) == [not_in_twl]


class TestCountAnagrams:
    """Anagram counts within a length class."""

    def test_shared_alphagram(self, oracle):
        deriver = AttributeDeriver("CSW", oracle, LetterTable.standard())
        records = count_anagrams([deriver.derive(w) for w in ["ATE", "EAT", "TEA", "ARE"]])
        counts = {r.word: r.num_anagrams for r in records}
        assert counts == {"ATE": 3, "EAT": 3, "TEA": 3, "ARE": 1}
