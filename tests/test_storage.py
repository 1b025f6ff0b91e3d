"""Tests for the SQLite lexicon store."""

import sqlite3
from datetime import date

import pytest

from lexistore.core.models import ProbabilityRecord, WordRecord
from lexistore.storage import BuildMetadata, SCHEMA_VERSION, open_lexicon_db


def _word(word, **kwargs):
    values = dict(
        word=word,
        length=len(word),
        alphagram="".join(sorted(word.upper())),
        num_unique_letters=len(set(word.upper())),
        num_vowels=sum(1 for c in word.upper() if c in "AEIOU"),
        point_value=len(word),
    )
    values.update(kwargs)
    return WordRecord(**values)


@pytest.fixture
def db(tmp_path):
    store = open_lexicon_db(tmp_path / "nested" / "lexicon.db")
    with store.transaction():
        store.create_schema()
    yield store
    store.close()


class TestSchema:
    """Schema creation and metadata."""

    def test_fresh_store_has_no_schema(self, tmp_path):
        with open_lexicon_db(tmp_path / "empty.db") as store:
            assert not store.has_schema()

    def test_create_schema(self, db):
        assert db.has_schema()
        assert db.count_rows("words") == 0
        assert db.count_rows("probability") == 0

    def test_schema_creation_rolls_back(self, tmp_path):
        with open_lexicon_db(tmp_path / "rollback.db") as store:
            with pytest.raises(RuntimeError):
                with store.transaction():
                    store.create_schema()
                    raise RuntimeError("boom")
            assert not store.has_schema()

    def test_metadata(self, db):
        with db.transaction():
            db.write_metadata(
                BuildMetadata(
                    schema_version=SCHEMA_VERSION,
                    lexicon="CSW",
                    lexicon_date=date(2021, 5, 1),
                    lexicon_file="csw.txt",
                )
            )
        assert db.get_metadata() == {
            "lexicon": "CSW",
            "lexicon_date": "2021-05-01",
            "lexicon_file": "csw.txt",
            "schema_version": str(SCHEMA_VERSION),
        }

    def test_count_rows_rejects_unknown_table(self, db):
        with pytest.raises(ValueError):
            db.count_rows("sqlite_master")


class TestWords:
    """Word rows and definitions."""

    def test_insert_and_get(self, db):
        with db.transaction():
            db.insert_word(_word("CARE", front_hooks="s", is_back_hook=True))
        row = db.get_word("care")
        assert row["word"] == "CARE"
        assert row["alphagram"] == "ACER"
        assert row["front_hooks"] == "s"
        assert row["is_back_hook"] == 1
        assert row["definition"] is None

    def test_missing_word(self, db):
        assert db.get_word("NOPE") is None

    def test_duplicate_word_rejected(self, db):
        with pytest.raises(sqlite3.IntegrityError):
            with db.transaction():
                db.insert_word(_word("CARE"))
                db.insert_word(_word("CARE"))
        assert db.count_rows("words") == 0

    def test_set_definition(self, db):
        with db.transaction():
            db.insert_word(_word("CARE"))
            assert db.set_definition("care", "[v] to mind")
            assert not db.set_definition("NOPE", "[n] nothing")
        assert db.get_definitions() == {"CARE": "[v] to mind"}

    def test_words_of_length_sorted(self, db):
        with db.transaction():
            for w in ["RACE", "ACRE", "ARE", "CARE"]:
                db.insert_word(_word(w))
        assert db.words_of_length(4) == ["ACRE", "CARE", "RACE"]

    def test_anagrams(self, db):
        with db.transaction():
            for w in ["RACE", "ACRE", "CARE", "ARE"]:
                db.insert_word(_word(w))
        assert [r["word"] for r in db.get_anagrams("erca")] == ["ACRE", "CARE", "RACE"]

    def test_iter_words_joins_probability(self, db):
        with db.transaction():
            db.insert_word(_word("CARE"))
            db.insert_word(_word("ARE"))
            db.insert_probabilities(
                [
                    ProbabilityRecord(
                        word="CARE",
                        length=4,
                        num_blanks=0,
                        combinations=1296.0,
                        probability_order=1,
                        min_probability_order=1,
                        max_probability_order=1,
                    )
                ]
            )
        rows = list(db.iter_words())
        assert [r["word"] for r in rows] == ["ARE", "CARE"]
        assert rows[0]["probability_order"] is None
        assert rows[1]["probability_order"] == 1
        assert [r["word"] for r in db.iter_words(length=3)] == ["ARE"]


class TestProbability:
    """Probability rows and bands."""

    @pytest.fixture
    def ranked(self, db):
        records = [
            ProbabilityRecord(
                word=w,
                length=2,
                num_blanks=0,
                combinations=c,
                probability_order=o,
                min_probability_order=lo,
                max_probability_order=hi,
            )
            for w, c, o, lo, hi in [
                ("AE", 108.0, 1, 1, 2),
                ("EA", 108.0, 2, 1, 2),
                ("OE", 96.0, 3, 3, 3),
                ("QI", 9.0, 4, 4, 4),
            ]
        ]
        with db.transaction():
            db.insert_probabilities(records)
        return db

    def test_get_probability(self, ranked):
        row = ranked.get_probability("oe", 0)
        assert row["probability_order"] == 3
        assert row["combinations"] == 96.0
        assert ranked.get_probability("OE", 1) is None

    def test_band_includes_overlapping_ties(self, ranked):
        """Asking for order 2 alone still returns its whole tie band."""
        rows = ranked.probability_band(0, 2, 2, 2)
        assert [r["word"] for r in rows] == ["AE", "EA"]

    def test_band_range(self, ranked):
        rows = ranked.probability_band(0, 2, 3, 4)
        assert [r["word"] for r in rows] == ["OE", "QI"]


class TestRunSelect:
    """Generic read-only queries."""

    def test_limit_applied(self, db):
        with db.transaction():
            for w in ["AA", "AB", "AD", "AE"]:
                db.insert_word(_word(w))
        rows = db.run_select("SELECT word FROM words ORDER BY word", limit=2)
        assert rows == [{"word": "AA"}, {"word": "AB"}]
