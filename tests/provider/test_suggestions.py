"""Tests for 'did you mean' package name suggestions."""

from __future__ import annotations

from pkgplan.provider.suggestions import levenshtein, similar_names, similarity


class TestLevenshtein:
    def test_distances(self) -> None:
        assert levenshtein("kitten", "sitting") == 3
        assert levenshtein("", "abc") == 3
        assert levenshtein("same", "same") == 0


class TestSimilarNames:
    """Tests for ranking and filtering suggestions."""

    def test_case_insensitive(self) -> None:
        assert similarity("Requests", "requests") == 1.0

    def test_best_first(self) -> None:
        names = ["requests", "request", "flask", "reqs"]
        assert similar_names("requets", names)[:2] == ["requests", "request"]

    def test_threshold(self) -> None:
        assert similar_names("numpy", ["django", "flask"]) == []

    def test_target_excluded_and_limit(self) -> None:
        names = ["lib", "lib1", "lib2", "lib3", "lib4", "lib5", "lib6"]
        result = similar_names("lib", names, limit=3)
        assert result == ["lib1", "lib2", "lib3"]
