"""Tests for versions, VersionConstraint, and PackageSpecifier.

Validates version parsing and padding, constraint satisfaction for every
operator, constraint merging, and specifier parsing including the
single-``=`` and ``@`` exact-match spellings.
"""

from __future__ import annotations

import pytest

from pkgplan.core.dependency import (
    PackageSpecifier,
    VersionConstraint,
    is_valid_version,
    parse_version,
    sort_versions,
    versions_equal,
)


class TestVersions:
    """Tests for version parsing and ordering helpers."""

    def test_short_versions_are_padded(self) -> None:
        """"2", "2.0" and "2.0.0" are the same version."""
        assert versions_equal("2", "2.0.0")
        assert versions_equal("2.0", "2.0.0")

    def test_prerelease_sorts_before_release(self) -> None:
        assert parse_version("1.0.0-alpha") < parse_version("1.0.0")

    def test_build_metadata_ignored(self) -> None:
        assert versions_equal("1.0.0+build.5", "1.0.0")

    def test_v_prefix_accepted(self) -> None:
        assert parse_version("v1.2.3") == parse_version("1.2.3")

    def test_invalid_version_raises(self) -> None:
        with pytest.raises(ValueError, match="Invalid version"):
            parse_version("one.two")

    def test_is_valid_version(self) -> None:
        assert is_valid_version("1.2.3")
        assert not is_valid_version("latest")

    def test_sort_versions_descending_and_deduplicated(self) -> None:
        """Equal spellings collapse; highest comes first."""
        assert sort_versions({"1.0", "2.0.0", "1.0.0", "1.5.0"}) == ["2.0.0", "1.5.0", "1.0"]

    def test_sort_versions_ascending(self) -> None:
        assert sort_versions(["3.0.0", "1.0.0"], descending=False) == ["1.0.0", "3.0.0"]


class TestVersionConstraint:
    """Tests for VersionConstraint parsing and the ``satisfies()`` method."""

    def test_wildcard_accepts_everything(self) -> None:
        vc = VersionConstraint("*")
        assert vc.is_any
        assert vc.satisfies("0.0.1")
        assert vc.satisfies("99.0.0")

    def test_exact_spellings(self) -> None:
        """==, = and @ all mean exact match."""
        for raw in ("==2.0", "=2.0", "@2.0", "2.0"):
            vc = VersionConstraint(raw)
            assert vc.satisfies("2.0.0"), raw
            assert not vc.satisfies("2.0.1"), raw

    def test_range_operators(self) -> None:
        assert VersionConstraint(">=1.0").satisfies("1.0.0")
        assert not VersionConstraint(">1.0").satisfies("1.0.0")
        assert VersionConstraint("<=2.0").satisfies("2.0.0")
        assert not VersionConstraint("<2.0").satisfies("2.0.0")
        assert not VersionConstraint("!=1.0").satisfies("1.0.0")

    def test_caret(self) -> None:
        """^1.2.0 allows >=1.2.0 within major 1."""
        vc = VersionConstraint("^1.2.0")
        assert vc.satisfies("1.9.0")
        assert not vc.satisfies("2.0.0")
        assert not vc.satisfies("1.1.0")

    def test_caret_zero_major(self) -> None:
        """^0.2.0 stays within 0.2.x."""
        vc = VersionConstraint("^0.2.0")
        assert vc.satisfies("0.2.5")
        assert not vc.satisfies("0.3.0")

    def test_tilde(self) -> None:
        vc = VersionConstraint("~1.2.0")
        assert vc.satisfies("1.2.9")
        assert not vc.satisfies("1.3.0")

    def test_compound(self) -> None:
        vc = VersionConstraint(">=1.0,<2.0")
        assert vc.satisfies("1.5.0")
        assert not vc.satisfies("2.0.0")

    def test_invalid_atom_raises(self) -> None:
        with pytest.raises(ValueError, match="Invalid constraint atom"):
            VersionConstraint(">=banana")

    def test_pinned_versions(self) -> None:
        assert VersionConstraint(">=1.0,==1.5").pinned_versions() == ["1.5"]
        assert VersionConstraint(">=1.0").pinned_versions() == []

    def test_merge(self) -> None:
        merged = VersionConstraint(">=1.0").merge(VersionConstraint("<2.0"))
        assert str(merged) == ">=1.0,<2.0"
        assert VersionConstraint.any().merge(VersionConstraint("<2.0")) == VersionConstraint("<2.0")

    def test_exact_factory(self) -> None:
        assert VersionConstraint.exact("1.2.3").satisfies("1.2.3")


class TestPackageSpecifier:
    """Tests for ``PackageSpecifier.parse``."""

    def test_bare_name(self) -> None:
        spec = PackageSpecifier.parse("Lib")
        assert spec.name == "Lib"
        assert spec.constraint.is_any
        assert str(spec) == "Lib"

    def test_single_equals_is_exact(self) -> None:
        spec = PackageSpecifier.parse("Lib=2.0")
        assert spec.name == "Lib"
        assert spec.constraint.satisfies("2.0.0")
        assert not spec.constraint.satisfies("2.1.0")

    def test_at_sign_is_exact(self) -> None:
        spec = PackageSpecifier.parse("Lib@2.0")
        assert spec.name == "Lib"
        assert str(spec) == "Lib==2.0"

    def test_compound_constraint(self) -> None:
        spec = PackageSpecifier.parse("Lib>=1.0,<2.0")
        assert spec.constraint.satisfies("1.9.9")
        assert not spec.constraint.satisfies("2.0.0")

    def test_optional_flag(self) -> None:
        assert PackageSpecifier.parse("Lib", optional=True).optional

    def test_invalid_specifier(self) -> None:
        with pytest.raises(ValueError):
            PackageSpecifier.parse(">=1.0")
