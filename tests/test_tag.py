"""Tests for versioned tag matching."""

import pytest

from gitversion.domain import Tag, matches_tag, strip_prefix


class TestMatchesTag:
    """Tests for matches_tag."""

    @pytest.mark.parametrize("name", ["1.0", "1", "10.2.3", "2024.01-hotfix", "0"])
    def test_no_prefix_accepts_leading_digit(self, name):
        assert matches_tag(name)

    @pytest.mark.parametrize("name", ["v1.0", "release-1", "", "x", ".1"])
    def test_no_prefix_rejects_other_names(self, name):
        assert not matches_tag(name)

    def test_prefix_required(self):
        assert matches_tag("v1.2.3", "v")
        assert not matches_tag("1.2.3", "v")
        assert not matches_tag("vnext", "v")
        assert not matches_tag("xv1.0", "v")

    def test_prefix_is_literal(self):
        """Regex metacharacters in the prefix must not act as patterns."""
        assert matches_tag("app.v1.0", "app.v")
        assert not matches_tag("appXv1.0", "app.v")
        assert matches_tag("c++1.0", "c++")
        assert not matches_tag("c1.0", "c++")
        assert matches_tag("[x]2", "[x]")
        assert not matches_tag("x2", "[x]")

    def test_empty_name_with_prefix(self):
        assert not matches_tag("", "v")

    def test_prefix_alone_is_not_versioned(self):
        assert not matches_tag("v", "v")


class TestStripPrefix:
    """Tests for strip_prefix."""

    def test_strip(self):
        assert strip_prefix("v1.2.3", "v") == "1.2.3"
        assert strip_prefix("app/1.0", "app/") == "1.0"

    def test_no_prefix(self):
        assert strip_prefix("1.2.3", "") == "1.2.3"

    def test_only_leading_prefix_removed(self):
        assert strip_prefix("v1.0v", "v") == "1.0v"


class TestTag:
    """Tests for the Tag value object."""

    def test_version(self):
        tag = Tag(name="v1.4", target="a" * 40)
        assert tag.is_versioned("v")
        assert tag.version("v") == "1.4"
        assert str(tag) == "v1.4"

    def test_to_dict(self):
        tag = Tag(name="1.0", target="b" * 40)
        assert tag.to_dict() == {'name': "1.0", 'target': "b" * 40}

    def test_hashable(self):
        assert len({Tag("1.0", "abc"), Tag("1.0", "abc")}) == 1
