"""Unit tests for image_migrator/models.py"""

import pytest

from image_migrator.models import ImageReference, MigrationPair, NamespaceSummary


class TestImageReference:
    """Tests for ImageReference parsing and rendering"""

    def test_parse_keeps_registry_port(self):
        """Test that a registry port is not mistaken for the tag separator"""
        ref = ImageReference.parse("registry.example.com:5000/ns1/app:v1")

        assert ref.registry == "registry.example.com:5000"
        assert ref.path == "ns1/app"
        assert ref.tag == "v1"

    def test_renders_full_reference(self):
        """Test string form and repository helpers"""
        ref = ImageReference(registry="quay.example.com", path="aro-group/ns1/app", tag="v2")

        assert str(ref) == "quay.example.com/aro-group/ns1/app:v2"
        assert ref.repository == "quay.example.com/aro-group/ns1/app"
        assert ref.repository_path == "aro-group/ns1/app"

    def test_parse_then_render_is_identity(self):
        """Test that parsing a rendered reference yields the same text"""
        text = "src.example.com/ns1/app:2024.01-build.7"
        assert str(ImageReference.parse(text)) == text

    @pytest.mark.parametrize(
        "reference",
        [
            "app:v1",  # no registry host
            "registry.example.com/ns1/app",  # no tag
            "registry.example.com:5000/ns1/app",  # port only, no tag
            "registry.example.com/ns1/app:",  # empty tag
        ],
    )
    def test_parse_rejects_malformed_references(self, reference):
        """Test that malformed references raise ValueError"""
        with pytest.raises(ValueError):
            ImageReference.parse(reference)


class TestMigrationPair:
    """Tests for MigrationPair line format"""

    def test_to_line_and_from_line(self):
        """Test that a work list line is '<source> <destination>'"""
        line = "src.example.com/ns1/app:v2 quay.example.com/aro-group/ns1/app:v2"
        pair = MigrationPair.from_line(line + "\n")

        assert str(pair.source) == "src.example.com/ns1/app:v2"
        assert str(pair.destination) == "quay.example.com/aro-group/ns1/app:v2"
        assert pair.to_line() == line

    def test_from_line_requires_two_tokens(self):
        """Test that lines with the wrong number of tokens are rejected"""
        with pytest.raises(ValueError):
            MigrationPair.from_line("src.example.com/ns1/app:v2")
        with pytest.raises(ValueError):
            MigrationPair.from_line("a.io/x:1 b.io/y:1 c.io/z:1")

    def test_pairs_are_hashable_and_immutable(self):
        """Test that pairs are frozen"""
        pair = MigrationPair.from_line("a.io/ns/x:1 b.io/g/ns/x:1")
        assert pair in {pair}
        with pytest.raises(Exception):
            pair.source = None


class TestNamespaceSummary:
    """Tests for NamespaceSummary defaults"""

    def test_defaults_to_zero_counts(self):
        """Test that a fresh summary has zero counts and no size"""
        summary = NamespaceSummary(namespace="ns1")
        assert summary.image_count == 0
        assert summary.tag_count == 0
        assert summary.total_size is None
