"""Tests for image reference parsing."""

import pytest

from singularity_sync.core.types import ImageReference
from singularity_sync.exceptions import ReferenceParseError
from singularity_sync.utils.reference import parse_image_reference


def test_parse_simple_reference():
    """Test parsing a repository/image pair."""
    reference = parse_image_reference("biocontainers/samtools")
    assert reference == ImageReference(repository="biocontainers", image="samtools")
    assert str(reference) == "biocontainers/samtools"


def test_parse_uses_rightmost_segment_as_image():
    """Test that nested namespaces stay in the repository part."""
    reference = parse_image_reference("org/team/tool")
    assert reference.repository == "org/team"
    assert reference.image == "tool"


def test_parse_strips_whitespace():
    reference = parse_image_reference("  rocker/tidyverse\n")
    assert reference == ImageReference("rocker", "tidyverse")


@pytest.mark.parametrize("value", ["ubuntu", "/ubuntu", "library/", "", "/"])
def test_parse_invalid_references(value):
    """Test that references without two non-empty parts are rejected."""
    with pytest.raises(ReferenceParseError):
        parse_image_reference(value)


def test_parse_non_string():
    with pytest.raises(ReferenceParseError):
        parse_image_reference(42)
