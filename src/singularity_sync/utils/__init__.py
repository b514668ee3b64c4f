"""Utility functions for singularity-sync."""

from .reference import parse_image_reference

__all__ = ["parse_image_reference"]
