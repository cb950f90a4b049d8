"""Utility package for Minimal Life."""

from . import image_operations, image_processor, validation

__all__ = ["image_operations", "image_processor", "validation"]
