"""Intake: classify pending source files and normalize them into canonical records."""

from .utils import classify_source, load_records

__all__ = ["classify_source", "load_records"]
