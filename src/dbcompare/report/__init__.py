"""Presentation of comparison results."""

from .formatters import JsonLinesSink, format_summary_console, to_json

__all__ = ["JsonLinesSink", "format_summary_console", "to_json"]
