"""Verso parsing services.

Date/time extraction, recurrence and priority matching, title cleanup and
the parser that ties them together. Imports are lazy so that importing the
package stays cheap.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS: dict[str, tuple[str, str]] = {
    # Date/time extraction
    "DateTimeExtractor": ("verso.services.datetime_extractor", "DateTimeExtractor"),
    "ExtractedDateTime": ("verso.services.datetime_extractor", "ExtractedDateTime"),
    "extract_datetime": ("verso.services.datetime_extractor", "extract_datetime"),
    # Recurrence
    "RecurrenceKind": ("verso.services.recurrence", "RecurrenceKind"),
    "RecurrenceMatch": ("verso.services.recurrence", "RecurrenceMatch"),
    "RecurrenceRule": ("verso.services.recurrence", "RecurrenceRule"),
    "RECURRENCE_RULES": ("verso.services.recurrence", "RECURRENCE_RULES"),
    "match_recurrence": ("verso.services.recurrence", "match_recurrence"),
    # Priority
    "Priority": ("verso.services.priority", "Priority"),
    "PRIORITY_RULES": ("verso.services.priority", "PRIORITY_RULES"),
    "match_priority": ("verso.services.priority", "match_priority"),
    # Title
    "extract_title": ("verso.services.title", "extract_title"),
    # Parser
    "ParsedReminder": ("verso.services.nlp", "ParsedReminder"),
    "ReminderParser": ("verso.services.nlp", "ReminderParser"),
    "format_parsed_summary": ("verso.services.nlp", "format_parsed_summary"),
    "get_parser": ("verso.services.nlp", "get_parser"),
    "parse_natural_language": ("verso.services.nlp", "parse_natural_language"),
    "reset_parser": ("verso.services.nlp", "reset_parser"),
}

__all__ = list(_EXPORTS.keys())


def __getattr__(name: str) -> Any:
    if name not in _EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = _EXPORTS[name]
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(_EXPORTS.keys()))
