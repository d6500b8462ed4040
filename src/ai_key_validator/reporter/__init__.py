"""Reporter module for rendering validation results."""

from ai_key_validator.reporter.console import ConsoleReporter
from ai_key_validator.reporter.json_reporter import JSONReporter

__all__ = [
    "ConsoleReporter",
    "JSONReporter",
]
