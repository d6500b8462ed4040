"""JSON output reporter.

This module serializes validation results for machine consumption.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from ai_key_validator.core.models import ValidationStats

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from ai_key_validator.core.models import PatternResult, ValidationResult


class JSONReporter:
    """JSON reporter for validation results.

    Example:
        ```python
        reporter = JSONReporter(tool_version=__version__)
        print(reporter.generate_json(results, labels))
        ```
    """

    def __init__(
        self,
        tool_name: str = "ai-key-validator",
        tool_version: str = "0.1.0",
    ) -> None:
        """Initialize the JSON reporter.

        Args:
            tool_name: Name of the tool.
            tool_version: Version of the tool.
        """
        self.tool_name = tool_name
        self.tool_version = tool_version

    def _result_to_dict(self, result: ValidationResult, label: str | None) -> dict[str, Any]:
        data = result.model_dump(mode="json")
        data["suggestions"] = list(result.suggestions)
        if label is not None:
            data["key"] = label
        return data

    def generate(
        self,
        results: Sequence[ValidationResult],
        labels: Sequence[str] | None = None,
    ) -> dict[str, Any]:
        """Generate a JSON-ready report.

        Args:
            results: Results to report.
            labels: Masked key labels aligned with ``results``.

        Returns:
            JSON structure as a dictionary.
        """
        return {
            "tool": self.tool_name,
            "version": self.tool_version,
            "timestamp": datetime.now(UTC).isoformat(),
            "results": [
                self._result_to_dict(r, labels[i] if labels is not None else None)
                for i, r in enumerate(results)
            ],
            "summary": asdict(ValidationStats.from_results(results)),
        }

    def generate_json(
        self,
        results: Sequence[ValidationResult],
        labels: Sequence[str] | None = None,
        pretty: bool = True,
    ) -> str:
        """Generate the report as a JSON string."""
        data = self.generate(results, labels)
        if pretty:
            return json.dumps(data, indent=2, ensure_ascii=False)
        return json.dumps(data, ensure_ascii=False)

    def pattern_json(self, result: PatternResult, label: str | None = None) -> str:
        """Serialize a single pattern check outcome."""
        data = result.model_dump(mode="json")
        if label is not None:
            data["key"] = label
        return json.dumps(data, indent=2, ensure_ascii=False)

    def write(
        self,
        results: Sequence[ValidationResult],
        output_path: Path,
        labels: Sequence[str] | None = None,
    ) -> None:
        """Write the report to a file.

        Args:
            results: Results to report.
            output_path: Path to write the JSON file.
            labels: Masked key labels aligned with ``results``.
        """
        output_path.write_text(self.generate_json(results, labels), encoding="utf-8")
