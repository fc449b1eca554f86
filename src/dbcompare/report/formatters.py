"""
Result presentation.

Results are written as JSON, one value per changed table. Console
formatting of the run summary goes to stderr next to the logs.
"""

import json
import sys
from typing import Any, TextIO

from ..introspection.models import TableDescriptor
from ..strategies.results import ComparisonResult


def to_json(value: Any, pretty: bool = False) -> str:
    """
    Serialize a value to JSON.

    Args:
        value: JSON-compatible value; other types (datetime, Decimal, UUID,
            bytes) are written through str()
        pretty: Indent the output

    Returns:
        JSON text
    """
    return json.dumps(value, indent=4 if pretty else None, default=str, ensure_ascii=False)


class JsonLinesSink:
    """
    Writes one JSON value per changed table.

    Compact output is one line per table; pretty output spreads each value
    over several lines but is otherwise identical.
    """

    def __init__(self, stream: TextIO | None = None, pretty: bool = False):
        self.stream = stream if stream is not None else sys.stdout
        self.pretty = pretty
        self.emitted = 0

    def write(self, value: Any) -> None:
        self.stream.write(to_json(value, self.pretty) + "\n")
        self.stream.flush()

    def emit(self, table: str, result: ComparisonResult) -> None:
        self.write({"table": table, "result": result.to_jsonable()})
        self.emitted += 1

    def emit_descriptor(self, descriptor: TableDescriptor) -> None:
        self.write(descriptor.to_dict())


def format_summary_console(summary: dict[str, Any]) -> str:
    """
    Format a run summary for console output

    Args:
        summary: RunSummary.to_dict() output

    Returns:
        Formatted string for console display
    """
    if summary["cancelled"]:
        status = "CANCELLED"
    elif summary["failed"]:
        status = "FAILED"
    elif summary["changed"]:
        status = "DRIFT"
    else:
        status = "MATCH"

    lines = []
    lines.append("=" * 60)
    lines.append("COMPARISON SUMMARY")
    lines.append("=" * 60)
    lines.append(f"Status: {status}")
    lines.append(f"Tables: {summary['tables_total']}")
    lines.append(f"Compared: {summary['compared']}")
    lines.append(f"Changed: {summary['changed']}")
    lines.append(f"Duration: {summary['duration_seconds']}s")

    if summary["failed"]:
        lines.append("")
        lines.append("Failed tables:")
        for table, error in summary["failed"].items():
            lines.append(f"  {table}: {error}")

    lines.append("=" * 60)
    return "\n".join(lines)
