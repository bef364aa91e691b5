"""CLI output formatting.

Commands hand plain dicts/lists to an OutputWriter; the writer renders
them as text, JSON, YAML, or a table depending on ``--output``.
"""
from __future__ import annotations

import json
import sys
from dataclasses import asdict, dataclass, is_dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, TextIO


class OutputFormat(str, Enum):
    """Output format options."""
    TEXT = "text"
    JSON = "json"
    YAML = "yaml"
    TABLE = "table"


@dataclass
class OutputConfig:
    """Configuration for output formatting."""
    format: OutputFormat = OutputFormat.TEXT
    verbose: bool = False
    quiet: bool = False
    file: Optional[TextIO] = None

    @property
    def stream(self) -> TextIO:
        return self.file or sys.stdout


class OutputWriter:
    """Handles formatted output for CLI commands."""

    def __init__(self, config: Optional[OutputConfig] = None):
        self.config = config or OutputConfig()

    def print(self, *args, **kwargs) -> None:
        if self.config.quiet:
            return
        kwargs.setdefault("file", self.config.stream)
        print(*args, **kwargs)

    def print_error(self, message: str) -> None:
        print(f"Error: {message}", file=sys.stderr)

    def print_data(self, data: Any, headers: Optional[List[str]] = None) -> None:
        """Print a record or list of records in the configured format."""
        fmt = self.config.format
        if fmt == OutputFormat.JSON:
            self._print_json(data)
        elif fmt == OutputFormat.YAML:
            self._print_yaml(data)
        elif fmt == OutputFormat.TABLE:
            self._print_table(data, headers)
        else:
            self._print_text(data)

    def print_records(self, records: Sequence[Dict[str, Any]], empty: str = "") -> None:
        """Print a listing; ``empty`` is shown in text mode when there is nothing."""
        if not records and empty and self.config.format in (OutputFormat.TEXT, OutputFormat.TABLE):
            self.print(empty)
            return
        self.print_data(list(records))

    def print_dict(self, data: Dict[str, Any], *, indent: int = 0) -> None:
        prefix = " " * indent
        for key, value in data.items():
            if isinstance(value, dict):
                self.print(f"{prefix}{key}:")
                self.print_dict(value, indent=indent + 2)
            elif isinstance(value, (list, tuple)):
                joined = ", ".join(str(v) for v in value)
                self.print(f"{prefix}{key}: {joined}")
            else:
                self.print(f"{prefix}{key}: {'' if value is None else value}")

    def _print_json(self, data: Any) -> None:
        normalized = self._normalize_for_json(data)
        self.print(json.dumps(normalized, indent=2, ensure_ascii=False, default=str))

    def _print_yaml(self, data: Any) -> None:
        import yaml

        normalized = self._normalize_for_json(data)
        self.print(
            yaml.safe_dump(normalized, default_flow_style=False, sort_keys=False, allow_unicode=True),
            end="",
        )

    def _print_table(self, data: Any, headers: Optional[List[str]] = None) -> None:
        rows = self._to_rows(data)
        if not rows:
            return
        if headers is None and isinstance(rows[0], dict):
            headers = list(rows[0].keys())
        if not headers:
            for row in rows:
                self.print(str(row))
            return

        str_rows = [
            [str(row.get(h, "")) if isinstance(row, dict) else str(row) for h in headers]
            for row in rows
        ]
        widths = [len(h) for h in headers]
        for str_row in str_rows:
            for i, val in enumerate(str_row):
                widths[i] = max(widths[i], len(val))

        header_line = " | ".join(h.ljust(widths[i]) for i, h in enumerate(headers))
        self.print(header_line)
        self.print("-" * len(header_line))
        for str_row in str_rows:
            self.print(" | ".join(val.ljust(widths[i]) for i, val in enumerate(str_row)))

    def _print_text(self, data: Any) -> None:
        if isinstance(data, str):
            self.print(data)
        elif isinstance(data, dict):
            self.print_dict(data)
        elif isinstance(data, (list, tuple)):
            for i, item in enumerate(data):
                if isinstance(item, dict):
                    if i:
                        self.print("")
                    self.print_dict(item)
                else:
                    self.print(item)
        elif is_dataclass(data) and not isinstance(data, type):
            self.print_dict(asdict(data))
        else:
            self.print(str(data))

    def _normalize_for_json(self, data: Any) -> Any:
        if is_dataclass(data) and not isinstance(data, type):
            return asdict(data)
        if isinstance(data, dict):
            return {k: self._normalize_for_json(v) for k, v in data.items()}
        if isinstance(data, (list, tuple)):
            return [self._normalize_for_json(v) for v in data]
        if isinstance(data, Enum):
            return data.value
        return data

    def _to_rows(self, data: Any) -> List[Any]:
        if isinstance(data, (list, tuple)):
            return list(data)
        if is_dataclass(data) and not isinstance(data, type):
            return [asdict(data)]
        return [data]
