"""
Diagnostics

Structured records emitted (never raised) by the loader, dispatcher and
deployer. Each record is written to the structlog stream and kept so
callers can inspect what happened.
"""

from collections.abc import Iterator
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import structlog
from pydantic import BaseModel, Field

logger = structlog.get_logger(__name__)


class DiagnosticCode(str, Enum):
    """Machine-readable diagnostic codes."""

    COMMAND_MISSING_PROPERTIES = "COMMAND_MISSING_PROPERTIES"
    COMMAND_LOAD_ERROR = "COMMAND_LOAD_ERROR"
    COMMAND_NOT_FOUND = "COMMAND_NOT_FOUND"
    COMMAND_EXECUTION_ERROR = "COMMAND_EXECUTION_ERROR"
    COMMAND_DEPLOY_ERROR = "COMMAND_DEPLOY_ERROR"
    MISSING_CONFIGURATION = "MISSING_CONFIGURATION"


class DiagnosticLevel(str, Enum):
    """Severity of a diagnostic."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Diagnostic(BaseModel):
    """A single diagnostic record."""

    message: str
    code: DiagnosticCode | None = None
    level: DiagnosticLevel = DiagnosticLevel.ERROR
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    context: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def error(cls, code: DiagnosticCode, message: str, **context: Any) -> "Diagnostic":
        return cls(code=code, message=message, level=DiagnosticLevel.ERROR, context=context)

    @classmethod
    def info(cls, message: str, **context: Any) -> "Diagnostic":
        return cls(message=message, level=DiagnosticLevel.INFO, context=context)

    @property
    def source(self) -> str | None:
        """Source path of the command file, if any."""
        return self.context.get("file_path")

    def to_log_fields(self) -> dict[str, Any]:
        """Flatten into keyword arguments for a structlog call."""
        fields = dict(self.context)
        if self.code is not None:
            fields["code"] = self.code.value
        fields["diagnostic_ts"] = self.timestamp.isoformat()
        return fields


class DiagnosticLog:
    """
    Collects diagnostics and writes each one to the log.

    One instance is shared by the loader, dispatcher and deployer of a
    process so the full history can be inspected (for example by the CLI
    or tests).
    """

    def __init__(self, log: Any = None) -> None:
        self._log = log or logger
        self._records: list[Diagnostic] = []

    def record(self, diagnostic: Diagnostic, exc_info: BaseException | None = None) -> Diagnostic:
        """
        Log and store a diagnostic.

        Args:
            diagnostic: The record to emit
            exc_info: Optional exception whose traceback is logged alongside

        Returns:
            The same diagnostic, for chaining
        """
        fields = diagnostic.to_log_fields()
        if exc_info is not None:
            fields["exc_info"] = exc_info

        if diagnostic.level == DiagnosticLevel.ERROR:
            self._log.error(diagnostic.message, **fields)
        elif diagnostic.level == DiagnosticLevel.WARNING:
            self._log.warning(diagnostic.message, **fields)
        else:
            self._log.info(diagnostic.message, **fields)

        self._records.append(diagnostic)
        return diagnostic

    @property
    def records(self) -> list[Diagnostic]:
        return list(self._records)

    def with_code(self, code: DiagnosticCode) -> list[Diagnostic]:
        """Return all records carrying the given code."""
        return [d for d in self._records if d.code == code]

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(list(self._records))
