"""Standardized CLI error kinds and error handling.

Every failure surfaced by the core is one of these kinds. None of them is
retried; callers display them or act on them.
"""
from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class ExitCode(IntEnum):
    """Standard CLI exit codes."""
    SUCCESS = 0
    ERROR = 1
    USAGE = 2
    INTERRUPTED = 130  # Standard for Ctrl+C


@dataclass
class CLIError(Exception):
    """CLI error with exit code and message."""
    message: str
    code: ExitCode = ExitCode.ERROR
    hint: Optional[str] = None

    kind = "error"

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict:
        out = {"error": self.message, "kind": self.kind}
        if self.hint:
            out["hint"] = self.hint
        return out


class ConfigError(CLIError):
    """Configuration-related error."""
    kind = "config"

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message, ExitCode.ERROR, hint)


class AuthError(CLIError):
    """Token exchange rejected by the identity provider."""
    kind = "auth"

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message, ExitCode.ERROR, hint)


class NetworkError(CLIError):
    """Transport failure: connection error or timeout."""
    kind = "transport"

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message, ExitCode.ERROR, hint)


class NotFoundError(CLIError):
    """Missing credential or unresolved resource suffix."""
    kind = "not_found"

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message, ExitCode.ERROR, hint)


class UsageError(CLIError):
    """Usage/argument error."""
    kind = "usage"

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message, ExitCode.USAGE, hint)


class RemoteError(CLIError):
    """Graph returned a structured error payload.

    ``remote_code`` and the message are carried verbatim from the response.
    """
    kind = "remote"

    def __init__(
        self,
        message: str,
        remote_code: Optional[str] = None,
        status: Optional[int] = None,
        hint: Optional[str] = None,
    ):
        super().__init__(message, ExitCode.ERROR, hint)
        self.remote_code = remote_code
        self.status = status

    def to_dict(self) -> dict:
        out = super().to_dict()
        out["code"] = self.remote_code
        out["status"] = self.status
        return out


def handle_error(error: BaseException, verbose: bool = False) -> int:
    """Print an exception to stderr and return the exit code to use."""
    if isinstance(error, RemoteError):
        code = f" [{error.remote_code}]" if error.remote_code else ""
        print(f"Error: {error.message}{code}", file=sys.stderr)
        if error.hint:
            print(f"Hint: {error.hint}", file=sys.stderr)
        return error.code

    if isinstance(error, CLIError):
        print(f"Error: {error.message}", file=sys.stderr)
        if error.hint:
            print(f"Hint: {error.hint}", file=sys.stderr)
        return error.code

    if isinstance(error, KeyboardInterrupt):
        print("\nInterrupted.", file=sys.stderr)
        return ExitCode.INTERRUPTED

    # Unexpected error
    print(f"Error: {error}", file=sys.stderr)
    if verbose:
        import traceback
        traceback.print_exc()
    return ExitCode.ERROR
