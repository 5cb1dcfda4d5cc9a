"""Exceptions raised while defining and parsing command-line flags."""

from __future__ import annotations


class QFlagError(Exception):
    """Base class of every error the package raises on purpose."""

    prefix: str = ""

    def __init__(self, detail: object = "") -> None:
        self.detail = str(detail)
        message = f"{self.prefix}: {self.detail}" if self.prefix else self.detail
        super().__init__(message)


class FlagParseError(QFlagError):
    """The arguments of a command could not be parsed."""

    prefix = "Parameter parsing error"


class SubCommandParseError(QFlagError):
    """The arguments handed to a subcommand could not be parsed."""

    prefix = "Subcommand parsing error"


class PanicRecoveredError(QFlagError):
    """An unexpected failure was caught while parsing."""

    prefix = "panic recovered"


class ValidationError(QFlagError):
    """A value or definition failed validation."""

    prefix = "Validation failed"


def new_validation_error(message: str, *args: object) -> ValidationError:
    """Build a ValidationError; extra arguments are %-formatted into the message."""
    return ValidationError(message % args if args else message)