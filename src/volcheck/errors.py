"""
Exceptions raised by volcheck.

- ConfigurationError: fatal, abort before (or during) a detection run
- LoaderError: the scene description could not be read or validated
- SolidError: a solid could not be built from its parameters/operands
"""

from typing import List, Optional


class VolcheckError(Exception):
    """Base class for all volcheck errors."""


class ConfigurationError(VolcheckError):
    """Bad parameters, missing inputs or a broken placement tree."""


class LoaderError(ConfigurationError):
    """A scene description failed to load or validate."""

    def __init__(self, message: str, messages: Optional[List[str]] = None):
        super().__init__(message)
        self.messages: List[str] = list(messages or [])

    def __str__(self) -> str:
        base = super().__str__()
        if not self.messages:
            return base
        return base + "\n" + "\n".join(f"  {msg}" for msg in self.messages)


class SolidError(VolcheckError, ValueError):
    """Invalid solid parameters or a failed derived-solid construction."""


__all__ = ["VolcheckError", "ConfigurationError", "LoaderError", "SolidError"]
