"""Unified exception hierarchy for PyHVT."""


class PyHVTError(Exception):
    """Base class for framework errors."""


class ConfigurationError(PyHVTError, ValueError):
    """Configuration or wiring errors."""


class DataError(PyHVTError):
    """Data quality or parsing issues."""


class ParseError(DataError):
    """A raw bar record could not be turned into a bar."""

    def __init__(self, message: str, line: str | None = None) -> None:
        super().__init__(message)
        self.line = line


class OutOfOrderInputError(DataError):
    """Bar timestamps did not strictly increase."""


class ExecutionError(PyHVTError):
    """Venue could not carry out an intent."""


class PersistenceError(PyHVTError):
    """Persistence or storage failures."""


__all__ = [
    "PyHVTError",
    "ConfigurationError",
    "DataError",
    "ParseError",
    "OutOfOrderInputError",
    "ExecutionError",
    "PersistenceError",
]
