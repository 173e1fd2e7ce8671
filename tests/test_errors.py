import pytest

from pyhvt import (
    ConfigurationError,
    DataError,
    ExecutionError,
    OutOfOrderInputError,
    ParseError,
    PersistenceError,
    PyHVTError,
)


@pytest.mark.parametrize(
    "exc", [ConfigurationError, DataError, ParseError, OutOfOrderInputError, ExecutionError, PersistenceError]
)
def test_exception_hierarchy(exc: type) -> None:
    assert issubclass(exc, PyHVTError)


def test_data_errors_and_config_errors() -> None:
    assert issubclass(ParseError, DataError)
    assert issubclass(OutOfOrderInputError, DataError)
    assert issubclass(ConfigurationError, ValueError)
    assert ParseError("bad", "line").line == "line"
