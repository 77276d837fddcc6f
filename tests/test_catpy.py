"""
Tests for the Result type and functional helpers.
"""

import pytest

from seqpipe.dsl import (
    Ok, Err, Result, pipeline_ok, pipeline_err,
    compose, identity, const, pipe_value,
)
from seqpipe.exceptions import FunctionError, TypeMismatchError


class TestResultTypes:
    """Tests for Ok/Err result types."""

    def test_ok_is_ok(self):
        result = Ok(42)
        assert result.is_ok()
        assert not result.is_err()
        assert isinstance(result, Result)

    def test_ok_unwrap(self):
        assert Ok("value").unwrap() == "value"

    def test_err_is_err(self):
        result = Err(TypeMismatchError("scalar"))
        assert result.is_err()
        assert not result.is_ok()

    def test_results_are_values(self):
        assert Ok(1) == Ok(1)
        assert Ok(1) != Err(1)

    def test_err_unwrap_raises_exception_payload(self):
        with pytest.raises(TypeMismatchError):
            Err(TypeMismatchError("scalar")).unwrap()

    def test_err_unwrap_plain_payload(self):
        with pytest.raises(ValueError, match="Cannot unwrap Err"):
            Err("error").unwrap()

    def test_pipeline_helpers(self):
        assert pipeline_ok(1) == Ok(1)
        error = TypeMismatchError("bad")
        assert pipeline_err(error).error is error


class TestHelpers:

    def test_compose(self):
        assert compose(lambda x: x * 2, lambda x: x + 1)(3) == 8

    def test_identity_and_const(self):
        assert identity("a") == "a"
        assert const(True)(object()) is True

    def test_pipe_value(self):
        assert pipe_value(3, lambda x: x + 1, lambda x: x * 2) == 8

    def test_pipe_value_no_functions(self):
        assert pipe_value(7) == 7

    def test_pipe_value_stops_at_none(self):
        assert pipe_value(1, lambda x: x + 1, None, lambda x: 1 / 0) == 2

    def test_pipe_value_not_callable(self):
        with pytest.raises(FunctionError):
            pipe_value(1, 2)

    def test_pipe_value_failure(self):
        with pytest.raises(FunctionError) as exc_info:
            pipe_value(0, lambda x: 1 / x)
        assert isinstance(exc_info.value.cause, ZeroDivisionError)
