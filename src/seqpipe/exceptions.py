"""
seqpipe Exception Hierarchy

Contains all exception classes raised by sequences, stage operators
and the pipeline dispatcher.
"""

from typing import Optional


class SeqPipeError(Exception):
    """
    Base exception for all seqpipe operations.

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is stateless.
    """
    pass


class AllocationError(SeqPipeError, MemoryError):
    """
    Raised when sequence storage cannot be obtained.

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is stateless.
    """
    pass


class SequenceIndexError(SeqPipeError, IndexError):
    """
    Raised on access outside the live elements of a sequence.

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is stateless.
    """
    pass


class TypeMismatchError(SeqPipeError, TypeError):
    """
    Raised when a stage receives a value of the wrong shape,
    e.g. a scalar produced by reduce fed into map.

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is stateless.
    """
    pass


class FunctionError(SeqPipeError):
    """
    Raised when a user-supplied function or predicate fails.

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is stateless.

    Attributes:
        stage: Name of the stage that called the function
        element_index: Index of the element being processed, if any
        cause: The exception raised by the function, if any
    """

    def __init__(
        self,
        message: str,
        stage: Optional[str] = None,
        element_index: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.stage = stage
        self.element_index = element_index
        self.cause = cause


class PipelineError(SeqPipeError):
    """
    Raised when a pipeline stage fails. Wraps the underlying error
    together with the position of the failing stage.

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is stateless.
    """

    def __init__(self, stage_index: int, stage: str, cause: BaseException):
        super().__init__(f"[stage {stage_index}: {stage}] {cause}")
        self.stage_index = stage_index
        self.stage = stage
        self.cause = cause


__all__ = [
    "SeqPipeError",
    "AllocationError",
    "SequenceIndexError",
    "TypeMismatchError",
    "FunctionError",
    "PipelineError",
]
