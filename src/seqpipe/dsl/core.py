"""
seqpipe Core - Tagged Operations and the Pipeline Dispatcher

This module provides the pipeline abstractions:

- OpCode: integer tags for the four stage kinds plus the STOP terminator
- Operation: Map / Filter / Foreach / Reduce values, each a step
  T -> Result[U, SeqPipeError]
- run_pipeline: fold an operation list left to right over a sequence
- Pipeline: a lazy, immutable builder over the same dispatcher

Any stage failure aborts the run and is reported as a PipelineError
carrying the index of the failing stage.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum
from typing import (
    Any, Callable, ClassVar, Iterable, List, Optional, Union
)

import pyarrow as pa

from .catpy import PipelineResult, pipeline_ok, pipeline_err
from .sequence import Sequence
from .stages import map_seq, filter_seq, foreach_seq, reduce_seq
from ..config import get_settings
from ..exceptions import FunctionError, PipelineError, SeqPipeError, TypeMismatchError
from ..logging_config import get_trace_logger


__all__ = [
    "OpCode", "Operation", "Map", "Filter", "Foreach", "Reduce",
    "Stop", "STOP",
    "StageEvent", "StageHook",
    "operations_from_tags", "as_sequence", "run_pipeline",
    "Pipeline",
]


# =============================================================================
# Operations
# =============================================================================

class OpCode(IntEnum):
    """Integer tag of each operation kind."""
    STOP = 0
    MAP = 1
    FOREACH = 2
    FILTER = 3
    REDUCE = 4


class Operation(ABC):
    """
    A single pipeline stage.

    ``apply`` runs the stage operator and raises on failure; ``execute``
    wraps the outcome in a Result so the dispatcher can short-circuit.

    ::: This is-in-layer Domain-Specific-Language-Layer.
    ::: This is a step.
    ::: This is stateless.
    """
    opcode: ClassVar[OpCode]

    @property
    def name(self) -> str:
        return self.opcode.name.lower()

    @abstractmethod
    def apply(self, data: Any) -> Any:
        """Run the stage on ``data`` and return its output."""
        pass

    def execute(self, data: Any) -> PipelineResult[Any]:
        """Run the stage and return Ok(output) or Err(error)."""
        try:
            return pipeline_ok(self.apply(data))
        except SeqPipeError as e:
            return pipeline_err(e)
        except Exception as e:
            return pipeline_err(
                FunctionError(f"{self.name} stage failed: {e}", stage=self.name, cause=e)
            )


@dataclass(frozen=True)
class Map(Operation):
    """Transform each element; ``output_type`` constrains the results.

    ::: This is-in-layer Domain-Specific-Language-Layer.
    ::: This is a step.
    ::: This is stateless.
    """
    opcode: ClassVar[OpCode] = OpCode.MAP
    fn: Callable[[Any], Any]
    output_type: Optional[type] = None

    def apply(self, data: Any) -> Sequence:
        return map_seq(data, self.fn, self.output_type)


@dataclass(frozen=True)
class Filter(Operation):
    """Keep elements matching the predicate.

    ::: This is-in-layer Domain-Specific-Language-Layer.
    ::: This is a step.
    ::: This is stateless.
    """
    opcode: ClassVar[OpCode] = OpCode.FILTER
    pred: Callable[[Any], Any]

    def apply(self, data: Any) -> Sequence:
        return filter_seq(data, self.pred)


@dataclass(frozen=True)
class Foreach(Operation):
    """Run a side effect per element and pass the sequence through unchanged.

    ::: This is-in-layer Domain-Specific-Language-Layer.
    ::: This is a step.
    ::: This is stateless.
    """
    opcode: ClassVar[OpCode] = OpCode.FOREACH
    fn: Callable[[Any], Any]

    def apply(self, data: Any) -> Sequence:
        foreach_seq(data, self.fn)
        return data


@dataclass(frozen=True)
class Reduce(Operation):
    """Fold the sequence into a scalar.

    ::: This is-in-layer Domain-Specific-Language-Layer.
    ::: This is a step.
    ::: This is stateless.
    """
    opcode: ClassVar[OpCode] = OpCode.REDUCE
    initial: Any
    fn: Callable[[Any, Any], Any]

    def apply(self, data: Any) -> Any:
        return reduce_seq(data, self.initial, self.fn)


@dataclass(frozen=True)
class Stop:
    """Terminator: dispatch ends when this is reached."""
    opcode: ClassVar[OpCode] = OpCode.STOP

    def __repr__(self) -> str:
        return "STOP"


STOP = Stop()

_TAGGED_OPERATIONS = {
    OpCode.MAP: (Map, 1),
    OpCode.FOREACH: (Foreach, 1),
    OpCode.FILTER: (Filter, 1),
    OpCode.REDUCE: (Reduce, 2),
}


def operations_from_tags(*args: Any) -> List[Union[Operation, Stop]]:
    """
    Decode a flat tag-and-argument list into operations.

    Each tag is followed by its arguments: one function for MAP, FOREACH
    and FILTER; an initial value and a function for REDUCE. STOP ends the
    list; anything after it is ignored.

    Example:
        operations_from_tags(
            OpCode.MAP, double,
            OpCode.FILTER, is_big,
            OpCode.REDUCE, 0, add,
            OpCode.STOP,
        )
    """
    operations: List[Union[Operation, Stop]] = []
    position = 0
    while position < len(args):
        tag = args[position]
        if isinstance(tag, bool):
            raise TypeMismatchError(f"unknown operation tag {tag!r} at position {position}")
        try:
            code = OpCode(tag)
        except (ValueError, TypeError):
            raise TypeMismatchError(f"unknown operation tag {tag!r} at position {position}")
        if code is OpCode.STOP:
            operations.append(STOP)
            break
        op_class, arity = _TAGGED_OPERATIONS[code]
        operands = args[position + 1:position + 1 + arity]
        if len(operands) < arity:
            raise TypeMismatchError(
                f"{code.name} at position {position} expects {arity} argument(s), "
                f"got {len(operands)}"
            )
        operations.append(op_class(*operands))
        position += 1 + arity
    return operations


# =============================================================================
# Observability
# =============================================================================

@dataclass(frozen=True)
class StageEvent:
    """Stage entry, exit or failure reported to a hook.

    ``length`` is the length of the stage input (enter/error) or output
    (exit), or None when that value is a scalar.
    """
    stage_index: int
    stage: str
    phase: str  # "enter" | "exit" | "error"
    length: Optional[int] = None


StageHook = Callable[[StageEvent], None]


def _log_stage_event(event: StageEvent) -> None:
    get_trace_logger().debug(
        "stage %d %s %s (length=%s)",
        event.stage_index, event.stage, event.phase, event.length,
    )


def _resolve_hook(hook: Optional[StageHook]) -> Optional[StageHook]:
    if hook is not None:
        return hook
    if get_settings().trace:
        return _log_stage_event
    return None


def _length_of(value: Any) -> Optional[int]:
    return len(value) if isinstance(value, Sequence) else None


# =============================================================================
# Dispatcher
# =============================================================================

def as_sequence(data: Any) -> Sequence:
    """Coerce pipeline input to a Sequence.

    Accepts a Sequence (returned as is), a list or tuple, or a pyarrow
    Array/ChunkedArray.
    """
    if isinstance(data, Sequence):
        return data
    if isinstance(data, (pa.Array, pa.ChunkedArray)):
        return Sequence.from_arrow(data)
    if isinstance(data, (list, tuple)):
        return Sequence.from_iterable(data)
    raise TypeMismatchError(f"pipeline input must be a sequence, got {type(data).__name__}")


def _dispatch(current: Any, operations: Iterable[Any],
              hook: Optional[StageHook]) -> PipelineResult[Any]:
    for index, op in enumerate(operations):
        if isinstance(op, Stop):
            break
        if not isinstance(op, Operation):
            cause = TypeMismatchError(f"stage {index} is not an Operation: {op!r}")
            return pipeline_err(PipelineError(index, type(op).__name__, cause))

        if hook:
            hook(StageEvent(index, op.name, "enter", _length_of(current)))
        result = op.execute(current)
        if result.is_err():
            if hook:
                hook(StageEvent(index, op.name, "error", _length_of(current)))
            return pipeline_err(PipelineError(index, op.name, result.error))
        current = result.unwrap()
        if hook:
            hook(StageEvent(index, op.name, "exit", _length_of(current)))

    return pipeline_ok(current)


def run_pipeline(seq: Any, operations: Iterable[Any],
                 hook: Optional[StageHook] = None) -> Any:
    """
    Fold ``operations`` left to right over ``seq``.

    Returns the final Sequence, or the scalar produced by a trailing
    Reduce. An empty operation list returns the input unchanged.

    Raises:
        TypeMismatchError: ``seq`` cannot be used as a sequence
        PipelineError: a stage failed; ``stage_index`` and ``cause`` say
            which one and why
    """
    result = _dispatch(as_sequence(seq), operations, _resolve_hook(hook))
    if result.is_err():
        raise result.error from result.error.cause
    return result.unwrap()


# =============================================================================
# Pipeline Builder
# =============================================================================

@dataclass
class Pipeline:
    """
    A lazy, composable sequence pipeline.

    Builder methods return a new Pipeline; nothing runs until run().

    Example:
        result = (
            Pipeline.from_iterable([1, 2, 3, 4, 5])
            .map(lambda x: x * 2)
            .filter(lambda x: x > 4)
            .reduce(0, lambda a, b: a + b)
            .run()
        )
        result.unwrap()  # 24

    ::: This is-in-layer Domain-Specific-Language-Layer.
    ::: This is a pipeline.
    ::: This is stateless.
    """
    _source: Sequence
    _operations: List[Union[Operation, Stop]] = field(default_factory=list)
    _hook: Optional[StageHook] = None

    def _add_step(self, op: Union[Operation, Stop]) -> "Pipeline":
        """Add an operation and return a new pipeline."""
        return Pipeline(
            _source=self._source,
            _operations=self._operations + [op],
            _hook=self._hook,
        )

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def from_sequence(cls, seq: Sequence) -> "Pipeline":
        return cls(_source=as_sequence(seq).copy())

    @classmethod
    def from_iterable(cls, items: Iterable[Any], element_type: Optional[type] = None) -> "Pipeline":
        return cls(_source=Sequence.from_iterable(items, element_type))

    @classmethod
    def from_arrow(cls, array: Any) -> "Pipeline":
        return cls(_source=Sequence.from_arrow(array))

    # -------------------------------------------------------------------------
    # Fluent API
    # -------------------------------------------------------------------------

    def map(self, fn: Callable[[Any], Any], output_type: Optional[type] = None) -> "Pipeline":
        return self._add_step(Map(fn, output_type))

    def filter(self, pred: Callable[[Any], Any]) -> "Pipeline":
        return self._add_step(Filter(pred))

    def foreach(self, fn: Callable[[Any], Any]) -> "Pipeline":
        return self._add_step(Foreach(fn))

    def reduce(self, initial: Any, fn: Callable[[Any, Any], Any]) -> "Pipeline":
        return self._add_step(Reduce(initial, fn))

    def with_hook(self, hook: Optional[StageHook]) -> "Pipeline":
        """Report stage events of this pipeline to ``hook``."""
        return Pipeline(_source=self._source, _operations=list(self._operations), _hook=hook)

    @property
    def operations(self) -> List[Union[Operation, Stop]]:
        return list(self._operations)

    def __rshift__(self, op: Union[Operation, Stop]) -> "Pipeline":
        """Syntactic sugar: pipeline >> Map(f)"""
        return self._add_step(op)

    def __or__(self, op: Union[Operation, Stop]) -> "Pipeline":
        """Alternative syntax: pipeline | Map(f)"""
        return self >> op

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def run(self) -> PipelineResult[Any]:
        """Execute the pipeline and return Ok(value) or Err(PipelineError)."""
        result = _dispatch(self._source, self._operations, _resolve_hook(self._hook))
        if result.is_ok() and result.unwrap() is self._source:
            return pipeline_ok(self._source.copy())
        return result

    def run_or_raise(self) -> Any:
        """Execute the pipeline, raising PipelineError on failure."""
        result = self.run()
        if result.is_err():
            raise result.error from result.error.cause
        return result.unwrap()
