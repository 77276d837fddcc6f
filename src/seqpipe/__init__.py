"""
seqpipe - functional primitives and tagged pipelines over owned sequences

map, filter, foreach and reduce over a resizable Sequence container, and
a dispatcher that folds an ordered list of tagged operations left to right.
"""

__version__ = "0.1.0"

from .exceptions import (
    SeqPipeError,
    AllocationError,
    SequenceIndexError,
    TypeMismatchError,
    FunctionError,
    PipelineError,
)
from .dsl import (
    Sequence,
    map_seq, filter_seq, foreach_seq, reduce_seq,
    OpCode, Operation, Map, Filter, Foreach, Reduce, STOP,
    StageEvent,
    operations_from_tags, run_pipeline,
    Pipeline,
    pipe_value, compose, identity,
)

__all__ = [
    "SeqPipeError",
    "AllocationError",
    "SequenceIndexError",
    "TypeMismatchError",
    "FunctionError",
    "PipelineError",
    "Sequence",
    "map_seq",
    "filter_seq",
    "foreach_seq",
    "reduce_seq",
    "OpCode",
    "Operation",
    "Map",
    "Filter",
    "Foreach",
    "Reduce",
    "STOP",
    "StageEvent",
    "operations_from_tags",
    "run_pipeline",
    "Pipeline",
    "pipe_value",
    "compose",
    "identity",
]
