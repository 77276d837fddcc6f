"""
seqpipe DSL - sequences, stage operators and the pipeline dispatcher.

    from seqpipe.dsl import Sequence, Map, Filter, Reduce, run_pipeline

    seq = Sequence.from_iterable([1, 2, 3, 4, 5])
    run_pipeline(seq, [Map(lambda x: x * 2), Filter(lambda x: x > 4),
                       Reduce(0, lambda a, b: a + b)])  # 24
"""

from .catpy import (
    Functor,
    Result, Ok, Err,
    PipelineResult, pipeline_ok, pipeline_err,
    compose, identity, const, pipe_value,
)
from .sequence import Sequence
from .stages import map_seq, filter_seq, foreach_seq, reduce_seq
from .core import (
    OpCode, Operation, Map, Filter, Foreach, Reduce, Stop, STOP,
    StageEvent, StageHook,
    operations_from_tags, as_sequence, run_pipeline,
    Pipeline,
)

__all__ = [
    # Category Theory
    "Functor",
    "Result", "Ok", "Err",
    "PipelineResult", "pipeline_ok", "pipeline_err",
    "compose", "identity", "const", "pipe_value",
    # Container
    "Sequence",
    # Stage operators
    "map_seq", "filter_seq", "foreach_seq", "reduce_seq",
    # Dispatcher
    "OpCode", "Operation", "Map", "Filter", "Foreach", "Reduce", "Stop", "STOP",
    "StageEvent", "StageHook",
    "operations_from_tags", "as_sequence", "run_pipeline",
    "Pipeline",
]
