"""
Stage Operators

map/filter/foreach/reduce over a Sequence. Each operator reads its input
without modifying it and builds a new Sequence (or, for reduce, a scalar).
Failures of user functions are raised as FunctionError; a non-sequence
input is a TypeMismatchError.
"""

from typing import Any, Callable, Optional, TypeVar

from .sequence import Sequence
from ..exceptions import FunctionError, TypeMismatchError

T = TypeVar("T")
U = TypeVar("U")
A = TypeVar("A")


def _require_sequence(stage: str, data: Any) -> Sequence:
    if not isinstance(data, Sequence):
        raise TypeMismatchError(
            f"{stage} expects a Sequence, got {type(data).__name__}"
        )
    return data


def _require_callable(stage: str, fn: Any) -> None:
    if not callable(fn):
        raise FunctionError(f"{stage} function is not callable: {fn!r}", stage=stage)


def map_seq(seq: Sequence[T], fn: Callable[[T], U],
            output_type: Optional[type] = None) -> Sequence[U]:
    """Apply ``fn`` to every element; output has the same length and order."""
    _require_sequence("map", seq)
    _require_callable("map", fn)
    out = Sequence.create(len(seq), element_type=output_type)
    for i, item in enumerate(seq):
        try:
            value = fn(item)
        except Exception as e:
            raise FunctionError(
                f"map function failed on element {i}: {e}",
                stage="map", element_index=i, cause=e,
            ) from e
        # output_type violations surface as TypeMismatchError from append
        out.append(value)
    return out


def filter_seq(seq: Sequence[T], pred: Callable[[T], Any]) -> Sequence[T]:
    """Keep, in order, the elements for which ``pred`` is truthy."""
    _require_sequence("filter", seq)
    _require_callable("filter", pred)
    out = Sequence.create(len(seq), element_type=seq.element_type)
    for i, item in enumerate(seq):
        try:
            keep = bool(pred(item))
        except Exception as e:
            raise FunctionError(
                f"filter predicate failed on element {i}: {e}",
                stage="filter", element_index=i, cause=e,
            ) from e
        if keep:
            out.append(item)
    return out


def foreach_seq(seq: Sequence[T], fn: Callable[[T], Any]) -> None:
    """Call ``fn`` once per element, in order, for its side effects."""
    _require_sequence("foreach", seq)
    _require_callable("foreach", fn)
    for i, item in enumerate(seq):
        try:
            fn(item)
        except Exception as e:
            raise FunctionError(
                f"foreach function failed on element {i}: {e}",
                stage="foreach", element_index=i, cause=e,
            ) from e


def reduce_seq(seq: Sequence[T], initial: A, fn: Callable[[A, T], A]) -> A:
    """
    Left fold: acc = fn(acc, seq[i]) starting from ``initial``.

    Returns ``initial`` unchanged for an empty sequence. The accumulator
    type need not match the element type.
    """
    _require_sequence("reduce", seq)
    _require_callable("reduce", fn)
    acc = initial
    for i, item in enumerate(seq):
        try:
            acc = fn(acc, item)
        except Exception as e:
            raise FunctionError(
                f"reduce function failed on element {i}: {e}",
                stage="reduce", element_index=i, cause=e,
            ) from e
    return acc
