"""
catpy.py - Category-theory-inspired programming foundations for seqpipe.

- Functor: containers that map a function over their elements (Sequence)
- Result (Ok/Err): the outcome of one stage, short-circuited by the dispatcher
- Helpers: compose, identity, const, pipe_value
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Generic,
    Optional,
    TypeVar,
)
from abc import ABC, abstractmethod

from ..exceptions import FunctionError, SeqPipeError

T = TypeVar("T")
U = TypeVar("U")
V = TypeVar("V")
E = TypeVar("E")

# ---------------------------------------------------------------------------
# Functor
# ---------------------------------------------------------------------------

class Functor(ABC, Generic[T]):
    """
    A structure that supports mapping a function over the values it contains.

    Laws (for all f: a->b, g: b->c):
      1) Identity:     fmap(id)      == id
      2) Composition:  fmap(g)∘fmap(f) == fmap(g∘f)

    ::: This is-in-layer Domain-Specific-Language-Layer.
    ::: This is a type-class.
    ::: This is stateless.
    """

    @abstractmethod
    def fmap(self, f: Callable[[T], U]) -> "Functor[U]":
        """Map a pure function over the structure."""
        raise NotImplementedError


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

class Result(ABC, Generic[T, E]):
    """
    Outcome of a stage or a whole pipeline run: Ok(value) or Err(error).

    ::: This is-in-layer Domain-Specific-Language-Layer.
    ::: This is a value-object.
    ::: This is stateless.
    """

    def is_ok(self) -> bool:
        return isinstance(self, Ok)

    def is_err(self) -> bool:
        return isinstance(self, Err)

    @abstractmethod
    def unwrap(self) -> T:
        """Get the value; an Err raises its error."""
        raise NotImplementedError


@dataclass(frozen=True)
class Ok(Result[T, E]):
    """A successful stage output."""
    value: T

    def unwrap(self) -> T:
        return self.value

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True)
class Err(Result[Any, E]):
    """A failed stage; ``error`` is raised by unwrap() when it is an exception."""
    error: E

    def unwrap(self) -> Any:
        if isinstance(self.error, BaseException):
            raise self.error
        raise ValueError(f"Cannot unwrap Err: {self}")

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


# Type alias for stage and pipeline results
PipelineResult = Result[T, SeqPipeError]


def pipeline_ok(value: T) -> PipelineResult[T]:
    """Create a successful pipeline result."""
    return Ok(value)


def pipeline_err(error: SeqPipeError) -> PipelineResult[Any]:
    """Create a failed pipeline result."""
    return Err(error)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def compose(f: Callable[[U], V], g: Callable[[T], U]) -> Callable[[T], V]:
    """Function composition: compose(f, g)(x) == f(g(x))"""
    return lambda x: f(g(x))


def identity(x: T) -> T:
    """Identity function."""
    return x


def const(x: T) -> Callable[[Any], T]:
    """Constant function: const(x)(y) == x for all y."""
    return lambda _: x


def pipe_value(value: Any, *functions: Optional[Callable[[Any], Any]]) -> Any:
    """
    Thread a value through functions left to right.

    A None entry terminates the chain; functions after it are not called.

        >>> pipe_value(3, lambda x: x + 1, lambda x: x * 2)
        8
    """
    for position, func in enumerate(functions):
        if func is None:
            break
        if not callable(func):
            raise FunctionError(
                f"pipe entry {position} is not callable: {func!r}", stage="pipe"
            )
        try:
            value = func(value)
        except Exception as e:
            raise FunctionError(
                f"pipe entry {position} failed: {e}", stage="pipe", cause=e
            ) from e
    return value
