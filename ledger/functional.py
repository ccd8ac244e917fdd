"""
Shared result types for the ledger core.

``Maybe`` carries an optional value (goal ETAs, parsed dates) and ``Either``
carries a value or an error payload (row parsing and entry validation).
The module also holds the entry acceptance gate that every manual
or imported entry passes through.
"""
import math
from abc import ABC, abstractmethod
from typing import Callable, Generic, TypeVar

from ledger.domain import Kind, LedgerEntry

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value

    def __hash__(self) -> int:
        return hash(("Some", self._value))


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)

    def __hash__(self) -> int:
        return hash("Nothing")


class Either(Generic[E, T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass

    def is_left(self) -> bool:
        return not self.is_right()


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Left(self._error)

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return Left(self._error)

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def validate_entry(e: LedgerEntry) -> Either[dict, LedgerEntry]:
    """Acceptance gate shared by manual entry, import and storage load."""
    if not str(e.date or "").strip():
        return Left({
            "error": "missing_date",
            "message": f"Entry {e.id} has no date",
            "id": e.id,
        })

    if e.kind not in (Kind.INCOME, Kind.EXPENSE):
        return Left({
            "error": "unresolved_kind",
            "message": f"Entry {e.id} is neither income nor expense",
            "id": e.id,
        })

    if not isinstance(e.amount, (int, float)) or not math.isfinite(e.amount) or e.amount <= 0:
        return Left({
            "error": "invalid_amount",
            "message": f"Entry {e.id} amount must be a positive number, got {e.amount!r}",
            "id": e.id,
            "amount": e.amount,
        })

    return Right(e)


def check_budget(category: str, cap: float, spent: float) -> Either[dict, float]:
    """Right(remaining) while within the cap, Left(details) once it is exceeded."""
    if cap > 0 and spent > cap:
        return Left({
            "error": "budget_exceeded",
            "message": f"Budget limit exceeded for category {category}",
            "category": category,
            "limit": cap,
            "spent": spent,
            "over_budget": spent - cap,
        })
    return Right(max(0.0, cap - spent))


def pipe(x, *funcs):
    """Pipe a value through a series of functions.

    pipe(x, f, g, h) == h(g(f(x)))
    Returns the final result.
    """
    res = x
    for f in funcs:
        res = f(res)
    return res
