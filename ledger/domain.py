import itertools
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from ledger.functional import Maybe

EntryId = Union[int, float]


class Kind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    UNKNOWN = ""   # normalizer result only, never stored


@dataclass(frozen=True)
class LedgerEntry:
    id: EntryId
    date: str        # "YYYY-MM-DD"
    kind: Kind
    amount: float    # magnitude, direction lives in kind
    category: str = ""
    note: str = ""


@dataclass(frozen=True)
class Goal:
    id: str
    name: str
    target: float
    monthly: float
    start_period: str  # "YYYY-MM"


@dataclass(frozen=True)
class MonthlyAggregate:
    period: str
    income: float
    expense: float
    net: float


@dataclass(frozen=True)
class BudgetUsage:
    category: str
    cap: float
    consumed: float
    ratio: int       # 0..100
    over: bool
    remaining: float
    status: str      # "ok" | "warn" | "over"


@dataclass(frozen=True)
class SpendingHint:
    category: str
    spent: float
    cap: float
    over: bool


@dataclass(frozen=True)
class GoalProjection:
    goal: Goal
    months: "Maybe[int]"
    eta_period: "Maybe[str]"


_ids = itertools.count(int(time.time() * 1000))


def new_entry_id() -> int:
    """Process-unique id for entries that arrive without a numeric one."""
    return next(_ids)
