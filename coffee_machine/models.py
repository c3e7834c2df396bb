from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple

Recipe = Tuple[Tuple[str, int], ...]


class MachineState(Enum):
    IDLE = "Idle"
    SELECTING = "Selecting"
    PROCESSING = "Processing"
    DISPENSING = "Dispensing"


class Action(Enum):
    SELECT = "select"
    PAY = "pay"
    DISPENSE = "dispense"
    CANCEL = "cancel"


class OutcomeStatus(Enum):
    ACCEPTED = "ACCEPTED"
    CANCELLED = "CANCELLED"
    UNAVAILABLE = "UNAVAILABLE"
    REJECTED = "REJECTED"
    FAILED = "FAILED"


class ErrorKind(Enum):
    INVALID_SELECTION = "InvalidSelection"
    UNAVAILABLE = "Unavailable"
    PAYMENT_REJECTED = "PaymentRejected"
    INVALID_TRANSITION = "InvalidTransition"
    OPERATIONAL_BLOCK = "OperationalBlock"


@dataclass(frozen=True, slots=True)
class Product:
    id: int
    name: str
    price: Decimal
    preparation_seconds: int
    preparation_note: str
    recipe: Recipe


@dataclass(slots=True)
class Order:
    """
    The one order in flight. Lives from a successful selection until it is
    cancelled or dispensed.
    """

    product: Product
    payment_method: Optional[str] = None
    change: Optional[Decimal] = None


@dataclass(frozen=True, slots=True)
class LowStock:
    ingredient: str
    quantity: int
    threshold: int


@dataclass(slots=True)
class Outcome:
    status: OutcomeStatus
    message: str
    error: Optional[ErrorKind] = None
    price: Optional[Decimal] = None
    change: Optional[Decimal] = None
    messages: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status in (OutcomeStatus.ACCEPTED, OutcomeStatus.CANCELLED)


@dataclass(frozen=True, slots=True)
class MachineStatus:
    state: str
    operational: bool
    selected_product: Optional[str] = None
