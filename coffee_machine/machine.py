from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Tuple

from coffee_machine.catalog import RecipeCatalog
from coffee_machine.inventory import InventoryLedger, StockObserver
from coffee_machine.models import (
    Action,
    ErrorKind,
    MachineState,
    MachineStatus,
    Order,
    Outcome,
    OutcomeStatus,
)
from coffee_machine.payments import PaymentMethod, authorize

logger = logging.getLogger(__name__)

# (state, action) pairs without a handler in _TRANSITIONS are rejected
# without touching the machine.
_REJECTIONS: Dict[Tuple[MachineState, Action], str] = {
    (MachineState.IDLE, Action.PAY): "Please select a coffee first.",
    (MachineState.IDLE, Action.DISPENSE): "Please select a coffee and make payment first.",
    (MachineState.IDLE, Action.CANCEL): "Nothing to cancel.",
    (MachineState.SELECTING, Action.SELECT): "Coffee already selected. Please make payment or cancel.",
    (MachineState.SELECTING, Action.DISPENSE): "Please complete payment first.",
    (MachineState.PROCESSING, Action.SELECT): "Machine is processing. Please wait.",
    (MachineState.PROCESSING, Action.PAY): "Payment already received. Processing order.",
    (MachineState.PROCESSING, Action.DISPENSE): "Order is being processed. Please wait.",
    (MachineState.PROCESSING, Action.CANCEL): "Cannot cancel. Order is being processed.",
    (MachineState.DISPENSING, Action.SELECT): "Please collect your coffee first.",
    (MachineState.DISPENSING, Action.PAY): "Please collect your coffee first.",
    (MachineState.DISPENSING, Action.DISPENSE): "Please collect your coffee first.",
    (MachineState.DISPENSING, Action.CANCEL): "Cannot cancel. Coffee is being dispensed.",
}

MAINTENANCE_MESSAGE = "Machine is under maintenance. Please try later."


class CoffeeMachine:
    """
    One vending session: the current state, the order in flight, the
    operational flag and the ledger it draws ingredients from.

    A successful payment runs processing and dispensing in the same call, so
    Processing and Dispensing are only ever observed from inside that call
    (for example by a low-stock observer). Every public action holds the
    ledger lock, which every session sharing that ledger also uses, so the
    availability check, authorization and consumption form one critical
    section and concurrent callers cannot drive stock negative.
    """

    def __init__(
        self,
        inventory: Optional[InventoryLedger] = None,
        catalog: Optional[RecipeCatalog] = None,
        operational: bool = True,
    ) -> None:
        self.inventory = inventory if inventory is not None else InventoryLedger()
        self.catalog = catalog if catalog is not None else RecipeCatalog()
        self.operational = operational
        self.display: List[str] = []

        self._state = MachineState.IDLE
        self._order: Optional[Order] = None
        self.lock = self.inventory.lock
        self._messages: Optional[List[str]] = None

    @property
    def state(self) -> MachineState:
        return self._state

    @property
    def order(self) -> Optional[Order]:
        return self._order

    def show(self, message: str) -> None:
        self.display.append(message)
        if self._messages is not None:
            self._messages.append(message)
        logger.info(message)

    # --- Public actions -----------------------------------------------------
    def select_coffee(self, product_id: int) -> Outcome:
        return self._gated(Action.SELECT, product_id)

    def insert_payment(self, payment: PaymentMethod) -> Outcome:
        return self._gated(Action.PAY, payment)

    def dispense(self) -> Outcome:
        return self._dispatch(Action.DISPENSE)

    def cancel_order(self) -> Outcome:
        return self._dispatch(Action.CANCEL)

    def get_status(self) -> MachineStatus:
        with self.lock:
            return MachineStatus(
                state=self._state.value,
                operational=self.operational,
                selected_product=self._order.product.name if self._order else None,
            )

    def set_operational(self, operational: bool) -> None:
        with self.lock:
            self.operational = operational
            logger.info("operational=%s", operational)

    def menu(self) -> List[str]:
        return self.catalog.menu()

    def list_stock(self) -> Dict[str, int]:
        return self.inventory.list_stock()

    def refill(self, ingredient: str, amount: int) -> int:
        return self.inventory.refill(ingredient, amount)

    def subscribe(self, observer: StockObserver) -> None:
        self.inventory.add_observer(observer)

    def unsubscribe(self, observer: StockObserver) -> None:
        self.inventory.remove_observer(observer)

    # --- Dispatch -----------------------------------------------------------
    def _gated(self, action: Action, *args) -> Outcome:
        with self.lock:
            if not self.operational:
                logger.info("%s blocked: machine not operational", action.value)
                return self._capture(
                    lambda: self._result(OutcomeStatus.REJECTED, MAINTENANCE_MESSAGE, ErrorKind.OPERATIONAL_BLOCK)
                )
            return self._dispatch(action, *args)

    def _dispatch(self, action: Action, *args) -> Outcome:
        with self.lock:
            handler = _TRANSITIONS.get((self._state, action))
            if handler is None:
                return self._capture(lambda: self._reject(action))
            return self._capture(lambda: handler(self, *args))

    def _capture(self, run: Callable[[], Outcome]) -> Outcome:
        previous = self._messages
        self._messages = []
        try:
            outcome = run()
            outcome.messages = self._messages
            return outcome
        finally:
            self._messages = previous

    def _result(self, status: OutcomeStatus, message: str, error: Optional[ErrorKind] = None, **extra) -> Outcome:
        self.show(message)
        return Outcome(status=status, message=message, error=error, **extra)

    def _reject(self, action: Action) -> Outcome:
        message = _REJECTIONS[(self._state, action)]
        logger.info("rejected %s in %s", action.value, self._state.value)
        return self._result(OutcomeStatus.REJECTED, message, ErrorKind.INVALID_TRANSITION)

    def _transition(self, new_state: MachineState) -> None:
        logger.debug("state %s -> %s", self._state.value, new_state.value)
        self._state = new_state

    # --- Idle ---------------------------------------------------------------
    def _select_from_idle(self, product_id: int) -> Outcome:
        product = self.catalog.get(product_id)
        if product is None:
            return self._result(
                OutcomeStatus.REJECTED, "Invalid selection. Please try again.", ErrorKind.INVALID_SELECTION
            )
        if not self.inventory.check_availability(product.recipe):
            return self._result(
                OutcomeStatus.UNAVAILABLE,
                f"Sorry, {product.name} is currently unavailable due to low ingredients.",
                ErrorKind.UNAVAILABLE,
            )

        self._order = Order(product=product)
        self._transition(MachineState.SELECTING)
        outcome = self._result(OutcomeStatus.ACCEPTED, f"Selected: {product.name}", price=product.price)
        self.show(f"Price: ${product.price}")
        return outcome

    # --- Selecting ----------------------------------------------------------
    def _pay_while_selecting(self, payment: PaymentMethod) -> Outcome:
        order = self._order
        product = order.product

        with self.inventory.lock:
            if not self.inventory.check_availability(product.recipe):
                return self._result(
                    OutcomeStatus.FAILED,
                    f"Sorry, {product.name} ran out before payment. Please cancel.",
                    ErrorKind.UNAVAILABLE,
                    price=product.price,
                )

            result = authorize(product.price, payment)
            self.show(result.message)
            if not result.approved:
                return self._result(
                    OutcomeStatus.FAILED,
                    "Payment failed. Please try again or cancel.",
                    ErrorKind.PAYMENT_REJECTED,
                    price=product.price,
                )
            if result.change:
                self.show(f"Change returned: ${result.change}")

            order.payment_method = payment.method
            order.change = result.change
            self._transition(MachineState.PROCESSING)
            self._process(order)

        return Outcome(
            status=OutcomeStatus.ACCEPTED,
            message=f"{product.name} dispensed.",
            price=product.price,
            change=result.change if result.change is not None else Decimal("0.00"),
        )

    def _cancel_while_selecting(self) -> Outcome:
        self._order = None
        self._transition(MachineState.IDLE)
        return self._result(OutcomeStatus.CANCELLED, "Order cancelled.")

    # --- Processing / Dispensing --------------------------------------------
    def _process(self, order: Order) -> None:
        product = order.product
        self.show("Processing your order...")
        self.show(f"Preparing {product.name}: {product.preparation_note}")
        self.show(f"Please wait {product.preparation_seconds} seconds...")

        self.inventory.consume(product.recipe)

        self._transition(MachineState.DISPENSING)
        self._dispense(order)

    def _dispense(self, order: Order) -> None:
        self.show(f"*** Your {order.product.name} is ready! ***")
        self.show("Please collect your coffee from the dispenser.")
        self.show("Thank you for your purchase!")
        self._order = None
        self._transition(MachineState.IDLE)


# Handlers for the (state, action) pairs that move the machine forward.
_TRANSITIONS: Dict[Tuple[MachineState, Action], Callable[..., Outcome]] = {
    (MachineState.IDLE, Action.SELECT): CoffeeMachine._select_from_idle,
    (MachineState.SELECTING, Action.PAY): CoffeeMachine._pay_while_selecting,
    (MachineState.SELECTING, Action.CANCEL): CoffeeMachine._cancel_while_selecting,
}
