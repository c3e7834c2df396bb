from __future__ import annotations

import logging
from typing import Callable, Dict, List, Mapping, Optional

from coffee_machine.machine import CoffeeMachine
from coffee_machine.models import LowStock, MachineStatus

logger = logging.getLogger(__name__)

REFILL_ALL_AMOUNTS: Mapping[str, int] = {
    "Coffee Beans": 400,
    "Water": 1500,
    "Milk": 800,
    "Chocolate": 150,
    "Cups": 40,
}

CredentialCheck = Callable[[str, str], bool]


class Operator:
    """
    Maintenance role. Subscribes to the machine's ledger and keeps the
    low-stock alerts it receives until they are cleared.
    """

    def __init__(self, operator_id: str, name: str) -> None:
        self.operator_id = operator_id
        self.name = name
        self.machine: Optional[CoffeeMachine] = None
        self._alerts: List[str] = []

    def __call__(self, event: LowStock) -> None:
        alert = f"[ALERT] Low inventory: {event.ingredient} at {event.quantity} (threshold: {event.threshold})"
        self._alerts.append(alert)
        logger.warning("operator %s received alert: %s", self.name, alert)

    def attach(self, machine: CoffeeMachine) -> "Operator":
        self.machine = machine
        machine.subscribe(self)
        return self

    def unregister(self) -> None:
        if self.machine is not None:
            self.machine.unsubscribe(self)

    def _require_machine(self) -> CoffeeMachine:
        if self.machine is None:
            raise ValueError(f"Operator {self.operator_id} is not attached to a machine")
        return self.machine

    @property
    def alerts(self) -> List[str]:
        return list(self._alerts)

    def clear_alerts(self) -> None:
        self._alerts.clear()

    def check_inventory(self) -> Dict[str, int]:
        return self._require_machine().list_stock()

    def refill(self, ingredient: str, amount: int) -> int:
        logger.info("operator %s refilling %s", self.name, ingredient)
        return self._require_machine().refill(ingredient, amount)

    def refill_all(self, amounts: Mapping[str, int] = REFILL_ALL_AMOUNTS) -> Dict[str, int]:
        machine = self._require_machine()
        for ingredient, amount in amounts.items():
            machine.refill(ingredient, amount)
        return machine.list_stock()

    def perform_maintenance(self) -> None:
        logger.info("operator %s starting maintenance", self.name)
        self._require_machine().set_operational(False)

    def complete_maintenance(self) -> None:
        logger.info("operator %s completing maintenance", self.name)
        self._require_machine().set_operational(True)

    def view_status(self) -> MachineStatus:
        return self._require_machine().get_status()

    def __repr__(self) -> str:
        return f"Operator({self.operator_id}, {self.name})"


def login(machine: CoffeeMachine, username: str, password: str, check: CredentialCheck) -> Optional[Operator]:
    """
    Authenticate through an external credential check and return an operator
    attached to the machine, or None when the check fails.
    """
    if not check(username, password):
        logger.warning("invalid login for %s", username)
        return None
    logger.info("operator %s logged in", username)
    return Operator(operator_id=username, name=username).attach(machine)
