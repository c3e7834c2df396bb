"""Pytest fixtures for the coffee machine core."""

import pytest

from coffee_machine.catalog import RecipeCatalog
from coffee_machine.inventory import InventoryLedger
from coffee_machine.machine import CoffeeMachine


class AlertRecorder:
    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)


@pytest.fixture
def ledger() -> InventoryLedger:
    return InventoryLedger(
        stock={"Coffee Beans": 500, "Water": 2000, "Milk": 1000, "Chocolate": 200, "Cups": 50},
        thresholds={"Milk": 200},
    )


@pytest.fixture
def machine(ledger) -> CoffeeMachine:
    return CoffeeMachine(inventory=ledger, catalog=RecipeCatalog())


@pytest.fixture
def recorder(machine) -> AlertRecorder:
    rec = AlertRecorder()
    machine.subscribe(rec)
    return rec
