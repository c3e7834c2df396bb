"""Tests for the operator role and the demo runner."""
import logging
from decimal import Decimal

import pytest

from coffee_machine.machine import CoffeeMachine
from coffee_machine.models import ErrorKind
from coffee_machine.operators import REFILL_ALL_AMOUNTS, Operator, login
from coffee_machine.payments import CashPayment
from run_machine import main, run_orders, seed


def test_operator_receives_alerts(machine):
    logging.info("\n=== TEST: Operator alerts ===")
    operator = Operator("OP001", "Charlie").attach(machine)
    machine.inventory.consume((("Milk", 700),))  # 300 left

    machine.select_coffee(2)
    machine.insert_payment(CashPayment(Decimal("5.00")))

    assert operator.alerts == ["[ALERT] Low inventory: Milk at 200 (threshold: 200)"]

    operator.clear_alerts()
    assert operator.alerts == []


def test_unregistered_operator_gets_nothing(machine):
    operator = Operator("OP001", "Charlie").attach(machine)
    operator.unregister()

    machine.inventory.consume((("Milk", 900),))

    assert operator.alerts == []


def test_maintenance_toggles_operational_gate(machine):
    operator = Operator("OP001", "Charlie").attach(machine)

    operator.perform_maintenance()
    assert operator.view_status().operational is False
    assert machine.select_coffee(1).error is ErrorKind.OPERATIONAL_BLOCK

    operator.complete_maintenance()
    assert machine.select_coffee(1).ok


def test_refill_and_refill_all():
    machine = CoffeeMachine()
    operator = Operator("OP001", "Charlie").attach(machine)

    assert operator.refill("Milk", 100) == 1100
    stock = operator.refill_all()

    assert stock["Milk"] == 1100 + REFILL_ALL_AMOUNTS["Milk"]
    assert stock["Cups"] == 50 + REFILL_ALL_AMOUNTS["Cups"]
    assert operator.check_inventory() == stock


def test_detached_operator_cannot_act():
    with pytest.raises(ValueError):
        Operator("OP002", "Dana").check_inventory()


def test_login_uses_external_check(machine):
    def check(username, password):
        return (username, password) == ("admin", "secret")

    assert login(machine, "admin", "wrong", check) is None

    operator = login(machine, "admin", "secret", check)

    assert operator is not None
    assert operator.machine is machine
    assert operator in machine.inventory.observers


def test_run_orders_until_out_of_milk():
    machine, operator = seed()
    machine.inventory.consume((("Milk", 800),))  # 200 left

    outcomes = run_orders(machine, 2, CashPayment(Decimal("5.00")), orders=3)

    assert [o.status.value for o in outcomes] == ["ACCEPTED", "ACCEPTED", "ACCEPTED", "ACCEPTED", "UNAVAILABLE"]
    assert machine.list_stock()["Milk"] == 0
    # 200 after the manual draw, then 100 and 0 after each purchase
    assert len(operator.alerts) == 3


def test_run_orders_cancels_failed_payment():
    machine, _ = seed()

    outcomes = run_orders(machine, 1, CashPayment(Decimal("1.00")), orders=1)

    assert [o.status.value for o in outcomes] == ["ACCEPTED", "FAILED", "CANCELLED"]
    assert machine.get_status().state == "Idle"


def test_cli_main(capsys):
    main(["--product", "5", "--payment", "wallet", "--wallet-id", "alice@upi", "--orders", "2"])

    out = capsys.readouterr().out
    assert "=== RESULT ===" in out
    assert "'Chocolate': 140" in out


def test_cli_menu(capsys):
    main(["--menu"])

    assert "2. Cappuccino - $3.50" in capsys.readouterr().out
