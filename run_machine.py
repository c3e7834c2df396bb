from __future__ import annotations

import argparse
import logging
from typing import List, Optional, Tuple

from coffee_machine.catalog import RecipeCatalog
from coffee_machine.inventory import InventoryLedger
from coffee_machine.machine import CoffeeMachine
from coffee_machine.models import Outcome
from coffee_machine.operators import Operator
from coffee_machine.payments import build_payment


def seed() -> Tuple[CoffeeMachine, Operator]:
    machine = CoffeeMachine(inventory=InventoryLedger(), catalog=RecipeCatalog())
    operator = Operator("OP001", "operator").attach(machine)
    return machine, operator


def run_orders(machine: CoffeeMachine, product_id: int, payment, orders: int) -> List[Outcome]:
    outcomes: List[Outcome] = []
    for _ in range(orders):
        selected = machine.select_coffee(product_id)
        outcomes.append(selected)
        if not selected.ok:
            continue
        paid = machine.insert_payment(payment)
        outcomes.append(paid)
        if not paid.ok:
            outcomes.append(machine.cancel_order())
    return outcomes


def main(argv: Optional[List[str]] = None) -> None:
    p = argparse.ArgumentParser(description="Run coffee orders through the vending machine and print the display.")
    p.add_argument("--product", type=int, default=2, help="Menu number (see --menu)")
    p.add_argument("--payment", choices=["cash", "card", "wallet"], default="cash")
    p.add_argument("--amount", type=str, default="5.00", help="Cash tendered")
    p.add_argument("--card-number", type=str, default="1234567890123456")
    p.add_argument("--pin", type=str, default="1234")
    p.add_argument("--wallet-id", type=str, default="user@wallet")
    p.add_argument("--orders", type=int, default=1)
    p.add_argument("--maintenance", action="store_true", help="Start with the machine out of service")
    p.add_argument("--menu", action="store_true")
    p.add_argument("--log-level", type=str, default="INFO")
    args = p.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level.upper()), format="%(message)s")

    machine, operator = seed()
    if args.menu:
        print("\n".join(machine.menu()))
        return
    if args.maintenance:
        operator.perform_maintenance()

    payment = build_payment(
        args.payment,
        amount=args.amount,
        number=args.card_number,
        pin=args.pin,
        identifier=args.wallet_id,
    )
    outcomes = run_orders(machine, args.product, payment, args.orders)

    print("\n=== RESULT ===")
    print("outcomes:", [o.status.value for o in outcomes])
    print("status:", machine.get_status())
    print("stock:", machine.list_stock())
    print("alerts:", operator.alerts)


if __name__ == "__main__":
    main()
