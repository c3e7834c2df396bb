from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Mapping, Optional

from coffee_machine.models import LowStock, Recipe

logger = logging.getLogger(__name__)

CONSUMABLE = "Cups"

DEFAULT_STOCK: Mapping[str, int] = {
    "Coffee Beans": 500,
    "Water": 2000,
    "Milk": 1000,
    "Chocolate": 200,
    CONSUMABLE: 50,
}

DEFAULT_THRESHOLDS: Mapping[str, int] = {
    "Coffee Beans": 100,
    "Water": 500,
    "Milk": 200,
    "Chocolate": 50,
    CONSUMABLE: 10,
}

StockObserver = Callable[[LowStock], None]


class InsufficientStockError(ValueError):
    pass


class InventoryLedger:
    """
    In-memory ingredient stock with low-stock thresholds.

    Quantities only go down through consume(), which re-checks availability
    under the ledger lock, so a quantity can never become negative. Every
    ingredient whose new quantity is at or below its threshold is reported to
    the observers, one LowStock per ingredient, in recipe order, followed by
    the shared consumable. Ingredients without a threshold never alert.
    """

    def __init__(
        self,
        stock: Optional[Mapping[str, int]] = None,
        thresholds: Optional[Mapping[str, int]] = None,
        consumable: str = CONSUMABLE,
    ) -> None:
        self._stock: Dict[str, int] = dict(DEFAULT_STOCK if stock is None else stock)
        self._thresholds: Dict[str, int] = dict(DEFAULT_THRESHOLDS if thresholds is None else thresholds)
        self.consumable = consumable
        self._observers: List[StockObserver] = []
        # Reentrant: observers run inside consume() and may call back in.
        self.lock = threading.RLock()

        if any(qty < 0 for qty in self._stock.values()):
            raise ValueError("Initial stock cannot be negative")
        self._stock.setdefault(consumable, 0)

    # --- Observers ----------------------------------------------------------
    def add_observer(self, observer: StockObserver) -> None:
        with self.lock:
            if observer not in self._observers:
                self._observers.append(observer)

    def remove_observer(self, observer: StockObserver) -> None:
        with self.lock:
            try:
                self._observers.remove(observer)
            except ValueError:
                pass

    subscribe = add_observer
    unsubscribe = remove_observer

    @property
    def observers(self) -> List[StockObserver]:
        return list(self._observers)

    def _notify(self, event: LowStock) -> None:
        logger.warning("low stock: %s at %d (threshold=%d)", event.ingredient, event.quantity, event.threshold)
        for observer in list(self._observers):
            try:
                observer(event)
            except Exception:
                logger.exception("observer %r failed on %s", observer, event.ingredient)

    # --- Queries ------------------------------------------------------------
    def check_availability(self, recipe: Recipe) -> bool:
        with self.lock:
            for ingredient, qty in recipe:
                if self._stock.get(ingredient, 0) < qty:
                    return False
            return self._stock.get(self.consumable, 0) > 0

    def quantity(self, ingredient: str) -> int:
        with self.lock:
            if ingredient not in self._stock:
                raise ValueError(f"Ingredient {ingredient} not found")
            return self._stock[ingredient]

    def threshold(self, ingredient: str) -> Optional[int]:
        return self._thresholds.get(ingredient)

    def list_stock(self) -> Dict[str, int]:
        with self.lock:
            return dict(self._stock)

    def low_items(self) -> List[str]:
        with self.lock:
            return [name for name, qty in self._stock.items() if self._is_low(name, qty)]

    def _is_low(self, ingredient: str, quantity: int) -> bool:
        threshold = self._thresholds.get(ingredient)
        return threshold is not None and quantity <= threshold

    # --- Mutations ----------------------------------------------------------
    def _take(self, ingredient: str, qty: int) -> None:
        remaining = self._stock[ingredient] - qty
        self._stock[ingredient] = remaining
        logger.debug("consumed %s qty=%d (remaining=%d)", ingredient, qty, remaining)
        if self._is_low(ingredient, remaining):
            self._notify(LowStock(ingredient=ingredient, quantity=remaining, threshold=self._thresholds[ingredient]))

    def consume(self, recipe: Recipe) -> None:
        with self.lock:
            if not self.check_availability(recipe):
                have = {name: self._stock.get(name, 0) for name, _ in recipe}
                raise InsufficientStockError(f"Insufficient stock for recipe {list(recipe)}: have={have}")
            for ingredient, qty in recipe:
                self._take(ingredient, qty)
            self._take(self.consumable, 1)

    def refill(self, ingredient: str, amount: int) -> int:
        if amount <= 0:
            raise ValueError(f"Refill amount must be > 0, got {amount}")
        with self.lock:
            if ingredient not in self._stock:
                raise ValueError(f"Ingredient {ingredient} not found")
            self._stock[ingredient] += amount
            logger.info("refilled %s: +%d (now=%d)", ingredient, amount, self._stock[ingredient])
            return self._stock[ingredient]
