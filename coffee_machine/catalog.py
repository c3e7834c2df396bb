from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, Iterator, List, Optional

from coffee_machine.models import Product, Recipe

BEANS = "Coffee Beans"
WATER = "Water"
MILK = "Milk"
CHOCOLATE = "Chocolate"

DEFAULT_PRODUCTS = (
    Product(
        id=1,
        name="Espresso",
        price=Decimal("2.50"),
        preparation_seconds=30,
        preparation_note="Grinding beans, extracting shot...",
        recipe=((BEANS, 20), (WATER, 30)),
    ),
    Product(
        id=2,
        name="Cappuccino",
        price=Decimal("3.50"),
        preparation_seconds=45,
        preparation_note="Extracting espresso, steaming milk, adding foam...",
        recipe=((BEANS, 20), (WATER, 30), (MILK, 100)),
    ),
    Product(
        id=3,
        name="Latte",
        price=Decimal("3.00"),
        preparation_seconds=40,
        preparation_note="Extracting espresso, adding steamed milk...",
        recipe=((BEANS, 20), (WATER, 30), (MILK, 150)),
    ),
    Product(
        id=4,
        name="Americano",
        price=Decimal("2.00"),
        preparation_seconds=25,
        preparation_note="Extracting espresso, adding hot water...",
        recipe=((BEANS, 20), (WATER, 150)),
    ),
    Product(
        id=5,
        name="Mocha",
        price=Decimal("4.00"),
        preparation_seconds=50,
        preparation_note="Adding chocolate, extracting espresso, steaming milk...",
        recipe=((BEANS, 20), (WATER, 30), (MILK, 100), (CHOCOLATE, 30)),
    ),
)


class RecipeCatalog:
    """
    Products in declaration order. Built once and never changed: the order
    is the menu order and the order in which ingredients are consumed.
    """

    def __init__(self, products: Iterable[Product] = DEFAULT_PRODUCTS) -> None:
        by_id: Dict[int, Product] = {}
        for product in products:
            if product.id in by_id:
                raise ValueError(f"Duplicate product id {product.id}")
            if not product.recipe:
                raise ValueError(f"Product {product.name} has an empty recipe")
            if any(qty <= 0 for _, qty in product.recipe):
                raise ValueError(f"Product {product.name} has a non-positive ingredient quantity")
            by_id[product.id] = product
        self._products = tuple(by_id.values())
        self._by_id = by_id

    def get(self, product_id: int) -> Optional[Product]:
        return self._by_id.get(product_id)

    def recipe_for(self, product_id: int) -> Recipe:
        product = self._by_id.get(product_id)
        if product is None:
            raise ValueError(f"Product {product_id} not found")
        return product.recipe

    def ingredients(self) -> List[str]:
        seen: List[str] = []
        for product in self._products:
            for ingredient, _ in product.recipe:
                if ingredient not in seen:
                    seen.append(ingredient)
        return seen

    def menu(self) -> List[str]:
        return [f"{p.id}. {p.name} - ${p.price}" for p in self._products]

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._by_id

    def __iter__(self) -> Iterator[Product]:
        return iter(self._products)

    def __len__(self) -> int:
        return len(self._products)
