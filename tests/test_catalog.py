"""Tests for the recipe catalog."""
from decimal import Decimal

import pytest

from coffee_machine.catalog import RecipeCatalog
from coffee_machine.models import Product


def test_default_menu_in_declaration_order():
    catalog = RecipeCatalog()

    assert len(catalog) == 5
    assert [p.name for p in catalog] == ["Espresso", "Cappuccino", "Latte", "Americano", "Mocha"]
    assert catalog.menu()[0] == "1. Espresso - $2.50"
    assert catalog.menu()[-1] == "5. Mocha - $4.00"


def test_lookup():
    catalog = RecipeCatalog()

    assert catalog.get(2).price == Decimal("3.50")
    assert catalog.get(6) is None
    assert 5 in catalog
    assert 0 not in catalog
    assert catalog.recipe_for(4) == (("Coffee Beans", 20), ("Water", 150))
    with pytest.raises(ValueError):
        catalog.recipe_for(42)


def test_ingredients_in_first_seen_order():
    assert RecipeCatalog().ingredients() == ["Coffee Beans", "Water", "Milk", "Chocolate"]


def test_products_are_immutable():
    product = RecipeCatalog().get(1)

    with pytest.raises(AttributeError):
        product.price = Decimal("0.01")


def _product(product_id, recipe=(("Water", 10),)):
    return Product(
        id=product_id,
        name=f"Drink {product_id}",
        price=Decimal("1.00"),
        preparation_seconds=5,
        preparation_note="Pouring...",
        recipe=recipe,
    )


def test_rejects_duplicate_ids():
    with pytest.raises(ValueError):
        RecipeCatalog([_product(1), _product(1)])


def test_rejects_empty_or_non_positive_recipes():
    with pytest.raises(ValueError):
        RecipeCatalog([_product(1, recipe=())])
    with pytest.raises(ValueError):
        RecipeCatalog([_product(1, recipe=(("Water", 0),))])


def test_custom_catalog_keeps_given_order():
    catalog = RecipeCatalog([_product(7), _product(3)])

    assert [p.id for p in catalog] == [7, 3]
