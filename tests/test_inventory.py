# tests/test_inventory.py
import pytest

from catalog.errors import ProductAlreadyExists, ProductNotFound
from catalog.inventory import Inventory
from catalog.models import Product


def product(pid, name="p", price=1.0, quantity=1, category="general"):
    return Product(id=pid, name=name, price=price, quantity=quantity, category=category)


def test_add_same_id_twice_keeps_first():
    inv = Inventory()
    inv.add_product(product(1, name="first"))
    with pytest.raises(ProductAlreadyExists):
        inv.add_product(product(1, name="second"))
    assert inv.get(1).name == "first"
    assert len(inv) == 1


def test_remove_twice():
    inv = Inventory()
    inv.add_product(product(1))
    inv.remove_product(1)
    with pytest.raises(ProductNotFound):
        inv.remove_product(1)
    assert 1 not in inv


def test_find_by_name_prefers_lowest_id():
    inv = Inventory()
    inv.add_product(product(9, name="Widget"))
    inv.add_product(product(3, name="Widget"))
    inv.add_product(product(5, name="Gadget"))
    assert inv.find_product_by_name("Widget").id == 3


def test_find_by_name_missing():
    inv = Inventory()
    inv.add_product(product(1, name="Widget"))
    with pytest.raises(ProductNotFound):
        inv.find_product_by_name("widget")


def test_list_by_category_exact_subset():
    inv = Inventory()
    for pid, cat in [(1, "X"), (2, "Y"), (3, "X"), (4, "x"), (5, "X")]:
        inv.add_product(product(pid, category=cat))
    found = inv.list_by_category("X")
    assert sorted(p.id for p in found) == [1, 3, 5]
    assert inv.list_by_category("Z") == []


def test_total_value():
    inv = Inventory()
    assert inv.total_value() == 0.0
    inv.add_product(product(1, price=10, quantity=2))
    inv.add_product(product(2, price=20, quantity=1))
    assert inv.total_value() == 40.0


def test_replace_requires_existing():
    inv = Inventory()
    with pytest.raises(ProductNotFound):
        inv.replace(product(1))
    inv.add_product(product(1, quantity=1))
    inv.replace(product(1, quantity=8))
    assert inv.get(1).quantity == 8
