#!/usr/bin/env python
from catalog.config import settings
from catalog_sdk.client import CatalogClient


def main():
    c = CatalogClient(base_url=settings.api_url)

    # -----------------------------
    # Reset everything for demo
    # -----------------------------
    print("Resetting catalog...")
    c.reset()

    # -----------------------------
    # Create products
    # -----------------------------
    print("\nCreating products...")
    print(c.create_product(1, "Laptop", 1500.0, 3, "electronics"))
    print(c.create_product(2, "Mouse", 25.5, 10, "electronics"))
    print(c.create_product(3, "Desk", 240.0, 2, "furniture"))

    print("\nElectronics:")
    print(c.list_products("electronics"))

    print("\nSearching for 'Mouse'...")
    print(c.search_product("Mouse"))

    # -----------------------------
    # Stock movements
    # -----------------------------
    print("\nSelling 2 laptops...")
    print(c.sell(1, 2).json())
    print("Selling 5 more laptops (should fail)...")
    r = c.sell(1, 5)
    print(r.status_code, r.json())
    print("Restocking laptops...")
    print(c.restock(1, 4))
    print(c.display_product(1))

    print("\nTotal inventory value:", c.total_value())

    # -----------------------------
    # Batch fetch from the detail source
    # -----------------------------
    print("\nFetching details for IDs 100-109...")
    print(c.fetch_many(range(100, 110)))

    print("\nDeleting the desk...")
    c.delete_product(3)
    print(c.list_products())


if __name__ == "__main__":
    main()
