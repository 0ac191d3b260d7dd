#!/usr/bin/env python
import logging

from stockroom.config import ClientConfig
from stockroom.listing import ProductListView, use_system_collation
from stockroom.client import StockroomClient

def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    use_system_collation()
    c = StockroomClient(ClientConfig.from_env())

    # -----------------------------
    # List products (API, or seeded local store)
    # -----------------------------
    print("Listing products...")
    products = c.list_products()
    print(f"{len(products)} products served by the {c.last_source} store")

    # -----------------------------
    # Create / update
    # -----------------------------
    print("\nCreating a product...")
    lamp = c.create_product({"name": "Desk Lamp", "sku": "DL-3003", "price": 34.5, "stock": 12, "category": "Lighting"})
    print(lamp)

    print("\nRestocking it...")
    print(c.update_product(lamp.id, {"stock": 40}))

    # -----------------------------
    # Search and sort
    # -----------------------------
    view = ProductListView(search="a", sort_key="price", ascending=False)
    print("\nProducts containing 'a', most expensive first:")
    for p in view.apply(c.list_products()):
        print(f"  {p.name:<24} {p.sku:<10} ${p.price:>8.2f} x{p.stock}")

    # -----------------------------
    # Delete
    # -----------------------------
    print("\nDeleting it again...")
    print(c.delete_product(lamp.id))
    c.close()

if __name__ == "__main__":
    main()
