"""Storefront database management CLI.

Usage:
    python src/manage.py setup-db                 # Create all tables
    python src/manage.py drop-db                  # Drop all tables
    python src/manage.py seed-stock stock.json    # Load products and stock counts
"""

import argparse
import json
import sys


def setup_database():
    from storefront.domain import storefront
    from storefront.utils.db import setup_db

    print("Initializing storefront domain...")
    storefront.init()
    print("Creating storefront database schema...")
    setup_db(storefront)
    print("Done.")


def drop_database():
    from storefront.domain import storefront
    from storefront.utils.db import drop_db

    print("Initializing storefront domain...")
    storefront.init()
    print("Dropping storefront database schema...")
    drop_db(storefront)
    print("Done.")


def seed_stock(path):
    """Load ``[{product_id, name, unit_price, on_hand, image?}, ...]`` from a JSON file."""
    from storefront.domain import storefront
    from storefront.stock.management import StockProduct

    with open(path) as f:
        products = json.load(f)

    storefront.init()
    with storefront.domain_context():
        for product in products:
            storefront.process(StockProduct(**product), asynchronous=False)
            print(f"  {product['product_id']}: {product['on_hand']} in stock")

    print(f"Seeded {len(products)} product(s).")


def main():
    parser = argparse.ArgumentParser(description="Storefront database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    seed_parser = subparsers.add_parser("seed-stock", help="Load stock records from a JSON file")
    seed_parser.add_argument("path", help="JSON file with a list of products")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "seed-stock":
        seed_stock(args.path)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
