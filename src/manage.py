"""Storefront stock database management CLI.

Creates and drops the stock tables and loads product rows exported from the
admin console (a JSON list of product records).

Usage:
    python src/manage.py setup-db                 # Create stock tables
    python src/manage.py drop-db                  # Drop stock tables
    python src/manage.py load-products data.json  # Insert/replace products
"""

import argparse
import json
import sys

from catalogue.product import Product
from inventory.store.sql_adapter import SQLStockStore, drop_tables, setup_tables
from shared.settings import stock_database_url
from sqlalchemy import create_engine


def _engine(url=None):
    url = url or stock_database_url()
    if not url:
        print("STOCK_DATABASE_URL is not set and no --url given.")
        sys.exit(1)
    return create_engine(url)


def setup_database(url=None):
    engine = _engine(url)
    print("Creating stock schema...")
    setup_tables(engine)
    print("Done.")


def drop_database(url=None):
    engine = _engine(url)
    print("Dropping stock schema...")
    drop_tables(engine)
    print("Done.")


def load_products(path, url=None):
    """Insert or replace every product record found in ``path``."""
    with open(path, encoding="utf-8") as fh:
        records = json.load(fh)

    store = SQLStockStore(_engine(url))
    for record in records:
        product = Product.from_record(record)
        store.save_product(product)
        print(f"  {product.id} {product.name}")
    print(f"Loaded {len(records)} product(s).")


def main():
    parser = argparse.ArgumentParser(description="Storefront stock database management")
    parser.add_argument("--url", help="SQLAlchemy URL (default: STOCK_DATABASE_URL)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create the stock tables")
    subparsers.add_parser("drop-db", help="Drop the stock tables")
    load_parser = subparsers.add_parser("load-products", help="Load product records from a JSON file")
    load_parser.add_argument("path", help="JSON file holding a list of product records")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database(args.url)
    elif args.command == "drop-db":
        drop_database(args.url)
    elif args.command == "load-products":
        load_products(args.path, args.url)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
