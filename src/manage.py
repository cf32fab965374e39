"""Storefront database management CLI.

Provides commands to create and drop the database schema of the storefront
domain. SQL providers are selected through domain.toml and PROTEAN_ENV.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys


def setup_databases():
    """Create database schemas for every SQL provider of the domain."""
    from storefront import elements  # noqa: F401
    from storefront.domain import storefront
    from storefront.utils.db import setup_db

    print("Initializing storefront domain...")
    storefront.init()
    print("Creating storefront database schema...")
    touched = setup_db(storefront)
    if touched:
        print(f"  schema ready for: {', '.join(touched)}")
    else:
        print("  no SQL providers configured; nothing to do.")
    print("Done.")


def drop_databases():
    """Drop database schemas for every SQL provider of the domain."""
    from storefront import elements  # noqa: F401
    from storefront.domain import storefront
    from storefront.utils.db import drop_db

    print("Initializing storefront domain...")
    storefront.init()
    print("Dropping storefront database schema...")
    touched = drop_db(storefront)
    if touched:
        print(f"  schema dropped for: {', '.join(touched)}")
    else:
        print("  no SQL providers configured; nothing to do.")
    print("Done.")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Storefront database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args(argv)

    if args.command == "setup-db":
        setup_databases()
    elif args.command == "drop-db":
        drop_databases()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
