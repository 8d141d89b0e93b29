#!/usr/bin/env python3
"""
Delete invoices whose numeric invoice number is above a threshold.

Used after test runs leave stray high numbers behind, which would otherwise
push every future next-number suggestion past them.

  python scripts/cleanup_invoices.py --above 1000 [--dry-run]
"""
import argparse

from apps.billing.db import pool
from apps.billing.repos import invoices as invoices_repo
from apps.billing.services.numbering import next_invoice_number, parse_invoice_no


def main() -> None:
    ap = argparse.ArgumentParser(description="Remove high-numbered invoices")
    ap.add_argument("--above", type=int, default=1000, help="Delete invoices numbered above this")
    ap.add_argument("--dry-run", action="store_true", help="Only list what would be deleted")
    args = ap.parse_args()

    pool.open(wait=True)
    try:
        with pool.connection() as conn:
            deleted = 0
            for inv in invoices_repo.list_invoices(conn):
                number = parse_invoice_no(inv["invoice_no"])
                if number is not None and number > args.above:
                    print(f"Deleting invoice #{number} ({inv['id']})")
                    if not args.dry_run:
                        invoices_repo.delete_invoice(conn, inv["id"])
                    deleted += 1
            verb = "Would delete" if args.dry_run else "Deleted"
            print(f"{verb} {deleted} high-numbered invoices.")

            remaining = invoices_repo.list_invoice_numbers(conn)
            print(f"Next suggested invoice number: {next_invoice_number(remaining)}")
            if args.dry_run:
                conn.rollback()
    finally:
        pool.close()


if __name__ == "__main__":
    main()
