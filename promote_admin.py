#!/usr/bin/env python3
"""
Set the role of a CulturePass account directly in the SQLite database.

Admin promotion over the API (``POST /api/admin/make-admin/{id}``)
requires an existing admin, so the first administrator is created with
this script.  It does not touch passwords or sessions.

Usage:
    python promote_admin.py --db ./culturepass_api/culturepass.db --username priya
    python promote_admin.py --db ./culturepass_api/culturepass.db --username priya --role user

Exit codes: 0 on success, 1 when the database file is missing, 2 when
no account has the given username.
"""

import argparse
import os
import sqlite3
import sys

ROLES = ("admin", "user")


def set_role(db_path: str, username: str, role: str) -> bool:
    """Set ``role`` on the account named ``username``; False if there is none."""
    conn = sqlite3.connect(db_path)
    try:
        cur = conn.cursor()
        cur.execute("SELECT id FROM users WHERE username = ?", (username,))
        if cur.fetchone() is None:
            return False
        cur.execute(
            "UPDATE users SET role = ?, updated_at = strftime('%Y-%m-%dT%H:%M:%f', 'now') WHERE username = ?",
            (role, username),
        )
        conn.commit()
        return True
    finally:
        conn.close()


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Set the role of a CulturePass account (SQLite).")
    ap.add_argument("--db", required=True, help="Path to SQLite DB file (e.g., ./culturepass_api/culturepass.db)")
    ap.add_argument("--username", required=True, help="Username of the account to update")
    ap.add_argument("--role", choices=ROLES, default="admin", help="Role to set (default: admin)")
    args = ap.parse_args(argv)

    if not os.path.exists(args.db):
        print(f"[!] DB not found: {args.db}", file=sys.stderr)
        return 1

    if not set_role(args.db, args.username, args.role):
        print(f"[!] No user found with username: {args.username}", file=sys.stderr)
        return 2

    print(f"[+] {args.username} is now {args.role}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
