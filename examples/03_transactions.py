"""
Example 03: Transactions

This example demonstrates running several statements in one transaction.
"""

from row_persist import Database, Transaction, Tag
from dataclasses import dataclass
from typing import Annotated
import sqlite3


@dataclass
class Account:
    id: Annotated[str, Tag("id,pk")] = ""
    owner: str = ""
    balance: int = 0


def main():
    conn = sqlite3.connect(":memory:")
    conn.execute("CREATE TABLE account (id TEXT PRIMARY KEY, owner TEXT, balance INTEGER)")

    db = Database()

    print("=== Transactions ===\n")

    # string keys are generated before the insert
    with Transaction(conn) as tx:
        alice = Account(owner="Alice", balance=100)
        bob = Account(owner="Bob", balance=50)
        db.save(tx, "account", alice)
        db.save(tx, "account", bob)
    print(f"Created accounts {alice.id} and {bob.id}")

    # an exception rolls everything back
    try:
        with Transaction(conn) as tx:
            alice.balance -= 500
            db.save(tx, "account", alice)
            if alice.balance < 0:
                raise ValueError("insufficient funds")
    except ValueError as e:
        print(f"Transfer aborted: {e}")

    for account in db.query_all(conn, Account, "SELECT * FROM account ORDER BY owner"):
        print(f"  - {account.owner}: {account.balance}")

    conn.close()


if __name__ == "__main__":
    main()
