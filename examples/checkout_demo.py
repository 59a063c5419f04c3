#!/usr/bin/env python3
"""
checkout_demo.py — A day at the register

================================================================================
THE BUG THIS AVOIDS
================================================================================

    >>> 200 - 123.15
    76.85000000000001

A register computing change in floats has to keep rounding to stay honest.
This one counts hundredths, so 76.85 is 7685 and nothing drifts.

================================================================================
WHAT IT SHOWS
================================================================================

    1. change with the largest notes first
    2. exact payment (no change, money still goes in the drawer)
    3. preferred denominations
    4. insufficient payment and impossible change, inventory untouched
    5. reset

Run from the repository root:

    python examples/checkout_demo.py

================================================================================
"""

import json
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cash_register import CashRegister, CashRegisterError, RegisterSettings


def show(title: str, payload: dict) -> None:
    print("=" * 60)
    print(title)
    print("=" * 60)
    print(json.dumps(payload, indent=2))
    print()


def attempt(register: CashRegister, title: str, request: dict) -> None:
    """Settle one sale and print either the result or the error payload."""
    try:
        result = register.settle(request)
    except CashRegisterError as e:
        show(title, e.to_dict())
        return
    show(title, result.to_dict())


def main() -> None:
    register = CashRegister.from_settings(RegisterSettings(log_format="text"), configure_logging=True)

    show("OPENING INVENTORY", register.get_inventory().to_dict())

    attempt(register, "1. CHANGE FOR 123 PAID WITH 200", {
        "amountDue": 123,
        "totalGiven": {"200": 1},
        "strategy": "maxLarge",
    })

    attempt(register, "2. EXACT PAYMENT OF 25", {
        "amountDue": 25,
        "totalGiven": {"20": 1, "5": 1},
    })

    attempt(register, "3. CHANGE FOR 60 IN 20/10/5 ONLY", {
        "amountDue": 60,
        "totalGiven": {"100": 1},
        "strategy": "preferred",
        "preferredDenominations": [20, 10, 5],
    })

    before = register.get_inventory()
    attempt(register, "4a. 123 PAID WITH 100", {
        "amountDue": 123,
        "totalGiven": {"100": 1},
    })
    print(f"Inventory untouched: {register.get_inventory() is before}")
    print()

    register.reset_inventory({"100": 5})
    before = register.get_inventory()
    attempt(register, "4b. CHANGE FOR 123 FROM A DRAWER OF 100s", {
        "amountDue": 123,
        "totalGiven": {"200": 1},
    })
    print(f"Inventory untouched: {register.get_inventory() is before}")
    print()

    show("5. RESET TO OPENING STOCK", register.reset_inventory().to_dict())


if __name__ == "__main__":
    main()
