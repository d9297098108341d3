"""
Manage Login Lockouts Script
List locked-out clients and unblock them from the command line.

Usage:
    python scripts/manage_lockouts.py            # list active lockouts
    python scripts/manage_lockouts.py 1.2.3.4    # unblock an identifier
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.auth.dependencies import get_login_guard
from app.auth.exceptions import StoreUnavailable
from app.database import close_db


async def list_locked() -> None:
    """List all identifiers with an active lockout."""
    guard = get_login_guard()
    locked = await guard.list_locked()

    if not locked:
        print("\nNo locked identifiers.")
        return

    print(f"\nLocked identifiers ({len(locked)}):")
    print("-" * 60)
    for item in locked:
        print(
            f"  {item.identifier:<40} {item.attempt_count:>3} attempts  "
            f"{item.time_remaining} remaining"
        )
    print("-" * 60)


async def unblock(identifier: str) -> None:
    """Unblock a single identifier."""
    guard = get_login_guard()
    found = await guard.unblock(identifier, admin_email="cli")
    if found:
        print(f"\n{identifier} has been unblocked.")
    else:
        print(f"\nNo login attempts recorded for {identifier}.")


async def main() -> None:
    """Main script entry point."""
    try:
        if len(sys.argv) > 1:
            identifier = sys.argv[1].strip()
            confirm = input(f"Unblock '{identifier}'? (yes/no): ").strip().lower()
            if confirm not in ["yes", "y"]:
                print("\nCancelled.")
                return
            await unblock(identifier)
        else:
            await list_locked()
    except StoreUnavailable as e:
        print(f"\nLogin attempt store unavailable: {e.message}")
        sys.exit(1)
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
