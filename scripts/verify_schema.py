"""
Create/repair the schema and verify identity + foreign keys against the configured database.

- Creates missing tables and indexes (same step the app runs on first use)
- Checks users.uid is the only identity column and every FK points at it with the right ON DELETE
- Seeds default settings (and bootstrap accounts when SEED_BOOTSTRAP_ACCOUNTS is on)

Run from project root:
  python scripts/verify_schema.py
Exit code 1 lists every schema problem found; 2 means the database could not be opened.
"""
import logging
import os
import sys

# Project root
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from ownbroker.config import get_settings  # noqa: E402
from ownbroker.connection import ConnectionManager  # noqa: E402
from ownbroker.errors import InitializationError, SchemaIntegrityError  # noqa: E402


def main() -> int:
    settings = get_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
    connections = ConnectionManager(settings)
    connections.install_shutdown_hook()
    try:
        db = connections.acquire()
    except SchemaIntegrityError as e:
        print("Schema verification FAILED:")
        for problem in e.problems:
            print(f"  - {problem}")
        return 1
    except InitializationError as e:
        print(f"Could not initialize database: {e.message}")
        return 2
    print(f"Schema OK: {db.safe_url}")
    connections.release()
    return 0


if __name__ == "__main__":
    sys.exit(main())
