"""Verify the live schema against the identity and foreign-key rules.

A store created by an older build can carry a second identity column on users, or
foreign keys pointing at users.email / users.id. Either silently breaks cascades, so
startup refuses to run on such a store.
"""
from typing import NamedTuple

from sqlalchemy import inspect
from sqlalchemy.engine import Connection

from ownbroker.errors import SchemaIntegrityError


class ExpectedForeignKey(NamedTuple):
    table: str
    column: str
    target_table: str
    target_column: str
    ondelete: str


EXPECTED_TABLES = (
    "users",
    "properties",
    "bookings",
    "contactMessages",
    "roleRequests",
    "notifications",
    "platformSettings",
)

LEGACY_IDENTITY_COLUMNS = ("userId", "user_id", "id")

EXPECTED_FOREIGN_KEYS = (
    ExpectedForeignKey("properties", "ownerId", "users", "uid", "CASCADE"),
    ExpectedForeignKey("bookings", "userId", "users", "uid", "CASCADE"),
    ExpectedForeignKey("bookings", "propertyId", "properties", "id", "CASCADE"),
    ExpectedForeignKey("contactMessages", "userId", "users", "uid", "SET NULL"),
    ExpectedForeignKey("roleRequests", "userId", "users", "uid", "CASCADE"),
    ExpectedForeignKey("notifications", "userId", "users", "uid", "CASCADE"),
)


def _ondelete(fk: dict) -> str:
    return ((fk.get("options") or {}).get("ondelete") or "NO ACTION").upper()


def _sqlite_foreign_keys(conn: Connection, table: str) -> list[dict]:
    """FKs from PRAGMA foreign_key_list, shaped like Inspector.get_foreign_keys().

    SQLite reflection only fills `options` for table-level FOREIGN KEY clauses; the pragma
    reports ON DELETE for column-level REFERENCES too.
    """
    rows = conn.exec_driver_sql(f'PRAGMA foreign_key_list("{table}")').mappings().all()
    grouped: dict[int, dict] = {}
    for row in sorted(rows, key=lambda r: (r["id"], r["seq"])):
        fk = grouped.setdefault(
            row["id"],
            {
                "constrained_columns": [],
                "referred_table": row["table"],
                "referred_columns": [],
                "options": {"ondelete": row["on_delete"]},
            },
        )
        fk["constrained_columns"].append(row["from"])
        if row["to"] is not None:
            fk["referred_columns"].append(row["to"])
    return list(grouped.values())


class SchemaVerifier:
    def check(self, conn: Connection) -> None:
        """Raise SchemaIntegrityError listing every problem found."""
        problems = []
        inspector = inspect(conn)
        tables = set(inspector.get_table_names())

        for name in EXPECTED_TABLES:
            if name not in tables:
                problems.append(f"missing table {name}")

        if "users" in tables:
            pk = inspector.get_pk_constraint("users").get("constrained_columns") or []
            if list(pk) != ["uid"]:
                problems.append(f"users primary key is {pk}, expected ['uid']")
            columns = {c["name"] for c in inspector.get_columns("users")}
            for legacy in LEGACY_IDENTITY_COLUMNS:
                if legacy in columns:
                    problems.append(f"users has legacy identity column {legacy}")

        for expected in EXPECTED_FOREIGN_KEYS:
            if expected.table not in tables:
                continue
            if conn.dialect.name == "sqlite":
                foreign_keys = _sqlite_foreign_keys(conn, expected.table)
            else:
                foreign_keys = inspector.get_foreign_keys(expected.table)
            problems.extend(self._check_foreign_key(foreign_keys, expected))

        if problems:
            raise SchemaIntegrityError(problems)

    def _check_foreign_key(self, foreign_keys: list[dict], expected: ExpectedForeignKey) -> list[str]:
        label = f"{expected.table}.{expected.column}"
        on_column = [
            fk for fk in foreign_keys
            if list(fk.get("constrained_columns") or []) == [expected.column]
        ]
        if not on_column:
            return [f"{label} has no foreign key (expected -> {expected.target_table}.{expected.target_column})"]
        matching = [
            fk for fk in on_column
            if fk.get("referred_table") == expected.target_table
            and list(fk.get("referred_columns") or []) == [expected.target_column]
        ]
        if not matching:
            found = ", ".join(
                f"{fk.get('referred_table')}.{','.join(fk.get('referred_columns') or [])}" for fk in on_column
            )
            return [f"{label} references {found}, expected {expected.target_table}.{expected.target_column}"]
        if not any(_ondelete(fk) == expected.ondelete for fk in matching):
            return [f"{label} ON DELETE is {_ondelete(matching[0])}, expected {expected.ondelete}"]
        return []
