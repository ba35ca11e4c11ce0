"""Helpers shared by the model modules."""
from sqlalchemy import CheckConstraint


def one_of(column: str, values, name: str) -> CheckConstraint:
    """CHECK(column IN (...)) over the values of a str enum (or plain strings)."""
    allowed = ", ".join("'%s'" % getattr(v, "value", v) for v in values)
    return CheckConstraint(f'"{column}" IN ({allowed})', name=name)
