"""Helpers shared by the moderation workflows."""
import uuid

from sqlalchemy.orm import Session

from ownbroker.errors import NotFound, StateConflict


def new_id() -> str:
    return str(uuid.uuid4())


def raise_not_applied(session: Session, model, ident, label: str, expected: str):
    """A guarded update touched no rows: tell a missing entity apart from a wrong state."""
    row = session.get(model, ident, populate_existing=True)
    if row is None:
        raise NotFound(f"{label} not found.")
    raise StateConflict(
        f"{label} is {row.status}; expected {expected}.",
        current_status=row.status,
    )
