"""
Denormalized counter updates done in SQL so concurrent writers never lose an increment.
"""
from sqlalchemy import case
from sqlalchemy.orm import Session


def bump_counter(db: Session, model, row_id: int, column, delta: int) -> None:
    """Add ``delta`` to ``column`` of one row, never going below zero."""
    if delta >= 0:
        value = column + delta
    else:
        value = case((column + delta > 0, column + delta), else_=0)

    db.query(model).filter(model.id == row_id).update(
        {column: value}, synchronize_session="fetch"
    )
