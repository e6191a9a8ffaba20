from __future__ import annotations

import logging
from typing import Any, Mapping, Type, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


def _apply(row: Any, values: Mapping[str, Any]) -> None:
    for field, value in values.items():
        setattr(row, field, value)


def _locked_lookup(db: Session, model: Type[ModelT], keys: Mapping[str, Any]) -> ModelT | None:
    return db.query(model).filter_by(**keys).with_for_update().first()


def upsert(
    db: Session,
    model: Type[ModelT],
    *,
    keys: Mapping[str, Any],
    values: Mapping[str, Any],
    create_values: Mapping[str, Any] | None = None,
) -> tuple[ModelT, bool]:
    """Update the row identified by ``keys`` or insert it.

    ``keys`` must match a unique constraint on ``model``. ``create_values`` are
    only applied on insert. Returns ``(row, created)``. The insert runs inside a
    SAVEPOINT so a concurrent insert of the same key falls back to an update
    without aborting the caller's transaction.
    """
    row = _locked_lookup(db, model, keys)
    if row is not None:
        _apply(row, values)
        db.flush()
        return row, False

    try:
        with db.begin_nested():
            row = model(**keys, **dict(create_values or {}), **values)
            db.add(row)
    except IntegrityError:
        logger.info("upsert insert raced model=%s keys=%s", model.__name__, dict(keys))
        row = _locked_lookup(db, model, keys)
        if row is None:
            raise
        _apply(row, values)
        db.flush()
        return row, False

    return row, True
