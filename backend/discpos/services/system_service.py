# Overview: Store connectivity checks shared by the health endpoint and the CLI.

from __future__ import annotations

import time

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db


class InfrastructureError(Exception):
    """The relational store is unreachable or failing."""


def check_database() -> dict:
    """
    Run a trivial round-trip against the store.

    Returns latency details; raises InfrastructureError when the store
    cannot be reached.
    """
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        db.session.rollback()
        raise InfrastructureError(str(getattr(e, "orig", None) or e)) from e

    elapsed_ms = (time.time() - start_time) * 1000
    return {
        "dialect": db.engine.dialect.name,
        "latency_ms": round(elapsed_ms, 2),
    }
