"""
Route dependencies.

Each request gets an engine for the requested user, refreshed from the
SQLite history store at the request time. `at` pins the clock, which keeps
responses reproducible for a given history. Log lines emitted while the
request is served carry the user id.
"""

from collections.abc import AsyncIterator
from datetime import datetime

from fastapi import Depends, Query

from cadence.config_models import CadenceConfig, load_config
from cadence.engine import CadenceEngine
from cadence.history.store import SQLiteHistoryStore
from cadence.logging_config import user_context


def get_config() -> CadenceConfig:
    return load_config()


def get_now(at: datetime | None = Query(None, description="Evaluate as of this time")) -> datetime:
    return at or datetime.now()


async def get_engine(
    user_id: str | None = Query(None, description="User to evaluate"),
    now: datetime = Depends(get_now),
    config: CadenceConfig = Depends(get_config),
) -> AsyncIterator[CadenceEngine]:
    user_id = user_id or config.engine.default_user_id
    with user_context(user_id):
        engine = CadenceEngine(user_id, SQLiteHistoryStore(user_id), config=config)
        await engine.refresh(now)
        yield engine
