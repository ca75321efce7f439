"""Async wrappers around SQLModel sessions for the arena repositories."""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable
from contextlib import nullcontext
from typing import TYPE_CHECKING, TypeVar

from sqlmodel import Session

if TYPE_CHECKING:
    from sqlalchemy import Engine

T = TypeVar("T")


class AsyncRepository:
    """Base for repositories that run blocking DuckDB work on worker threads.

    Sessions keep loaded attributes after commit, so rows returned from a
    transaction stay readable once the session is closed.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def _session(self) -> Session:
        return Session(self._engine, expire_on_commit=False)

    async def _run_session(self, fn: Callable[[Session], T]) -> T:
        """Run a read-only function inside a Session on a worker thread."""

        def _run() -> T:
            with self._session() as session:
                return fn(session)

        return await asyncio.to_thread(_run)

    async def _run_transaction(
        self, fn: Callable[[Session], T], lock: threading.Lock | None = None
    ) -> T:
        """Run a function in a transaction that commits when it returns.

        Any exception rolls the transaction back. If a lock is given it is
        held from the first read until the commit has finished.
        """

        def _run() -> T:
            with lock or nullcontext(), self._session() as session, session.begin():
                return fn(session)

        return await asyncio.to_thread(_run)
