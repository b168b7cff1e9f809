"""Debounced profile saving for live editing sessions.

Field changes accumulate in memory and are written in one update once the
editor has been idle for ``delay`` seconds, or immediately on ``flush()``
(the editor left the field) and ``close()``.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

FIELD_ALIASES = {"name": "display_name"}
EDITABLE_FIELDS = frozenset({"display_name", "bio", "username", "avatar_url", "theme_settings"})

SaveFn = Callable[[dict[str, Any]], Awaitable[Any]]
ResultFn = Callable[[Any], Awaitable[None]]
ErrorFn = Callable[[Exception], Awaitable[None]]
ValidateFn = Callable[[str, Any], Any]


class ProfileSaveBuffer:
    def __init__(
        self,
        save: SaveFn,
        delay: float = 3.0,
        *,
        on_saved: ResultFn | None = None,
        on_error: ErrorFn | None = None,
        validate: ValidateFn | None = None,
    ) -> None:
        self._save = save
        self._delay = delay
        self._on_saved = on_saved
        self._on_error = on_error
        self._validate = validate
        self._pending: dict[str, Any] = {}
        self._timer: asyncio.Task | None = None
        self._lock = asyncio.Lock()
        self._closed = False

    @property
    def pending(self) -> dict[str, Any]:
        return dict(self._pending)

    def update(self, field: str, value: Any) -> None:
        """Record one field change and restart the idle timer.

        A rejected value raises from ``validate`` and leaves the pending
        changes and the timer untouched.
        """
        if self._closed:
            raise RuntimeError("Edit session is closed")
        key = FIELD_ALIASES.get(field, field)
        if key not in EDITABLE_FIELDS:
            raise ValueError(f"Unknown profile field: {field}")
        if self._validate is not None:
            value = self._validate(key, value)
        self._pending[key] = value
        self._cancel_timer()
        self._timer = asyncio.create_task(self._save_when_idle())

    async def flush(self) -> Any:
        """Save pending changes now. Returns the save result, or None if nothing was pending."""
        self._cancel_timer()
        return await self._save_pending()

    async def close(self) -> Any:
        self._closed = True
        return await self.flush()

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _save_when_idle(self) -> None:
        await asyncio.sleep(self._delay)
        # detach so a concurrent flush() does not cancel the save in flight
        self._timer = None
        try:
            await self._save_pending()
        except Exception as exc:
            logger.warning("Debounced profile save failed: %s", exc)
            if self._on_error is not None:
                await self._on_error(exc)

    async def _save_pending(self) -> Any:
        async with self._lock:
            if not self._pending:
                return None
            changes, self._pending = self._pending, {}
            try:
                result = await self._save(changes)
            except Exception:
                # newer edits made during the save win over the failed batch
                self._pending = {**changes, **self._pending}
                raise
        if self._on_saved is not None:
            await self._on_saved(result)
        return result
