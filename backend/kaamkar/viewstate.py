"""Client-side mirrors of server lists.

A ``ViewState`` owns one list (todos, notes of a category, a month of
transactions...). It refetches the whole list after mutations, replaces a
single record after toggles, and keeps the last good data when a request
fails.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from enum import Enum
from typing import Any, Awaitable, Callable

from .errors import AiError, IndexRequiredError, KaamKarError

logger = logging.getLogger(__name__)


class LoadState(str, Enum):
    loading = "loading"
    error = "error"
    ready = "ready"


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _record_id(record: Any) -> Any:
    if isinstance(record, dict):
        return record.get("id")
    return getattr(record, "id", None)


class ViewState:
    def __init__(self, label: str, fetch: Callable[..., Any], **params: Any) -> None:
        self.label = label
        self.fetch = fetch
        self.params: dict[str, Any] = params
        self.state = LoadState.loading
        self.data: list[Any] = []
        self.error: str | None = None
        self.notice: str | None = None
        self._loaded_params: dict[str, Any] | None = None

    def _fail(self, action: str, exc: Exception) -> None:
        if isinstance(exc, IndexRequiredError):
            message = f"{exc.message} Create it here: {exc.link}"
        else:
            message = f"Failed to {action} {self.label}"
        logger.error("failed to %s %s: %s", action, self.label, exc)
        self.state = LoadState.error
        self.error = message
        self.notice = message

    async def load(self) -> list[Any]:
        self.state = LoadState.loading
        try:
            data = await _resolve(self.fetch(**self.params))
        except Exception as exc:
            self._fail("load", exc)
            return self.data
        self.data = list(data)
        self.state = LoadState.ready
        self.error = None
        self._loaded_params = dict(self.params)
        return self.data

    async def set_params(self, **params: Any) -> bool:
        """Merge new parameters and refetch; returns False when nothing changed."""
        merged = {**self.params, **params}
        if merged == self._loaded_params:
            return False
        self.params = merged
        await self.load()
        return True

    async def mutate(self, action: Callable[[], Any]) -> Any:
        """Run a server write, then reload the whole list."""
        try:
            result = await _resolve(action())
        except Exception as exc:
            self._fail("update", exc)
            return None
        await self.load()
        return result

    async def patch(self, action: Callable[[], Any]) -> Any:
        """Run a server write and swap in the record it returns."""
        try:
            record = await _resolve(action())
        except Exception as exc:
            self._fail("update", exc)
            return None
        record_id = _record_id(record)
        for index, current in enumerate(self.data):
            if _record_id(current) == record_id:
                self.data[index] = record
                break
        else:
            self.data.append(record)
        self.state = LoadState.ready
        self.error = None
        return record

    def dismiss(self) -> None:
        self.notice = None


class Debouncer:
    """Trailing-edge debounce: only the last call within ``delay`` seconds runs."""

    def __init__(self, delay: float, callback: Callable[..., Any]) -> None:
        self.delay = delay
        self.callback = callback
        self._task: asyncio.Task | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def trigger(self, *args: Any, **kwargs: Any) -> None:
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run(args, kwargs))

    async def _run(self, args: tuple, kwargs: dict[str, Any]) -> None:
        await asyncio.sleep(self.delay)
        await _resolve(self.callback(*args, **kwargs))

    async def flush(self) -> None:
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)

    def cancel(self) -> None:
        if self.pending:
            self._task.cancel()
        self._task = None


class NoteSuggestions:
    """Asks the assistant for note improvements once edits settle."""

    def __init__(self, suggest: Callable[[str, str], Any], delay: float = 1.5) -> None:
        self.suggest = suggest
        self.suggestions: str | None = None
        self.error: str | None = None
        self._debouncer = Debouncer(delay, self._request)

    def on_edit(self, title: str, content: str) -> None:
        if not title.strip() and not content.strip():
            self._debouncer.cancel()
            return
        self._debouncer.trigger(title, content)

    async def _request(self, title: str, content: str) -> None:
        call = self.suggest
        try:
            if inspect.iscoroutinefunction(call):
                result = await call(title, content)
            else:
                result = await asyncio.to_thread(call, title, content)
        except AiError as exc:
            logger.warning("note suggestions failed (%s): %s", exc.kind, exc)
            self.error = exc.message
            return
        except KaamKarError as exc:
            logger.error("note suggestions failed: %s", exc)
            self.error = "Failed to get note suggestions"
            return
        self.suggestions = result
        self.error = None

    async def wait(self) -> None:
        await self._debouncer.flush()

    def close(self) -> None:
        self._debouncer.cancel()
