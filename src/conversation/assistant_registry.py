from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

LOGGER = logging.getLogger(__name__)


class AssistantRegistry:
    """Once-initialized holder for the provider-side assistant id.

    Note: This is a single-process holder. The id is not persisted and a new
    assistant is created after every restart.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._assistant_id: str | None = None

    @property
    def assistant_id(self) -> str | None:
        return self._assistant_id

    async def ensure(self, create: Callable[[], Awaitable[str]]) -> str:
        """Return the cached id, calling ``create`` only when none is set.

        Errors raised by ``create`` propagate and leave the registry empty.
        """

        if self._assistant_id is not None:
            return self._assistant_id

        async with self._lock:
            # Another request may have finished creation while we waited.
            if self._assistant_id is None:
                self._assistant_id = await create()
            return self._assistant_id
