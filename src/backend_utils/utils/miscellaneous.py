import asyncio
from collections.abc import Mapping
from typing import Any


async def sleep(ms: float) -> None:
    """Suspends the current task for `ms` milliseconds."""
    await asyncio.sleep(ms / 1000)


def is_empty_object(obj: Any) -> bool:
    """True only for a mapping without any keys."""
    return isinstance(obj, Mapping) and len(obj) == 0
