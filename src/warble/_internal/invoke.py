"""Await-if-needed call for component route handlers.

``Router.dispatch`` is the only caller: a matched handler may be a plain
function or a coroutine function, and dispatch must return its value
either way.
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Return ``handler(*args, **kwargs)``, awaiting it when it is awaitable."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
