"""
Handler invocation for application widgets and listeners.

Functions may be plain or async; awaitable results are awaited.
"""

import inspect
from typing import Any, Callable


async def callHandler(handler: Callable[..., Any], *args) -> Any:
    """Call a widget/listener function and resolve its result"""
    result = handler(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def errorString(error: BaseException) -> str:
    """String form sent back to clients; class name when the message is empty"""
    return str(error) or error.__class__.__name__
