"""
shimkit logging - hierarchical structured logger with automatic detection.

API:
    from shimkit.logging import getLogger

    # Class-level (auto-detect once in __init__)
    class ShimServer:
        def __init__(self):
            self.log = getLogger()  # Auto: 'shim.server.server.ShimServer'

        async def start(self):
            self.log.info("Listening", port=self.port)

    # Module-level (auto-detect once at import)
    log = getLogger()  # Auto: 'shim.main'

    # Global configuration (once at app startup)
    from shimkit.logging import configureLogging
    configureLogging(logDir='./logs', level='DEBUG')
"""

from .logger import getLogger, configureLogging, StructuredFormatter
from .context import (
    setRequestContext,
    getRequestContext,
    clearRequestContext,
    installRequestContextFilter
)

__all__ = [
    'getLogger',
    'configureLogging',
    'StructuredFormatter',
    'setRequestContext',
    'getRequestContext',
    'clearRequestContext',
    'installRequestContextFilter'
]
