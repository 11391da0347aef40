"""
Logging Context

Provides request-level context (requestType, path) to every log record
emitted while a request is being dispatched.
"""

import logging
from typing import Optional
from contextvars import ContextVar

# Context variables for the request being handled
_request_type: ContextVar[Optional[str]] = ContextVar('request_type', default=None)
_request_path: ContextVar[Optional[str]] = ContextVar('request_path', default=None)


class RequestContextFilter(logging.Filter):
    """
    Logging filter that adds request context to log records
    """

    def filter(self, record):
        """Add request context to record"""
        requestType = _request_type.get()
        path = _request_path.get()

        if requestType and not hasattr(record, 'requestType'):
            record.requestType = requestType
        if path and not hasattr(record, 'path'):
            record.path = path

        return True


def setRequestContext(requestType: str, path: Optional[str] = None):
    """
    Set request-level context for logging

    Args:
        requestType: Dispatch type ('resource', 'listener', 'widget', 'manifest', 'none')
        path: Request path (optional)
    """
    _request_type.set(requestType)
    if path:
        _request_path.set(path)


def getRequestContext() -> dict:
    """Get current request context"""
    return {
        'requestType': _request_type.get(),
        'path': _request_path.get()
    }


def clearRequestContext():
    """Clear request context"""
    _request_type.set(None)
    _request_path.set(None)


def installRequestContextFilter(handler: logging.Handler):
    """
    Install request context filter on a handler

    Called by getLogger() for every handler it creates.
    """
    for f in handler.filters:
        if isinstance(f, RequestContextFilter):
            return

    handler.addFilter(RequestContextFilter())
