"""
Access log: one line per request.

Format: METHOD URL type: <requestType> STATUS <ms> ms
"""

from aiohttp import web
from aiohttp.abc import AbstractAccessLogger

from shim.core.requests import RequestType

REQUEST_TYPE_KEY = web.RequestKey('requestType', RequestType)


def formatAccessLine(method: str, url: str, requestType: str, status: int, seconds: float) -> str:
    return f"{method} {url} type: {requestType} {status} {seconds * 1000:.3f} ms"


class ShimAccessLogger(AbstractAccessLogger):
    """aiohttp access logger that reports the dispatch type of each request"""

    def log(self, request: web.BaseRequest, response: web.StreamResponse, time: float) -> None:
        requestType = request.get(REQUEST_TYPE_KEY, RequestType.NONE)
        self.logger.info(formatAccessLine(
            request.method,
            request.path_qs,
            RequestType(requestType).value,
            response.status,
            time
        ))
