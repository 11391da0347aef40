"""
Package init for shim.server
"""

from shim.server.server import ShimServer, jsonResponse
from shim.server.accessLog import ShimAccessLogger
from shim.server.bodyParser import parseBody

__all__ = ['ShimServer', 'jsonResponse', 'ShimAccessLogger', 'parseBody']
