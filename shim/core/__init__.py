"""
Shim core - request model, application loading and the manifest cache.
"""

from .requests import (
    RequestType,
    ResourceRequest,
    ListenerRequest,
    WidgetRequest,
    ManifestQuery,
    NoDispatch,
    ShimRequest,
    decodeRequest,
    requestTypeOf
)
from .appLoader import AppLoader, AppLoadError, importAppModule
from .manifest import AppManifest, ManifestState, ManifestStore
from .invoke import callHandler, errorString

__all__ = [
    # Requests
    'RequestType',
    'ResourceRequest',
    'ListenerRequest',
    'WidgetRequest',
    'ManifestQuery',
    'NoDispatch',
    'ShimRequest',
    'decodeRequest',
    'requestTypeOf',
    # Application
    'AppLoader',
    'AppLoadError',
    'importAppModule',
    # Manifest
    'AppManifest',
    'ManifestState',
    'ManifestStore',
    # Invocation
    'callHandler',
    'errorString',
]
