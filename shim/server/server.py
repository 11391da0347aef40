"""
Shim Server - HTTP edge for the application manifest.

One catch-all route. POST bodies are parsed, decoded into a ShimRequest and
dispatched to exactly one of four handlers:
- resource: image file from the resource directory
- listener: application listener (props, event, api), empty 200
- widget:   application widget (data, props), {"widget": result}
- manifest: {"manifest": {widgets, listeners, rootWidget}}

Architecture invariants:
- ManifestStore is created once per server and never invalidated
- Exactly one handler entry is invoked per request, by exact name match
- Handler failures are isolated per call: 500 with the error string
- Unknown names are 404 with a descriptive message
- Non-POST requests are never dispatched (framework 404)

Property of Uncompromising Sensors LLC.
"""

from typing import Any, Optional

import orjson
from aiohttp import web

from shim.config import ShimConfig
from shim.core.appLoader import AppLoader
from shim.core.invoke import callHandler, errorString
from shim.core.manifest import ManifestStore
from shim.core.requests import (
    ListenerRequest,
    ManifestQuery,
    NoDispatch,
    RequestType,
    ResourceRequest,
    WidgetRequest,
    decodeRequest,
)
from shim.server.accessLog import REQUEST_TYPE_KEY, ShimAccessLogger
from shim.server.bodyParser import parseBody
from shim.server.resources import isAllowedResource, resolveResource
from shimkit.logging import getLogger, setRequestContext


def jsonResponse(payload: Any, status: int = 200) -> web.Response:
    """JSON response encoded with orjson"""
    return web.Response(
        status=status,
        body=orjson.dumps(payload),
        content_type='application/json'
    )


class ShimServer:
    """
    Shim server process.

    Owns the aiohttp app and the manifest store for its lifetime.
    """

    def __init__(self, config: ShimConfig, loader: Optional[AppLoader] = None):
        self.config = config
        self.log = getLogger()

        self.manifestStore = ManifestStore(loader or AppLoader(appModule=config.appModule))

        # aiohttp app; per-type body limits are enforced by the parser
        self.app = web.Application(client_max_size=config.clientMaxSize)
        self._setupRoutes()

        self._runner = None
        self._site = None

    def _setupRoutes(self):
        """Setup aiohttp routes"""
        self.app.router.add_route('*', '/{tail:.*}', self.handleRequest)

    async def start(self):
        """Initialize the manifest and start listening"""
        self.log.info("[Server] Starting...")

        try:
            await self.manifestStore.get()
        except Exception as e:
            # Requests retry initialization; keep serving
            self.log.error(f"[Server] Manifest initialization failed at startup: {errorString(e)}")

        self._runner = web.AppRunner(
            self.app,
            access_log_class=ShimAccessLogger,
            access_log=getLogger('shim.access')
        )
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self.config.host, self.config.port)
        await self._site.start()

        self.log.info(f"[Server] Listening on {self.config.host}:{self.config.port}")

    async def stop(self):
        """Stop Server"""
        self.log.info("[Server] Stopping...")

        if self._site:
            await self._site.stop()
        if self._runner:
            await self._runner.cleanup()

        self.log.info("[Server] Stopped")

    # =========================================================================
    # Dispatch
    # =========================================================================

    async def handleRequest(self, request: web.Request) -> web.StreamResponse:
        """Catch-all route: classify the request and dispatch it"""
        if request.method != 'POST':
            shimRequest = NoDispatch(method=request.method)
        else:
            body = await parseBody(request, self.config)
            shimRequest = decodeRequest(request.method, body)

        request[REQUEST_TYPE_KEY] = shimRequest.requestType
        setRequestContext(shimRequest.requestType.value, request.path)

        if isinstance(shimRequest, ResourceRequest):
            return await self.handleResource(shimRequest)
        if isinstance(shimRequest, ListenerRequest):
            return await self.handleListener(shimRequest)
        if isinstance(shimRequest, WidgetRequest):
            return await self.handleWidget(shimRequest)
        if isinstance(shimRequest, ManifestQuery):
            return await self.handleManifest(shimRequest)

        raise web.HTTPNotFound()

    # =========================================================================
    # Handlers
    # =========================================================================

    async def handleResource(self, shimRequest: ResourceRequest) -> web.StreamResponse:
        """Serve an image from the resource directory"""
        if not isAllowedResource(shimRequest.resource):
            return web.Response(status=404, text='Not Found')

        path = resolveResource(self.config.resourcesDir, shimRequest.resource)
        if path is None:
            return web.Response(status=404, text='Not Found')

        return web.FileResponse(path)

    async def handleManifest(self, shimRequest: ManifestQuery) -> web.Response:
        """Return the cached manifest"""
        try:
            state = await self.manifestStore.get()
        except Exception as e:
            errString = errorString(e)
            self.log.error(f"handleAppManifest: {errString}")
            return web.Response(status=500, text=errString)

        return jsonResponse({'manifest': state.manifest.toDict()})

    async def handleWidget(self, shimRequest: WidgetRequest) -> web.Response:
        """Render a widget by name with (data, props)"""
        try:
            state = await self.manifestStore.get()
        except Exception as e:
            errString = errorString(e)
            self.log.error(f"handleAppWidget: {errString}")
            return web.Response(status=500, text=errString)

        name = shimRequest.widget
        handler = state.widgetHandlers.get(name) if isinstance(name, str) else None
        if handler is None:
            msg = f"No widget found for name {name} in app manifest."
            self.log.error(msg)
            return web.Response(status=404, text=msg)

        try:
            widget = await callHandler(handler, shimRequest.data, shimRequest.props)
            return jsonResponse({'widget': widget})
        except Exception as e:
            errString = errorString(e)
            self.log.error(f"handleAppWidget: {errString}")
            return web.Response(status=500, text=errString)

    async def handleListener(self, shimRequest: ListenerRequest) -> web.Response:
        """Run a listener by action name with (props, event, api)"""
        try:
            state = await self.manifestStore.get()
        except Exception as e:
            errString = errorString(e)
            self.log.error(f"handleAppAction: {errString}")
            return web.Response(status=500, text=errString)

        action = shimRequest.action
        handler = state.listenerHandlers.get(action) if isinstance(action, str) else None
        if handler is None:
            msg = f"No listener found for action {action} in app manifest."
            self.log.error(msg)
            return web.Response(status=404, text=msg)

        try:
            await callHandler(handler, shimRequest.props, shimRequest.event, shimRequest.api)
        except Exception as e:
            errString = errorString(e)
            self.log.error(f"handleAppAction: {errString}")
            return web.Response(status=500, text=errString)

        return web.Response(status=200)
