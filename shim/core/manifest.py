"""
Manifest store - compute-once cache of the application manifest.

Lifecycle: uninitialized -> initialized, once, never reverted.

Architecture invariants:
- Only name lists and rootWidget are published to clients
- Handler maps are frozen after initialization (read-only views)
- Concurrent first callers share one in-flight initialization
- A failed initialization is not cached; the next call retries
"""

import asyncio
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional

from shim.core.appLoader import AppLoader
from shimkit.logging import getLogger


@dataclass(frozen=True)
class AppManifest:
    """Published summary of the application"""
    widgets: List[str]
    listeners: List[str]
    rootWidget: Any = None

    def toDict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            'widgets': list(self.widgets),
            'listeners': list(self.listeners),
            'rootWidget': self.rootWidget
        }


@dataclass(frozen=True)
class ManifestState:
    """Initialized manifest plus the handler maps it was derived from"""
    manifest: AppManifest
    widgetHandlers: Mapping[str, Callable[..., Any]] = field(default_factory=dict)
    listenerHandlers: Mapping[str, Callable[..., Any]] = field(default_factory=dict)


class ManifestStore:
    """
    Process-lifetime holder of the application manifest.

    Owned by ShimServer; handlers reach it through the server instance.
    """

    def __init__(self, loader: AppLoader):
        self.loader = loader
        self.log = getLogger()
        self._state: Optional[ManifestState] = None
        self._inflight: Optional[asyncio.Task] = None
        self.loadCount = 0

    @property
    def initialized(self) -> bool:
        return self._state is not None

    async def get(self) -> ManifestState:
        """
        Return the manifest state, initializing it on first use.

        Raises:
            Exception: Whatever the application initializer raised
        """
        if self._state is not None:
            return self._state

        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._initialize())
            self._inflight.add_done_callback(self._onInitializeDone)

        # Shielded so one cancelled request does not abort the shared load
        return await asyncio.shield(self._inflight)

    def _onInitializeDone(self, task: asyncio.Task) -> None:
        """Drop the finished load so a failure is retried by the next caller"""
        if self._inflight is task:
            self._inflight = None
        if not task.cancelled():
            # Marks the exception retrieved when every waiter was cancelled
            task.exception()

    async def _initialize(self) -> ManifestState:
        self.loadCount += 1
        try:
            loaded = await self.loader.load()
        except Exception as e:
            self.log.error(f"[ManifestStore] Initialization failed: {e}")
            raise

        widgetHandlers = MappingProxyType(dict(loaded['widgets']))
        listenerHandlers = MappingProxyType(dict(loaded['listeners']))

        state = ManifestState(
            manifest=AppManifest(
                widgets=list(widgetHandlers.keys()),
                listeners=list(listenerHandlers.keys()),
                rootWidget=loaded['rootWidget']
            ),
            widgetHandlers=widgetHandlers,
            listenerHandlers=listenerHandlers
        )
        self._state = state
        self.log.info(
            "[ManifestStore] Manifest initialized",
            widgets=len(widgetHandlers),
            listeners=len(listenerHandlers)
        )
        return state
