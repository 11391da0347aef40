"""
Application module loader.

The application module is plain trusted Python. It must export a callable
named `manifest` (sync or async) returning:

    {
        'widgets':    {name: fn(data, props) -> renderable | awaitable},
        'listeners':  {name: fn(props, event, api) -> None | awaitable},  # optional
        'rootWidget': <opaque identifier>
    }

`appModule` is either a path to a .py file (loaded by location, like the
plugin-style manifest discovery) or a dotted importable module name.
"""

import importlib
import importlib.util
import inspect
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Dict, Mapping, Optional

from shimkit.logging import getLogger

log = getLogger()

MANIFEST_EXPORT = 'manifest'


class AppLoadError(RuntimeError):
    """The application module violates the manifest contract"""


def _isFilePath(appModule: str) -> bool:
    return appModule.endswith('.py') or '/' in appModule or '\\' in appModule


def importAppModule(appModule: str) -> ModuleType:
    """
    Import the application module by file path or dotted name.

    Raises:
        AppLoadError: If the module cannot be found
    """
    if _isFilePath(appModule):
        modulePath = Path(appModule)
        if not modulePath.is_file():
            raise AppLoadError(f"Application module not found: {appModule}")

        moduleName = f"shimApp_{modulePath.stem}"
        spec = importlib.util.spec_from_file_location(moduleName, modulePath)
        if spec is None or spec.loader is None:
            raise AppLoadError(f"Cannot load application module: {appModule}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    try:
        return importlib.import_module(appModule)
    except ModuleNotFoundError as e:
        raise AppLoadError(f"Application module not found: {appModule} ({e})")


class AppLoader:
    """
    Resolves the application's manifest initializer.

    The module is imported once; every load() calls the initializer again,
    caching is ManifestStore's job.
    """

    def __init__(self, appModule: Optional[str] = None, initializer: Optional[Callable[[], Any]] = None):
        if appModule is None and initializer is None:
            raise ValueError("AppLoader needs an appModule or an initializer")
        self.appModule = appModule
        self._initializer = initializer

    def _resolveInitializer(self) -> Callable[[], Any]:
        if self._initializer is None:
            module = importAppModule(self.appModule)
            initializer = getattr(module, MANIFEST_EXPORT, None)
            if initializer is None:
                raise AppLoadError(f"{self.appModule} missing '{MANIFEST_EXPORT}' export")
            if not callable(initializer):
                raise AppLoadError(f"{self.appModule} '{MANIFEST_EXPORT}' export is not callable")
            log.info(f"[AppLoader] Loaded application module {self.appModule}")
            self._initializer = initializer
        return self._initializer

    async def load(self) -> Dict[str, Any]:
        """
        Call the application's initializer and check the result's shape.

        Returns:
            Dict with 'widgets', 'listeners' (mappings) and 'rootWidget'

        Raises:
            AppLoadError: On contract violations
            Exception: Whatever the initializer raises, unchanged
        """
        result = self._resolveInitializer()()
        if inspect.isawaitable(result):
            result = await result

        if not isinstance(result, Mapping):
            raise AppLoadError(f"Application manifest must be a mapping, got {type(result).__name__}")

        widgets = result.get('widgets')
        if not isinstance(widgets, Mapping):
            raise AppLoadError("Application manifest 'widgets' must be a mapping of name to function")

        listeners = result.get('listeners') or {}
        if not isinstance(listeners, Mapping):
            raise AppLoadError("Application manifest 'listeners' must be a mapping of name to function")

        return {
            'widgets': widgets,
            'listeners': listeners,
            'rootWidget': result.get('rootWidget')
        }
