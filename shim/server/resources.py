"""
Image resources served from the resource directory.

Only the image formats the UI client can render are served.
"""

import re
from pathlib import Path
from typing import Any, Optional

from aiohttp import web

IMAGE_PATTERN = re.compile(r'.*(\.jpeg|\.jpg|\.png|\.gif|\.webp|\.bmp|\.wbmp)$')


def isAllowedResource(resource: Any) -> bool:
    """True for strings ending in an allowed image extension"""
    return isinstance(resource, str) and IMAGE_PATTERN.match(resource) is not None


def resolveResource(resourcesDir: Path, resource: str) -> Optional[Path]:
    """
    Resolve a resource name inside resourcesDir.

    Returns:
        Absolute file path, or None if the file does not exist or the
        filesystem rejects the name (too long, embedded NUL)

    Raises:
        web.HTTPForbidden: If the name escapes resourcesDir
    """
    root = resourcesDir.resolve()
    try:
        candidate = (root / resource.lstrip('/\\')).resolve()
    except (OSError, ValueError):
        return None

    try:
        candidate.relative_to(root)
    except ValueError:
        raise web.HTTPForbidden(text='Forbidden')

    try:
        if not candidate.is_file():
            return None
    except (OSError, ValueError):
        return None
    return candidate
