"""
Request body parsing.

- Missing Content-Type is treated as text/plain
- Raw mode: bytes for every content type, limit maxRawSize
- text/*: str, limit maxTextSize
- application/json: object or array only, limit maxJsonSize
- application/x-www-form-urlencoded: dict, limit maxTextSize. Repeated keys
  become lists, bracket keys nest: a[b]=1 -> {"a": {"b": "1"}}, a[]=1 -> {"a": ["1"]}
- anything else: {}
"""

import re
from typing import Any, Dict, List

import orjson
from aiohttp import hdrs, web

from shim.config import ShimConfig

DEFAULT_CONTENT_TYPE = 'text/plain'
BRACKET_KEY = re.compile(r'^([^\[\]]+)((?:\[[^\[\]]*\])+)$')
BRACKET_SEGMENT = re.compile(r'\[([^\[\]]*)\]')


def effectiveContentType(request: web.Request) -> str:
    """Content type with the text/plain default applied"""
    if not request.headers.get(hdrs.CONTENT_TYPE):
        return DEFAULT_CONTENT_TYPE
    return request.content_type


async def _readLimited(request: web.Request, limit: int) -> bytes:
    declared = request.content_length
    if declared is not None and declared > limit:
        raise web.HTTPRequestEntityTooLarge(max_size=limit, actual_size=declared)

    body = await request.read()
    if len(body) > limit:
        raise web.HTTPRequestEntityTooLarge(max_size=limit, actual_size=len(body))
    return body


def _decodeText(raw: bytes, charset: str) -> str:
    try:
        return raw.decode(charset, errors='replace')
    except LookupError:
        raise web.HTTPUnsupportedMediaType(text=f'unsupported charset "{charset.upper()}"')


def parseJson(raw: bytes) -> Any:
    """Strict JSON: empty body is {}, top level must be an object or array"""
    stripped = raw.strip()
    if not stripped:
        return {}
    if stripped[:1] not in (b'{', b'['):
        raise web.HTTPBadRequest(text='Unexpected JSON body: expected an object or array')
    try:
        return orjson.loads(stripped)
    except orjson.JSONDecodeError as e:
        raise web.HTTPBadRequest(text=f'Invalid JSON body: {e}')


def _keyPath(key: str) -> List[str]:
    """'a[b][]' -> ['a', 'b', '']; keys without brackets stay whole"""
    match = BRACKET_KEY.match(key)
    if match is None:
        return [key]
    return [match.group(1)] + BRACKET_SEGMENT.findall(match.group(2))


def _assignField(container: Dict[str, Any], path: List[str], value: Any) -> None:
    key = path[0]
    if len(path) == 1:
        if key not in container:
            container[key] = value
        elif isinstance(container[key], list):
            container[key].append(value)
        else:
            container[key] = [container[key], value]
        return

    if path[1] == '':
        # key[] appends
        items = container.get(key)
        if not isinstance(items, list):
            items = container[key] = [] if items is None else [items]
        if len(path) == 2:
            items.append(value)
        else:
            item: Dict[str, Any] = {}
            _assignField(item, path[2:], value)
            items.append(item)
        return

    child = container.get(key)
    if not isinstance(child, dict):
        # A later nested field replaces a plain value of the same name
        child = container[key] = {}
    _assignField(child, path[1:], value)


async def _parseUrlEncoded(request: web.Request) -> Dict[str, Any]:
    form = await request.post()
    result: Dict[str, Any] = {}
    for key, value in form.items():
        _assignField(result, _keyPath(key), value)
    return result


async def parseBody(request: web.Request, config: ShimConfig) -> Any:
    """
    Read and parse the request body according to the shim configuration.

    Raises:
        web.HTTPRequestEntityTooLarge: Body over the applicable limit
        web.HTTPBadRequest: Malformed JSON
        web.HTTPUnsupportedMediaType: Unknown text charset
    """
    if config.rawBody:
        return await _readLimited(request, config.maxRawSize)

    contentType = effectiveContentType(request)

    if contentType.startswith('text/'):
        raw = await _readLimited(request, config.maxTextSize)
        return _decodeText(raw, request.charset or 'utf-8')

    if contentType == 'application/json':
        raw = await _readLimited(request, config.maxJsonSize)
        return parseJson(raw)

    if contentType == 'application/x-www-form-urlencoded':
        await _readLimited(request, config.maxTextSize)
        return await _parseUrlEncoded(request)

    return {}
