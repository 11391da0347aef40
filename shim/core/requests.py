"""
Request model - tagged union decoded from the POST body.

Classification (fixed priority, not configurable):
- non-POST           -> NoDispatch      ("none")
- body.resource      -> ResourceRequest ("resource")
- body.action        -> ListenerRequest ("listener")
- body.widget        -> WidgetRequest   ("widget")
- anything else      -> ManifestQuery   ("manifest")

A field counts as present when its value is truthy. Only mapping bodies can
carry a field; text, raw bytes and JSON arrays are manifest queries.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Union


class RequestType(str, Enum):
    """Dispatch categories, as reported in the access log"""
    RESOURCE = "resource"
    LISTENER = "listener"
    WIDGET = "widget"
    MANIFEST = "manifest"
    NONE = "none"


@dataclass(frozen=True)
class ResourceRequest:
    """Static image fetch"""
    resource: Any

    requestType = RequestType.RESOURCE


@dataclass(frozen=True)
class ListenerRequest:
    """Listener invocation: handler(props, event, api)"""
    action: str
    props: Any = None
    event: Any = None
    api: Any = None

    requestType = RequestType.LISTENER


@dataclass(frozen=True)
class WidgetRequest:
    """Widget render: handler(data, props)"""
    widget: str
    data: Any = None
    props: Any = None

    requestType = RequestType.WIDGET


@dataclass(frozen=True)
class ManifestQuery:
    """Anything else posted to the shim"""

    requestType = RequestType.MANIFEST


@dataclass(frozen=True)
class NoDispatch:
    """Non-POST request; never reaches a handler"""
    method: str

    requestType = RequestType.NONE


ShimRequest = Union[ResourceRequest, ListenerRequest, WidgetRequest, ManifestQuery, NoDispatch]


def decodeRequest(method: str, body: Any) -> ShimRequest:
    """
    Classify a request by method and body shape.

    Args:
        method: HTTP method
        body: Parsed body (mapping, list, str or bytes)

    Returns:
        One ShimRequest variant
    """
    if method.upper() != 'POST':
        return NoDispatch(method=method.upper())

    if not isinstance(body, Mapping):
        return ManifestQuery()

    if body.get('resource'):
        return ResourceRequest(resource=body['resource'])
    if body.get('action'):
        return ListenerRequest(
            action=body['action'],
            props=body.get('props'),
            event=body.get('event'),
            api=body.get('api')
        )
    if body.get('widget'):
        return WidgetRequest(
            widget=body['widget'],
            data=body.get('data'),
            props=body.get('props')
        )
    return ManifestQuery()


def requestTypeOf(method: str, body: Any) -> RequestType:
    """Shorthand for decodeRequest(...).requestType"""
    return decodeRequest(method, body).requestType
