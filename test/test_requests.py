"""
Request classification tests

Priority: resource > listener > widget > manifest; non-POST is never
dispatched.

Run: python -m pytest test/test_requests.py -v
"""

import pytest

from shim.core.requests import (
    RequestType, ResourceRequest, ListenerRequest, WidgetRequest,
    ManifestQuery, NoDispatch, decodeRequest, requestTypeOf
)


class TestDecodeRequest:
    """decodeRequest field-presence classification"""

    def test_resource(self):
        req = decodeRequest('POST', {'resource': 'logo.png'})
        assert req == ResourceRequest(resource='logo.png')
        assert req.requestType == RequestType.RESOURCE

    def test_listener_carries_props_event_api(self):
        body = {'action': 'save', 'props': {'a': 1}, 'event': {'type': 'tap'}, 'api': {'url': 'x'}}
        req = decodeRequest('POST', body)
        assert isinstance(req, ListenerRequest)
        assert req.action == 'save'
        assert req.props == {'a': 1}
        assert req.event == {'type': 'tap'}
        assert req.api == {'url': 'x'}

    def test_widget_carries_data_props(self):
        req = decodeRequest('POST', {'widget': 'greeting', 'data': {'name': 'x'}, 'props': [1]})
        assert req == WidgetRequest(widget='greeting', data={'name': 'x'}, props=[1])
        assert req.requestType == RequestType.WIDGET

    def test_manifest_when_no_field(self):
        assert decodeRequest('POST', {}) == ManifestQuery()
        assert decodeRequest('POST', {'other': 1}).requestType == RequestType.MANIFEST

    @pytest.mark.parametrize('body', [
        {'resource': 'a.png', 'action': 'save', 'widget': 'w'},
        {'resource': 'a.png', 'widget': 'w'},
    ])
    def test_resource_wins(self, body):
        assert requestTypeOf('POST', body) == RequestType.RESOURCE

    def test_listener_beats_widget(self):
        assert requestTypeOf('POST', {'action': 'save', 'widget': 'w'}) == RequestType.LISTENER

    @pytest.mark.parametrize('value', ['', None, 0, False])
    def test_falsy_fields_are_absent(self, value):
        assert requestTypeOf('POST', {'resource': value, 'widget': 'w'}) == RequestType.WIDGET
        assert requestTypeOf('POST', {'widget': value}) == RequestType.MANIFEST

    @pytest.mark.parametrize('body', ['{"widget": "w"}', b'{"widget": "w"}', [{'widget': 'w'}], None])
    def test_non_mapping_body_is_manifest(self, body):
        assert requestTypeOf('POST', body) == RequestType.MANIFEST

    @pytest.mark.parametrize('method', ['GET', 'PUT', 'DELETE', 'HEAD', 'OPTIONS'])
    def test_non_post_is_none(self, method):
        req = decodeRequest(method, {'widget': 'greeting'})
        assert req == NoDispatch(method=method)
        assert req.requestType == RequestType.NONE

    def test_method_case_insensitive(self):
        assert requestTypeOf('post', {'widget': 'w'}) == RequestType.WIDGET
