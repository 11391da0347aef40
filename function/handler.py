"""
Example application module.

Replace with the real application. The shim only needs `manifest()`.
"""


def helloWidget(data, props):
    name = (data or {}).get('name', 'world')
    return {'type': 'text', 'value': f"Hello, {name}!"}


async def counterWidget(data, props):
    count = (props or {}).get('count', 0)
    return {'type': 'column', 'children': [
        {'type': 'text', 'value': str(count)},
        {'type': 'button', 'label': '+1', 'action': 'increment'},
    ]}


async def increment(props, event, api):
    # Side effects only; results are not returned to the client
    pass


def manifest():
    return {
        'widgets': {
            'hello': helloWidget,
            'counter': counterWidget,
        },
        'listeners': {
            'increment': increment,
        },
        'rootWidget': 'hello',
    }
