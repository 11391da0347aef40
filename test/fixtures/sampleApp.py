"""
Application module used by the shim tests.
"""

import asyncio


def greeting(data, props):
    return {'text': f"Hi {data['name']}", 'style': props}


async def slowCounter(data, props):
    await asyncio.sleep(0)
    return {'count': data['count'] + 1}


def broken(data, props):
    raise ValueError("widget exploded")


async def save(props, event, api):
    await asyncio.sleep(0)


def failingListener(props, event, api):
    raise RuntimeError("listener failed")


def manifest():
    return {
        'widgets': {
            'greeting': greeting,
            'slowCounter': slowCounter,
            'broken': broken,
        },
        'listeners': {
            'save': save,
            'failingListener': failingListener,
        },
        'rootWidget': 'greeting',
    }
