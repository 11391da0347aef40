"""
Widget shim - HTTP dispatch of widget, listener, resource and manifest
requests to an application module.
"""

__version__ = "1.0.0"
