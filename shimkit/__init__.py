"""shimkit - shared support code for the widget shim

Contains reusable modules for:
    - logging: hierarchical structured logging with request context
"""

__version__ = "1.0.0"
__versionInfo__ = (1, 0, 0)
