"""
Hierarchical logger with automatic name detection.

Features:
- Auto-detects logger hierarchy from call stack (computed once, cached)
- Console output always, rotating log files when a log directory is configured
- Global disk cap enforced after each file rollover
- Structured field logging: log.info("Message", key=value)

Usage:
    from shimkit.logging import getLogger

    class ManifestStore:
        def __init__(self):
            self.log = getLogger()  # Auto: 'shim.core.manifest.ManifestStore'

        async def get(self):
            self.log.info("Manifest ready", widgets=3)

Property of Uncompromising Sensors LLC.
"""

# Imports
import  inspect, logging, logging.handlers, socket
from pathlib import Path
from typing import Optional
from datetime import datetime, timezone as tz

from .context import installRequestContextFilter


# Global state
_hostname = socket.gethostname()
_configured = False
_fileHandlers = {}  # Singleton cache: logPath -> handler
_config = {
    'logDir': None,                 # None = console only
    'maxBytes': 10_000_000,         # 10 MB per log file before rotation
    'backupCount': 5,
    'maxTotalMb': 2048,             # Max total disk usage across all logs
    'console': True,
    'level': logging.INFO,
    'utc': False
}


def configureLogging(logDir: Optional[str] = None, maxBytes: int = 10_000_000,
                     backupCount: int = 5, maxTotalMb: int = 2048,
                     console: bool = True, level: str = 'INFO', utc: bool = False):
    """
    Configure global logging settings (call once at app startup).

    Args:
        logDir: Directory for log files (default: None, console only)
        maxBytes: Maximum size per log file before rotation (default: 10MB)
        backupCount: Number of backup files to keep per app (default: 5)
        maxTotalMb: Maximum total disk usage across all logs in MB (default: 2048)
        console: Also log to console (default: True)
        level: Minimum log level (default: 'INFO')
        utc: Use UTC timestamps (default: False, uses local time)
    """
    global _configured, _config

    levelNo = logging.getLevelName(level.upper())
    if not isinstance(levelNo, int):
        raise ValueError(f"Unknown log level: {level}")

    _config.update({'logDir': logDir, 'maxBytes': maxBytes, 'backupCount': backupCount, 'maxTotalMb': maxTotalMb,
                    'console': console, 'level': levelNo, 'utc': utc})

    if logDir:
        Path(logDir).mkdir(parents=True, exist_ok=True)

    # Loggers handed out before configuration pick up the new settings
    for existing in list(logging.Logger.manager.loggerDict.values()):
        if isinstance(existing, logging.Logger) and getattr(existing, '_configured_by_shimkit', False):
            existing.setLevel(levelNo)
            _attachFileHandler(existing)
            for handler in existing.handlers:
                handler.setLevel(levelNo)

    _configured = True


def _autoDetectName() -> str:
    """Auto-detect logger name from call stack. Returns hierarchy like: 'shim.server.server.ShimServer'"""

    frame = inspect.currentframe()
    try:
        current = frame
        while current is not None:
            current = current.f_back
            if current is None:
                break

            module = inspect.getmodule(current)
            if module is None:
                continue

            moduleName = module.__name__

            # Skip frames inside this package
            if moduleName.startswith('shimkit.logging'):
                continue

            # Skip Python's import machinery
            if moduleName.startswith('importlib') or moduleName == '__main__':
                continue

            parts = moduleName.split('.')

            className = None
            if current.f_locals:
                if 'self' in current.f_locals:
                    className = current.f_locals['self'].__class__.__name__
                elif 'cls' in current.f_locals:
                    className = current.f_locals['cls'].__name__

            hierarchy = '.'.join(parts) if parts else 'unknown'
            if className:
                hierarchy = f"{hierarchy}.{className}"

            return hierarchy if hierarchy else 'unknown'

        return 'unknown'
    finally:
        del frame


class StructuredFormatter(logging.Formatter):
    """Custom formatter that includes hostname and structured fields.
    Format: timestamp - hostname - logger.name - level - message [field1=value1, field2=value2]"""

    excluded = {
        'name', 'msg', 'args', 'created', 'filename', 'funcName',
        'levelname', 'levelno', 'lineno', 'module', 'msecs',
        'message', 'pathname', 'process', 'processName',
        'relativeCreated', 'thread', 'threadName', 'exc_info',
        'exc_text', 'stack_info', 'hostname', 'asctime', 'taskName'
    }

    def __init__(self, fmt=None, datefmt=None, utc=False):
        super().__init__(fmt, datefmt)
        self.utc = utc

    def formatTime(self, record, datefmt=None):
        """Override to support UTC if configured."""
        if self.utc:
            ct = datetime.fromtimestamp(record.created, tz=tz.utc)
        else:
            ct = datetime.fromtimestamp(record.created)

        if datefmt:
            s = ct.strftime(datefmt)
        else:
            s = ct.strftime("%Y-%m-%d %H:%M:%S")
            s = f"{s},{int(record.msecs):03d}"
        return s

    def format(self, record):
        record.hostname = _hostname

        structuredFields = []
        for key, value in record.__dict__.items():
            if key not in self.excluded and not key.startswith('_'):
                structuredFields.append(f"{key}={value}")

        # Don't modify record.msg for other handlers
        originalMsg = record.msg
        if structuredFields:
            record.msg = f"{originalMsg} [{', '.join(structuredFields)}]"

        result = super().format(record)

        record.msg = originalMsg

        return result


class DiskCappedRotatingFileHandler(logging.handlers.RotatingFileHandler):
    """Rotating file handler that trims the log directory after every rollover."""

    def doRollover(self):
        super().doRollover()
        _enforceDiskLimit()


def _attachFileHandler(logger: logging.Logger) -> None:
    """Attach the shared rotating file handler for this logger's app, if a log directory is set"""
    if not _config['logDir']:
        return

    if getattr(logger, '_shimkitSeparateFile', False):
        logFilename = f"{logger.name}.log"
    else:
        # Top-level app name (e.g., 'shim' from 'shim.server.server')
        appName = logger.name.split('.')[0]
        logFilename = f"{appName}.log"

    logPath = str(Path(_config['logDir']) / logFilename)

    if logPath not in _fileHandlers:
        fileHandler = DiskCappedRotatingFileHandler(
            logPath,
            maxBytes=_config['maxBytes'],
            backupCount=_config['backupCount'],
            encoding='utf-8'
        )
        fileHandler.setLevel(_config['level'])
        fileHandler.setFormatter(StructuredFormatter(
            '%(asctime)s - %(hostname)s - %(name)s - %(levelname)s - %(message)s',
            utc=_config['utc']
        ))
        installRequestContextFilter(fileHandler)
        _fileHandlers[logPath] = fileHandler

    if _fileHandlers[logPath] not in logger.handlers:
        logger.addHandler(_fileHandlers[logPath])


def getLogger(name: Optional[str] = None, separateFile: bool = False) -> logging.Logger:
    """
    Get or create a logger with automatic hierarchy detection.

    Stack inspection happens once per getLogger() call; keep the returned
    logger on the instance or module.

    Args:
        name: Logger name (auto-detected from call stack if None)
        separateFile: If True, creates separate log file for this logger (default: False)

    Returns:
        logging.Logger whose level methods accept structured fields as **kwargs
    """
    if not _configured:
        configureLogging()

    if name is None:
        name = _autoDetectName()

    logger = logging.getLogger(name)

    # Always disable propagation to avoid duplicate messages
    logger.propagate = False

    if not getattr(logger, '_configured_by_shimkit', False):
        logger.setLevel(_config['level'])

        logger._shimkitSeparateFile = separateFile
        _attachFileHandler(logger)

        if _config['console']:
            consoleHandler = logging.StreamHandler()
            consoleHandler.setLevel(_config['level'])
            consoleHandler.setFormatter(StructuredFormatter(
                '%(name)s - %(levelname)s - %(message)s',
                utc=_config['utc']
            ))
            installRequestContextFilter(consoleHandler)
            logger.addHandler(consoleHandler)

        logger._configured_by_shimkit = True

    return _wrapLogger(logger)


def _wrapLogger(logger: logging.Logger) -> logging.Logger:
    """
    Wrap a standard logger to add convenience methods that accept structured fields as **kwargs.

    This allows: log.info("Message", field1=value1, field2=value2)
    Instead of: log.info("Message", extra={'field1': value1, 'field2': value2})
    """
    if hasattr(logger, '_is_wrapped'):
        return logger

    def _wrap(original):
        def method(msg, *args, **kwargs):
            # exc_info and stack_info are reserved logging params
            excInfo = kwargs.pop('exc_info', False)
            stackInfo = kwargs.pop('stack_info', False)
            if kwargs:
                original(msg, *args, extra=kwargs, exc_info=excInfo, stack_info=stackInfo)
            else:
                original(msg, *args, exc_info=excInfo, stack_info=stackInfo)
        return method

    logger.debug = _wrap(logger.debug)
    logger.info = _wrap(logger.info)
    logger.warning = _wrap(logger.warning)
    logger.error = _wrap(logger.error)
    logger.critical = _wrap(logger.critical)
    logger._is_wrapped = True

    return logger


def _enforceDiskLimit():
    """
    Enforce global disk usage limit by removing oldest log files.

    Called after each rollover. Only removes files when total disk usage
    exceeds maxTotalMb.
    """
    if not _config['logDir']:
        return

    logDir = Path(_config['logDir'])
    maxBytes = _config['maxTotalMb'] * 1024 * 1024

    files = []
    totalSize = 0
    try:
        for filepath in logDir.rglob('*.log*'):
            if filepath.is_file():
                stat = filepath.stat()
                files.append((stat.st_mtime, stat.st_size, filepath))
                totalSize += stat.st_size
    except OSError:
        return

    if totalSize <= maxBytes:
        return

    # Oldest first
    files.sort(key=lambda x: x[0])

    for mtime, size, filepath in files:
        if totalSize <= maxBytes:
            break
        try:
            filepath.unlink()
            totalSize -= size
        except OSError:
            continue
