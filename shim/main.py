"""
Widget shim main entry point.

Loads configuration, configures logging and runs the HTTP server until
interrupted.

Usage:
    python -m shim.main [--config path/to/config.json] [--port 3000] [--app function/handler.py]

Property of Uncompromising Sensors LLC.
"""

import asyncio
import argparse
import sys
from typing import List, Optional

from shim.config import ConfigError, ShimConfig, loadConfig
from shim.server.server import ShimServer
from shimkit.logging import getLogger, configureLogging


def parseArgs(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Widget shim - HTTP dispatch for an application manifest')
    parser.add_argument('--config', default=None, help='Optional JSON config file')
    parser.add_argument('--port', type=int, default=None, help='Listen port (overrides http_port)')
    parser.add_argument('--app', default=None, help='Application module path or dotted name (overrides APP_MODULE)')
    return parser.parse_args(argv)


async def runServer(config: ShimConfig):
    """Run the server until cancelled"""
    log = getLogger('shim.main')
    server = ShimServer(config)

    try:
        await server.start()

        # Keep running
        while True:
            await asyncio.sleep(3600)

    except asyncio.CancelledError:
        log.info("[Main] Shutdown signal received")
    finally:
        await server.stop()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = parseArgs(argv)

    try:
        config = loadConfig(configPath=args.config).withOverrides(port=args.port, appModule=args.app)
        configureLogging(logDir=config.logDir, level=config.logLevel)
    except (ConfigError, ValueError) as e:
        configureLogging()
        getLogger('shim.main').error(f"[Main] Invalid configuration: {e}")
        return 1

    log = getLogger('shim.main')
    log.info(f"[Main] Application module: {config.appModule}")
    log.info(f"[Main] Resources: {config.resourcesDir}")
    if config.rawBody:
        log.info("[Main] Raw body mode enabled", maxRawSize=config.maxRawSize)

    try:
        asyncio.run(runServer(config))
    except KeyboardInterrupt:
        log.info("[Main] Stopped")

    return 0


if __name__ == '__main__':
    sys.exit(main())
