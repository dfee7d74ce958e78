"""BridgeX CLI — fetch the bridge configuration for a host.

Invariants:
    - Exit 0 with the config `data` as JSON on stdout; exit 1 with the error envelope on stderr
    - The structured logger is destroyed before exit (final flush of buffered entries)
"""

import argparse
import asyncio
import json
import sys

from bridgex.config import Settings, get_settings
from bridgex.core.errors import BridgeError
from bridgex.infrastructure.observability import setup_logging
from bridgex.infrastructure.structured_logger import get_logger
from bridgex.services.bridge_api import create_bridge_config_client, get_bridge_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bridgex", description="BridgeX API client")
    commands = parser.add_subparsers(dest="command", required=True)
    config = commands.add_parser("config", help="Fetch the bridge config for a host")
    config.add_argument("--host", default=None, help="Defaults to DEFAULT_HOST")
    return parser


async def _run_config(host: str, settings: Settings) -> int:
    structured = get_logger()
    try:
        async with create_bridge_config_client(settings) as client:
            response = await get_bridge_config(client, host)
    except BridgeError as e:
        print(json.dumps(e.to_dict(), indent=2), file=sys.stderr)
        return 1
    finally:
        await structured.destroy()

    print(json.dumps(response.data, indent=2, ensure_ascii=False, default=str))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    host = args.host or settings.default_host
    if not host:
        parser.error("--host is required when DEFAULT_HOST is not set")
    return asyncio.run(_run_config(host, settings))


if __name__ == "__main__":
    sys.exit(main())
