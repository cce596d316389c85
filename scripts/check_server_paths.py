#!/usr/bin/env python3
"""
Check that the configured server paths are usable.

Usage:
    python scripts/check_server_paths.py
    python scripts/check_server_paths.py --config /etc/filekid.json
"""

import argparse
import asyncio
import sys

from filekid.core.config import FileKidConfig, get_settings
from filekid.core.exceptions import FileKidError, NotFoundError
from filekid.core.logging import configure_logging
from filekid.services.storage import build_backend, startup_check


async def check(config: FileKidConfig) -> int:
    """Print the state of every server path, then run the startup check."""
    print("=" * 70)
    print("  SERVER PATHS")
    print("=" * 70)

    for name, descriptor in sorted(config.server_paths.items()):
        try:
            backend = build_backend(descriptor)
            state = "online" if await backend.available() else "OFFLINE"
            print(f"  {name:<20} {state:<8} {backend.name()}")
        except FileKidError as e:
            print(f"  {name:<20} {'ERROR':<8} {e.message}")

    print("=" * 70)

    try:
        await startup_check(config)
    except NotFoundError as e:
        print(f"Startup check failed: {e.message}")
        return 1
    except FileKidError as e:
        print(f"Configuration invalid: {e.message}")
        return 1

    print("Startup check passed")
    return 0


def main() -> int:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Check FileKid server paths")
    parser.add_argument(
        "--config",
        default=str(settings.config_file),
        help="Configuration file (default: %(default)s)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.debug:
        settings = settings.model_copy(update={"debug": True, "log_format": "console"})
    configure_logging(settings)

    try:
        config = FileKidConfig.from_file(args.config)
    except FileKidError as e:
        print(f"Failed to load configuration: {e.message}")
        return 1

    return asyncio.run(check(config))


if __name__ == "__main__":
    sys.exit(main())
