"""
Warm-up probe CLI.

Wakes the configured backend the way the app does on first load and
reports whether it came up.

    python -m connectivity.probe --url https://example.koyeb.app
    python -m connectivity.probe --keep-alive 900

Exit code 0 when the backend is awake, 1 otherwise.
"""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import replace
from typing import Iterable, Optional

from dotenv import load_dotenv

from config import AppConfig
from connectivity.warmup import WarmupManager, build_warmup_manager


async def run_probe(manager: WarmupManager, keep_alive_s: float) -> bool:
    async with manager:
        awake = await manager.initialize_server()
        if awake and keep_alive_s > 0:
            await asyncio.sleep(keep_alive_s)
        return manager.is_server_awake()


def main(argv: Optional[Iterable[str]] = None) -> int:
    load_dotenv()
    config = AppConfig.load_from_env()

    parser = argparse.ArgumentParser(description="Backend warm-up probe")
    parser.add_argument(
        "--url",
        default=config.api_base_url,
        help=f"Backend base URL (default: {config.api_base_url})",
    )
    parser.add_argument(
        "--keep-alive",
        type=float,
        default=0.0,
        metavar="SECONDS",
        help="Keep pinging for this long after a successful wake",
    )
    args = parser.parse_args(list(argv) if argv is not None else None)

    config = replace(config, api_base_url=args.url.rstrip("/"))
    awake = asyncio.run(run_probe(build_warmup_manager(config), args.keep_alive))

    print(f"{config.api_base_url} -> {'AWAKE' if awake else 'UNREACHABLE'}")
    return 0 if awake else 1


if __name__ == "__main__":
    raise SystemExit(main())
