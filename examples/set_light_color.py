#!/usr/bin/env python
"""Set a light or group color on a bridge from a hex string."""
from __future__ import annotations

import argparse
import asyncio
import os

from alphahue import const
from alphahue.client import AlphaHueClient
from alphahue.colors import hex_to_rgb, xy_from_hex


async def run(args: argparse.Namespace) -> None:
    """Run the color example."""
    # The client resolves the gamma mode, falling back to ALPHAHUE_GAMMA_MODE.
    hue = AlphaHueClient(args.host, args.username or "", gamma_mode=args.gamma)
    point = xy_from_hex(args.color, hue.gamma_mode)
    print(
        f"color {args.color}: rgb={hex_to_rgb(args.color).as_tuple()} "
        f"xy={point} gamma={hue.gamma_mode}"
    )
    if args.dry_run:
        return

    async with hue:
        print(f"bridge api version: {hue.api_version}")
        if args.group is not None:
            resp = await hue.async_set_group_to_hex(args.group, args.color)
        else:
            resp = await hue.async_set_light_to_hex(args.light, args.color)
        print(f"response: {resp}")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Set a light or group to a hex color."
    )
    parser.add_argument("color", help="Hex color, e.g. '#ff8800'")
    parser.add_argument(
        "--host",
        default=os.environ.get("ALPHAHUE_HOST", "philips-hue.local"),
        help="Bridge host (env: ALPHAHUE_HOST)",
    )
    parser.add_argument(
        "--username",
        default=os.environ.get("ALPHAHUE_USERNAME"),
        help="Bridge username (env: ALPHAHUE_USERNAME)",
    )
    target = parser.add_mutually_exclusive_group()
    target.add_argument("--light", default="1", help="Light ID (default: 1)")
    target.add_argument("--group", help="Group ID; 0 addresses all lights")
    parser.add_argument(
        "--gamma",
        choices=sorted(const.GAMMA_MODES),
        default=None,
        help=(
            f"Gamma curve (env: {const.ENV_GAMMA_MODE}, "
            f"default: {const.DEFAULT_GAMMA_MODE})"
        ),
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only print the converted color",
    )
    args = parser.parse_args(argv)
    if not args.dry_run and not args.username:
        parser.error("--username or ALPHAHUE_USERNAME is required")
    return args


def main() -> None:
    """Entry point."""
    args = parse_args()
    asyncio.run(run(args))


if __name__ == "__main__":
    main()
