#!/usr/bin/env python3
"""
Standalone CLI: run a headless scene, load one remote asset, print the tree.

Usage:
  python scripts/load_asset.py [URL] [--immersive] [--timeout 60] [--ticks 30]

With no URL the Khronos Duck sample is used.  ``--immersive`` registers an
XR interface that comes up successfully, so the asset lands under the XR rig
instead of a desktop controller.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

SERVICE_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(SERVICE_ROOT))

from engine.logging import configure_logging
from scene_loader.config import LoaderSettings
from scene_loader.host import LoaderHost


async def main() -> int:
    parser = argparse.ArgumentParser(description="Load a remote glTF binary asset into a headless scene")
    parser.add_argument("url", nargs="?", default="", help="Asset URL (defaults to the sample asset)")
    parser.add_argument("--immersive", action="store_true", help="Simulate an available XR interface")
    parser.add_argument("--timeout", type=float, default=60.0, help="Seconds to wait for the session")
    parser.add_argument("--ticks", type=int, default=30, help="Extra frames to run after the session settles")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    configure_logging(args.log_level)
    settings = LoaderSettings(xr_interface_available=args.immersive, autoload_on_start=False)
    host = LoaderHost(settings)

    await host.startup()
    try:
        record = host.start_session(args.url)
        print(f"Loading: {record.request.address}")
        record = await host.wait_for_completion(args.timeout)

        target = host.tree.frames + args.ticks
        while host.tree.frames < target:
            await asyncio.sleep(1.0 / settings.tick_rate_hz)
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        await host.shutdown()

    print(f"\nOutcome: {record.outcome.value if record.outcome else 'none'} ({record.detail})")
    print(f"  Mode: {record.mode.value if record.mode else '-'}")
    print(f"  Attached under: {record.attached_under or '-'}")
    print(json.dumps(host.main_scene.to_dict(), indent=2))
    return 0 if record.attached else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
