from __future__ import annotations

import argparse
import logging
import os

import uvicorn


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="tinytd-server",
        description="Serve the tower-defense simulation over HTTP for a rendering client.",
    )
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--config", default="", help="JSON/YAML game config (sets TINYTD_CONFIG).")
    parser.add_argument("--paused", action="store_true", help="Do not run the frame loop; drive it via /api/v1/tick.")
    parser.add_argument("--log-level", default="info")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.config:
        os.environ["TINYTD_CONFIG"] = args.config
    if args.paused:
        os.environ["TINYTD_AUTORUN"] = "0"

    # Import after env setup so api.py picks up the config and autorun flag.
    from tinytd.api import app as api_app

    print(f"tinytd server: http://{args.host}:{args.port}")
    uvicorn.run(api_app, host=args.host, port=args.port, log_level=args.log_level)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
