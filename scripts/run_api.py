#!/usr/bin/env python
"""
Start the pricing API under uvicorn.

Usage:
    python scripts/run_api.py [--host 0.0.0.0] [--port 8000] [--no-reload] [--workers N]
"""
import argparse
import os
import subprocess
import sys
from pathlib import Path


def build_command(args) -> list[str]:
    command = [
        sys.executable, "-m", "uvicorn",
        "print_pricing.api.main:app",
        "--host", args.host,
        "--port", str(args.port),
    ]
    if args.reload:
        command.append("--reload")
    elif args.workers > 1:
        command += ["--workers", str(args.workers)]
    return command


def main(argv=None):
    parser = argparse.ArgumentParser(description='Run the print pricing API')
    parser.add_argument('--host', default='0.0.0.0', help='Bind address (default: 0.0.0.0)')
    parser.add_argument('--port', type=int, default=8000, help='Port (default: 8000)')
    parser.add_argument('--no-reload', dest='reload', action='store_false',
                        help='Disable auto-reload for production runs')
    parser.add_argument('--workers', type=int, default=1,
                        help='Worker processes, only used with --no-reload (default: 1)')
    args = parser.parse_args(argv)

    project_root = Path(__file__).parent.parent
    os.chdir(project_root)

    # Ensure src is in python path
    env = os.environ.copy()
    src_path = str(project_root / "src")
    if "PYTHONPATH" in env:
        env["PYTHONPATH"] = f"{src_path}{os.pathsep}{env['PYTHONPATH']}"
    else:
        env["PYTHONPATH"] = src_path

    mode = "reload" if args.reload else f"{args.workers} worker(s)"
    print(f"Starting Print Pricing API on {args.host}:{args.port} ({mode})...")
    try:
        subprocess.run(build_command(args), env=env)
    except KeyboardInterrupt:
        print("\nAPI stopped.")


if __name__ == "__main__":
    main()
