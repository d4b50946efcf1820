"""Run the service under uvicorn: ``python -m best_goats --port 8000``."""

from __future__ import annotations

import argparse

import uvicorn


def main() -> None:
    ap = argparse.ArgumentParser(description="Serve the Best Goats catalog.")
    ap.add_argument("--host", default="127.0.0.1")
    ap.add_argument("--port", type=int, default=8000)
    ap.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = ap.parse_args()

    uvicorn.run("best_goats.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
