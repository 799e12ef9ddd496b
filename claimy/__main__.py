#!/usr/bin/env python3
"""
Entry point for running the claimy FastAPI app.

Usage:
    python -m claimy [--host HOST] [--port PORT] [--reload] [--log-level LEVEL]
"""

import argparse
import logging

import uvicorn


def main():
    parser = argparse.ArgumentParser(description="Run the Claimy FastAPI app")
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    parser.add_argument("--log-level", default="info", help="Log level (default: info)")

    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print(f"🚀 Starting Claimy on {args.host}:{args.port}")
    print(f"📖 API docs will be available at http://{args.host}:{args.port}/docs")
    print(f"🔄 Auto-reload: {'enabled' if args.reload else 'disabled'}")
    print()

    uvicorn.run(
        "claimy.fastapi.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level.lower(),
    )


if __name__ == "__main__":
    main()
