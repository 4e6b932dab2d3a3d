#!/usr/bin/env python3
"""
Drowsy - Entry Point
======================
One-command startup for the Drowsy web console.

Usage:
    python app.py              # Start with default settings
    python app.py --port 9000  # Start on custom port

This script:
    1. Loads environment variables from .env
    2. Loads configuration from config.yaml
    3. Creates the FastAPI web application and its process container
    4. Serves it with uvicorn until interrupted, then closes the listener
"""

import argparse
import asyncio
import os
import shutil

from dotenv import load_dotenv


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Drowsy - Web console for an on-demand game server",
    )
    parser.add_argument(
        "--port", type=int, default=None,
        help="Port number for the web console (overrides config.yaml)",
    )
    parser.add_argument(
        "--host", type=str, default=None,
        help="Host binding address (overrides config.yaml)",
    )
    return parser.parse_args(argv)


async def serve(project_dir: str, host: str, port: int, config: dict) -> None:
    """Run the console until the listener is closed."""
    from console.listener import WebServer
    from console.main import create_app

    app = create_app(project_dir=project_dir, config=config)
    server = WebServer(app, host=host, port=port, logger=app.state.logger)
    server.init()
    try:
        await server.serve()
    finally:
        await server.close()


def main():
    """Parse arguments, load config, and start the web server."""
    args = parse_args()
    project_dir = os.path.dirname(os.path.abspath(__file__))

    # -- Ensure config.yaml exists ---------------------------------------------
    config_path = os.path.join(project_dir, "config.yaml")
    config_example = os.path.join(project_dir, "config.yaml.example")
    if not os.path.exists(config_path) and os.path.exists(config_example):
        shutil.copy2(config_example, config_path)
        print("[INIT] Created config.yaml from template")

    # -- Load environment variables from .env ----------------------------------
    env_path = os.path.join(project_dir, ".env")
    if os.path.exists(env_path):
        load_dotenv(env_path)

    from console.config import ConfigManager
    config = ConfigManager(project_dir).load()

    # Command-line args override config file
    host = args.host or config["web"]["host"]
    port = args.port or config["web"]["port"]

    print()
    print(f"  Drowsy : {config['server']['name']}")
    print(f"  Console: http://{host}:{port}")
    print()

    try:
        asyncio.run(serve(project_dir, host, port, config))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
