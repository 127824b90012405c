#!/usr/bin/env python3
"""Run the National Economy web API server."""

import logging
from pathlib import Path

import uvicorn


def main():
    """Run the server."""
    # Load .env file if it exists
    env_file = Path(__file__).parent / ".env"
    if env_file.exists():
        from dotenv import load_dotenv
        load_dotenv(env_file)
        print(f"Loaded environment from {env_file}")

    from econ_engine.config import EngineConfig

    config = EngineConfig.from_env()
    logging.basicConfig(level=config.log_level)

    uvicorn.run(
        "web.api:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
