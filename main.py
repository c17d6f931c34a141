#!/usr/bin/env python3
"""
QuizMaster - Main Entry Point

This script runs the trivia quiz in the terminal. Settings are read from
config.json in the working directory.

Usage:
    python main.py

Configuration:
    1. Edit config.json to change quiz and logging settings
    2. Or set the environment variables below

Environment Variables:
    QUIZMASTER_HIGH_SCORES: High score file path (overrides config.json)
    QUIZMASTER_CATALOG: Question catalog JSON file (overrides config.json)
"""

import asyncio
import json
import logging
import os
import sys
from pathlib import Path

ENV_OVERRIDES = {
    'QUIZMASTER_HIGH_SCORES': 'high_score_path',
    'QUIZMASTER_CATALOG': 'catalog_path',
}


def load_config(config_path: Path = Path("config.json")) -> dict:
    """Load configuration from config.json, or use defaults if it is missing."""
    if not config_path.exists():
        print("ℹ️  config.json not found, using default settings")
        return {}

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        print(f"❌ Error: Invalid JSON in config.json: {e}")
        sys.exit(1)
    except OSError as e:
        print(f"❌ Error loading config.json: {e}")
        sys.exit(1)


def apply_environment_overrides(config: dict) -> dict:
    """Environment variables take precedence over the config file."""
    quiz_config = config.setdefault('quiz', {})
    for env_name, key in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            quiz_config[key] = value
    return config


def setup_logging_from_config(config: dict) -> None:
    """Set up logging based on configuration."""
    log_config = config.get('logging', {})
    log_level = getattr(logging, log_config.get('level', 'WARNING').upper(), logging.WARNING)
    log_directory = Path(log_config.get('log_directory', './logs/'))

    log_directory.mkdir(parents=True, exist_ok=True)

    # The console is the game screen, so only warnings go to stderr.
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(logging.WARNING)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            stream_handler,
            logging.FileHandler(log_directory / "quizmaster.log", encoding='utf-8')
        ]
    )


async def run_with_config():
    """Run the quiz with configuration."""
    config = apply_environment_overrides(load_config())

    setup_logging_from_config(config)

    from quizmaster.console import run_app
    await run_app(config)


if __name__ == "__main__":
    try:
        asyncio.run(run_with_config())
    except KeyboardInterrupt:
        print("\n👋 Bye!")
