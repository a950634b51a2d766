"""
API keys and other secrets, read from the environment.

A .env file in the working directory is loaded on import so local runs
don't need the variables exported by hand.
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _require_env(name: str) -> str:
    value = os.environ.get(name)
    if not value:
        raise RuntimeError(f"{name} is not set")
    return value


def get_gnews_api_key() -> str:
    """Get the GNews search API token."""
    return _require_env("GNEWS_API_KEY")


def get_gemini_api_key() -> str:
    """Get the Google Gemini API key."""
    return _require_env("GEMINI_API_KEY")
