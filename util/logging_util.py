import logging
import os
import sys

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Overrides the default level for every logger created through setup_logger
LOG_LEVEL_ENV_VAR = "NEWS_CURATOR_LOG_LEVEL"


def default_log_level() -> int:
    """Level from NEWS_CURATOR_LOG_LEVEL (a name such as DEBUG), else INFO."""
    name = os.environ.get(LOG_LEVEL_ENV_VAR, "").strip().upper()
    level = logging.getLevelName(name) if name else logging.INFO
    return level if isinstance(level, int) else logging.INFO


def setup_logger(name: str, level: int = None) -> logging.Logger:
    """
    Returns a logger that writes formatted lines to stdout.

    Args:
        name: Name of the logger (typically __name__ from the calling module)
        level: Logging level; defaults to default_log_level()

    Returns:
        Configured logger instance
    """
    if level is None:
        level = default_log_level()

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Handlers survive re-imports, only attach one
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        logger.addHandler(handler)

    return logger


def log_llm_interaction(logger: logging.Logger, prompt: str, response: str,
                        model_name: str, duration_ms: float = None):
    """
    Logs a model call: model and duration at info, the prompt at debug and a
    truncated response at info.
    """
    duration_str = f" ({duration_ms:.2f}ms)" if duration_ms else ""
    logger.info(f"LLM Request{duration_str} - Model: {model_name}")
    logger.debug(f"  Prompt ({len(prompt)} chars): {prompt[:500]}")
    logger.info(f"  Response: {response[:200]}{'...' if len(response) > 200 else ''}")
