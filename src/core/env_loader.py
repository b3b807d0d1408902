#!/usr/bin/env python3
"""
Environment variable loader with .env file support.

Safely loads environment variables from .env file if present.
"""

import os
from pathlib import Path
import logging

logger = logging.getLogger(__name__)

def load_env_file(env_file_path: str = ".env") -> int:
    """
    Load environment variables from .env file if it exists.

    Args:
        env_file_path: Path to .env file (default: ".env" in project root)

    Returns:
        Number of variables loaded
    """
    # Find project root (where .env should be)
    current_dir = Path(__file__).parent
    project_root = current_dir.parent.parent  # Go up to project root
    env_path = project_root / env_file_path

    if not env_path.exists():
        logger.debug(f"No .env file found at {env_path}")
        return 0

    try:
        with open(env_path, 'r', encoding='utf-8') as f:
            lines = f.readlines()
    except OSError as e:
        logger.error(f"Error loading .env file {env_path}: {e}")
        return 0

    loaded_count = 0
    for line_num, line in enumerate(lines, 1):
        line = line.strip()

        # Skip empty lines and comments
        if not line or line.startswith('#'):
            continue

        if '=' not in line:
            logger.warning(f"Invalid .env format at line {line_num}: {line}")
            continue

        key, value = line.split('=', 1)
        key = key.strip()
        value = value.strip()

        if value.startswith('"') and value.endswith('"'):
            value = value[1:-1]
        elif value.startswith("'") and value.endswith("'"):
            value = value[1:-1]

        # Env vars take precedence
        if key not in os.environ:
            os.environ[key] = value
            loaded_count += 1
            logger.debug(f"Loaded {key} from .env")
        else:
            logger.debug(f"Skipped {key} (already in environment)")

    logger.info(f"Loaded {loaded_count} variables from {env_path}")
    return loaded_count

def get_env_var(key: str, default: str = None) -> str:
    """Get environment variable, falling back to default."""
    return os.environ.get(key, default)

# Auto-load .env file when module is imported
load_env_file()
