"""
Environment variable loading utility.

Settings read their overrides from ``os.environ``; this module lets a
deployment keep them in a plain ``KEY=value`` file instead.
"""
import os
import logging

logger = logging.getLogger(__name__)


def load_env_from_file(file_path, override=False):
    """
    Load environment variables from a file.

    Args:
        file_path: Path to the environment variable file.
        override: Replace variables that are already set in the environment.

    Returns:
        True if the file was loaded, False if it was missing or unreadable.
    """
    if not os.path.exists(file_path):
        logger.debug(f"Environment file not found: {file_path}")
        return False

    try:
        with open(file_path, 'r') as f:
            for line_number, line in enumerate(f, start=1):
                line = line.strip()
                if not line or line.startswith('#'):
                    continue
                if '=' not in line:
                    logger.warning(f"Skipping malformed line {line_number} in {file_path}")
                    continue

                key, value = line.split('=', 1)
                key = key.strip()
                value = value.strip().strip('"').strip("'")
                if override or key not in os.environ:
                    os.environ[key] = value

        logger.info(f"Loaded environment variables from {file_path}")
        return True
    except OSError as e:
        logger.error(f"Error loading environment variables from {file_path}: {str(e)}")
        return False


def env_bool(name, default=False):
    """Read a boolean flag such as ``DEBUG=true`` from the environment."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')


def env_list(name, default=()):
    """Read a comma-separated list from the environment."""
    raw = os.getenv(name)
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(',') if item.strip()]
