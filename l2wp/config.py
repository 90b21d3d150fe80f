"""Environment loading for l2wp.

Loads a ``.env`` file (from the working directory, then the source
checkout) before any ``L2WP_*`` variable is read.
"""
import logging
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger("l2wp.config")

_loaded = False


def load_environment() -> None:
    """Load ``.env`` files once per process. Existing env vars win."""
    global _loaded
    if _loaded:
        return
    for env_file in (Path.cwd() / ".env", Path(__file__).parent.parent / ".env"):
        if env_file.is_file():
            load_dotenv(env_file, override=False)
            logger.debug("Loaded environment from %s", env_file)
    _loaded = True
