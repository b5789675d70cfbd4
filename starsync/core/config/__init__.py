"""
Static configuration for StarSync, loaded from environment variables
(`.env` supported) at import time.
"""

from starsync.core.config.config import Config

__all__ = ["Config"]
