"""
Settings re-export so modules can import ``settings`` from ``app.core.config``.
"""
from app.core.settings import Settings, get_settings, settings

__all__ = ["Settings", "get_settings", "settings"]
