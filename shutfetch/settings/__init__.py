"""Settings package."""

from shutfetch.settings.app import AppSettings, get_settings


__all__ = ["AppSettings", "get_settings"]
