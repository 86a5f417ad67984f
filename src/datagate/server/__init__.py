"""
aiohttp REST server exposing the data service.
"""

from datagate.server.app import API_PREFIX, AppConfig, create_app
from datagate.server.ratelimit import RateLimiter

__all__ = ["API_PREFIX", "AppConfig", "RateLimiter", "create_app"]
