"""
Application factory for the REST server.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from aiohttp import web

from datagate.adapters.base import DataAdapter
from datagate.server.middleware import cors_middleware, error_middleware
from datagate.server.ratelimit import RateLimiter, rate_limit_middleware, sweeper
from datagate.server.routes import resource_app
from datagate.services.data import DataService

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@dataclass
class AppConfig:
    """Settings for ``create_app``.

    Attributes:
        adapter: Backend adapter. Closed when the app shuts down.
        cors_origins: Allowed CORS origins; ``*`` allows any.
        rate_limit: Requests per client per window under ``/api``.
        rate_limit_window: Window length in seconds.
        cache_ttl: Single-record cache lifetime in seconds; zero disables it.
        allowed_tables: Optional table allow-list.
    """

    adapter: DataAdapter
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    rate_limit: int = 60
    rate_limit_window: float = 60.0
    cache_ttl: float = 0
    allowed_tables: Optional[list[str]] = None


def create_app(
    config: AppConfig,
    *,
    service: Optional[DataService] = None,
    limiter: Optional[RateLimiter] = None,
) -> web.Application:
    """Build the aiohttp application.

    Args:
        config: Server settings.
        service: Data service to use. Built from ``config`` if omitted.
        limiter: Rate limiter to use. Built from ``config`` if omitted.

    Returns:
        Application with resource routes mounted under ``/api/v1``.
    """
    if service is None:
        service = DataService(
            config.adapter,
            cache_ttl=config.cache_ttl,
            allowed_tables=config.allowed_tables,
        )
    if limiter is None:
        limiter = RateLimiter(config.rate_limit, config.rate_limit_window)

    app = web.Application(middlewares=[cors_middleware(config.cors_origins), error_middleware])

    resources = resource_app(service)
    # Subapp middlewares only see /api routes
    resources.middlewares.append(rate_limit_middleware(limiter))
    app.add_subapp(API_PREFIX, resources)

    app.cleanup_ctx.append(sweeper(limiter))

    async def close_adapter(app: web.Application) -> None:
        await config.adapter.close()

    app.on_cleanup.append(close_adapter)

    logger.info(
        "Serving %s adapter at %s (cache_ttl=%s, rate_limit=%d/%ss)",
        config.adapter.provider,
        API_PREFIX,
        config.cache_ttl,
        config.rate_limit,
        config.rate_limit_window,
    )
    return app
