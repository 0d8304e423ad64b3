"""
Query Performance Monitoring Middleware

Counts and times the SQL statements issued while serving each request and
logs the slow ones. Thresholds come from SLOW_QUERY_THRESHOLD_SECONDS and
WARN_QUERY_THRESHOLD_SECONDS.
"""
import logging
import time
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from fastapi import Request, Response
from sqlalchemy import event
from sqlalchemy.engine import Engine
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.settings import get_settings
from app.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class RequestQueryStats:
    query_count: int = 0
    query_time: float = 0.0
    slow_queries: List[Tuple[str, float]] = field(default_factory=list)


_current_stats: ContextVar[Optional[RequestQueryStats]] = ContextVar("request_query_stats", default=None)


def _truncate(sql: str, limit: int) -> str:
    return f"{sql[:limit]}{'...' if len(sql) > limit else ''}"


class QueryPerformanceMonitor(BaseHTTPMiddleware):
    """
    Tracks per request:
    - Total query count
    - Total query time
    - Individual slow queries
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        settings = get_settings()
        stats = RequestQueryStats()
        token = _current_stats.set(stats)

        start_time = time.time()
        try:
            response = await call_next(request)
        finally:
            _current_stats.reset(token)
        total_time = time.time() - start_time

        if stats.query_time > settings.WARN_QUERY_THRESHOLD_SECONDS or stats.slow_queries:
            log_level = (
                logging.ERROR if stats.query_time > settings.SLOW_QUERY_THRESHOLD_SECONDS
                else logging.WARNING
            )
            logger.log(
                log_level,
                f"Request performance: {request.method} {request.url.path} | "
                f"Total: {total_time:.3f}s | Queries: {stats.query_count} ({stats.query_time:.3f}s) | "
                f"Slow queries: {len(stats.slow_queries)}",
                extra={
                    "path": request.url.path,
                    "query_count": stats.query_count,
                    "query_time": round(stats.query_time, 3),
                },
            )

        response.headers["X-Query-Count"] = str(stats.query_count)
        response.headers["X-Query-Time"] = f"{stats.query_time:.3f}"
        response.headers["X-Total-Time"] = f"{total_time:.3f}"
        return response


def setup_query_logging(engine: Engine) -> None:
    """
    Attach timing listeners to the engine.

    Call once at startup, before serving requests.
    """
    settings = get_settings()

    @event.listens_for(engine, "before_cursor_execute")
    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("query_start_time", []).append(time.time())

    @event.listens_for(engine, "after_cursor_execute")
    def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        total = time.time() - conn.info["query_start_time"].pop(-1)

        if total > settings.SLOW_QUERY_THRESHOLD_SECONDS:
            logger.error(f"SLOW QUERY ({total:.3f}s): {_truncate(statement, 500)}")
        elif total > settings.WARN_QUERY_THRESHOLD_SECONDS:
            logger.warning(f"Slow query ({total:.3f}s): {_truncate(statement, 200)}")

        # Statements run outside a request (startup, scripts) are not aggregated
        stats = _current_stats.get()
        if stats is not None:
            stats.query_count += 1
            stats.query_time += total
            if total > settings.WARN_QUERY_THRESHOLD_SECONDS:
                stats.slow_queries.append((statement, total))
