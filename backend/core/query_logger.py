# backend/core/query_logger.py

import logging
import time
from typing import Any, Dict

from sqlalchemy import event
from sqlalchemy.engine import Engine

from core.config import get_settings

query_logger = logging.getLogger("query_performance")

settings = get_settings()


class QueryLogger:
    """SQL query timing for development and debugging"""

    def __init__(self, slow_query_threshold: float = None):
        self.enabled = settings.log_sql_queries or settings.is_development
        self.slow_query_threshold = (
            slow_query_threshold
            if slow_query_threshold is not None
            else settings.slow_query_threshold_seconds
        )
        self.query_stats: Dict[str, Any] = {
            "total_queries": 0,
            "slow_queries": 0,
            "total_time": 0.0,
        }

    def record(self, statement: str, elapsed: float):
        self.query_stats["total_queries"] += 1
        self.query_stats["total_time"] += elapsed

        if elapsed >= self.slow_query_threshold:
            self.query_stats["slow_queries"] += 1
            query_logger.warning(
                f"Slow query ({elapsed:.3f}s): {statement[:200]}"
            )

    def log_query_stats(self):
        """Log accumulated query statistics"""
        if not self.enabled:
            return

        total = self.query_stats["total_queries"]
        query_logger.info(
            f"Queries: {total}, slow: {self.query_stats['slow_queries']}, "
            f"avg: {self.query_stats['total_time'] / max(total, 1):.3f}s"
        )

    def reset_stats(self):
        """Reset query statistics"""
        self.query_stats = {
            "total_queries": 0,
            "slow_queries": 0,
            "total_time": 0.0,
        }


# Singleton instance
query_logger_instance = QueryLogger()


def setup_query_logging(engine: Engine):
    """Attach timing listeners to an engine when query logging is enabled"""
    if not query_logger_instance.enabled:
        return

    @event.listens_for(engine, "before_cursor_execute")
    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("query_start_time", []).append(time.perf_counter())

    @event.listens_for(engine, "after_cursor_execute")
    def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        started = conn.info["query_start_time"].pop(-1)
        query_logger_instance.record(statement, time.perf_counter() - started)
