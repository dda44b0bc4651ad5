import asyncio
import functools
import logging
import time

logger = logging.getLogger(__name__)


def _report(stage_name: str, started: float) -> None:
    logger.info(f"[PERF] {stage_name}: {(time.perf_counter() - started) * 1000:.1f} ms")


def profile_stage(stage_name: str):
    """Decorator logging how long a pipeline stage takes (async or sync callables)."""
    def decorator(func):
        if asyncio.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                started = time.perf_counter()
                try:
                    return await func(*args, **kwargs)
                finally:
                    _report(stage_name, started)
            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            started = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                _report(stage_name, started)
        return sync_wrapper
    return decorator
