import time
from typing import Any, Callable, Dict

import structlog
from django.core.cache import cache
from django.db import connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone

logger = structlog.get_logger(__name__)


def _probe_database() -> None:
    conn = connections["default"]
    conn.ensure_connection()
    with conn.cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()


def _probe_cache() -> None:
    cache.set("_health_check", "ok", 10)
    if cache.get("_health_check") != "ok":
        raise ConnectionError("Cache read-back mismatch")


def _timed(probe: Callable[[], None]) -> Dict[str, Any]:
    start = time.monotonic()
    probe()
    return {
        "status": "up",
        "response_time_ms": round((time.monotonic() - start) * 1000, 2),
    }


def health_check(request: HttpRequest) -> JsonResponse:
    """Report reachability of the order store and the token cache."""
    services: Dict[str, Dict[str, Any]] = {}
    for name, probe in (("database", _probe_database), ("cache", _probe_cache)):
        try:
            services[name] = _timed(probe)
        except Exception:
            logger.exception("health_check.probe_failed", service=name)
            services[name] = {"status": "down"}

    healthy = all(s["status"] == "up" for s in services.values())
    logger.info("health_check.completed", healthy=healthy)

    return JsonResponse(
        {
            "status": "healthy" if healthy else "unhealthy",
            "timestamp": timezone.now().isoformat(),
            "services": services,
        },
        status=200 if healthy else 503,
    )
