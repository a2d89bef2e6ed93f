"""Per-client rate limiting for the chat endpoints.

In-memory sliding window, resets on deploy.
"""

import time
from collections import defaultdict

from fastapi import Depends, HTTPException, Request

from cli.config_models import OracleConfig
from web.deps import get_config

RATE_LIMIT_MESSAGE = "Demasiadas consultas. Por favor, espera unos minutos antes de volver a preguntar."

# client key -> list of timestamps
_request_log: dict[str, list[float]] = defaultdict(list)


def _prune(key: str, now: float, window_seconds: float) -> list[float]:
    """Remove timestamps older than the window."""
    cutoff = now - window_seconds
    log = [t for t in _request_log[key] if t > cutoff]
    _request_log[key] = log
    return log


def check_rate_limit(key: str, max_requests: int, window_seconds: float) -> None:
    """Raise 429 if the client has used up its window."""
    now = time.time()
    log = _prune(key, now, window_seconds)

    if len(log) >= max_requests:
        oldest = log[0]
        retry_after = int(oldest + window_seconds - now) + 1
        raise HTTPException(
            status_code=429,
            detail=RATE_LIMIT_MESSAGE,
            headers={"Retry-After": str(retry_after)},
        )

    _request_log[key].append(now)


def chat_rate_limit(request: Request, config: OracleConfig = Depends(get_config)) -> None:
    """Route dependency keyed by client address."""
    limits = config.rate_limits
    if not limits.enabled:
        return
    forwarded = request.headers.get("x-forwarded-for", "")
    key = forwarded.split(",")[0].strip() or (request.client.host if request.client else "unknown")
    check_rate_limit(key, limits.max_requests, limits.window_seconds)


def reset_rate_limits() -> None:
    """Clear all rate limit state. Used in tests."""
    _request_log.clear()
