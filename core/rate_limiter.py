# core/rate_limiter.py

from typing import Dict, Tuple
from fastapi import HTTPException, Request
from collections import defaultdict
import time


# In-memory sliding window, per process
_rate_limit_store: Dict[str, list] = defaultdict(list)


def check_rate_limit(
    identifier: str,
    max_requests: int = 10,
    window_seconds: int = 60,
) -> Tuple[bool, int]:
    """
    Record a hit for `identifier` and report whether it is within the window.

    Returns:
        Tuple of (allowed: bool, remaining: int)
    """
    now = time.time()
    window_start = now - window_seconds

    requests = [ts for ts in _rate_limit_store[identifier] if ts > window_start]

    if len(requests) >= max_requests:
        _rate_limit_store[identifier] = requests
        return False, 0

    requests.append(now)
    _rate_limit_store[identifier] = requests

    return True, max_requests - len(requests)


def get_rate_limit_identifier(request: Request) -> str:
    """Client IP, or the first forwarded address behind a proxy."""
    client_ip = request.client.host if request.client else "unknown"

    # Behind a proxy the original client is the first forwarded address
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        client_ip = forwarded_for.split(",")[0].strip()

    return f"ip:{client_ip}"


def require_rate_limit(
    request: Request,
    scope: str,
    max_requests: int = 10,
    window_seconds: int = 60,
) -> int:
    """
    Raises HTTPException 429 when the caller exceeded `max_requests`
    for `scope` inside the window.
    """
    identifier = f"{scope}:{get_rate_limit_identifier(request)}"

    allowed, remaining = check_rate_limit(identifier, max_requests, window_seconds)

    if not allowed:
        raise HTTPException(
            status_code=429,
            detail=f"Rate limit exceeded. Maximum {max_requests} requests per {window_seconds} seconds.",
            headers={
                "X-RateLimit-Limit": str(max_requests),
                "X-RateLimit-Window": str(window_seconds),
                "Retry-After": str(window_seconds),
            },
        )

    return remaining


def reset_rate_limits() -> None:
    _rate_limit_store.clear()
