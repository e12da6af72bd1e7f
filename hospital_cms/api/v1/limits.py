"""Per-IP rate limit dependencies for authentication and general API routes."""

from fastapi import HTTPException, Request, status

from hospital_cms.core.rate_limit import SlidingWindowRateLimiter


def client_ip(request: Request, trust_proxy_headers: bool) -> str:
    """Caller address; first X-Forwarded-For hop when running behind a trusted proxy."""
    if trust_proxy_headers:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else "unknown"


def _enforce(limiter: SlidingWindowRateLimiter, request: Request) -> None:
    ip = client_ip(request, request.app.state.settings.TRUST_PROXY_HEADERS)
    allowed, retry_after = limiter.hit(ip)
    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Too many requests, please try again in {retry_after} seconds.",
            headers={"Retry-After": str(retry_after)},
        )


def limit_auth_attempts(request: Request) -> None:
    """Dependency: low ceiling for login/logout traffic."""
    _enforce(request.app.state.auth_rate_limiter, request)


def limit_api_requests(request: Request) -> None:
    """Dependency: general API ceiling."""
    _enforce(request.app.state.api_rate_limiter, request)
