# External package imports
from fastapi import Request

# Local application imports
from ...core.config import get_settings
from ...core.request_context import RequestContext


def get_request_context(request: Request) -> RequestContext:
    """
    FastAPI dependency capturing the caller's network origin

    Args:
        request: Incoming request

    Returns:
        RequestContext with client IP (proxy-aware) and user agent
    """
    return RequestContext.from_request(
        request,
        forwarded_count=get_settings().http_forwarded_count,
    )
