# Standard library imports
from dataclasses import dataclass
from typing import Optional

# External package imports
from fastapi import Request


@dataclass(frozen=True)
class RequestContext:
    """
    Per-request information about the caller's network origin.

    Passed explicitly into the user creation use case so the visitor address
    recorded on a new user always belongs to the request that created it.
    """
    client_ip: Optional[str] = None
    user_agent: Optional[str] = None

    @classmethod
    def from_request(cls, request: Request, forwarded_count: int = 0) -> "RequestContext":
        """
        Build the context from an inbound HTTP request

        Args:
            request: Incoming FastAPI/Starlette request
            forwarded_count: Number of trusted proxies appending to X-Forwarded-For.
                With 0 the socket peer address is used.

        Returns:
            RequestContext for the request
        """
        client_ip = request.client.host if request.client else None

        if forwarded_count > 0:
            forwarded_for = request.headers.get("x-forwarded-for", "")
            hops = [hop.strip() for hop in forwarded_for.split(",") if hop.strip()]
            # Each trusted proxy appends one entry; the client is forwarded_count from the right
            if len(hops) >= forwarded_count:
                client_ip = hops[-forwarded_count]

        return cls(
            client_ip=client_ip,
            user_agent=request.headers.get("user-agent"),
        )
