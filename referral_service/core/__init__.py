from .config import Settings, get_settings
from .request_context import RequestContext

__all__ = [
    "Settings",
    "get_settings",
    "RequestContext",
]
