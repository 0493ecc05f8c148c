from .ask import build_ask_router
from .fallback import build_fallback_router
from .health import build_health_router

__all__ = ["build_ask_router", "build_fallback_router", "build_health_router"]
