from .router import income_router, router

__all__ = ["router", "income_router"]
