"""HTTP API routers."""

from apt_eval.api.router import router as apartments_router

__all__ = ["apartments_router"]
