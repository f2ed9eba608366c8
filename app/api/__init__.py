"""API routers."""

from app.api import scheduling

__all__ = [
    "scheduling",
]
