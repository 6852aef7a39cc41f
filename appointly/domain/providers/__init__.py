"""Provider domain - provider lookup and availability settings"""

from .router import router

__all__ = ["router"]
