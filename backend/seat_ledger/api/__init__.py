from .tables import router as tables_router
from .report import router as report_router

__all__ = ["tables_router", "report_router"]
