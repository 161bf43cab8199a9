from .report import ReportRenderer

__all__ = ["ReportRenderer"]
