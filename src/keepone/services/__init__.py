from .file_service import FileService
from .report_store import ReportStore

__all__ = ["FileService", "ReportStore"]
