# Schemas package
from .images import UploadResponse, BatchUploadResponse, ErrorResponse, HealthResponse

__all__ = [
    "UploadResponse",
    "BatchUploadResponse",
    "ErrorResponse",
    "HealthResponse",
]
