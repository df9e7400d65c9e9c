# image_server/schemas/images.py
from pydantic import BaseModel, Field
from typing import Optional

class UploadResponse(BaseModel):
    message: str
    reference: str = Field(..., description="Partition and filename, e.g. 2024/02/03/<uuid>.jpg")
    url: str

class BatchUploadResponse(BaseModel):
    original_filename: Optional[str] = Field(None, description="Original file name")
    url: Optional[str] = Field(None, description="Stored reference (on success)")
    success: bool
    error: Optional[str] = Field(None, description="Error message (on failure)")

class ErrorResponse(BaseModel):
    success: bool = False
    data: Optional[dict] = None
    error: str

class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    timestamp: str
    storage_root: str
