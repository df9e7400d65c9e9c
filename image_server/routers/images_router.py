from dataclasses import asdict
from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile
from fastapi.responses import FileResponse

from ..application.naming import partition_from_parts
from ..application.services.image_service import ImageService
from ..core.config import get_settings
from ..schemas.images import BatchUploadResponse, ErrorResponse, UploadResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Image"])

MAX_VARIANT_DIMENSION = get_settings().MAX_VARIANT_DIMENSION


def get_image_service(request: Request) -> ImageService:
    return request.app.state.image_service


# Endpoints are plain ``def`` so FastAPI runs the blocking file and image
# work in its threadpool instead of on the event loop.

@router.post(
    "/upload",
    response_model=UploadResponse,
    summary="Upload an image",
    description="Stores the original plus thumb, small, medium and large variants.",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def upload_image(file: UploadFile = File(...), service: ImageService = Depends(get_image_service)):
    data = file.file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Please select a file to upload")
    reference = service.store(data, file.filename)
    return UploadResponse(
        message=f"File uploaded successfully: {reference}",
        reference=reference,
        url=f"/images/{reference}",
    )


@router.post(
    "/upload/batch",
    response_model=List[BatchUploadResponse],
    summary="Upload several images",
    description="Stores each file independently and reports a result per file.",
)
def upload_image_batch(files: List[UploadFile] = File(...), service: ImageService = Depends(get_image_service)):
    results = service.store_batch((f.file.read(), f.filename) for f in files)
    return [BatchUploadResponse(**asdict(r)) for r in results]


@router.get(
    "/images/{year}/{month}/{day}/{filename}",
    summary="Fetch an image",
    description="Returns the original, or a width x height variant when both are given.",
    responses={200: {"content": {"image/*": {}}}, 404: {"model": ErrorResponse}},
)
def get_image(
    year: str,
    month: str,
    day: str,
    filename: str,
    width: Optional[int] = Query(None, ge=1, le=MAX_VARIANT_DIMENSION, description="Target width in pixels"),
    height: Optional[int] = Query(None, ge=1, le=MAX_VARIANT_DIMENSION, description="Target height in pixels"),
    service: ImageService = Depends(get_image_service),
):
    resource = service.load(partition_from_parts(year, month, day), filename, width, height)
    return FileResponse(
        resource.path,
        media_type=resource.media_type,
        filename=resource.filename,
        content_disposition_type="inline",
    )
