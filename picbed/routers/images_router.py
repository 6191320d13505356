from typing import BinaryIO, Iterator, List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile
from fastapi.responses import StreamingResponse

from ..application.ports.user_repo import UserDto
from ..application.services.image_service import ImageService
from ..exceptions import ValidationError
from ..infrastructure.imaging.thumbnail_generator import ThumbnailGenerator
from ..schemas import ImageResponse
from .dependencies import get_current_user, get_image_service, get_thumbnail_generator

router = APIRouter(prefix="/images", tags=["Images"])

CHUNK_SIZE = 64 * 1024


def _iter_stream(stream: BinaryIO) -> Iterator[bytes]:
    try:
        while True:
            chunk = stream.read(CHUNK_SIZE)
            if not chunk:
                break
            yield chunk
    finally:
        stream.close()


def _to_response(image_service: ImageService, record) -> ImageResponse:
    url, thumbnail_url = image_service.urls_for(record)
    return ImageResponse.from_record(record, url=url, thumbnail_url=thumbnail_url)


@router.post("", response_model=ImageResponse)
def upload_image(
    file: Optional[UploadFile] = File(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    current_user: UserDto = Depends(get_current_user),
    image_service: ImageService = Depends(get_image_service),
):
    if file is None:
        raise ValidationError("No file uploaded")
    # Bounded read; chunked bodies carry no Content-Length for the middleware to check
    data = file.file.read(image_service.policy.max_file_size + 1)
    record = image_service.upload_image(
        current_user,
        data,
        file.filename or "",
        content_type=file.content_type,
        description=description,
        category=category,
    )
    return _to_response(image_service, record)


@router.get("", response_model=List[ImageResponse])
def list_images(
    page: int = Query(1),
    page_size: int = Query(20, alias="pageSize"),
    category: Optional[str] = Query(None),
    image_service: ImageService = Depends(get_image_service),
):
    records = image_service.list_images(page, page_size, category)
    return [_to_response(image_service, record) for record in records]


@router.get("/file/{file_name}")
def get_image_file(file_name: str, image_service: ImageService = Depends(get_image_service)):
    record, stream = image_service.open_original(file_name)
    disposition = f"inline; filename*=UTF-8''{quote(record.original_file_name)}"
    return StreamingResponse(
        _iter_stream(stream),
        media_type=record.mime_type,
        headers={"Content-Disposition": disposition},
    )


@router.get("/thumbnail/{file_name}")
def get_thumbnail(
    file_name: str,
    width: int = Query(200),
    height: int = Query(200),
    image_service: ImageService = Depends(get_image_service),
    thumbnails: ThumbnailGenerator = Depends(get_thumbnail_generator),
):
    # Thumbnails are sized at upload time; width and height are accepted for compatibility only
    record, stream = image_service.open_thumbnail(file_name)
    return StreamingResponse(_iter_stream(stream), media_type=thumbnails.output_mime_type(record.mime_type))


@router.get("/{image_id}", response_model=ImageResponse)
def get_image_info(image_id: int, image_service: ImageService = Depends(get_image_service)):
    return _to_response(image_service, image_service.get_image(image_id))


@router.delete("/{image_id}", status_code=204)
def delete_image(
    image_id: int,
    current_user: UserDto = Depends(get_current_user),
    image_service: ImageService = Depends(get_image_service),
):
    image_service.delete_image(image_id, requester=current_user)
    return Response(status_code=204)
