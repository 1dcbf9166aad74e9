from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile

from ....core.errors import ValidationError
from ....core.runtime import Runtime
from ....schemas.system import UploadResponse
from ...deps import ensure_store_available, get_runtime, require_admin


router = APIRouter(dependencies=[Depends(ensure_store_available)])


@router.post("", response_model=UploadResponse, dependencies=[Depends(require_admin)])
async def upload_image(
    image: UploadFile | None = File(default=None),
    runtime: Runtime = Depends(get_runtime),
) -> UploadResponse:
    if image is None or not image.filename:
        raise ValidationError("No file uploaded", code="NO_FILE_UPLOADED")
    host = runtime.images
    # read one byte past the limit so oversized files are rejected without buffering them whole
    data = await image.read(host.max_bytes + 1)
    await image.close()
    stored = await host.save(data, image.filename, image.content_type or "")
    return UploadResponse(
        success=True,
        filename=stored.filename,
        url=stored.url,
        originalName=stored.original_name,
        size=stored.size,
        mimetype=stored.mimetype,
        storage=stored.storage,
    )
