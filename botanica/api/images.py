# botanica/api/images.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse

from ..integrations.images import ImageUploadError

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cloudinary", tags=["images"])

DEFAULT_FOLDER = "balance-botanica/products"


@router.post("/upload")
async def upload_image(
    request: Request,
    image: Optional[UploadFile] = File(default=None),
    folder: str = Form(default=DEFAULT_FOLDER),
):
    if image is None:
        return JSONResponse(status_code=400, content={"success": False, "error": "No image file provided"})

    data = await image.read()
    host = request.app.state.image_host
    try:
        result = host.upload(data, image.filename or "", folder)
    except ImageUploadError as e:
        return JSONResponse(status_code=400, content={"success": False, "error": str(e)})
    except OSError:
        log.exception("image upload failed")
        return JSONResponse(status_code=500, content={"success": False, "error": "Upload failed"})

    return result.as_dict()


@router.get("/test")
def test_image_host(request: Request):
    result = request.app.state.image_host.check()
    if not result.get("success"):
        return JSONResponse(status_code=500, content=result)
    return result
