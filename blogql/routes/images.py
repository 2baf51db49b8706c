"""
BlogQL — Post Image Routes
===========================

What:  Upload and serve the images referenced by posts' imageUrl.
Why:   GraphQL carries JSON only, so images travel over plain multipart HTTP.
       The client uploads first, then passes the returned filePath as the
       imageUrl of createPost / updatePost.
How:
    PUT /post-image         multipart field `image`, optional form field
                            `oldPath` (the image being replaced)
    GET /images/{path}      serves a stored image

Upload outcomes:
    not authenticated            → 401 {message: "Not authenticated!", status: 401}
    no file part                 → 200 {message: "No file provided!"}
    wrong type / empty / too big → 422 {message, status, data}
    stored                       → 201 {message: "File stored.", filePath}

The old image is removed only after the new one is stored, best-effort.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import FileResponse, JSONResponse

from blogql.auth import AuthContext
from blogql.config import settings
from blogql.exceptions import NotFoundError, UnauthorizedError
from blogql.middleware.auth import get_auth_context
from blogql.schemas.blog import ErrorResponse, ImageUploadResponse
from blogql.services.file_service import file_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Images"])


@router.put(
    "/post-image",
    status_code=201,
    response_model=ImageUploadResponse,
    responses={
        200: {"description": "Request carried no file", "model": ImageUploadResponse},
        401: {"description": "Not authenticated", "model": ErrorResponse},
        422: {"description": "Invalid file type or size", "model": ErrorResponse},
    },
    summary="Upload a post image",
)
async def upload_post_image(
    image: Optional[UploadFile] = File(
        default=None,
        description="PNG or JPEG image",
    ),
    old_path: Optional[str] = Form(
        default=None,
        alias="oldPath",
        description="Public path of the image this upload replaces",
    ),
    auth: AuthContext = Depends(get_auth_context),
):
    if not auth.is_auth:
        raise UnauthorizedError("Not authenticated!")

    if image is None:
        return JSONResponse(
            status_code=200,
            content=ImageUploadResponse(message="No file provided!").model_dump(
                by_alias=True, exclude_none=True
            ),
        )

    try:
        content = await image.read()
        logger.info(
            "Received image upload: filename=%s, size=%d bytes",
            image.filename or "unknown",
            len(content),
        )
        file_path = await file_service.validate_and_store(
            filename=image.filename or "",
            content=content,
            content_type=image.content_type,
        )
    finally:
        await image.close()

    if old_path:
        await file_service.clear_image(old_path)

    return JSONResponse(
        status_code=201,
        content=ImageUploadResponse(message="File stored.", file_path=file_path).model_dump(
            by_alias=True
        ),
    )


@router.get(
    f"/{settings.image_url_prefix}/{{file_path:path}}",
    summary="Serve a stored post image",
)
async def serve_image(file_path: str) -> FileResponse:
    full_path = file_service.resolve_public_path(file_path)

    if not full_path.is_file():
        raise NotFoundError("Image not found.", resource="image", resource_id=file_path)

    return FileResponse(
        path=str(full_path),
        headers={"Cache-Control": "public, max-age=86400"},
    )
