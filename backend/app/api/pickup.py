"""
회수 요청 접수 API
- POST /api/pickup: multipart(photo 바이너리) 또는 JSON(photoDataUrl) 접수
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from app.database import get_db
from app.errors import ClientValidationError
from app.schemas.pickup import PickupCreateResponse, PickupRequestOut
from app.services.geocoder import ReverseGeocoder, get_geocoder
from app.services.storage import PhotoStorage, get_storage
from app.services.submission import PhotoUpload, build_submission, submit_pickup

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/pickup", tags=["pickup"])


async def _read_form(request: Request):
    """multipart 본문 → (필드 dict, 사진)"""
    form = await request.form()
    fields = {}
    photo = None
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if key != "photo":
                continue
            data = await value.read()
            # 빈 파일 입력은 사진 없음으로 취급
            if data:
                photo = PhotoUpload(content_type=value.content_type or "", data=data)
        else:
            fields[key] = value
    return fields, photo


async def _read_json(request: Request):
    """JSON 본문 → (필드 dict, photoDataUrl)"""
    try:
        body = await request.json()
    except ValueError:
        raise ClientValidationError("Invalid JSON body")
    if not isinstance(body, dict):
        raise ClientValidationError("Invalid JSON body")
    photo_data_url = body.get("photoDataUrl")
    return body, str(photo_data_url) if photo_data_url else None


@router.post("", response_model=PickupCreateResponse)
async def create_pickup(
    request: Request,
    db: Session = Depends(get_db),
    geocoder: ReverseGeocoder = Depends(get_geocoder),
    storage: PhotoStorage = Depends(get_storage),
):
    """회수 요청 1건을 검증 후 저장한다."""
    content_type = (request.headers.get("content-type") or "").lower()

    if "multipart/form-data" in content_type or "application/x-www-form-urlencoded" in content_type:
        fields, photo = await _read_form(request)
        submission = build_submission(fields, photo=photo)
    else:
        fields, photo_data_url = await _read_json(request)
        submission = build_submission(fields, photo_data_url=photo_data_url)

    row = await submit_pickup(db, submission, geocoder, storage)

    return PickupCreateResponse(
        ok=True,
        row=PickupRequestOut.model_validate(row),
        address=row.address,
        photoUrl=row.photo_url,
    )
