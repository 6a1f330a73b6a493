"""
회수 요청 접수 파이프라인
- 검증 (먼저 실패한 항목이 응답): SKU → 좌표 → 사진 형식 → 사진 크기
- 정규화: 수량 1~999, 적재 상태 O/X/UNKNOWN, 비고 trim + 100자
- 처리 순서: 검증 → 역지오코딩(실패해도 진행) → 사진 업로드(실패 시 요청 실패) → DB insert
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.catalog import is_known_sku
from app.config import settings
from app.errors import ClientValidationError, PersistenceFailure
from app.models import PickupRequest, LoadStatus
from app.services.geocoder import ReverseGeocoder
from app.services.storage import PhotoStorage, build_photo_path, parse_data_url

logger = logging.getLogger(__name__)


@dataclass
class PhotoUpload:
    content_type: str
    data: bytes


@dataclass
class PickupSubmission:
    """검증/정규화가 끝난 접수 데이터"""
    sku: str
    item_no: str | None
    qty: int
    load_status: LoadStatus
    note: str
    lat: float
    lng: float
    accuracy: float | None
    photo: PhotoUpload | None = None


def _to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        n = float(str(value).strip())
    except ValueError:
        return None
    return n if math.isfinite(n) else None


def clamp_qty(value: Any, qty_max: int | None = None) -> int:
    """숫자가 아니거나 0 이하이면 1, 상한 초과는 상한으로"""
    qty_max = settings.QTY_MAX if qty_max is None else qty_max
    n = _to_float(value)
    if n is None or n <= 0:
        return 1
    return max(1, min(int(n), qty_max))


def normalize_load_status(value: Any) -> LoadStatus:
    raw = str(value if value is not None else "UNKNOWN").upper()
    if raw == "O":
        return LoadStatus.O
    if raw == "X":
        return LoadStatus.X
    return LoadStatus.UNKNOWN


def normalize_note(value: Any, max_length: int | None = None) -> str:
    max_length = settings.NOTE_MAX_LENGTH if max_length is None else max_length
    if value is None:
        return ""
    return str(value).strip()[:max_length]


def parse_coordinate(value: Any) -> float | None:
    return _to_float(value)


def parse_accuracy(value: Any) -> float | None:
    n = _to_float(value)
    if n is None or n < 0:
        return None
    return n


def _first(fields: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        value = fields.get(name)
        if value is not None:
            return value
    return None


def build_submission(
    fields: Mapping[str, Any],
    photo: PhotoUpload | None = None,
    photo_data_url: str | None = None,
) -> PickupSubmission:
    """원시 입력을 검증하고 정규화한다. 실패 시 ClientValidationError."""
    sku = str(fields.get("sku") or "").strip().upper()
    if not sku or not is_known_sku(sku):
        raise ClientValidationError("Invalid sku")

    lat = parse_coordinate(fields.get("lat"))
    lng = parse_coordinate(fields.get("lng"))
    if lat is None or lng is None:
        raise ClientValidationError("Invalid lat/lng")

    if photo is None and photo_data_url:
        parsed = parse_data_url(photo_data_url)
        if parsed is None:
            raise ClientValidationError("Invalid photo format")
        photo = PhotoUpload(content_type=parsed[0], data=parsed[1])

    if photo is not None:
        content_type = (photo.content_type or "").split(";")[0].strip().lower()
        if content_type not in settings.PHOTO_ALLOWED_TYPES:
            raise ClientValidationError("Invalid photo type")
        if len(photo.data) > settings.PHOTO_MAX_BYTES:
            raise ClientValidationError("Photo too large")
        photo = PhotoUpload(content_type=content_type, data=photo.data)

    item_no = _first(fields, "item_no", "itemNo")
    item_no = str(item_no).strip() if item_no is not None else None

    return PickupSubmission(
        sku=sku,
        item_no=item_no or None,
        qty=clamp_qty(fields.get("qty")),
        load_status=normalize_load_status(_first(fields, "load_status", "loadStatus")),
        note=normalize_note(fields.get("note")),
        lat=lat,
        lng=lng,
        accuracy=parse_accuracy(fields.get("accuracy")),
        photo=photo,
    )


async def submit_pickup(
    db: Session,
    submission: PickupSubmission,
    geocoder: ReverseGeocoder,
    storage: PhotoStorage,
) -> PickupRequest:
    """역지오코딩 → 사진 업로드 → insert 순으로 처리하고 생성된 행을 반환한다."""
    # 1) 주소 (실패해도 None으로 진행)
    address = await geocoder.reverse(submission.lat, submission.lng)
    if address is None:
        logger.warning(f"주소 미확인 — 주소 없이 저장 ({submission.sku})")

    # 2) 사진 업로드 (실패 시 StorageFailure 그대로 전파)
    photo_url = None
    if submission.photo is not None:
        path = build_photo_path(submission.sku, submission.photo.content_type)
        storage.upload(path, submission.photo.data, submission.photo.content_type)
        photo_url = storage.public_url(path)

    # 3) DB insert
    row = PickupRequest(
        sku=submission.sku,
        item_no=submission.item_no,
        qty=submission.qty,
        load_status=submission.load_status,
        note=submission.note,
        lat=submission.lat,
        lng=submission.lng,
        accuracy=submission.accuracy,
        address=address,
        photo_url=photo_url,
    )
    try:
        db.add(row)
        db.commit()
        db.refresh(row)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"회수 요청 저장 실패 ({submission.sku}): {e}")
        raise PersistenceFailure(str(e))

    logger.info(
        f"회수 요청 접수: id={row.id} sku={row.sku} item_no={row.item_no} "
        f"qty={row.qty} photo={'Y' if photo_url else 'N'} address={'Y' if address else 'N'}"
    )
    return row
