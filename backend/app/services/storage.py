"""
사진 저장소 — 버킷(로컬 디렉토리)에 업로드 후 공개 URL 제공
- 경로: <SKU>/<epoch_ms>_<랜덤 hex>.<ext> (덮어쓰기 금지)
- data URL 파싱, 업로드 전 이미지 압축(Pillow) 헬퍼 포함
"""

import base64
import binascii
import io
import logging
import os
import re
import secrets
import time
from typing import Protocol

from PIL import Image, UnidentifiedImageError

from app.config import settings
from app.errors import ClientValidationError, StorageFailure

logger = logging.getLogger(__name__)

_DATA_URL_RE = re.compile(r"^data:(.+?);base64,(.*)$", re.DOTALL)


class PhotoStorage(Protocol):
    """오브젝트 스토리지 인터페이스"""

    def upload(self, path: str, data: bytes, content_type: str) -> None: ...

    def public_url(self, path: str) -> str: ...


class LocalPhotoStorage:
    """로컬 디렉토리 버킷 — main.py에서 StaticFiles로 PHOTO_BASE_URL에 마운트"""

    def __init__(self, root: str | None = None, base_url: str | None = None):
        self.root = root or settings.PHOTO_DIR
        self.base_url = (base_url or settings.PHOTO_BASE_URL).rstrip("/")

    def upload(self, path: str, data: bytes, content_type: str) -> None:
        full_path = os.path.join(self.root, *path.split("/"))
        try:
            os.makedirs(os.path.dirname(full_path), exist_ok=True)
            # "x" 모드: 같은 경로가 있으면 실패 (upsert 금지)
            with open(full_path, "xb") as f:
                f.write(data)
        except FileExistsError:
            raise StorageFailure(f"이미 존재하는 경로입니다: {path}")
        except OSError as e:
            logger.error(f"사진 저장 실패 ({path}): {e}")
            raise StorageFailure(f"사진 업로드 실패: {e}")
        logger.info(f"사진 저장 완료: {path} ({len(data)} bytes, {content_type})")

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/{path}"


_storage: PhotoStorage | None = None


def get_storage() -> PhotoStorage:
    """FastAPI Depends용 — 테스트에서 override 한다."""
    global _storage
    if _storage is None:
        _storage = LocalPhotoStorage()
    return _storage


def extension_for(content_type: str) -> str:
    t = (content_type or "").lower()
    if "png" in t:
        return "png"
    if "webp" in t:
        return "webp"
    return "jpg"


def build_photo_path(
    sku: str,
    content_type: str,
    now_ms: int | None = None,
    suffix: str | None = None,
) -> str:
    """충돌 방지 경로 — 제품 코드 / 타임스탬프 / 랜덤 접미사"""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    if suffix is None:
        suffix = secrets.token_hex(6)
    return f"{sku.upper()}/{now_ms}_{suffix}.{extension_for(content_type)}"


def parse_data_url(value: str | None) -> tuple[str, bytes] | None:
    """'data:<mime>;base64,<payload>' → (mime, bytes). 형식 오류면 None."""
    if not value or not isinstance(value, str):
        return None
    m = _DATA_URL_RE.match(value.strip())
    if not m:
        return None
    mime, payload = m.group(1), m.group(2)
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        return None
    return mime.lower(), data


def is_jpeg_or_png(content_type: str | None) -> bool:
    t = (content_type or "").lower()
    return "jpeg" in t or "jpg" in t or "png" in t


def compress_image(data: bytes, max_side: int | None = None, quality: int | None = None) -> bytes:
    """
    업로드 전 사진 압축 — 긴 변을 max_side 이하로 줄이고 JPEG으로 통일.
    JPG/PNG 입력만 허용.
    """
    max_side = settings.PHOTO_MAX_SIDE if max_side is None else max_side
    quality = settings.PHOTO_JPEG_QUALITY if quality is None else quality

    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError):
        raise ClientValidationError("이미지 로드 실패")

    if img.format not in ("JPEG", "PNG"):
        raise ClientValidationError("JPG/PNG 형식만 업로드 가능합니다.")

    w, h = img.size
    if not w or not h:
        raise ClientValidationError("이미지 크기 확인 실패")

    scale = min(1.0, max_side / max(w, h))
    if scale < 1.0:
        nw = max(1, round(w * scale))
        nh = max(1, round(h * scale))
        img = img.resize((nw, nh), Image.Resampling.LANCZOS)

    if img.mode != "RGB":
        img = img.convert("RGB")

    buf = io.BytesIO()
    img.save(buf, "JPEG", quality=quality)
    return buf.getvalue()
