"""
회수 요청 관련 Pydantic 스키마
"""

from datetime import datetime, timezone

from pydantic import BaseModel, field_validator

from app.models.pickup_request import LoadStatus


class PickupRequestOut(BaseModel):
    id: int
    created_at: datetime
    sku: str
    item_no: str | None = None
    qty: int
    load_status: LoadStatus
    note: str | None = None
    lat: float
    lng: float
    accuracy: float | None = None
    address: str | None = None
    photo_url: str | None = None

    model_config = {"from_attributes": True}

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        # SQLite는 tzinfo 없이 돌려준다 — 저장 기준이 UTC
        return v.replace(tzinfo=timezone.utc) if v.tzinfo is None else v


class PickupCreateResponse(BaseModel):
    ok: bool = True
    row: PickupRequestOut
    address: str | None = None
    photoUrl: str | None = None


class AccuracyBadge(BaseModel):
    meters: int
    bad: bool
    label: str


class AdminRow(PickupRequestOut):
    """관리자 목록 행 — 표시용 파생 필드 포함"""
    created_at_kst: str
    load_status_label: str
    map_url: str | None = None
    map_embed_url: str | None = None
    osm_embed_url: str | None = None
    accuracy_badge: AccuracyBadge | None = None
    exact_match: bool = False


class AdminListResponse(BaseModel):
    total: int
    exact_count: int = 0
    sku_options: list[str]
    date_options: list[str]
    rows: list[AdminRow]


class BackfillResponse(BaseModel):
    ok: bool = True
    updated: int
    remaining: int


class ProductOut(BaseModel):
    sku: str
    name: str
    image: str
    message: str


class ProductPageResponse(BaseModel):
    """QR 스캔 랜딩 페이지 데이터"""
    sku: str
    item_no: str | None = None
    product: ProductOut
    target_accuracy_m: float
    max_wait_ms: int
