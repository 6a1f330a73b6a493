"""
관리자 API — 요청 목록 조회, 주소 백필
- GET /admin/list: 최신순 목록 (q / sku / date / from / to 필터 선택)
- POST /admin/backfill-addresses: 주소 없는 요청에 주소 채우기
"""

import logging

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.errors import PersistenceFailure
from app.models import PickupRequest
from app.schemas.pickup import AdminListResponse, AdminRow, BackfillResponse, PickupRequestOut
from app.services.backfill import backfill_addresses
from app.services.civil_time import format_civil_datetime
from app.services.geocoder import ReverseGeocoder, get_geocoder
from app.services.map_links import (
    accuracy_badge, google_embed_url, google_maps_link, load_status_label, osm_embed_url,
)
from app.services.request_list import (
    ALL, AdminViewState, date_options, is_exact_match, normalize_query, project, sku_options,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def _build_admin_row(row: dict, query: str) -> AdminRow:
    """목록 행 + 표시용 파생 필드"""
    lat, lng = row.get("lat"), row.get("lng")
    return AdminRow(
        **row,
        created_at_kst=format_civil_datetime(row.get("created_at")),
        load_status_label=load_status_label(row.get("load_status")),
        map_url=google_maps_link(lat, lng),
        map_embed_url=google_embed_url(lat, lng),
        osm_embed_url=osm_embed_url(lat, lng),
        accuracy_badge=accuracy_badge(row.get("accuracy")),
        exact_match=is_exact_match(row, query),
    )


@router.get("/list", response_model=AdminListResponse)
def list_requests(
    response: Response,
    q: str = Query("", description="개별번호/제품/주소/비고 검색"),
    sku: str = Query(ALL, description="제품 필터"),
    date: str = Query(ALL, description="단일 날짜 (YYYY-MM-DD, UTC+9)"),
    date_from: str | None = Query(None, alias="from", description="시작일 (포함)"),
    date_to: str | None = Query(None, alias="to", description="종료일 (포함)"),
    db: Session = Depends(get_db),
):
    """회수 요청 목록 조회 (최신순, ADMIN_LIST_LIMIT건까지)"""
    try:
        records = (
            db.query(PickupRequest)
            .order_by(desc(PickupRequest.created_at), desc(PickupRequest.id))
            .limit(settings.ADMIN_LIST_LIMIT)
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"관리자 목록 조회 실패: {e}")
        raise PersistenceFailure(str(e))

    rows = [PickupRequestOut.model_validate(r).model_dump() for r in records]

    state = AdminViewState().with_query(q).with_sku_filter(sku)
    if date_from or date_to:
        state = state.with_date_range(date_from, date_to)
    else:
        state = state.with_date(date)

    projection = project(rows, state)
    query = normalize_query(state.query)

    response.headers["Cache-Control"] = "no-store"
    return AdminListResponse(
        total=len(projection.rows),
        exact_count=projection.exact_count,
        sku_options=sku_options(rows),
        date_options=date_options(rows),
        rows=[_build_admin_row(r, query) for r in projection.rows],
    )


@router.post("/backfill-addresses", response_model=BackfillResponse)
async def run_backfill(
    request: Request,
    db: Session = Depends(get_db),
    geocoder: ReverseGeocoder = Depends(get_geocoder),
):
    """주소가 비어있는 요청을 최신순으로 최대 limit건 채운다."""
    try:
        body = await request.json()
    except ValueError:
        body = {}
    limit = body.get("limit") if isinstance(body, dict) else None

    result = await backfill_addresses(db, geocoder, limit=limit)
    return BackfillResponse(ok=True, updated=result.updated, remaining=result.remaining)
