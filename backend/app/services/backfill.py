"""
주소 백필 작업 — address가 비어있는 기존 요청에 주소를 채운다.
- 최신순으로 최대 limit건 (기본 30, 최대 80)
- Nominatim 이용 정책상 호출은 순차 실행, 호출마다 고정 딜레이
- 실패/빈 결과는 건너뛰고 다음 실행 때 다시 대상이 된다.
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from sqlalchemy import desc, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.errors import PersistenceFailure
from app.models import PickupRequest
from app.services.geocoder import ReverseGeocoder

logger = logging.getLogger(__name__)


@dataclass
class BackfillResult:
    updated: int
    remaining: int


def normalize_limit(value: Any) -> int:
    """숫자가 아니거나 0 이하이면 기본값, 상한 초과는 상한으로"""
    try:
        n = float(value)
    except (TypeError, ValueError):
        n = math.nan
    if not math.isfinite(n) or n <= 0:
        return settings.BACKFILL_DEFAULT_LIMIT
    return max(1, min(int(n), settings.BACKFILL_MAX_LIMIT))


def _address_missing():
    return or_(PickupRequest.address.is_(None), PickupRequest.address == "")


def count_missing_address(db: Session) -> int:
    return db.query(PickupRequest.id).filter(_address_missing()).count()


async def backfill_addresses(
    db: Session,
    geocoder: ReverseGeocoder,
    limit: Any = None,
    delay_seconds: float | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> BackfillResult:
    """주소 없는 요청을 순차적으로 역지오코딩하여 채운다."""
    limit = normalize_limit(limit)
    delay = settings.BACKFILL_DELAY_SECONDS if delay_seconds is None else delay_seconds

    try:
        targets = (
            db.query(PickupRequest.id, PickupRequest.lat, PickupRequest.lng)
            .filter(_address_missing())
            .order_by(desc(PickupRequest.created_at), desc(PickupRequest.id))
            .limit(limit)
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"[Backfill] 대상 조회 실패: {e}")
        raise PersistenceFailure(str(e))

    updated = 0
    for row_id, lat, lng in targets:
        if lat is None or lng is None or not (math.isfinite(lat) and math.isfinite(lng)):
            continue

        address = await geocoder.reverse(lat, lng)

        # 호출 간 고정 딜레이 (병렬화 금지)
        await sleep(delay)

        if not address:
            logger.debug(f"[Backfill] id={row_id} 주소 없음 — 건너뜀")
            continue

        try:
            # 이미 채워진 주소는 덮어쓰지 않는다
            count = (
                db.query(PickupRequest)
                .filter(PickupRequest.id == row_id, _address_missing())
                .update({PickupRequest.address: address}, synchronize_session=False)
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"[Backfill] id={row_id} 업데이트 실패: {e}")
            continue

        if count:
            updated += 1

    remaining = count_missing_address(db)
    logger.info(f"[Backfill] 완료: 대상 {len(targets)}건, 갱신 {updated}건, 남은 {remaining}건")
    return BackfillResult(updated=updated, remaining=remaining)
