"""
데모 데이터 시딩 스크립트
- 서울 일대 좌표로 회수 요청 샘플 생성 (일부는 주소 없음 → 백필 대상)
- 실행: cd backend && python seed_data.py
"""

import random
import sys
import os
from datetime import datetime, timedelta, timezone

# backend/ 디렉토리 기준으로 app 패키지를 찾을 수 있도록 경로 설정
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app.catalog import PRODUCTS
from app.database import engine, SessionLocal, Base
from app.models import PickupRequest, LoadStatus

# (이름, 위도, 경도)
SEOUL_SPOTS = [
    ("서울역", 37.5547, 126.9707),
    ("강남역", 37.4979, 127.0276),
    ("여의도", 37.5219, 126.9245),
    ("잠실", 37.5133, 127.1001),
    ("성수", 37.5446, 127.0557),
    ("구로디지털단지", 37.4852, 126.9015),
]

NOTES = ["", "", "경비실 앞", "오후 수거 희망", "010-0000-0000", "박스 2개 포함"]


def seed_pickups(session, count: int = 20, rng: random.Random | None = None):
    """회수 요청 샘플 생성 — 최근 7일에 분산"""
    rng = rng or random.Random(42)
    now = datetime.now(timezone.utc)
    skus = sorted(PRODUCTS)

    rows = []
    for i in range(count):
        spot, lat, lng = rng.choice(SEOUL_SPOTS)
        sku = rng.choice(skus)
        has_address = rng.random() > 0.3
        rows.append(PickupRequest(
            created_at=now - timedelta(hours=rng.randint(0, 24 * 7)),
            sku=sku,
            item_no=f"KDA{i + 1:04d}" if rng.random() > 0.2 else None,
            qty=rng.randint(1, 5),
            load_status=rng.choice(list(LoadStatus)),
            note=rng.choice(NOTES),
            lat=lat + rng.uniform(-0.005, 0.005),
            lng=lng + rng.uniform(-0.005, 0.005),
            accuracy=round(rng.uniform(5, 150), 1),
            address=f"{spot} 인근, 서울특별시, 대한민국" if has_address else None,
            photo_url=None,
        ))

    session.add_all(rows)
    session.commit()
    print(f"  [OK] PickupRequests: {len(rows)}건 생성 (주소 없음 {sum(1 for r in rows if not r.address)}건)")
    return rows


def main():
    print("=" * 60)
    print("QR 회수 요청 시스템 — 데모 데이터 시딩")
    print("=" * 60)

    # 테이블 전체 재생성
    print("\n[1/2] 테이블 생성 중...")
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    print("  [OK] 테이블 생성 완료")

    session = SessionLocal()
    try:
        print("\n[2/2] PickupRequests 시딩...")
        rows = seed_pickups(session)

        print("\n" + "=" * 60)
        print("시딩 완료!")
        print(f"  PickupRequests: {len(rows)}건")
        print("=" * 60)

    except Exception as e:
        session.rollback()
        print(f"\n[ERROR] 시딩 실패: {e}")
        raise
    finally:
        session.close()


if __name__ == "__main__":
    main()
