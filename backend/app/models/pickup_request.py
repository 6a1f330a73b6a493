"""
pickup_requests 테이블 — QR 스캔 후 접수된 회수 요청
- 생성 후 변경 불가. 단, address는 백필 작업이 비어있을 때만 채운다.
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, Enum, DateTime, Index

from app.database import Base


class LoadStatus(str, enum.Enum):
    O = "O"
    X = "X"
    UNKNOWN = "UNKNOWN"


class PickupRequest(Base):
    __tablename__ = "pickup_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    sku = Column(String(20), nullable=False)  # 대문자, 제품 목록에 있는 코드
    item_no = Column(String(100), nullable=True)  # 개별번호 (원문 케이스 유지)
    qty = Column(Integer, nullable=False, default=1)  # 1~999
    load_status = Column(Enum(LoadStatus), nullable=False, default=LoadStatus.UNKNOWN)
    note = Column(String(100), nullable=True)
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)
    accuracy = Column(Float, nullable=True)  # 미터
    address = Column(String(500), nullable=True)  # 역지오코딩 결과
    photo_url = Column(String(500), nullable=True)

    __table_args__ = (
        Index("ix_pickup_requests_created_at", "created_at"),
    )
