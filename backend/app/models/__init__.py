"""
SQLAlchemy ORM 모델 패키지
- 모든 모델을 여기서 import하여 Base.metadata에 등록한다.
"""

from app.models.pickup_request import PickupRequest, LoadStatus

__all__ = [
    "PickupRequest",
    "LoadStatus",
]
