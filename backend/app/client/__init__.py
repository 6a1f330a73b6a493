"""
사용자 측(QR 랜딩 화면) 로직 패키지
- 위치 수집 상태 머신
- 회수 요청 전송기
"""

from app.client.location import (
    AcquisitionResult,
    AcquisitionState,
    LocationAcquisition,
    LocationSample,
    acquire_location,
)
from app.client.submitter import PickupSubmitter, SubmitOutcome, parse_qty_text

__all__ = [
    "AcquisitionResult",
    "AcquisitionState",
    "LocationAcquisition",
    "LocationSample",
    "acquire_location",
    "PickupSubmitter",
    "SubmitOutcome",
    "parse_qty_text",
]
