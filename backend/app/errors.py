"""
에러 분류
- 서버: 입력 검증 실패(400), 사진 저장 실패(500), DB 저장 실패(500)
- 클라이언트: 위치 기능 미지원 / 권한 거부 / 신호 불안정 / 위치 없음
- 역지오코딩 실패는 예외로 올리지 않는다 (주소 None으로 저장).
"""


class PickupError(Exception):
    """서버 측 회수 요청 처리 에러의 기본 클래스"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ClientValidationError(PickupError):
    """잘못된 입력 — 재시도 없이 4xx로 응답"""

    status_code = 400


class StorageFailure(PickupError):
    """사진 업로드 실패 — 요청 전체 실패"""

    status_code = 500


class PersistenceFailure(PickupError):
    """DB insert/조회 실패"""

    status_code = 500


# ── 클라이언트 측 위치 수집 에러 ──

class LocationError(Exception):
    """위치 수집 실패의 기본 클래스"""

    retryable = False


class GeolocationUnsupported(LocationError):
    def __init__(self, message: str = "이 기기/브라우저는 위치 기능을 지원하지 않습니다."):
        super().__init__(message)


class LocationPermissionDenied(LocationError):
    def __init__(self, message: str = "위치권한이 거부되었습니다. 브라우저 설정에서 위치권한을 허용해주세요."):
        super().__init__(message)


class LocationUnavailable(LocationError):
    """일시적인 신호 문제 — 사용자가 다시 시도할 수 있다."""

    retryable = True

    def __init__(self, message: str = "위치 정보를 가져올 수 없습니다(신호 불안정)."):
        super().__init__(message)


class NoLocationError(LocationError):
    retryable = True

    def __init__(self, message: str = "위치 요청이 시간초과되었습니다."):
        super().__init__(message)


class LocationCancelled(LocationError):
    def __init__(self, message: str = "위치 요청이 취소되었습니다."):
        super().__init__(message)
