"""
애플리케이션 설정
- DB, 사진 저장소, 역지오코딩, 주소 백필, 위치 수집 관련 설정을 관리한다.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # 데이터베이스
    DATABASE_URL: str = "sqlite:///pickup.db"

    # CORS
    CORS_ORIGINS: list[str] = ["*"]

    # 사진 저장소 (버킷 루트 디렉토리 / 공개 URL prefix)
    PHOTO_DIR: str = "photos"
    PHOTO_BASE_URL: str = "/photos"
    PHOTO_MAX_BYTES: int = 3 * 1024 * 1024
    PHOTO_ALLOWED_TYPES: list[str] = ["image/jpeg", "image/png", "image/webp"]

    # 클라이언트 측 사진 압축
    PHOTO_MAX_SIDE: int = 1280
    PHOTO_JPEG_QUALITY: int = 75

    # 역지오코딩 (Nominatim)
    GEOCODER_URL: str = "https://nominatim.openstreetmap.org/reverse"
    GEOCODER_USER_AGENT: str = "qr-pickup/1.0"
    GEOCODER_LANGUAGE: str = "ko"
    GEOCODER_ZOOM: int = 18
    GEOCODER_TIMEOUT_SECONDS: float = 10.0

    # 주소 백필
    BACKFILL_DEFAULT_LIMIT: int = 30
    BACKFILL_MAX_LIMIT: int = 80
    BACKFILL_DELAY_SECONDS: float = 0.25

    # 관리자 목록 최대 건수
    ADMIN_LIST_LIMIT: int = 300

    # 날짜 필터/표시 기준 시간대 (분 단위, UTC+9)
    CIVIL_TZ_OFFSET_MINUTES: int = 540

    # 위치 수집 루프 — 목표 정확도와 최대 대기 시간
    LOCATION_TARGET_ACCURACY_M: float = 30.0
    LOCATION_MAX_WAIT_MS: int = 15000

    # 관리자 화면 정확도 배지 (수집 루프 기준과 별개)
    ACCURACY_BAD_THRESHOLD_M: float = 100.0

    # 입력 정규화
    QTY_MAX: int = 999
    NOTE_MAX_LENGTH: int = 100

    # 지도 임베드
    MAP_EMBED_ZOOM: int = 16
    MAP_BBOX_DELTA: float = 0.003

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
