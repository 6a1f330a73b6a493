"""
FastAPI 앱 엔트리포인트
- CORS 설정
- 라우터 등록 (회수 요청 접수, 제품 랜딩, 관리자)
- 사진 버킷 디렉토리 정적 서빙
- 에러 → plain text 응답 변환
- 헬스체크 엔드포인트
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.database import engine, Base, SessionLocal
from app.api import admin, pickup, products
from app.errors import PickupError
from app.schemas.common import HealthResponse

# 로깅 설정
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 시작 시 테이블과 사진 디렉토리 확인"""
    Base.metadata.create_all(bind=engine)
    logger.info("데이터베이스 테이블 확인 완료")

    os.makedirs(settings.PHOTO_DIR, exist_ok=True)
    logger.info(f"사진 저장소: {os.path.abspath(settings.PHOTO_DIR)} → {settings.PHOTO_BASE_URL}")

    yield

    logger.info("서버 종료")


app = FastAPI(
    title="QR 회수 요청 시스템",
    description="QR 스캔 기반 제품 회수 요청 접수 및 관리",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 라우터 등록
app.include_router(pickup.router)
app.include_router(products.router)
app.include_router(admin.router)


@app.exception_handler(PickupError)
async def pickup_error_handler(request: Request, exc: PickupError):
    """검증 실패는 400, 저장 실패는 500 — 본문은 사람이 읽는 메시지"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} 실패: {exc.message}")
    return PlainTextResponse(exc.message, status_code=exc.status_code)


@app.get("/api/health", response_model=HealthResponse)
def health_check():
    """시스템 상태 확인"""
    db_ok = False
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError as e:
        logger.warning(f"헬스체크 DB 연결 실패: {e}")
    finally:
        db.close()

    return HealthResponse(
        status="ok" if db_ok else "degraded",
        db_connected=db_ok,
        timestamp=datetime.now(timezone.utc),
    )


# ── 사진 버킷 공개 URL ──
if settings.PHOTO_BASE_URL.startswith("/"):
    app.mount(
        settings.PHOTO_BASE_URL,
        StaticFiles(directory=settings.PHOTO_DIR, check_dir=False),
        name="photos",
    )
