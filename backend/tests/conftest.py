"""
테스트 공용 fixture
- 인메모리 SQLite (StaticPool) + get_db / 역지오코딩 / 사진 저장소 override
- 위치 수집용 가짜 LocationSource / Scheduler
"""

import os
import tempfile

# app.config 로드 전에 설정 (파일 DB / 실제 사진 디렉토리 사용 방지)
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PHOTO_DIR", os.path.join(tempfile.gettempdir(), "qr-pickup-test-photos"))

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.client.location import LocationSample
from app.database import Base, get_db
from app.errors import StorageFailure
from app.main import app
from app.models import PickupRequest, LoadStatus
from app.services.geocoder import get_geocoder
from app.services.storage import get_storage

DEFAULT_ADDRESS = "세종대로 110, 중구, 서울특별시, 04524, 대한민국"


class FakeGeocoder:
    """address가 None이면 실패(주소 없음)로 동작"""

    def __init__(self, address: str | None = DEFAULT_ADDRESS):
        self.address = address
        self.responses: list[str | None] | None = None
        self.calls: list[tuple[float, float]] = []

    async def reverse(self, lat, lng):
        self.calls.append((lat, lng))
        if self.responses is not None:
            return self.responses.pop(0) if self.responses else None
        return self.address


class FakeStorage:
    def __init__(self):
        self.fail = False
        self.uploads: dict[str, tuple[bytes, str]] = {}

    def upload(self, path, data, content_type):
        if self.fail:
            raise StorageFailure("사진 업로드 실패: bucket unavailable")
        self.uploads[path] = (data, content_type)

    def public_url(self, path):
        return f"https://storage.test/pickup-photos/{path}"


class FakeTimer:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancel_count = 0

    def cancel(self):
        self.cancel_count += 1

    def fire(self):
        self.callback()


class FakeScheduler:
    def __init__(self):
        self.timers: list[FakeTimer] = []

    def call_later(self, delay, callback):
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer


class FakeLocationSource:
    """watch 콜백을 잡아두고 테스트가 직접 샘플/에러를 흘려보낸다."""

    def __init__(self):
        self.on_sample = None
        self.on_error = None
        self.watch_count = 0
        self.cleared: list[str] = []

    def watch(self, on_sample, on_error):
        self.watch_count += 1
        self.on_sample = on_sample
        self.on_error = on_error
        return f"watch-{self.watch_count}"

    def clear_watch(self, handle):
        self.cleared.append(handle)

    def emit(self, accuracy, lat=37.5665, lng=126.9780):
        self.on_sample(LocationSample(lat=lat, lng=lng, accuracy=accuracy))

    def fail(self, code):
        self.on_error(code)


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def geocoder():
    return FakeGeocoder()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def api_app(session_factory, geocoder, storage):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_geocoder] = lambda: geocoder
    app.dependency_overrides[get_storage] = lambda: storage
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(api_app):
    return TestClient(api_app)


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def location_source():
    return FakeLocationSource()


@pytest.fixture
def make_row(db):
    """PickupRequest 한 건 직접 insert"""

    def _make(created_at=None, **kwargs):
        values = {
            "sku": "MS108",
            "qty": 1,
            "load_status": LoadStatus.UNKNOWN,
            "note": "",
            "lat": 37.5665,
            "lng": 126.9780,
        }
        values.update(kwargs)
        row = PickupRequest(created_at=created_at or datetime.now(timezone.utc), **values)
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    return _make
