"""
위치 수집 루프 — 목표 정확도에 도달하거나 최대 대기 시간이 지날 때까지 위치 샘플을 받는다.

상태 머신:
  IDLE → SAMPLING → SATISFIED  (정확도 ≤ 목표)
                  → TIMED_OUT  (시간초과, 마지막 샘플로 진행)
                  → FAILED     (권한 거부 / 신호 불안정 / 샘플 없음 / 기능 미지원 / 취소)

- 모든 종료 경로에서 위치 구독 해제와 타이머 취소를 정확히 한 번 수행한다.
- 완료 콜백도 정확히 한 번 호출된다. 종료 후 들어오는 이벤트는 무시.
- LocationSource / Scheduler는 주입 — asyncio 이벤트 루프는 Scheduler로 바로 쓸 수 있다.
"""

import asyncio
import enum
import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from app.config import settings
from app.errors import (
    GeolocationUnsupported, LocationCancelled, LocationError, LocationPermissionDenied,
    LocationUnavailable, NoLocationError,
)

logger = logging.getLogger(__name__)

# Geolocation API 에러 코드
PERMISSION_DENIED = 1
POSITION_UNAVAILABLE = 2
TIMEOUT = 3


class AcquisitionState(str, enum.Enum):
    IDLE = "IDLE"
    SAMPLING = "SAMPLING"
    SATISFIED = "SATISFIED"
    TIMED_OUT = "TIMED_OUT"
    FAILED = "FAILED"


_TERMINAL = (AcquisitionState.SATISFIED, AcquisitionState.TIMED_OUT, AcquisitionState.FAILED)


@dataclass(frozen=True)
class LocationSample:
    lat: float
    lng: float
    accuracy: float | None = None


@dataclass
class AcquisitionResult:
    state: AcquisitionState
    sample: LocationSample | None = None
    error: LocationError | None = None

    @property
    def ok(self) -> bool:
        return self.sample is not None and self.error is None


class LocationSource(Protocol):
    """기기 위치 기능 — watchPosition / clearWatch 형태"""

    def watch(
        self,
        on_sample: Callable[[LocationSample], None],
        on_error: Callable[[int], None],
    ) -> Any: ...

    def clear_watch(self, handle: Any) -> None: ...


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class LocationAcquisition:
    """위치 수집 상태 머신"""

    def __init__(
        self,
        source: LocationSource | None,
        scheduler: Scheduler,
        target_accuracy_m: float | None = None,
        max_wait_ms: int | None = None,
        on_done: Callable[[AcquisitionResult], None] | None = None,
    ):
        self._source = source
        self._scheduler = scheduler
        self.target_accuracy_m = (
            settings.LOCATION_TARGET_ACCURACY_M if target_accuracy_m is None else target_accuracy_m
        )
        self.max_wait_ms = settings.LOCATION_MAX_WAIT_MS if max_wait_ms is None else max_wait_ms
        self._on_done = on_done

        self._state = AcquisitionState.IDLE
        self._latest: LocationSample | None = None
        self._result: AcquisitionResult | None = None
        self._timer: TimerHandle | None = None
        self._watch: Any = None

    @property
    def state(self) -> AcquisitionState:
        return self._state

    @property
    def latest(self) -> LocationSample | None:
        return self._latest

    @property
    def result(self) -> AcquisitionResult | None:
        return self._result

    def start(self):
        """수집 시작. IDLE이 아니면 아무 것도 하지 않는다."""
        if self._state is not AcquisitionState.IDLE:
            return
        if self._source is None:
            self._finish(AcquisitionState.FAILED, error=GeolocationUnsupported())
            return

        self._state = AcquisitionState.SAMPLING
        self._timer = self._scheduler.call_later(self.max_wait_ms / 1000, self.on_timeout)
        handle = self._source.watch(self.on_sample, self.on_error)

        if self._state is AcquisitionState.SAMPLING:
            self._watch = handle
        else:
            # watch() 안에서 동기적으로 종료된 경우
            self._source.clear_watch(handle)

    def on_sample(self, sample: LocationSample):
        if self._state is not AcquisitionState.SAMPLING:
            return
        if not (math.isfinite(sample.lat) and math.isfinite(sample.lng)):
            logger.debug(f"유효하지 않은 좌표 무시: {sample}")
            return

        self._latest = sample
        acc = sample.accuracy
        # 정확도 미보고 샘플은 목표 달성으로 보지 않는다
        if acc is not None and math.isfinite(acc) and acc <= self.target_accuracy_m:
            self._finish(AcquisitionState.SATISFIED, sample=sample)

    def on_error(self, code: int):
        if self._state is not AcquisitionState.SAMPLING:
            return
        if code == PERMISSION_DENIED:
            error = LocationPermissionDenied()
        else:
            error = LocationUnavailable()
        self._finish(AcquisitionState.FAILED, error=error)

    def on_timeout(self):
        if self._state is not AcquisitionState.SAMPLING:
            return
        self._timer = None  # 이미 실행된 타이머
        if self._latest is not None:
            self._finish(AcquisitionState.TIMED_OUT, sample=self._latest)
        else:
            self._finish(AcquisitionState.FAILED, error=NoLocationError())

    def cancel(self):
        """진행 중이면 구독과 타이머를 정리하고 FAILED로 끝낸다."""
        if self._state is AcquisitionState.SAMPLING:
            self._finish(AcquisitionState.FAILED, error=LocationCancelled())

    def _finish(
        self,
        state: AcquisitionState,
        sample: LocationSample | None = None,
        error: LocationError | None = None,
    ):
        if self._state in _TERMINAL:
            return
        self._state = state

        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._watch is not None:
            self._source.clear_watch(self._watch)
            self._watch = None

        self._result = AcquisitionResult(state=state, sample=sample, error=error)
        if error is not None:
            logger.info(f"위치 수집 실패 ({state.value}): {error}")
        else:
            logger.info(f"위치 수집 완료 ({state.value}): accuracy={sample.accuracy}")

        if self._on_done is not None:
            self._on_done(self._result)


async def acquire_location(
    source: LocationSource | None,
    target_accuracy_m: float | None = None,
    max_wait_ms: int | None = None,
) -> AcquisitionResult:
    """현재 이벤트 루프에서 상태 머신을 돌리고 결과를 기다린다."""
    loop = asyncio.get_running_loop()
    future = loop.create_future()

    def _done(result: AcquisitionResult):
        if not future.done():
            future.set_result(result)

    machine = LocationAcquisition(
        source,
        loop,
        target_accuracy_m=target_accuracy_m,
        max_wait_ms=max_wait_ms,
        on_done=_done,
    )
    machine.start()
    try:
        return await future
    except asyncio.CancelledError:
        machine.cancel()
        raise
