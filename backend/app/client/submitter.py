"""
회수 요청 전송기 — QR 랜딩 화면의 "요청 보내기" 동작
- 수량 입력 검증 → 위치 수집 → 사진 압축 → POST /api/pickup (multipart)
- 전송 중(sending)에 다시 호출하면 아무 것도 하지 않는다.
- 결과는 항상 사용자에게 보여줄 메시지를 포함한다.
"""

import logging
import time
from dataclasses import dataclass

import httpx

from app.catalog import get_product, parse_scan_payload
from app.client.location import LocationSample, LocationSource, acquire_location
from app.errors import PickupError
from app.services.storage import compress_image, is_jpeg_or_png

logger = logging.getLogger(__name__)


@dataclass
class SubmitOutcome:
    ok: bool
    message: str
    address: str | None = None
    photo_url: str | None = None
    location: LocationSample | None = None


def parse_qty_text(text: str | None) -> int | None:
    """숫자만 허용. 공백/빈 값/숫자 외 문자는 None."""
    t = (text or "").strip()
    if not t or not (t.isascii() and t.isdigit()):
        return None
    return int(t)


class PickupSubmitter:
    def __init__(
        self,
        scan: str,
        source: LocationSource | None,
        base_url: str = "http://localhost:8000",
        transport: httpx.AsyncBaseTransport | None = None,
        target_accuracy_m: float | None = None,
        max_wait_ms: int | None = None,
        timeout: float = 30.0,
    ):
        self.sku, self.item_no = parse_scan_payload(scan)
        self.product = get_product(self.sku)
        self._source = source
        self._base_url = base_url
        self._transport = transport
        self._target_accuracy_m = target_accuracy_m
        self._max_wait_ms = max_wait_ms
        self._timeout = timeout

        self.sending = False
        self.submitted = False
        self.message = ""

    def _outcome(self, ok: bool, message: str, **kwargs) -> SubmitOutcome:
        self.message = message
        return SubmitOutcome(ok=ok, message=message, **kwargs)

    def _photo_filename(self) -> str:
        item = f"{self.item_no}_" if self.item_no else ""
        return f"pickup_{self.sku}_{item}{int(time.time() * 1000)}.jpg"

    async def submit(
        self,
        qty_text: str = "1",
        load_status: str = "UNKNOWN",
        note: str = "",
        photo: bytes | None = None,
        photo_type: str | None = None,
    ) -> SubmitOutcome | None:
        """한 번의 요청 전송. 이미 전송 중이면 None."""
        if self.sending:
            return None

        if self.product is None:
            return self._outcome(False, "지원하지 않는 제품입니다.")

        qty = parse_qty_text(qty_text)
        if qty is None or qty <= 0:
            return self._outcome(False, "수량은 1 이상이어야 합니다.")

        if photo and not is_jpeg_or_png(photo_type):
            return self._outcome(False, "JPG/PNG 형식만 업로드 가능합니다.")

        self.sending = True
        try:
            # 위치 먼저 받고 바로 전송
            result = await acquire_location(
                self._source,
                target_accuracy_m=self._target_accuracy_m,
                max_wait_ms=self._max_wait_ms,
            )
            if not result.ok:
                return self._outcome(False, str(result.error))
            loc = result.sample

            data = {
                "sku": self.sku,
                "qty": str(qty),
                "load_status": load_status,
                "note": (note or "")[:100],
                "lat": str(loc.lat),
                "lng": str(loc.lng),
            }
            if self.item_no:
                data["item_no"] = self.item_no
            if loc.accuracy is not None:
                data["accuracy"] = str(loc.accuracy)

            files = None
            if photo:
                compressed = compress_image(photo)
                files = {"photo": (self._photo_filename(), compressed, "image/jpeg")}

            async with httpx.AsyncClient(
                base_url=self._base_url, transport=self._transport, timeout=self._timeout
            ) as client:
                res = await client.post("/api/pickup", data=data, files=files)

            if not res.is_success:
                return self._outcome(False, res.text or "전송 실패")

            body = res.json()
            if not isinstance(body, dict):
                raise ValueError(f"unexpected response body: {type(body).__name__}")
            row = body.get("row") or {}
            address = row.get("address") or body.get("address")
            photo_url = row.get("photo_url") or body.get("photoUrl")

            self.submitted = True
            logger.info(f"회수 요청 전송 완료: {self.sku} ({self.item_no or '-'})")
            return self._outcome(True, "신청 완료!", address=address, photo_url=photo_url, location=loc)

        except PickupError as e:
            return self._outcome(False, e.message)
        except httpx.HTTPError as e:
            logger.warning(f"회수 요청 전송 실패: {e}")
            return self._outcome(False, f"전송 실패: {e}")
        except ValueError as e:
            logger.warning(f"회수 요청 응답 해석 실패: {e}")
            return self._outcome(False, "전송 실패: 서버 응답을 해석할 수 없습니다.")
        finally:
            self.sending = False
