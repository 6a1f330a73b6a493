"""
역지오코딩 클라이언트 — Nominatim reverse API 호출 래퍼.
- 실패(네트워크 에러, 200 이외 응답, 잘못된 본문) 시 None 반환.
- 호출자는 None이면 주소 없이 진행한다.
"""

import logging

import httpx

from app.config import settings

logger = logging.getLogger(__name__)


class ReverseGeocoder:
    """좌표 → 주소 문자열(display_name)"""

    def __init__(
        self,
        url: str | None = None,
        user_agent: str | None = None,
        language: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url or settings.GEOCODER_URL
        self.user_agent = user_agent or settings.GEOCODER_USER_AGENT
        self.language = language or settings.GEOCODER_LANGUAGE
        self.timeout = settings.GEOCODER_TIMEOUT_SECONDS if timeout is None else timeout
        self._transport = transport

    def _params(self, lat: float, lng: float) -> dict:
        return {
            "format": "jsonv2",
            "lat": lat,
            "lon": lng,
            "zoom": settings.GEOCODER_ZOOM,
            "addressdetails": 1,
            "accept-language": self.language,
        }

    async def reverse(self, lat: float, lng: float) -> str | None:
        """좌표의 주소를 조회한다. 실패 시 None."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                res = await client.get(
                    self.url,
                    params=self._params(lat, lng),
                    headers={"User-Agent": self.user_agent},
                )
            if res.status_code != 200:
                logger.warning(f"역지오코딩 응답 오류: HTTP {res.status_code} ({lat}, {lng})")
                return None
            body = res.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"역지오코딩 실패 ({lat}, {lng}): {e}")
            return None

        display = body.get("display_name") if isinstance(body, dict) else None
        if not isinstance(display, str) or not display.strip():
            return None
        return display.strip()


_geocoder: ReverseGeocoder | None = None


def get_geocoder() -> ReverseGeocoder:
    """FastAPI Depends용 — 테스트에서 override 한다."""
    global _geocoder
    if _geocoder is None:
        _geocoder = ReverseGeocoder()
    return _geocoder
