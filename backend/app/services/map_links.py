"""
관리자 화면 표시용 헬퍼 — 지도 링크/임베드 URL, 정확도 배지, 적재 상태 라벨
좌표가 없거나 0이면 None을 반환하고 화면은 "좌표 없음"으로 대체한다.
"""

import math

from app.config import settings


def _valid_coords(lat, lng) -> bool:
    try:
        la = float(lat)
        ln = float(lng)
    except (TypeError, ValueError):
        return False
    return math.isfinite(la) and math.isfinite(ln) and la != 0 and ln != 0


def google_maps_link(lat, lng) -> str | None:
    if not _valid_coords(lat, lng):
        return None
    return f"https://www.google.com/maps?q={float(lat)},{float(lng)}"


def google_embed_url(lat, lng, zoom: int | None = None) -> str | None:
    if not _valid_coords(lat, lng):
        return None
    zoom = settings.MAP_EMBED_ZOOM if zoom is None else zoom
    return f"https://www.google.com/maps?q={float(lat)},{float(lng)}&z={zoom}&output=embed"


def osm_embed_url(lat, lng, delta: float | None = None) -> str | None:
    """OpenStreetMap 임베드 — 중심점 기준 bbox + 마커"""
    if not _valid_coords(lat, lng):
        return None
    la, ln = float(lat), float(lng)
    d = settings.MAP_BBOX_DELTA if delta is None else delta
    return (
        "https://www.openstreetmap.org/export/embed.html"
        f"?bbox={ln - d},{la - d},{ln + d},{la + d}&layer=mapnik&marker={la},{ln}"
    )


def accuracy_badge(accuracy, bad_threshold: float | None = None) -> dict | None:
    """정확도 배지 — 값이 없거나 0이면 None"""
    if accuracy is None:
        return None
    try:
        acc = float(accuracy)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(acc) or acc == 0:
        return None

    threshold = settings.ACCURACY_BAD_THRESHOLD_M if bad_threshold is None else bad_threshold
    is_bad = acc >= threshold
    return {
        "meters": round(acc),
        "bad": is_bad,
        "label": f"정확도 낮음({int(threshold)}m 이상)" if is_bad else "정확도 양호",
    }


def load_status_label(status) -> str:
    value = status.value if hasattr(status, "value") else status
    if value == "O":
        return "적재 O"
    if value == "X":
        return "적재 X"
    return "알수없음"
