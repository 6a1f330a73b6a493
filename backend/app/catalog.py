"""
제품 목록 — 회수 대상 제품(SKU) 고정 레지스트리
- QR 스캔 값은 "<sku>" 또는 "<sku>_<item_no>" 형태
"""

from dataclasses import dataclass

_DEFAULT_MESSAGE = "회수 대상 제품입니다. 아래 버튼을 눌러 회수 요청을 보내주세요."


@dataclass(frozen=True)
class Product:
    sku: str
    name: str
    image: str
    message: str = _DEFAULT_MESSAGE


PRODUCTS: dict[str, Product] = {
    "BPS": Product(sku="BPS", name="BPS", image="/products/BPS.jpg"),
    "MS108": Product(sku="MS108", name="MS108", image="/products/MS108.jpg"),
    "MS112": Product(sku="MS112", name="MS112", image="/products/MS112.jpg"),
}


def get_product(sku: str | None) -> Product | None:
    """대소문자 구분 없이 제품 조회"""
    if not sku:
        return None
    return PRODUCTS.get(str(sku).strip().upper())


def is_known_sku(sku: str | None) -> bool:
    return get_product(sku) is not None


def parse_scan_payload(raw: str | None) -> tuple[str, str | None]:
    """
    QR 스캔 값을 (sku, item_no)로 분리한다.
    - 첫 "_" 기준으로 분리, sku는 대문자로 정규화
    - item_no는 원문 케이스 유지, 비어있으면 None
    예: "ms108_KDA0001" → ("MS108", "KDA0001")
    """
    s = (raw or "").strip()
    head, sep, tail = s.partition("_")
    if not sep:
        return s.upper(), None
    item_no = tail.strip()
    return head.upper(), item_no or None
