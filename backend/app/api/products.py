"""
제품 랜딩 API — QR 스캔 값으로 제품 페이지 데이터 제공
"""

from fastapi import APIRouter, HTTPException

from app.catalog import get_product, parse_scan_payload
from app.config import settings
from app.schemas.pickup import ProductOut, ProductPageResponse

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("/{scan}", response_model=ProductPageResponse)
def get_product_page(scan: str):
    """'<sku>' 또는 '<sku>_<item_no>' 스캔 값 해석"""
    sku, item_no = parse_scan_payload(scan)
    product = get_product(sku)
    if product is None:
        raise HTTPException(status_code=404, detail=f"지원하지 않는 제품입니다: {sku}")

    return ProductPageResponse(
        sku=sku,
        item_no=item_no,
        product=ProductOut(
            sku=product.sku,
            name=product.name,
            image=product.image,
            message=product.message,
        ),
        target_accuracy_m=settings.LOCATION_TARGET_ACCURACY_M,
        max_wait_ms=settings.LOCATION_MAX_WAIT_MS,
    )
