# =============================================================================
# app/routers/pricing.py - Price Preview Endpoint
# =============================================================================

from fastapi import APIRouter

from app.dependencies import TenantDep
from core.models.pricing import PricePreviewRequest, PriceResponse
from core.services.product_service import ProductService

router = APIRouter()


@router.post("/preview", response_model=PriceResponse)
async def preview_price(tenant: TenantDep, body: PricePreviewRequest):
    """
    Price ad-hoc inputs with the account's settings without saving anything.

    Send either a supplies_cost or a list of supplies:

        {"supplies_cost": 90}
        {"supplies": [{"unit_price": 10, "quantity": 5}, {"unit_price": 20, "quantity": 2}]}
    """
    return PriceResponse(**ProductService.preview_price(tenant.account_id, body).to_dict())
