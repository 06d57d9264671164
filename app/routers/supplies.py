# =============================================================================
# app/routers/supplies.py - Supply Endpoints
# =============================================================================
# CRUD for the account's supplies (raw materials). Listing is
# cursor-paginated, newest first.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path, Query

from app.dependencies import PageSizeDep, TenantDep
from core.models.supply import SupplyCreate, SupplyPage, SupplyResponse, SupplyUpdate
from core.services.supply_service import SupplyService

router = APIRouter()


@router.get("", response_model=SupplyPage)
async def list_supplies(
    tenant: TenantDep,
    page_size: PageSizeDep,
    cursor: Annotated[str | None, Query(description="next_cursor from the previous page")] = None,
):
    """
    List supplies, one page at a time.

    Pass the returned next_cursor to get the following page. An unknown
    cursor starts over at the first page.
    """
    page = SupplyService.get_supplies_page(tenant.account_id, page_size, cursor)
    return SupplyPage(
        supplies=[SupplyResponse(**row) for row in page.items],
        has_more=page.has_more,
        next_cursor=page.next_cursor,
        total=page.total,
    )


@router.post("", response_model=SupplyResponse, status_code=201)
async def create_supply(tenant: TenantDep, body: SupplyCreate):
    """
    Create a supply.

    Raises:
        403: If the plan's supply quota is used up
    """
    return SupplyResponse(**SupplyService.create_supply(tenant.account_id, body, tenant.plan))


@router.get("/{supply_id}", response_model=SupplyResponse)
async def get_supply(
    tenant: TenantDep,
    supply_id: Annotated[str, Path(description="Supply ID")],
):
    return SupplyResponse(**SupplyService.get_supply(tenant.account_id, supply_id))


@router.patch("/{supply_id}", response_model=SupplyResponse)
async def update_supply(
    tenant: TenantDep,
    body: SupplyUpdate,
    supply_id: Annotated[str, Path(description="Supply ID")],
):
    """
    Update a supply.

    Changing the cost flags every product using it for a new price.
    """
    return SupplyResponse(**SupplyService.update_supply(tenant.account_id, supply_id, body))


@router.delete("/{supply_id}", status_code=204)
async def delete_supply(
    tenant: TenantDep,
    supply_id: Annotated[str, Path(description="Supply ID")],
):
    """
    Delete a supply.

    Raises:
        409: If a product still uses the supply
    """
    SupplyService.delete_supply(tenant.account_id, supply_id)
