# =============================================================================
# app/pages.py - Server-Rendered Pages
# =============================================================================
# Jinja2 pages for the browser. Pages call the services directly (no API
# round trip) and follow post/redirect/get:
# - a valid form POST redirects (303) to a GET page, optionally with
#   ?notice=<key> to show a one-line confirmation
# - an invalid form is re-rendered with the error and the submitted values
#
# Private pages depend on PageTenantDep; without a valid session cookie the
# request is redirected to /login.
# =============================================================================

import logging
from pathlib import Path
from typing import Any, Optional

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError

from app.auth.dependencies import get_session
from app.auth.models import SessionData
from app.auth.routes import password_sign_in, password_sign_up, register
from app.auth.tokens import clear_session, set_session
from app.config import settings
from app.dependencies import PageTenantDep
from app.exceptions import PricewiseException
from core.models.pricing import PricePreviewRequest
from core.models.product import ProductCreate, ProductUpdate
from core.models.settings import SettingsUpdate
from core.models.supply import SupplyCreate, SupplyUpdate
from core.services.account_service import AccountService
from core.services.feature_service import FeatureService
from core.services.product_service import ProductService
from core.services.settings_service import SettingsService
from core.services.supply_service import SupplyService
from core.services.user_service import UserService
from lib.feature_flags import PLAN_CONFIG, Feature, has_feature

logger = logging.getLogger(__name__)

router = APIRouter(default_response_class=HTMLResponse)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

# Ingredient rows offered on the product form
INGREDIENT_ROWS = 5

NOTICES = {
    "created": "Saved.",
    "updated": "Changes saved.",
    "deleted": "Deleted.",
    "settings": "Settings saved. Product prices are being recalculated.",
    "recalculated": "Prices recalculated.",
    "confirm_email": "Check your inbox to confirm your email, then log in.",
}


# =============================================================================
# Helpers
# =============================================================================

def _render(request: Request, template: str, status_code: int = 200, **context: Any):
    context.setdefault("notice", NOTICES.get(request.query_params.get("notice", "")))
    return templates.TemplateResponse(request, template, context, status_code=status_code)


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=303)


def _error_message(error: Exception) -> str:
    """One-line message for a form error."""
    if isinstance(error, ValidationError):
        return "; ".join(
            f"{'.'.join(str(part) for part in e['loc']) or 'form'}: {e['msg']}"
            for e in error.errors()
        )
    if isinstance(error, PricewiseException):
        return error.message
    return str(error)


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value.strip()


def _ingredients_from_form(supply_ids: list[str], quantities: list[str]) -> list[dict[str, Any]]:
    """Pair up the ingredient rows of the product form, skipping empty rows."""
    ingredients = []
    for supply_id, quantity in zip(supply_ids, quantities):
        if not supply_id:
            continue
        ingredients.append({"supply_id": supply_id, "quantity": quantity or "1"})
    return ingredients


# =============================================================================
# Public pages
# =============================================================================

@router.get("/")
async def landing(request: Request, session: Optional[SessionData] = Depends(get_session)):
    return _render(request, "landing.html", session=session, plans=PLAN_CONFIG)


@router.get("/login")
async def login_page(request: Request, session: Optional[SessionData] = Depends(get_session)):
    if session:
        return _redirect("/dashboard")
    return _render(request, "login.html", email="")


@router.post("/login")
async def login_submit(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
):
    try:
        access_token = password_sign_in(email.strip(), password)
        response = _redirect("/dashboard")
        set_session(response, access_token)
    except PricewiseException as e:
        return _render(request, "login.html", status_code=400, email=email, error=e.message)
    return response


@router.get("/signup")
async def signup_page(request: Request, session: Optional[SessionData] = Depends(get_session)):
    if session:
        return _redirect("/dashboard")
    return _render(request, "signup.html", form={})


@router.post("/signup")
async def signup_submit(
    request: Request,
    name: str = Form(""),
    account_name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
):
    form = {"name": name, "account_name": account_name, "email": email}
    if not email.strip() or not password:
        return _render(request, "signup.html", status_code=400, form=form,
                       error="Email and password are required.")

    try:
        access_token = password_sign_up(email.strip(), password)
        if access_token is None:
            return _redirect("/login?notice=confirm_email")
        response = _redirect("/dashboard")
        register(response, access_token, _blank_to_none(name), _blank_to_none(account_name))
    except PricewiseException as e:
        return _render(request, "signup.html", status_code=400, form=form, error=e.message)
    return response


@router.get("/logout")
async def logout():
    response = _redirect("/")
    clear_session(response)
    return response


# =============================================================================
# Dashboard & demo
# =============================================================================

@router.get("/dashboard")
async def dashboard(request: Request, tenant: PageTenantDep):
    user = UserService.get_user(tenant.uid)
    account = AccountService.get_account(tenant.account_id)
    return _render(
        request,
        "dashboard.html",
        user=user,
        account=account,
        usage=FeatureService.usage_summary(tenant.account_id, tenant.plan),
        outdated=ProductService.get_products_needing_recalculation(tenant.account_id),
        billing_enabled=settings.billing_enabled,
    )


def _demo_context(tenant) -> dict[str, Any]:
    return {
        "materials_available": has_feature(Feature.MATERIALS, tenant.plan),
        "usage": FeatureService.usage_summary(tenant.account_id, tenant.plan),
        "pricing_settings": SettingsService.get_or_create_settings(tenant.account_id),
    }


@router.get("/demo")
async def demo(request: Request, tenant: PageTenantDep):
    return _render(request, "demo.html", supplies_cost="", result=None, **_demo_context(tenant))


@router.post("/demo")
async def demo_preview(request: Request, tenant: PageTenantDep, supplies_cost: str = Form("")):
    """Price a supplies cost with the account's settings (nothing is saved)."""
    try:
        result = ProductService.preview_price(
            tenant.account_id,
            PricePreviewRequest(supplies_cost=supplies_cost),
        )
    except (ValidationError, PricewiseException) as e:
        return _render(request, "demo.html", status_code=400, supplies_cost=supplies_cost,
                       result=None, error=_error_message(e), **_demo_context(tenant))
    return _render(request, "demo.html", supplies_cost=supplies_cost, result=result,
                   **_demo_context(tenant))


# =============================================================================
# Products
# =============================================================================

@router.get("/products")
async def products_list(request: Request, tenant: PageTenantDep):
    products = ProductService.list_products(tenant.account_id)
    return _render(
        request,
        "products/list.html",
        products=products,
        outdated_count=sum(1 for p in products if p.get("needs_recalculation")),
    )


@router.post("/products/recalculate")
async def products_recalculate(tenant: PageTenantDep):
    ProductService.recalculate_prices(tenant.account_id)
    return _redirect("/products?notice=recalculated")


def _product_form_context(tenant, product: dict[str, Any] | None = None) -> dict[str, Any]:
    ingredients = list((product or {}).get("ingredients") or [])
    ingredients += [{"supply_id": "", "quantity": ""}] * max(INGREDIENT_ROWS - len(ingredients), 0)
    return {
        "supplies": SupplyService.list_supplies(tenant.account_id),
        "ingredients": ingredients,
    }


@router.get("/products/add")
async def product_add_page(request: Request, tenant: PageTenantDep):
    return _render(request, "products/form.html", product=None, form={},
                   **_product_form_context(tenant))


@router.post("/products/add")
async def product_add_submit(
    request: Request,
    tenant: PageTenantDep,
    name: str = Form(""),
    description: str = Form(""),
    supply_id: list[str] = Form([]),
    quantity: list[str] = Form([]),
):
    ingredients = _ingredients_from_form(supply_id, quantity)
    try:
        data = ProductCreate(
            name=name,
            description=_blank_to_none(description),
            ingredients=ingredients,
        )
        product = ProductService.create_product(tenant.account_id, data, tenant.plan)
    except (ValidationError, PricewiseException) as e:
        context = _product_form_context(tenant, {"ingredients": ingredients})
        return _render(request, "products/form.html", status_code=400, product=None,
                       form={"name": name, "description": description},
                       error=_error_message(e), **context)
    return _redirect(f"/products/{product['id']}?notice=created")


@router.get("/products/{product_id}")
async def product_detail(request: Request, tenant: PageTenantDep, product_id: str):
    product = ProductService.get_product(tenant.account_id, product_id)
    try:
        price = ProductService.price_product(tenant.account_id, product_id)
        price_error = None
    except PricewiseException as e:
        price, price_error = None, e.message
    return _render(request, "products/form.html", product=product, form=product,
                   price=price, price_error=price_error,
                   **_product_form_context(tenant, product))


@router.post("/products/{product_id}")
async def product_update_submit(
    request: Request,
    tenant: PageTenantDep,
    product_id: str,
    name: str = Form(""),
    description: str = Form(""),
    supply_id: list[str] = Form([]),
    quantity: list[str] = Form([]),
):
    product = ProductService.get_product(tenant.account_id, product_id)
    ingredients = _ingredients_from_form(supply_id, quantity)
    try:
        data = ProductUpdate(
            name=name,
            description=_blank_to_none(description),
            ingredients=ingredients,
        )
        ProductService.update_product(tenant.account_id, product_id, data)
    except (ValidationError, PricewiseException) as e:
        context = _product_form_context(tenant, {"ingredients": ingredients})
        return _render(request, "products/form.html", status_code=400, product=product,
                       form={"name": name, "description": description},
                       error=_error_message(e), **context)
    return _redirect(f"/products/{product_id}?notice=updated")


@router.post("/products/{product_id}/delete")
async def product_delete(tenant: PageTenantDep, product_id: str):
    ProductService.delete_product(tenant.account_id, product_id)
    return _redirect("/products?notice=deleted")


# =============================================================================
# Supplies
# =============================================================================

@router.get("/supplies")
async def supplies_list(
    request: Request,
    tenant: PageTenantDep,
    cursor: Optional[str] = Query(default=None),
    page_size: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
):
    page = SupplyService.get_supplies_page(tenant.account_id, page_size, cursor)
    return _render(request, "supplies/list.html", page=page, page_size=page_size)


@router.get("/supplies/add")
async def supply_add_page(request: Request, tenant: PageTenantDep):
    return _render(request, "supplies/form.html", supply=None, form={})


@router.post("/supplies/add")
async def supply_add_submit(
    request: Request,
    tenant: PageTenantDep,
    name: str = Form(""),
    description: str = Form(""),
    cost: str = Form(""),
    unit: str = Form("unit"),
):
    form = {"name": name, "description": description, "cost": cost, "unit": unit}
    try:
        data = SupplyCreate(
            name=name,
            description=_blank_to_none(description),
            cost=cost,
            unit=unit or "unit",
        )
        SupplyService.create_supply(tenant.account_id, data, tenant.plan)
    except (ValidationError, PricewiseException) as e:
        return _render(request, "supplies/form.html", status_code=400, supply=None,
                       form=form, error=_error_message(e))
    return _redirect("/supplies?notice=created")


@router.get("/supplies/{supply_id}")
async def supply_detail(request: Request, tenant: PageTenantDep, supply_id: str):
    supply = SupplyService.get_supply(tenant.account_id, supply_id)
    return _render(request, "supplies/form.html", supply=supply, form=supply)


@router.post("/supplies/{supply_id}")
async def supply_update_submit(
    request: Request,
    tenant: PageTenantDep,
    supply_id: str,
    name: str = Form(""),
    description: str = Form(""),
    cost: str = Form(""),
    unit: str = Form("unit"),
):
    supply = SupplyService.get_supply(tenant.account_id, supply_id)
    form = {"name": name, "description": description, "cost": cost, "unit": unit}
    try:
        data = SupplyUpdate(
            name=name,
            description=_blank_to_none(description),
            cost=cost,
            unit=unit or "unit",
        )
        SupplyService.update_supply(tenant.account_id, supply_id, data)
    except (ValidationError, PricewiseException) as e:
        return _render(request, "supplies/form.html", status_code=400, supply=supply,
                       form=form, error=_error_message(e))
    return _redirect(f"/supplies/{supply_id}?notice=updated")


@router.post("/supplies/{supply_id}/delete")
async def supply_delete(request: Request, tenant: PageTenantDep, supply_id: str):
    try:
        SupplyService.delete_supply(tenant.account_id, supply_id)
    except PricewiseException as e:
        supply = SupplyService.get_supply(tenant.account_id, supply_id)
        return _render(request, "supplies/form.html", status_code=e.status_code,
                       supply=supply, form=supply, error=e.message)
    return _redirect("/supplies?notice=deleted")


# =============================================================================
# Settings
# =============================================================================

@router.get("/settings")
async def settings_page(request: Request, tenant: PageTenantDep):
    return _render(
        request,
        "settings.html",
        form=SettingsService.get_or_create_settings(tenant.account_id),
        account=AccountService.get_account(tenant.account_id),
        billing_enabled=settings.billing_enabled,
    )


@router.post("/settings")
async def settings_submit(
    request: Request,
    tenant: PageTenantDep,
    tax_rate: str = Form("0"),
    profit_margin: str = Form("0"),
    other_fixed_costs: str = Form("0"),
    other_percentage_costs: str = Form("0"),
):
    form = {
        "tax_rate": tax_rate,
        "profit_margin": profit_margin,
        "other_fixed_costs": other_fixed_costs,
        "other_percentage_costs": other_percentage_costs,
    }
    try:
        data = SettingsUpdate(**{key: value or "0" for key, value in form.items()})
        SettingsService.update_settings(tenant.account_id, data)
    except (ValidationError, PricewiseException) as e:
        return _render(request, "settings.html", status_code=400, form=form,
                       account=AccountService.get_account(tenant.account_id),
                       billing_enabled=settings.billing_enabled,
                       error=_error_message(e))
    return _redirect("/settings?notice=settings")
