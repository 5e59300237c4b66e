"""
Dashboard pages — invoices and customers.

Every route requires a signed-in user.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from api import actions
from api.rendering import render
from auth.dependencies import db_session, get_settings, require_user
from config.settings import Settings
from database import helpers
from utils.schemas import FieldErrors, FormResult, Redirect

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/dashboard",
    tags=["dashboard"],
    dependencies=[Depends(require_user)],
)


async def _form_fields(request: Request) -> dict:
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


def _see_other(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)


async def _render_result(
    request: Request,
    session: AsyncSession,
    result: FormResult,
    template_name: str,
    ctx: dict,
):
    if isinstance(result, Redirect):
        return _see_other(result.redirect)
    errors = result.errors if isinstance(result, FieldErrors) else {}
    if "customers" not in ctx and template_name.startswith("invoices/"):
        ctx["customers"] = await helpers.fetch_customer_options(session)
    return render(
        request,
        template_name,
        {**ctx, "errors": errors, "message": result.message},
        status_code=status.HTTP_400_BAD_REQUEST,
    )


@router.get("")
async def overview(request: Request):
    return render(request, "dashboard.html")


# ── Invoices ───────────────────────────────────────────────────────────


@router.get("/invoices")
async def invoices_page(
    request: Request,
    query: str = "",
    page: int = Query(1, ge=1),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(get_settings),
):
    invoices = await helpers.fetch_filtered_invoices(session, query, page, settings.items_per_page)
    total_pages = await helpers.fetch_invoices_pages(session, query, settings.items_per_page)
    return render(
        request,
        "invoices/list.html",
        {"invoices": invoices, "query": query, "page": page, "total_pages": total_pages},
    )


@router.get("/invoices/create")
async def create_invoice_page(
    request: Request,
    session: AsyncSession = Depends(db_session),
):
    customers = await helpers.fetch_customer_options(session)
    return render(
        request,
        "invoices/form.html",
        {"customers": customers, "invoice": None, "values": {}, "errors": {}, "message": None},
    )


@router.post("/invoices")
async def create_invoice(
    request: Request,
    session: AsyncSession = Depends(db_session),
):
    raw = await _form_fields(request)
    result = await actions.create_invoice(session, raw)
    return await _render_result(
        request, session, result, "invoices/form.html", {"invoice": None, "values": raw},
    )


@router.get("/invoices/{invoice_id}/edit")
async def edit_invoice_page(
    request: Request,
    invoice_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
):
    invoice = await helpers.fetch_invoice_by_id(session, invoice_id)
    if invoice is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")
    customers = await helpers.fetch_customer_options(session)
    values = {
        "customerId": str(invoice.customer_id),
        "amount": f"{invoice.amount / 100:.2f}",
        "status": invoice.status,
    }
    return render(
        request,
        "invoices/form.html",
        {"customers": customers, "invoice": invoice, "values": values, "errors": {}, "message": None},
    )


@router.post("/invoices/{invoice_id}")
async def update_invoice(
    request: Request,
    invoice_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
):
    raw = await _form_fields(request)
    result = await actions.update_invoice(session, invoice_id, raw)
    return await _render_result(
        request, session, result, "invoices/form.html",
        {"invoice": {"id": str(invoice_id)}, "values": raw},
    )


@router.post("/invoices/{invoice_id}/delete")
async def delete_invoice(
    invoice_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
):
    await helpers.delete_invoice(session, invoice_id)
    return _see_other(actions.INVOICES_PATH)


# ── Customers ──────────────────────────────────────────────────────────


@router.get("/customers")
async def customers_page(
    request: Request,
    query: str = "",
    page: int = Query(1, ge=1),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(get_settings),
):
    customers = await helpers.fetch_filtered_customers(session, query, page, settings.items_per_page)
    total_pages = await helpers.fetch_customers_pages(session, query, settings.items_per_page)
    return render(
        request,
        "customers/list.html",
        {"customers": customers, "query": query, "page": page, "total_pages": total_pages},
    )


@router.get("/customers/create")
async def create_customer_page(request: Request):
    return render(request, "customers/form.html", {"values": {}, "errors": {}, "message": None})


@router.post("/customers")
async def create_customer(
    request: Request,
    session: AsyncSession = Depends(db_session),
):
    raw = await _form_fields(request)
    result = await actions.create_customer(session, raw)
    return await _render_result(request, session, result, "customers/form.html", {"values": raw})


@router.post("/customers/{customer_id}/delete")
async def delete_customer(
    customer_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
):
    await helpers.delete_customer(session, customer_id)
    return _see_other(actions.CUSTOMERS_PATH)
