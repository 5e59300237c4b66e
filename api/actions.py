"""
Dashboard form actions — validate a form, run one statement, redirect.

Each action returns ``FieldErrors`` (with a summary message),
``FormMessage`` on a database error, or ``Redirect`` on success.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from database import helpers
from database.exceptions import StorageError
from utils.schemas import (
    CustomerForm,
    FieldErrors,
    FormMessage,
    FormResult,
    InvoiceForm,
    Redirect,
)
from utils.validators import flatten_errors

logger = logging.getLogger(__name__)

INVOICES_PATH = "/dashboard/invoices"
CUSTOMERS_PATH = "/dashboard/customers"

INVOICE_MESSAGES = {
    "customerId": "Please select a customer.",
    "amount": "Please enter an amount greater than $0.",
    "status": "Please select an invoice status.",
}

CUSTOMER_MESSAGES = {
    "name": "Please enter a name.",
    "email": "Email is invalid.",
    "imageUrl": "Image Url is invalid",
}


async def create_invoice(session: AsyncSession, raw: Mapping[str, Any]) -> FormResult:
    try:
        form = InvoiceForm.model_validate(dict(raw))
    except ValidationError as exc:
        return FieldErrors(
            errors=flatten_errors(exc, INVOICE_MESSAGES),
            message="Missing Fields. Failed to Create Invoice.",
        )

    try:
        await helpers.insert_invoice(session, form.customer_id, form.amount_in_cents, form.status)
    except StorageError:
        await session.rollback()
        logger.exception("Failed to create invoice")
        return FormMessage(message="Database Error: Failed to Create Invoice.")
    return Redirect(redirect=INVOICES_PATH)


async def update_invoice(
    session: AsyncSession,
    invoice_id: uuid.UUID,
    raw: Mapping[str, Any],
) -> FormResult:
    try:
        form = InvoiceForm.model_validate(dict(raw))
    except ValidationError as exc:
        return FieldErrors(
            errors=flatten_errors(exc, INVOICE_MESSAGES),
            message="Missing Fields. Failed to Update Invoice.",
        )

    try:
        updated = await helpers.update_invoice(
            session, invoice_id, form.customer_id, form.amount_in_cents, form.status
        )
    except StorageError:
        await session.rollback()
        logger.exception("Failed to update invoice %s", invoice_id)
        return FormMessage(message="Database Error: Failed to Update Invoice.")
    if not updated:
        return FormMessage(message="Invoice not found.")
    return Redirect(redirect=INVOICES_PATH)


async def create_customer(session: AsyncSession, raw: Mapping[str, Any]) -> FormResult:
    try:
        form = CustomerForm.model_validate(dict(raw))
    except ValidationError as exc:
        return FieldErrors(
            errors=flatten_errors(exc, CUSTOMER_MESSAGES),
            message="Missing Fields. Failed to Create Customer.",
        )

    try:
        await helpers.insert_customer(session, form.name, str(form.email), str(form.image_url))
    except StorageError:
        await session.rollback()
        logger.exception("Failed to create customer")
        return FormMessage(message="Database Error: Failed to Create Customer.")
    return Redirect(redirect=CUSTOMERS_PATH)
