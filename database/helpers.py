"""
Database helper functions — dashboard queries and single-statement writes.

Every helper takes the request's ``AsyncSession``. SQLAlchemy errors are
translated to ``StorageUnavailableError`` so routes never see driver
details.
"""

from __future__ import annotations

import logging
import math
import uuid
from contextlib import contextmanager
from datetime import date
from typing import Iterator, List, Optional

from sqlalchemy import String, case, cast, delete, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from database.exceptions import StorageUnavailableError
from database.models import Customer, Invoice
from utils.schemas import CustomerOption, CustomerRow, InvoiceRow

logger = logging.getLogger(__name__)


@contextmanager
def _storage_errors(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise StorageUnavailableError(f"Failed to {action}.") from exc


def _to_uuid(value: str | uuid.UUID) -> uuid.UUID:
    return uuid.UUID(value) if isinstance(value, str) else value


def _page_count(total: int, per_page: int) -> int:
    return max(1, math.ceil(total / per_page))


def _offset(page: int, per_page: int) -> int:
    return (max(page, 1) - 1) * per_page


# ── Customers ───────────────────────────────────────────────────────


def _customer_filter(query: str):
    pattern = f"%{query}%"
    return or_(Customer.name.ilike(pattern), Customer.email.ilike(pattern))


async def fetch_customer_options(session: AsyncSession) -> List[CustomerOption]:
    """All customers as (id, name) pairs for the invoice form."""
    with _storage_errors("fetch customers"):
        result = await session.execute(
            select(Customer.id, Customer.name).order_by(Customer.name.asc())
        )
        return [CustomerOption(id=str(row.id), name=row.name) for row in result]


async def fetch_filtered_customers(
    session: AsyncSession,
    query: str,
    page: int,
    per_page: int,
) -> List[CustomerRow]:
    """One page of customers matching ``query`` with their invoice totals."""
    pending = case((Invoice.status == "pending", Invoice.amount), else_=0)
    paid = case((Invoice.status == "paid", Invoice.amount), else_=0)
    stmt = (
        select(
            Customer.id,
            Customer.name,
            Customer.email,
            Customer.image_url,
            func.count(Invoice.id).label("total_invoices"),
            func.coalesce(func.sum(pending), 0).label("total_pending"),
            func.coalesce(func.sum(paid), 0).label("total_paid"),
        )
        .outerjoin(Invoice, Invoice.customer_id == Customer.id)
        .where(_customer_filter(query))
        .group_by(Customer.id, Customer.name, Customer.email, Customer.image_url)
        .order_by(Customer.name.asc())
        .limit(per_page)
        .offset(_offset(page, per_page))
    )
    with _storage_errors("fetch customer table"):
        result = await session.execute(stmt)
        return [
            CustomerRow(
                id=str(row.id),
                name=row.name,
                email=row.email,
                image_url=row.image_url,
                total_invoices=row.total_invoices,
                total_pending=row.total_pending,
                total_paid=row.total_paid,
            )
            for row in result
        ]


async def fetch_customers_pages(session: AsyncSession, query: str, per_page: int) -> int:
    with _storage_errors("fetch total number of customers"):
        total = await session.scalar(
            select(func.count()).select_from(Customer).where(_customer_filter(query))
        )
    return _page_count(total or 0, per_page)


async def insert_customer(session: AsyncSession, name: str, email: str, image_url: str) -> str:
    customer = Customer(id=uuid.uuid4(), name=name, email=email, image_url=image_url)
    with _storage_errors("create customer"):
        session.add(customer)
        await session.commit()
    logger.info("Created customer %s", customer.id)
    return str(customer.id)


async def delete_customer(session: AsyncSession, customer_id: str | uuid.UUID) -> None:
    cid = _to_uuid(customer_id)
    with _storage_errors("delete customer"):
        await session.execute(delete(Invoice).where(Invoice.customer_id == cid))
        await session.execute(delete(Customer).where(Customer.id == cid))
        await session.commit()
    logger.info("Deleted customer %s", cid)


# ── Invoices ────────────────────────────────────────────────────────


def _invoice_filter(query: str):
    pattern = f"%{query}%"
    return or_(
        Customer.name.ilike(pattern),
        Customer.email.ilike(pattern),
        cast(Invoice.amount, String).ilike(pattern),
        cast(Invoice.date, String).ilike(pattern),
        Invoice.status.ilike(pattern),
    )


async def fetch_filtered_invoices(
    session: AsyncSession,
    query: str,
    page: int,
    per_page: int,
) -> List[InvoiceRow]:
    """One page of invoices matching ``query``, newest first."""
    stmt = (
        select(
            Invoice.id,
            Invoice.customer_id,
            Invoice.amount,
            Invoice.status,
            Invoice.date,
            Customer.name,
            Customer.email,
        )
        .join(Customer, Invoice.customer_id == Customer.id)
        .where(_invoice_filter(query))
        .order_by(Invoice.date.desc(), Customer.name.asc())
        .limit(per_page)
        .offset(_offset(page, per_page))
    )
    with _storage_errors("fetch invoices"):
        result = await session.execute(stmt)
        return [
            InvoiceRow(
                id=str(row.id),
                customer_id=str(row.customer_id),
                name=row.name,
                email=row.email,
                amount=row.amount,
                status=row.status,
                date=row.date,
            )
            for row in result
        ]


async def fetch_invoices_pages(session: AsyncSession, query: str, per_page: int) -> int:
    stmt = (
        select(func.count(Invoice.id))
        .join(Customer, Invoice.customer_id == Customer.id)
        .where(_invoice_filter(query))
    )
    with _storage_errors("fetch total number of invoices"):
        total = await session.scalar(stmt)
    return _page_count(total or 0, per_page)


async def fetch_invoice_by_id(session: AsyncSession, invoice_id: str | uuid.UUID) -> Optional[Invoice]:
    with _storage_errors("fetch invoice"):
        result = await session.execute(
            select(Invoice).where(Invoice.id == _to_uuid(invoice_id))
        )
        return result.scalar_one_or_none()


async def insert_invoice(
    session: AsyncSession,
    customer_id: uuid.UUID,
    amount_in_cents: int,
    status: str,
    on: Optional[date] = None,
) -> str:
    invoice = Invoice(
        id=uuid.uuid4(),
        customer_id=customer_id,
        amount=amount_in_cents,
        status=status,
        date=on or date.today(),
    )
    with _storage_errors("create invoice"):
        session.add(invoice)
        await session.commit()
    logger.info("Created invoice %s", invoice.id)
    return str(invoice.id)


async def update_invoice(
    session: AsyncSession,
    invoice_id: str | uuid.UUID,
    customer_id: uuid.UUID,
    amount_in_cents: int,
    status: str,
) -> bool:
    """Returns ``False`` when no invoice has ``invoice_id``."""
    iid = _to_uuid(invoice_id)
    with _storage_errors("update invoice"):
        result = await session.execute(
            update(Invoice)
            .where(Invoice.id == iid)
            .values(customer_id=customer_id, amount=amount_in_cents, status=status)
        )
        await session.commit()
    return result.rowcount > 0


async def delete_invoice(session: AsyncSession, invoice_id: str | uuid.UUID) -> None:
    iid = _to_uuid(invoice_id)
    with _storage_errors("delete invoice"):
        await session.execute(delete(Invoice).where(Invoice.id == iid))
        await session.commit()
    logger.info("Deleted invoice %s", iid)
