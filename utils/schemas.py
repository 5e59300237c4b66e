"""
Pydantic schemas shared by the auth workflows and the dashboard.
"""

from __future__ import annotations

import datetime
import uuid
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl


# ═══════════════════════════════════════════════════════════════════════════════
# Outcomes: exactly one is returned from every workflow or service call
# ═══════════════════════════════════════════════════════════════════════════════


class FieldErrors(BaseModel):
    """Per-field validation messages, in the order the checks ran."""

    kind: Literal["errors"] = "errors"
    errors: Dict[str, List[str]]
    message: Optional[str] = None


class FormMessage(BaseModel):
    """A failure that is not attributable to a single field."""

    kind: Literal["message"] = "message"
    message: str


class Redirect(BaseModel):
    kind: Literal["redirect"] = "redirect"
    redirect: str


class SystemFailure(BaseModel):
    """Storage or collaborator failure. Details are logged, never shown."""

    kind: Literal["system_error"] = "system_error"
    message: str = "Something went wrong."


class InvalidCredentials(BaseModel):
    """Every login rejection looks like this, whatever the cause."""

    kind: Literal["invalid_credentials"] = "invalid_credentials"
    message: str = "Invalid credentials."


class UserIdentity(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    name: str
    email: str


class Authenticated(BaseModel):
    kind: Literal["authenticated"] = "authenticated"
    identity: UserIdentity
    session_token: str
    redirect: str


RegistrationResult = Union[FieldErrors, FormMessage, Redirect, SystemFailure]
AuthenticationResult = Union[Authenticated, InvalidCredentials, SystemFailure]
FormResult = Union[FieldErrors, FormMessage, Redirect]


# ═══════════════════════════════════════════════════════════════════════════════
# Dashboard forms
# ═══════════════════════════════════════════════════════════════════════════════

# Largest amount whose cents value fits the 32-bit invoices.amount column.
MAX_INVOICE_AMOUNT = 21_474_836.47


class InvoiceForm(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    customer_id: uuid.UUID = Field(alias="customerId")
    amount: float = Field(gt=0, le=MAX_INVOICE_AMOUNT, allow_inf_nan=False)
    status: Literal["pending", "paid"]

    @property
    def amount_in_cents(self) -> int:
        return int(round(self.amount * 100))


class CustomerForm(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(min_length=1)
    email: EmailStr
    image_url: HttpUrl = Field(alias="imageUrl")


# ═══════════════════════════════════════════════════════════════════════════════
# Dashboard read models
# ═══════════════════════════════════════════════════════════════════════════════


class CustomerOption(BaseModel):
    id: str
    name: str


class CustomerRow(BaseModel):
    id: str
    name: str
    email: str
    image_url: str
    total_invoices: int = 0
    total_pending: int = 0  # cents
    total_paid: int = 0     # cents


class InvoiceRow(BaseModel):
    id: str
    customer_id: str
    name: str
    email: str
    amount: int  # cents
    status: str
    date: datetime.date
