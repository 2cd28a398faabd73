"""Field-level validation of order request submissions."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Mapping

from ...config import settings
from ...errors import ValidationError
from ...models.domain import GRADES, URGENCIES

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]{2,}$")
PHONE_PATTERN = re.compile(r"^\+?\d{10,15}$")

# Wire name -> accepted aliases (the request form historically sent contact* fields).
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "customerName": ("customerName", "customer_name"),
    "customerEmail": ("customerEmail", "customer_email", "contactEmail"),
    "customerPhone": ("customerPhone", "customer_phone", "contactPhone"),
    "productType": ("productType", "product_type"),
    "grade": ("grade",),
    "quantity": ("quantity",),
    "budgetMin": ("budgetMin", "budget_min"),
    "budgetMax": ("budgetMax", "budget_max"),
    "urgency": ("urgency",),
    "preferredHub": ("preferredHub", "preferred_hub"),
    "description": ("description",),
}


@dataclass(slots=True)
class CleanSubmission:
    customer_name: str
    customer_email: str
    customer_phone: str
    product_type: str
    grade: str
    quantity: float
    budget_min: float
    budget_max: float
    urgency: str
    preferred_hub: str
    description: str


def _pick(payload: Mapping[str, Any], field: str) -> Any:
    for alias in FIELD_ALIASES[field]:
        value = payload.get(alias)
        if value is not None:
            return value
    return None


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _positive_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).replace(",", "")) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number) or number <= 0:
        return None
    return number


def validate_submission(payload: Mapping[str, Any], *, description_min_length: int | None = None) -> CleanSubmission:
    """Validate every field and raise one ValidationError listing all failures."""
    min_length = description_min_length or settings.description_min_length
    errors: dict[str, str] = {}

    customer_name = _text(_pick(payload, "customerName"))
    if not customer_name:
        errors["customerName"] = "Customer name is required"

    email = _text(_pick(payload, "customerEmail"))
    if not email:
        errors["customerEmail"] = "Email is required"
    elif not EMAIL_PATTERN.match(email):
        errors["customerEmail"] = "Enter a valid email"

    phone = re.sub(r"[\s()-]", "", _text(_pick(payload, "customerPhone")))
    if not phone:
        errors["customerPhone"] = "Phone number is required"
    elif not PHONE_PATTERN.match(phone):
        errors["customerPhone"] = "Valid phone number is required (10-15 digits)"

    grade = _text(_pick(payload, "grade"))
    if not grade:
        errors["grade"] = "Grade selection is required"
    elif grade not in GRADES:
        errors["grade"] = f"Grade must be one of: {', '.join(GRADES)}"

    urgency = _text(_pick(payload, "urgency")) or "normal"
    if urgency not in URGENCIES:
        errors["urgency"] = f"Urgency must be one of: {', '.join(URGENCIES)}"

    quantity = _positive_number(_pick(payload, "quantity"))
    if quantity is None:
        errors["quantity"] = "Valid quantity is required"

    budget_min = _positive_number(_pick(payload, "budgetMin"))
    if budget_min is None:
        errors["budgetMin"] = "Minimum budget is required"
    budget_max = _positive_number(_pick(payload, "budgetMax"))
    if budget_max is None:
        errors["budgetMax"] = "Maximum budget is required"
    elif budget_min is not None and budget_min > budget_max:
        errors["budgetMax"] = "Maximum budget must be greater than minimum"

    preferred_hub = _text(_pick(payload, "preferredHub"))
    if not preferred_hub:
        errors["preferredHub"] = "Please select a preferred hub"

    description = _text(_pick(payload, "description"))
    if len(description) < min_length:
        errors["description"] = f"Description must be at least {min_length} characters"

    if errors:
        raise ValidationError(errors)

    return CleanSubmission(
        customer_name=customer_name,
        customer_email=email,
        customer_phone=phone,
        product_type=_text(_pick(payload, "productType")) or "Cardamom",
        grade=grade,
        quantity=quantity,
        budget_min=budget_min,
        budget_max=budget_max,
        urgency=urgency,
        preferred_hub=preferred_hub,
        description=description,
    )
