from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from travelops_console.clients.travelops_sdk.errors import ValidationError

EMAIL_REGEX = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_DIGITS = 10
COUNTRY_CODES = ("+91", "+1", "+44", "+971")
DEFAULT_COUNTRY_CODE = "+91"
MAX_UPLOAD_BYTES = 5 * 1024 * 1024
ALLOWED_UPLOAD_TYPES = ("application/pdf", "image/jpeg", "image/png")
MANAGER_STATUSES = ("ACTIVE", "INACTIVE")


class FormStatus(str, Enum):
    IDLE = "idle"
    DIRTY = "dirty"
    VALID = "valid"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class FormResult:
    values: dict[str, Any]
    field_errors: dict[str, str]

    @property
    def first_invalid_field(self) -> str | None:
        return next(iter(self.field_errors), None)

    @property
    def is_valid(self) -> bool:
        return len(self.field_errors) == 0


@dataclass
class FormState:
    status: FormStatus = FormStatus.IDLE
    submit_enabled: bool = False
    submit_disabled_reason: str = "Fill in the required fields."


@dataclass(frozen=True)
class UploadedFile:
    name: str
    size: int
    content_type: str


def _text(value: Any) -> str:
    return str(value or "").strip()


def check_required(values: dict[str, Any], field: str, label: str, errors: dict[str, str]) -> str:
    normalized = _text(values.get(field))
    if not normalized:
        errors[field] = f"{label} is required."
    return normalized


def check_email(values: dict[str, Any], errors: dict[str, str], field: str = "email") -> str:
    normalized = _text(values.get(field)).lower()
    if not normalized:
        errors[field] = "Email is required."
    elif not EMAIL_REGEX.match(normalized):
        errors[field] = "Invalid email. Use the name@domain.com format."
    return normalized


def check_phone(
    values: dict[str, Any],
    errors: dict[str, str],
    field: str = "phone",
    code_field: str = "countryCode",
) -> tuple[str, str]:
    """Country code select plus a number of exactly ten digits."""
    country_code = _text(values.get(code_field)) or DEFAULT_COUNTRY_CODE
    if country_code not in COUNTRY_CODES:
        errors[code_field] = f"Country code must be one of {', '.join(COUNTRY_CODES)}."
    digits = re.sub(r"[\s-]", "", _text(values.get(field)))
    if not digits:
        errors[field] = "Phone is required."
    elif not digits.isdigit() or len(digits) != PHONE_DIGITS:
        errors[field] = f"Phone must contain {PHONE_DIGITS} digits."
    return country_code, digits


def check_upload(
    upload: UploadedFile | None,
    errors: dict[str, str],
    field: str = "document",
    max_bytes: int = MAX_UPLOAD_BYTES,
    allowed_types: tuple[str, ...] = ALLOWED_UPLOAD_TYPES,
    required: bool = False,
) -> UploadedFile | None:
    if upload is None:
        if required:
            errors[field] = "A file is required."
        return None
    if upload.size > max_bytes:
        errors[field] = f"File size too large (max {max_bytes // (1024 * 1024)}MB)."
    elif allowed_types and upload.content_type not in allowed_types:
        errors[field] = f"Unsupported file type {upload.content_type!r}."
    return upload


def validate_manager_form(values: dict[str, Any]) -> FormResult:
    errors: dict[str, str] = {}
    name = check_required(values, "name", "Name", errors)
    email = check_email(values, errors)
    username = _text(values.get("username"))
    if len(username) < 3:
        errors["username"] = "Username must be at least 3 characters."
    country_code, phone = check_phone(values, errors)
    password = _text(values.get("password"))
    if len(password) < 8:
        errors["password"] = "Password must be at least 8 characters."
    status = _text(values.get("status")).upper() or "INACTIVE"
    if status not in MANAGER_STATUSES:
        errors["status"] = "Status must be ACTIVE or INACTIVE."
    return FormResult(
        values={
            "name": name,
            "email": email,
            "username": username,
            "countryCode": country_code,
            "phone": phone,
            "password": password,
            "status": status,
        },
        field_errors=errors,
    )


def validate_dmc_form(values: dict[str, Any], upload: UploadedFile | None = None) -> FormResult:
    errors: dict[str, str] = {}
    name = check_required(values, "name", "DMC name", errors)
    contact_person = check_required(values, "contactPerson", "Contact person", errors)
    email = check_email(values, errors)
    country_code, phone = check_phone(values, errors)
    destinations = [str(item).strip() for item in values.get("destinations") or [] if str(item).strip()]
    if not destinations:
        errors["destinations"] = "Select at least one destination."
    document = check_upload(upload, errors, field="registrationDocument")
    cleaned = {
        "name": name,
        "contactPerson": contact_person,
        "email": email,
        "countryCode": country_code,
        "phone": phone,
        "destinations": destinations,
        "status": _text(values.get("status")) or "ACTIVE",
    }
    if document is not None:
        cleaned["registrationDocument"] = document.name
    return FormResult(values=cleaned, field_errors=errors)


def validate_enquiry_form(values: dict[str, Any]) -> FormResult:
    errors: dict[str, str] = {}
    name = check_required(values, "name", "Name", errors)
    email = check_email(values, errors)
    country_code, phone = check_phone(values, errors)
    locations = [str(item).strip() for item in values.get("locations") or [] if str(item).strip()]
    if not locations:
        errors["locations"] = "Select at least one location."
    try:
        travelers = int(values.get("numberOfTravelers") or 0)
    except (TypeError, ValueError):
        travelers = 0
    if travelers < 1:
        errors["numberOfTravelers"] = "At least one traveler is required."
    return FormResult(
        values={
            "name": name,
            "email": email,
            "countryCode": country_code,
            "phone": phone,
            "locations": locations,
            "numberOfTravelers": travelers,
            "status": _text(values.get("status")) or "enquiry",
        },
        field_errors=errors,
    )


def build_form_state(result: FormResult, submitting: bool = False) -> FormState:
    if submitting:
        return FormState(status=FormStatus.SUBMITTING, submit_enabled=False, submit_disabled_reason="Saving…")
    if result.is_valid:
        return FormState(status=FormStatus.VALID, submit_enabled=True, submit_disabled_reason="")
    first_invalid_field = result.first_invalid_field or "form"
    return FormState(
        status=FormStatus.DIRTY,
        submit_enabled=False,
        submit_disabled_reason=f"Fix '{first_invalid_field}' before submitting.",
    )


def ensure_valid(result: FormResult) -> dict[str, Any]:
    if not result.is_valid:
        raise ValidationError(field_errors=dict(result.field_errors))
    return dict(result.values)
