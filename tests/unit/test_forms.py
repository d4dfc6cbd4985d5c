import pytest

from travelops_console.app.ui.forms import (
    FormStatus,
    UploadedFile,
    build_form_state,
    ensure_valid,
    validate_dmc_form,
    validate_enquiry_form,
    validate_manager_form,
)
from travelops_console.clients.travelops_sdk.errors import ValidationError


def _manager(**overrides):
    values = {
        "name": "Ravi Kumar",
        "email": " Ravi@Agency.IN ",
        "username": "ravik",
        "countryCode": "+91",
        "phone": "98765-43210",
        "password": "supersecret",
        "status": "active",
    }
    values.update(overrides)
    return values


def test_manager_form_normalizes_valid_input() -> None:
    result = validate_manager_form(_manager())

    assert result.is_valid
    assert result.values["email"] == "ravi@agency.in"
    assert result.values["phone"] == "9876543210"
    assert result.values["status"] == "ACTIVE"


def test_manager_form_reports_each_rule() -> None:
    result = validate_manager_form(_manager(name="", username="ab", phone="12345", password="short", countryCode="+7"))

    assert set(result.field_errors) == {"name", "username", "phone", "password", "countryCode"}
    assert result.first_invalid_field == "name"


def test_manager_status_defaults_to_inactive() -> None:
    result = validate_manager_form(_manager(status=""))
    assert result.values["status"] == "INACTIVE"


def test_dmc_form_checks_destinations_and_upload_size() -> None:
    too_big = UploadedFile(name="licence.pdf", size=6 * 1024 * 1024, content_type="application/pdf")
    result = validate_dmc_form(
        {"name": "Himalaya Trails", "contactPerson": "Anu", "email": "ops@ht.in", "phone": "9999988888", "destinations": [" ", ""]},
        upload=too_big,
    )

    assert "destinations" in result.field_errors
    assert "5MB" in result.field_errors["registrationDocument"]


def test_dmc_form_accepts_allowed_upload() -> None:
    upload = UploadedFile(name="licence.png", size=1024, content_type="image/png")
    result = validate_dmc_form(
        {"name": "Himalaya Trails", "contactPerson": "Anu", "email": "ops@ht.in", "phone": "9999988888", "destinations": ["Leh"]},
        upload=upload,
    )

    assert result.is_valid
    assert result.values["registrationDocument"] == "licence.png"


def test_enquiry_form_requires_locations_and_travelers() -> None:
    result = validate_enquiry_form({"name": "Meera", "email": "m@x.in", "phone": "9123456780", "numberOfTravelers": "0"})

    assert set(result.field_errors) == {"locations", "numberOfTravelers"}
    assert result.values["status"] == "enquiry"


def test_ensure_valid_raises_with_field_errors() -> None:
    with pytest.raises(ValidationError) as excinfo:
        ensure_valid(validate_manager_form(_manager(email="nope")))

    assert list(excinfo.value.field_errors) == ["email"]


def test_form_state_blocks_submit_until_valid() -> None:
    invalid = build_form_state(validate_manager_form(_manager(password="")))
    valid = build_form_state(validate_manager_form(_manager()))
    submitting = build_form_state(validate_manager_form(_manager()), submitting=True)

    assert invalid.status is FormStatus.DIRTY
    assert invalid.submit_enabled is False
    assert "password" in invalid.submit_disabled_reason
    assert valid.submit_enabled is True
    assert submitting.status is FormStatus.SUBMITTING
