import pytest

from storefront.schemas.auth import RegistrationDetails, RegistrationPassword, RegistrationPhone
from storefront.services.registration import (
    RegistrationTransitionError,
    RegistrationValidationError,
    RegistrationWizard,
)
from storefront.stores.vehicle import SelectedVehicle

from conftest import API_PREFIX, user_payload


def filled_wizard() -> RegistrationWizard:
    wizard = RegistrationWizard()
    wizard.submit_details(RegistrationDetails(first_name="Jane", last_name="Wanjiku", email="jane@example.com"))
    wizard.submit_phone(RegistrationPhone(phone="0722123456"))
    wizard.submit_password(RegistrationPassword(password="secret123", password_confirm="secret123"))
    return wizard


def test_steps_in_order():
    wizard = filled_wizard()
    assert wizard.step == "vehicles"

    request = wizard.build_request()
    assert request.username == "jane@example.com"
    assert request.phone_number == "254722123456"


def test_steps_cannot_be_skipped():
    wizard = RegistrationWizard()
    with pytest.raises(RegistrationTransitionError):
        wizard.submit_phone(RegistrationPhone(phone="0722123456"))
    with pytest.raises(RegistrationTransitionError):
        wizard.build_request()


def test_password_rules():
    wizard = RegistrationWizard()
    wizard.submit_details(RegistrationDetails(first_name="J", last_name="W", email="j@example.com"))
    wizard.submit_phone(RegistrationPhone(phone="0722123456"))

    with pytest.raises(RegistrationValidationError) as exc:
        wizard.submit_password(RegistrationPassword(password="short", password_confirm="short"))
    assert "password" in exc.value.fields

    with pytest.raises(RegistrationValidationError) as exc:
        wizard.submit_password(RegistrationPassword(password="secret123", password_confirm="secret124"))
    assert exc.value.fields == {"password_confirm": "Passwords do not match"}
    assert wizard.step == "password"


def test_details_require_email_with_at():
    wizard = RegistrationWizard()
    with pytest.raises(RegistrationValidationError) as exc:
        wizard.submit_details(RegistrationDetails(first_name="Jane", last_name="", email="jane"))
    assert set(exc.value.fields) == {"last_name", "email"}


def test_register_route_logs_in_and_saves_vehicles(client, fake_api):
    fake_api.on(
        "POST",
        "/users/register/",
        (201, {"access": "access-1", "refresh": "refresh-1", "user": user_payload()}),
    )

    client.post(f"{API_PREFIX}/auth/register/details",
                json={"first_name": "Jane", "last_name": "Wanjiku", "email": "jane@example.com"})
    client.post(f"{API_PREFIX}/auth/register/phone", json={"phone": "0722 123 456"})
    resp = client.post(f"{API_PREFIX}/auth/register/password",
                       json={"password": "secret123", "password_confirm": "secret123"})
    assert resp.json()["step"] == "vehicles"
    client.post(f"{API_PREFIX}/auth/register/vehicles",
                json={"make_id": 1, "make_name": "Toyota", "model_id": 10, "model_name": "Vitz", "year": 2012})

    resp = client.post(f"{API_PREFIX}/auth/register")

    assert resp.status_code == 201, resp.text
    assert resp.json()["is_authenticated"] is True

    sent = fake_api.called("POST", "/users/register/")[0]
    import json
    body = json.loads(sent.content)
    assert body["username"] == "jane@example.com"
    assert body["phone_number"] == "254722123456"

    vehicle = client.get(f"{API_PREFIX}/vehicle").json()
    assert vehicle["label"] == "Toyota Vitz 2012"
    assert len(vehicle["saved"]) == 1

    # wizard is discarded after success
    assert client.get(f"{API_PREFIX}/auth/register").json()["step"] == "details"


def test_register_route_rejects_out_of_order(client):
    resp = client.post(f"{API_PREFIX}/auth/register")
    assert resp.status_code == 409
