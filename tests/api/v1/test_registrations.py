# tests/api/v1/test_registrations.py

import uuid

from fastapi.testclient import TestClient

from regdesk.crud.crud_print_status import print_status as print_status_crud
from regdesk.models.print_status import PrintStatus
from regdesk.models.server_mode import ServerMode
from tests.utils.registrations import intake, registration_count, set_mode

URL = "/api/v1/registrations"


def test_online_registration_happy_path(test_client: TestClient, db_session, asset_store):
    set_mode(db_session, "online")

    response = test_client.post(URL, json=intake())

    assert response.status_code == 201
    data = response.json()
    assert len(data["ticket_number"]) == 36
    assert str(uuid.UUID(data["ticket_number"])) == data["ticket_number"]
    assert data["badge_status"] == "not_printed"
    assert data["ticket_status"] == "not_printed"
    assert data["registration_type"] == "online"
    assert data["payment_status"] == "unpaid"
    assert data["confirmed"] is False
    assert data["registered_by"] is None
    # Online intake renders the QR synchronously
    assert data["qr_asset_path"] == f"qrcodes/{data['ticket_number']}.png"
    assert asset_store.exists(data["qr_asset_path"])


def test_distinct_people_get_distinct_tickets(test_client: TestClient, db_session):
    set_mode(db_session, "online")

    tickets = set()
    for first, last, company in [("Ana", "Cruz", "Acme"), ("Ben", "Ode", "Acme"), ("Ana", "Cruz", "Globex")]:
        response = test_client.post(
            URL, json=intake(first_name=first, last_name=last, company_name=company)
        )
        assert response.status_code == 201
        tickets.add(response.json()["ticket_number"])

    assert len(tickets) == 3


def test_closed_gate_rejects_before_persisting(
    test_client: TestClient, db_session, admin_headers
):
    set_mode(db_session, "deactivate")
    before = test_client.get(URL, headers=admin_headers).json()["total"]

    response = test_client.post(URL, json=intake())

    assert response.status_code == 403
    assert response.json()["error"]["category"] == "authorization_error"
    after = test_client.get(URL, headers=admin_headers).json()["total"]
    assert after == before


def test_closed_gate_rejects_staff_channels(test_client: TestClient, db_session, admin_headers):
    set_mode(db_session, "deactivate")

    response = test_client.post(
        URL, json=intake(registration_type="complimentary"), headers=admin_headers
    )

    assert response.status_code == 403
    assert registration_count(db_session) == 0


def test_online_channel_rejected_in_onsite_mode(test_client: TestClient, db_session):
    # Seeded mode is onsite
    response = test_client.post(URL, json=intake(registration_type="online"))

    assert response.status_code == 403
    assert response.json()["error"]["channel"] == "online"


def test_onsite_intake_requires_authentication(test_client: TestClient):
    response = test_client.post(URL, json=intake())

    assert response.status_code == 401
    assert response.json()["error"]["category"] == "authentication_error"


def test_onsite_intake_requires_permission(test_client: TestClient, user_headers):
    response = test_client.post(URL, json=intake(), headers=user_headers)

    assert response.status_code == 403


def test_onsite_intake_by_staff_enqueues_qr(
    test_client: TestClient, db_session, admin_headers, admin_user, enqueued
):
    response = test_client.post(URL, json=intake(), headers=admin_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["registration_type"] == "onsite"
    assert data["server_mode"] == "onsite"
    assert data["registered_by"] == admin_user.id
    assert data["qr_asset_path"] is None
    assert enqueued == [data["ticket_number"]]


def test_validation_reports_every_field(test_client: TestClient, db_session):
    set_mode(db_session, "online")

    response = test_client.post(
        URL,
        json={"first_name": "", "email": "not-an-email", "registration_type": "online"},
    )

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["category"] == "validation_error"
    assert {"first_name", "last_name", "email", "company_name"} <= set(error["fields"])
    assert registration_count(db_session) == 0


def test_unknown_registration_type_is_a_validation_error(
    test_client: TestClient, db_session
):
    set_mode(db_session, "online")

    response = test_client.post(URL, json=intake(registration_type="vip"))

    assert response.status_code == 422
    assert "registration_type" in response.json()["error"]["fields"]


def test_online_requires_company(test_client: TestClient, db_session):
    set_mode(db_session, "online")

    response = test_client.post(URL, json={"first_name": "Ana", "last_name": "Cruz"})

    assert response.status_code == 422
    assert "company_name" in response.json()["error"]["fields"]


def test_pre_registration_requires_email(test_client: TestClient, admin_headers):
    response = test_client.post(
        URL, json=intake(registration_type="pre-registered"), headers=admin_headers
    )

    assert response.status_code == 422
    assert "email" in response.json()["error"]["fields"]


def test_complimentary_defaults_payment_status(test_client: TestClient, admin_headers):
    response = test_client.post(
        URL, json=intake(registration_type="complimentary"), headers=admin_headers
    )

    assert response.status_code == 201
    assert response.json()["payment_status"] == "complimentary"


def test_complimentary_rejects_paid_status(test_client: TestClient, admin_headers):
    response = test_client.post(
        URL,
        json=intake(registration_type="complimentary", payment_status="paid"),
        headers=admin_headers,
    )

    assert response.status_code == 422
    assert "payment_status" in response.json()["error"]["fields"]


def test_duplicate_person_is_rejected(test_client: TestClient, db_session, admin_headers):
    first = test_client.post(URL, json=intake(), headers=admin_headers)
    assert first.status_code == 201

    # Same person after normalization (case and surrounding whitespace)
    second = test_client.post(
        URL,
        json=intake(first_name="  ana ", last_name="CRUZ", company_name="acme"),
        headers=admin_headers,
    )

    assert second.status_code == 409
    assert second.json()["error"]["category"] == "conflict_error"
    assert registration_count(db_session) == 1


def test_duplicate_email_is_rejected(test_client: TestClient, db_session, admin_headers):
    first = test_client.post(
        URL, json=intake(email="ana.cruz@acme.io"), headers=admin_headers
    )
    assert first.status_code == 201

    second = test_client.post(
        URL,
        json=intake(first_name="Bea", email="ANA.CRUZ@acme.io"),
        headers=admin_headers,
    )

    assert second.status_code == 409
    assert second.json()["error"]["field"] == "email"
    assert registration_count(db_session) == 1


def test_idempotency_key_replays_original(test_client: TestClient, db_session, admin_headers):
    headers = {**admin_headers, "Idempotency-Key": "kiosk-3-req-0001"}

    first = test_client.post(URL, json=intake(), headers=headers)
    second = test_client.post(URL, json=intake(), headers=headers)

    assert first.status_code == 201
    assert second.status_code == 200
    assert second.json()["ticket_number"] == first.json()["ticket_number"]
    assert registration_count(db_session) == 1


def test_idempotency_key_is_scoped_to_the_caller(
    test_client: TestClient, db_session, admin_headers
):
    set_mode(db_session, "both")
    staff = test_client.post(
        URL,
        json=intake(email="vip@corp.io", phone="+1555"),
        headers={**admin_headers, "Idempotency-Key": "1"},
    )
    assert staff.status_code == 201

    anonymous = test_client.post(
        URL,
        json={"first_name": "X", "last_name": "Y", "registration_type": "online"},
        headers={"Idempotency-Key": "1"},
    )

    assert anonymous.status_code == 409
    assert anonymous.json()["error"]["field"] == "idempotency_key"
    assert "vip@corp.io" not in anonymous.text
    assert registration_count(db_session) == 1


def test_idempotent_replay_still_consults_the_gate(
    test_client: TestClient, db_session, admin_headers
):
    set_mode(db_session, "online")
    headers = {"Idempotency-Key": "web-form-42"}
    first = test_client.post(URL, json=intake(), headers=headers)
    assert first.status_code == 201

    set_mode(db_session, "onsite")
    retry = test_client.post(URL, json=intake(), headers=headers)

    assert retry.status_code == 403
    assert first.json()["ticket_number"] not in retry.text


def test_unknown_registration_type_anonymous_in_onsite_mode(test_client: TestClient, db_session):
    set_mode(db_session, "onsite")

    response = test_client.post(URL, json=intake(registration_type="vip"))

    assert response.status_code == 422
    assert "registration_type" in response.json()["error"]["fields"]


def test_staff_channel_duplicate_ignores_company(
    test_client: TestClient, db_session, admin_headers
):
    first = test_client.post(
        URL,
        json=intake(registration_type="pre-registered", email="ana@acme.io"),
        headers=admin_headers,
    )
    assert first.status_code == 201

    second = test_client.post(
        URL,
        json=intake(
            registration_type="pre-registered", company_name="Beta", email="ana@beta.io"
        ),
        headers=admin_headers,
    )

    assert second.status_code == 409
    assert second.json()["error"]["field"] == "identity"
    assert registration_count(db_session) == 1


def test_complimentary_duplicate_ignores_company(
    test_client: TestClient, db_session, admin_headers
):
    test_client.post(URL, json=intake(), headers=admin_headers)

    response = test_client.post(
        URL,
        json=intake(registration_type="complimentary", company_name="Globex"),
        headers=admin_headers,
    )

    assert response.status_code == 409
    assert registration_count(db_session) == 1


def test_missing_server_mode(test_client: TestClient, db_session, admin_headers):
    db_session.query(ServerMode).delete()
    db_session.commit()

    response = test_client.post(URL, json=intake(), headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "No server mode Configured"


def test_missing_print_statuses(test_client: TestClient, db_session, admin_headers):
    db_session.query(PrintStatus).filter(PrintStatus.name == "not_printed").update(
        {PrintStatus.active: False}
    )
    db_session.commit()

    response = test_client.post(URL, json=intake(), headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["error"]["category"] == "configuration_missing"
    assert registration_count(db_session) == 0


def test_get_registration(test_client: TestClient, admin_headers):
    created = test_client.post(
        URL, json=intake(email="ana.cruz@acme.io", phone="+1 555 0100"), headers=admin_headers
    ).json()

    response = test_client.get(f"{URL}/{created['ticket_number']}", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["first_name"] == "Ana"
    assert data["email"] == "ana.cruz@acme.io"
    assert data["phone"] == "+1 555 0100"


def test_get_unknown_registration(test_client: TestClient, admin_headers):
    response = test_client.get(f"{URL}/{uuid.uuid4()}", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["error"]["category"] == "not_found_error"


def test_list_requires_permission(test_client: TestClient, user_headers):
    response = test_client.get(URL, headers=user_headers)

    assert response.status_code == 403


def test_list_search_by_email(test_client: TestClient, admin_headers):
    test_client.post(URL, json=intake(email="ana.cruz@acme.io"), headers=admin_headers)
    test_client.post(
        URL, json=intake(first_name="Ben", email="ben@acme.io"), headers=admin_headers
    )

    response = test_client.get(URL, params={"search": "Ben@Acme.io"}, headers=admin_headers)

    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["first_name"] == "Ben"


def test_update_registration(test_client: TestClient, admin_headers):
    ticket = test_client.post(URL, json=intake(), headers=admin_headers).json()["ticket_number"]

    response = test_client.patch(
        f"{URL}/{ticket}", json={"company_name": "Acme Corp", "job_title": "CTO"}, headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["company_name"] == "Acme Corp"
    assert response.json()["job_title"] == "CTO"


def test_update_rejects_status_fields(test_client: TestClient, admin_headers):
    ticket = test_client.post(URL, json=intake(), headers=admin_headers).json()["ticket_number"]

    response = test_client.patch(f"{URL}/{ticket}", json={"confirmed": True}, headers=admin_headers)

    assert response.status_code == 422


def test_confirmed_registration_is_frozen(test_client: TestClient, admin_headers):
    ticket = test_client.post(URL, json=intake(), headers=admin_headers).json()["ticket_number"]
    assert test_client.post(f"{URL}/{ticket}/scan", headers=admin_headers).status_code == 200

    response = test_client.patch(f"{URL}/{ticket}", json={"company_name": "Other"}, headers=admin_headers)

    assert response.status_code == 409


def test_update_into_existing_person_conflicts(test_client: TestClient, admin_headers):
    test_client.post(URL, json=intake(), headers=admin_headers)
    other = test_client.post(
        URL, json=intake(first_name="Bea"), headers=admin_headers
    ).json()["ticket_number"]

    response = test_client.patch(f"{URL}/{other}", json={"first_name": "Ana"}, headers=admin_headers)

    assert response.status_code == 409


def test_update_pre_registration_into_existing_name_conflicts(
    test_client: TestClient, admin_headers
):
    test_client.post(URL, json=intake(), headers=admin_headers)
    other = test_client.post(
        URL,
        json=intake(
            first_name="Bea",
            company_name="Beta",
            registration_type="pre-registered",
            email="bea@beta.io",
        ),
        headers=admin_headers,
    ).json()["ticket_number"]

    response = test_client.patch(f"{URL}/{other}", json={"first_name": "Ana"}, headers=admin_headers)

    assert response.status_code == 409
    assert response.json()["error"]["field"] == "identity"


def test_regenerate_qr_is_queued(test_client: TestClient, admin_headers, enqueued):
    ticket = test_client.post(URL, json=intake(), headers=admin_headers).json()["ticket_number"]
    enqueued.clear()

    response = test_client.post(f"{URL}/{ticket}/qr", headers=admin_headers)

    assert response.status_code == 202
    assert response.json() == {
        "ticket_number": ticket,
        "asset_path": f"qrcodes/{ticket}.png",
        "status": "queued",
    }
    assert enqueued == [ticket]


def test_print_statuses_listing(test_client: TestClient, admin_headers):
    response = test_client.get(
        "/api/v1/print-statuses", params={"type": "badge"}, headers=admin_headers
    )

    assert response.status_code == 200
    names = {row["name"] for row in response.json()}
    assert names == {"not_printed", "queued", "printing", "printed", "reprinted", "failed"}
    assert all(row["type"] == "badge" for row in response.json())
