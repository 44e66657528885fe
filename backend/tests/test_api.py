import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.services import audit
from app.services.auth import build_signed_request
from app.services.sale import sale_service

from conftest import ALICE, BOB, MAIN_END, OTHER_KEYPAIR, OTHER, OWNER, OWNER_KEYPAIR, PRE_END, PRIVATE_START

PREFIX = "/api/v1/sale"


@pytest.fixture
def client(crowdsale):
    sale_service.use(crowdsale)
    # Entering the client runs the lifespan, which opens the in-memory database
    with TestClient(app) as test_client:
        yield test_client
    sale_service.use(None)


def _signed(client, method, path, payload, keypair=OWNER_KEYPAIR):
    body, headers = build_signed_request(keypair, method, PREFIX + path, payload)
    return client.request(method, PREFIX + path, content=body, headers=headers)


def test_status_reports_current_stage(client, clock) -> None:
    clock.now = PRIVATE_START
    resp = client.get(f"{PREFIX}/status")

    assert resp.status_code == 200
    data = resp.json()
    assert data["stage"] == 1
    assert data["name"] == "Private Sale"
    assert data["price"] == 50
    assert data["hard_cap"] == 1000
    assert data["sale_active"] is True
    assert data["owner"] == OWNER


def test_list_stages(client) -> None:
    resp = client.get(f"{PREFIX}/stages")

    assert resp.status_code == 200
    stages = resp.json()["stages"]
    assert [s["name"] for s in stages] == ["Inactive", "Private Sale", "Pre-Sale", "Main Sale", "Sale Is Over"]


def test_allocation_flow(client, clock, ledger) -> None:
    clock.now = PRIVATE_START
    resp = _signed(client, "POST", "/allocations", {"recipient": ALICE, "quantity": 250, "value": 3})

    assert resp.status_code == 200
    data = resp.json()
    assert data["beneficiary"] == ALICE
    assert data["purchaser"] == OWNER
    assert data["sold"] == 250
    assert ledger.balance_of(ALICE) == 250

    records = client.get(f"{PREFIX}/allocations", params={"beneficiary": ALICE}).json()
    assert len(records) == 1
    assert records[0]["amount"] == 250
    assert records[0]["stage"] == "PRIVATE_SALE"


def test_allocation_survives_failed_audit_write(client, clock, ledger, monkeypatch) -> None:
    async def broken_record_allocation(receipt):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(audit, "record_allocation", broken_record_allocation)
    clock.now = PRIVATE_START

    resp = _signed(client, "POST", "/allocations", {"recipient": BOB, "quantity": 10})
    assert resp.status_code == 200
    assert ledger.balance_of(BOB) == 10


def test_allocation_errors_map_to_status(client, clock) -> None:
    clock.now = 0
    resp = _signed(client, "POST", "/allocations", {"recipient": ALICE, "quantity": 1})
    assert resp.status_code == 409
    assert resp.json()["error"] == "stage_not_sellable"

    clock.now = PRIVATE_START
    resp = _signed(client, "POST", "/allocations", {"recipient": ALICE, "quantity": 1001})
    assert resp.status_code == 409
    assert resp.json()["error"] == "cap_exceeded"

    resp = _signed(client, "POST", "/allocations", {"recipient": ALICE, "quantity": 0})
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_quantity"


def test_non_owner_is_forbidden(client, clock) -> None:
    clock.now = PRIVATE_START
    resp = _signed(client, "POST", "/allocations", {"recipient": ALICE, "quantity": 1}, keypair=OTHER_KEYPAIR)

    assert resp.status_code == 403
    assert resp.json()["error"] == "unauthorized"


def test_bad_signature_is_unauthenticated(client, clock) -> None:
    clock.now = PRIVATE_START
    body, headers = build_signed_request(OWNER_KEYPAIR, "POST", f"{PREFIX}/allocations", {"recipient": ALICE, "quantity": 1})
    headers["X-Caller"] = OTHER

    resp = client.post(f"{PREFIX}/allocations", content=body, headers=headers)
    assert resp.status_code == 401


def test_missing_signature_headers(client) -> None:
    resp = client.post(f"{PREFIX}/terminate", json={"issued_at": 0, "nonce": "n"})
    assert resp.status_code == 422


def test_repeated_allocation_request_is_rejected(client, clock, crowdsale, ledger) -> None:
    clock.now = PRIVATE_START
    path = f"{PREFIX}/allocations"
    body, headers = build_signed_request(OWNER_KEYPAIR, "POST", path, {"recipient": ALICE, "quantity": 100})

    first = client.post(path, content=body, headers=headers)
    second = client.post(path, content=body, headers=headers)

    assert first.status_code == 200
    assert second.status_code == 401
    assert "already been used" in second.json()["detail"]
    assert crowdsale.current_sold() == 100
    assert ledger.balance_of(ALICE) == 100


def test_request_signed_for_terminate_cannot_renounce(client, clock, crowdsale) -> None:
    clock.now = MAIN_END
    body, headers = build_signed_request(OWNER_KEYPAIR, "POST", f"{PREFIX}/terminate", {})

    resp = client.post(f"{PREFIX}/ownership/renounce", content=body, headers=headers)

    assert resp.status_code == 401
    assert crowdsale.owner == OWNER


def test_same_nonce_with_fresh_signature_is_rejected(client, clock, crowdsale) -> None:
    clock.now = PRIVATE_START
    first = _signed(client, "POST", "/allocations", {"recipient": ALICE, "quantity": 5, "nonce": "order-1"})
    second = _signed(client, "POST", "/allocations", {"recipient": BOB, "quantity": 5, "nonce": "order-1"})

    assert first.status_code == 200
    assert second.status_code == 401
    assert crowdsale.current_sold() == 5


def test_update_stage_date(client, clock) -> None:
    clock.now = 3500
    resp = _signed(client, "PUT", "/stages/pre_sale/end", {"value": 4500})

    assert resp.status_code == 200
    assert resp.json()["end_date"] == 4500

    clock.now = 4600
    resp = _signed(client, "PUT", "/stages/pre_sale/end", {"value": 4700})
    assert resp.status_code == 409
    assert resp.json()["reason"] == "boundary_passed"


def test_unknown_stage_path(client) -> None:
    resp = _signed(client, "PUT", "/stages/inactive/start", {"value": PRE_END})
    assert resp.status_code == 422


def test_terminate(client, clock, ledger) -> None:
    clock.now = MAIN_END
    resp = _signed(client, "POST", "/terminate", {})
    assert resp.status_code == 409
    assert resp.json()["error"] == "too_early"

    clock.now = MAIN_END + 1
    resp = _signed(client, "POST", "/terminate", {})
    assert resp.status_code == 200
    assert resp.json()["sale_over"] is True

    resp = _signed(client, "POST", "/terminate", {})
    assert resp.json()["error"] == "already_over"


def test_failed_burn_is_bad_gateway(client, clock, ledger) -> None:
    clock.now = MAIN_END + 1
    ledger.fail_burn = True

    resp = _signed(client, "POST", "/terminate", {})
    assert resp.status_code == 502
    assert resp.json()["error"] == "external_failure"


def test_ownership_transfer_and_renounce(client) -> None:
    resp = _signed(client, "POST", "/ownership/transfer", {"new_owner": OTHER})
    assert resp.status_code == 200
    assert resp.json() == {"previous_owner": OWNER, "owner": OTHER}

    resp = _signed(client, "POST", "/ownership/renounce", {}, keypair=OTHER_KEYPAIR)
    assert resp.status_code == 200
    assert resp.json()["owner"] == "11111111111111111111111111111111"

    resp = _signed(client, "POST", "/ownership/renounce", {}, keypair=OTHER_KEYPAIR)
    assert resp.status_code == 403


def test_health(client) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"

    resp = client.get("/ready")
    assert resp.json()["checks"]["memory_ledger"] is True


def test_error_responses_are_documented(client) -> None:
    schema = client.get("/openapi.json").json()
    responses = schema["paths"][f"{PREFIX}/allocations"]["post"]["responses"]

    for code in ("400", "403", "409", "502"):
        ref = responses[code]["content"]["application/json"]["schema"]["$ref"]
        assert ref.endswith("/ErrorResponse")
