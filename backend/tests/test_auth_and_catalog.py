from conftest import API


def _login(client, username, password):
    return client.post("/api/auth/login", json={"username": username, "password": password})


def test_login_and_me(client, users):
    res = _login(client, "Chemist", "secret123")
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["token_type"] == "bearer"
    assert data["user"]["role"] == "chemist"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
    assert me.status_code == 200
    assert me.json()["data"]["username"] == "chemist"


def test_login_rejects_bad_credentials_and_inactive_users(client, users, db):
    assert _login(client, "chemist", "wrong").status_code == 401
    assert _login(client, "nobody", "secret123").status_code == 401

    users["doctor"].is_active = False
    db.commit()
    assert _login(client, "doctor", "secret123").status_code == 401


def test_dispensary_requires_a_valid_token(client, users, patient):
    res = client.get(f"{API}/dispenses", params={"patient_id": patient.id})
    assert res.status_code == 401
    assert res.json() == {"message": "Missing token"}

    res = client.get(
        f"{API}/dispenses",
        params={"patient_id": patient.id},
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert res.status_code == 401


def test_role_matrix(client, auth_headers, patient):
    body = {"items": [{"name": "ORS", "quantity": 1, "unit_price": 20}], "patient": patient.id}
    assert client.post(f"{API}/dispenses", json=body, headers=auth_headers("receptionist")).status_code == 403
    assert client.post(f"{API}/dispenses", json=body, headers=auth_headers("doctor")).status_code == 403

    created = client.post(f"{API}/dispenses", json=body, headers=auth_headers("admin")).json()["data"]
    url = f"{API}/dispenses/{created['id']}"
    assert client.get(url, headers=auth_headers("receptionist")).status_code == 200
    assert client.get(url, headers=auth_headers("doctor")).status_code == 403
    assert client.put(url, json={"tax": 1}, headers=auth_headers("receptionist")).status_code == 403
    assert client.post(f"{url}/pay", json={"amount": 1}, headers=auth_headers("receptionist")).status_code == 403


def test_bill_pdf(client, auth_headers, patient):
    body = {
        "items": [{"name": "Paracetamol", "strength": "500 mg", "quantity": 10, "unit_price": 2, "notes": "after food"}],
        "patient": patient.id,
        "tax": 1.5,
    }
    created = client.post(f"{API}/dispenses", json=body, headers=auth_headers()).json()["data"]

    res = client.get(f"{API}/dispenses/{created['id']}/bill.pdf", headers=auth_headers("receptionist"))
    assert res.status_code == 200
    assert res.headers["content-type"] == "application/pdf"
    assert res.headers["content-disposition"].startswith("inline;")
    assert created["bill_number"] in res.headers["content-disposition"]
    assert res.content.startswith(b"%PDF")

    res = client.get(
        f"{API}/dispenses/{created['id']}/bill.pdf",
        params={"download": "true"},
        headers=auth_headers(),
    )
    assert res.headers["content-disposition"].startswith("attachment;")
    assert client.get(f"{API}/dispenses/999/bill.pdf", headers=auth_headers()).status_code == 404


def test_medicine_search(client, auth_headers, medicines):
    res = client.get(f"{API}/medicines", params={"q": "para"}, headers=auth_headers())
    assert res.status_code == 200
    data = res.json()["data"]
    assert [m["label"] for m in data] == ["Paracetamol 500 mg tablet", "Paracetamol 650 mg tablet"]
    assert data[0]["stock_qty"] == 100

    syrup = client.get(f"{API}/medicines", params={"q": "SYRUP"}, headers=auth_headers()).json()["data"]
    assert syrup[0]["is_low_stock"] is True
    assert syrup[0]["label"] == "Cough Syrup"


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"
    assert client.get("/health/db").json()["database"] == "ok"
