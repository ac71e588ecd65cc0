def test_register_validation(client):
    resp = client.post("/auth/register", json={"email": "nobody", "password": "long-enough-1"})
    assert resp.status_code == 400

    resp = client.post("/auth/register", json={"email": "a@b.test", "password": "short"})
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "VALIDATION_ERROR"


def test_duplicate_email(client):
    body = {"email": "dup@salon.test", "password": "long-enough-1"}
    assert client.post("/auth/register", json=body).status_code == 201

    resp = client.post("/auth/register", json=body)
    assert resp.status_code == 409
    assert resp.get_json()["code"] == "EMAIL_EXISTS"


def test_login_me_logout(client):
    client.post("/auth/register", json={"email": "Me@Salon.test", "password": "long-enough-1"})

    resp = client.post("/auth/login", json={"email": "me@salon.test", "password": "wrong-password"})
    assert resp.status_code == 401

    resp = client.post("/auth/login", json={"email": "me@salon.test", "password": "long-enough-1"})
    assert resp.get_json()["roles"] == ["CUSTOMER"]

    me = client.get("/auth/me").get_json()
    assert me["email"] == "me@salon.test"

    csrf = {"X-CSRF-Token": client.get_cookie("csrf_token").value}
    assert client.post("/auth/logout", headers=csrf).status_code == 200
    assert client.get("/auth/me").status_code == 401


def test_my_bookings(customer_client, payload, next_week):
    resp = customer_client.post("/bookings", json=payload(next_week), headers=customer_client.csrf)
    assert resp.status_code == 201
    assert resp.get_json()["booking"]["user_id"] is not None

    mine = customer_client.get("/bookings/me").get_json()
    assert mine["total"] == 1


def test_my_bookings_requires_login(client):
    assert client.get("/bookings/me").status_code == 401
