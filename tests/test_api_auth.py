def test_register_sets_http_only_cookie(client):
    response = client.post(
        "/api/register",
        json={"email": "new@co.com", "password": "password123", "company_name": "New Co"},
    )
    assert response.status_code == 201
    assert "password" not in response.json()
    set_cookie = response.headers["set-cookie"].lower()
    assert "access_token=" in set_cookie
    assert "httponly" in set_cookie
    assert "samesite=lax" in set_cookie

    me = client.get("/api/user")
    assert me.status_code == 200
    assert me.json()["email"] == "new@co.com"


def test_duplicate_registration_rejected(client, helpers):
    helpers.register(client, "dup@co.com")
    response = client.post(
        "/api/register",
        json={"email": "DUP@co.com", "password": "password123", "company_name": "Again"},
    )
    assert response.status_code == 400
    assert response.json() == {"success": False, "data": None, "error": "Email already registered"}


def test_login_logout_cycle(client, helpers):
    helpers.register(client, "pat@co.com", password="correct-horse")
    client.cookies.clear()

    bad = client.post("/api/login", json={"email": "pat@co.com", "password": "wrong-horse"})
    assert bad.status_code == 401
    assert bad.json()["error"] == "Invalid email or password"

    good = client.post("/api/login", json={"email": "pat@co.com", "password": "correct-horse"})
    assert good.status_code == 200
    assert client.get("/api/user").status_code == 200

    token = good.cookies.get("access_token")
    assert client.post("/api/logout").status_code == 200
    client.cookies.clear()
    assert client.get("/api/user", headers={"Authorization": f"Bearer {token}"}).status_code == 401


def test_invalid_payload_is_generic_400(client):
    response = client.post("/api/register", json={"email": "not-an-email", "password": "x"})
    assert response.status_code == 400
    assert response.json() == {"success": False, "data": None, "error": "Invalid request"}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["database"]["ok"] is True
