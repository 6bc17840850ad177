async def test_register_login_and_me(client):
    resp = await client.post("/api/v1/auth/register", json={
        "name": "Nora", "email": "Nora@Example.com", "password": "hunter22",
    })
    assert resp.status_code == 201
    body = resp.json()
    assert body["user"]["email"] == "nora@example.com"
    assert body["user"]["role"] == "customer"

    resp = await client.post("/api/v1/auth/login", json={"email": "nora@example.com", "password": "hunter22"})
    assert resp.status_code == 200
    access = resp.json()["access_token"]

    resp = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {access}"})
    assert resp.status_code == 200
    assert resp.json()["name"] == "Nora"


async def test_duplicate_email_conflicts(client, customer):
    resp = await client.post("/api/v1/auth/register", json={
        "name": "Again", "email": customer.email, "password": "hunter22",
    })
    assert resp.status_code == 409
    assert resp.json()["error"] == "Email already registered"


async def test_short_password_is_a_validation_error(client):
    resp = await client.post("/api/v1/auth/register", json={
        "name": "Short", "email": "short@example.com", "password": "123",
    })
    assert resp.status_code == 422
    assert resp.json()["error"] == "Validation error"
    assert resp.json()["details"]["errors"][0]["field"] == "body.password"


async def test_wrong_password_is_rejected(client, customer):
    resp = await client.post("/api/v1/auth/login", json={"email": customer.email, "password": "wrong-one"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid email or password", "details": {}}


async def test_refresh_requires_refresh_token(client, customer):
    resp = await client.post("/api/v1/auth/login", json={"email": customer.email, "password": "secret123"})
    tokens = resp.json()

    resp = await client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert resp.status_code == 200
    assert resp.json()["access_token"]

    resp = await client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert resp.status_code == 401


async def test_refresh_token_is_not_an_access_token(client, customer):
    resp = await client.post("/api/v1/auth/login", json={"email": customer.email, "password": "secret123"})
    refresh = resp.json()["refresh_token"]

    resp = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {refresh}"})
    assert resp.status_code == 401


async def test_login_sets_cookies_that_authenticate(client, customer):
    resp = await client.post("/api/v1/auth/login", json={"email": customer.email, "password": "secret123"})
    tokens = resp.json()
    set_cookies = resp.headers.get_list("set-cookie")
    assert any(c.startswith("access_token=") and "HttpOnly" in c for c in set_cookies)
    assert any(c.startswith("refresh_token=") and "HttpOnly" in c for c in set_cookies)

    resp = await client.get("/api/v1/auth/me", headers={"Cookie": f"access_token={tokens['access_token']}"})
    assert resp.status_code == 200
    assert resp.json()["email"] == customer.email

    resp = await client.post("/api/v1/auth/refresh", headers={"Cookie": f"refresh_token={tokens['refresh_token']}"})
    assert resp.status_code == 200
    assert resp.json()["access_token"]


async def test_logout_clears_cookies(client):
    resp = await client.post("/api/v1/auth/logout")

    assert resp.status_code == 200
    cleared = resp.headers.get_list("set-cookie")
    assert {c.split("=", 1)[0] for c in cleared} == {"access_token", "refresh_token"}
    assert all("Max-Age=0" in c for c in cleared)
