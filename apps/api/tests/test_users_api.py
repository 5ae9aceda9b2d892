from __future__ import annotations

import threading

import pytest

from garagehub.services import OtpStore


def _create(client, email: str = "ann@example.com", password: str = "hunter2"):
    return client.post(
        "/api/users",
        json={"name": "Ann", "email": email, "password": password, "type": "customer"},
    )


def test_user_crud_never_exposes_password(client, db_pool) -> None:
    res = _create(client)
    assert res.status_code == 201
    body = res.json()
    assert body["message"] == "User created successfully"
    user = body["user"]
    assert "password" not in user and "password_hash" not in user
    assert db_pool.users[user["id"]].password_hash != "hunter2"

    assert [u["id"] for u in client.get("/api/users").json()] == [user["id"]]

    res = client.put(f"/api/users/{user['id']}", json={"name": "Ann B"})
    assert res.status_code == 200
    assert res.json()["user"]["name"] == "Ann B"
    assert res.json()["user"]["email"] == "ann@example.com"

    assert client.delete(f"/api/users/{user['id']}").status_code == 200
    assert client.get(f"/api/users/{user['id']}").status_code == 404


def test_create_user_requires_all_fields(client) -> None:
    res = client.post("/api/users", json={"name": "Ann", "email": "ann@example.com"})
    assert res.status_code == 400
    assert res.json()["error"] == "VALIDATION_FAILED"


def test_login(client) -> None:
    _create(client)

    res = client.post("/api/users/login", json={"email": "ANN@example.com", "password": "hunter2"})
    assert res.status_code == 200
    assert res.json()["message"] == "Login successful"

    res = client.post("/api/users/login", json={"email": "ann@example.com", "password": "nope"})
    assert res.status_code == 400
    assert res.json()["error"] == "INVALID_CREDENTIALS"

    res = client.post("/api/users/login", json={"email": "bob@example.com", "password": "x"})
    assert res.status_code == 404


def test_update_password_is_rehashed(client) -> None:
    user = _create(client).json()["user"]
    client.put(f"/api/users/{user['id']}", json={"password": "s3cret"})

    res = client.post("/api/users/login", json={"email": "ann@example.com", "password": "s3cret"})
    assert res.status_code == 200


def test_forgot_and_reset_password(client, redis, mailer) -> None:
    _create(client)

    res = client.post("/api/users/forgot-password", json={"email": "ann@example.com"})
    assert res.status_code == 200
    assert res.json()["message"] == "OTP sent to email"
    (sent,) = mailer.sent
    assert sent["to"] == "ann@example.com"
    key = OtpStore.key("ann@example.com")
    code = redis._kv[key]
    assert code in sent["body"]
    assert redis.ttl[key] == 600

    res = client.post(
        "/api/users/reset-password",
        json={"email": "ann@example.com", "otp": "000000", "newPassword": "n3w"},
    )
    assert res.status_code == 400
    assert res.json()["error"] == "INVALID_OTP"

    res = client.post(
        "/api/users/reset-password",
        json={"email": "ann@example.com", "otp": int(code), "newPassword": "n3w"},
    )
    assert res.status_code == 200
    assert key not in redis._kv

    res = client.post("/api/users/login", json={"email": "ann@example.com", "password": "n3w"})
    assert res.status_code == 200

    res = client.post(
        "/api/users/reset-password",
        json={"email": "ann@example.com", "otp": code, "newPassword": "again"},
    )
    assert res.status_code == 400


def test_forgot_password_unknown_email_is_404(client, mailer) -> None:
    res = client.post("/api/users/forgot-password", json={"email": "bob@example.com"})
    assert res.status_code == 404
    assert mailer.sent == []


def test_forgot_password_mail_failure_is_500_and_discards_otp(client, redis, mailer) -> None:
    _create(client)
    mailer.fail = True

    res = client.post("/api/users/forgot-password", json={"email": "ann@example.com"})
    assert res.status_code == 500
    assert res.json()["error"] == "EMAIL_FAILED"
    assert OtpStore.key("ann@example.com") not in redis._kv


@pytest.mark.asyncio
async def test_password_hashing_runs_off_the_event_loop(
    monkeypatch, settings, db_pool, redis, mailer
) -> None:
    import services.user_service as user_service
    from garagehub.utils import hash_password, verify_password

    loop_thread = threading.get_ident()
    threads: list[int] = []

    def recording_hash(password: str) -> str:
        threads.append(threading.get_ident())
        return hash_password(password)

    def recording_verify(password: str, hashed: str) -> bool:
        threads.append(threading.get_ident())
        return verify_password(password, hashed)

    monkeypatch.setattr(user_service, "hash_password", recording_hash)
    monkeypatch.setattr(user_service, "verify_password", recording_verify)

    service = user_service.UserService(settings, db_pool, redis, mailer)
    user = await service.create_user(
        name="Ann", email="ann@example.com", password="hunter2", type="customer"
    )
    await service.update_user(user.id, password="s3cret")
    await service.login(email="ann@example.com", password="s3cret")

    assert len(threads) == 3
    assert loop_thread not in threads
