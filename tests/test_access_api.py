from __future__ import annotations

import pytest
from sqlmodel import select

from hrdesk.models import AllowedIP, UserRole
from hrdesk.repositories import AllowedIPRepository

pytestmark = pytest.mark.asyncio

ALLOWED_IP = "203.0.113.5"


async def test_allowlisted_address_is_granted(client, allowlist):
    response = await client.get(
        "/api/access/validate-ip",
        headers={"X-Forwarded-For": f"{ALLOWED_IP}, 70.41.3.18"},
    )

    assert response.status_code == 200
    assert response.json() == {"allowed": True, "message": "Access granted", "ip": ALLOWED_IP}


async def test_real_ip_header_is_used_without_forwarded_for(client, allowlist):
    response = await client.get("/api/access/validate-ip", headers={"X-Real-IP": ALLOWED_IP})
    assert response.json()["allowed"] is True


async def test_unknown_address_is_denied(client, allowlist):
    response = await client.get("/api/access/validate-ip", headers={"X-Forwarded-For": "198.51.100.7"})

    assert response.status_code == 200
    assert response.json() == {
        "allowed": False,
        "message": "IP address not allowed",
        "ip": "198.51.100.7",
    }


async def test_missing_headers_fall_back_to_sentinel(client, allowlist):
    response = await client.get("/api/access/validate-ip")
    body = response.json()
    assert body["allowed"] is False
    assert body["ip"] == "0.0.0.0"


async def test_exact_match_only(client, session):
    session.add(AllowedIP(ip_address="10.0.0.1"))
    await session.commit()

    response = await client.get("/api/access/validate-ip", headers={"X-Forwarded-For": "10.0.0.10"})

    assert response.json()["allowed"] is False


async def test_lookup_failure_fails_closed(client, allowlist, monkeypatch):
    async def _broken(self, ip_address):
        raise RuntimeError("allowlist unavailable")

    monkeypatch.setattr(AllowedIPRepository, "get_by_address", _broken)

    response = await client.get("/api/access/validate-ip", headers={"X-Forwarded-For": ALLOWED_IP})

    assert response.status_code == 500
    assert response.json() == {
        "allowed": False,
        "message": "Internal server error",
        "details": "allowlist unavailable",
        "ip": ALLOWED_IP,
    }


async def test_allowlist_administration(client, session, allowlist, make_user, auth_headers):
    admin = await make_user("root@example.com", role=UserRole.ADMIN)
    headers = auth_headers(admin)

    created = await client.post(
        "/api/access/allowed-ips",
        json={"ip_address": " 192.0.2.44 ", "description": "VPN"},
        headers=headers,
    )
    assert created.status_code == 201
    entry = created.json()
    assert entry["ip_address"] == "192.0.2.44"
    assert entry["created_by"] == admin.id

    duplicate = await client.post(
        "/api/access/allowed-ips",
        json={"ip_address": "192.0.2.44"},
        headers=headers,
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "duplicate_ip"

    invalid = await client.post(
        "/api/access/allowed-ips",
        json={"ip_address": "not-an-ip"},
        headers=headers,
    )
    assert invalid.status_code == 422

    listed = await client.get("/api/access/allowed-ips", headers=headers)
    assert {item["ip_address"] for item in listed.json()} == {ALLOWED_IP, "192.0.2.44"}

    removed = await client.delete(f"/api/access/allowed-ips/{entry['id']}", headers=headers)
    assert removed.status_code == 204
    remaining = (await session.exec(select(AllowedIP.ip_address))).all()
    assert remaining == [ALLOWED_IP]


async def test_allowlist_administration_requires_admin(client, allowlist, make_user, auth_headers):
    user = await make_user("staff@example.com")

    response = await client.get("/api/access/allowed-ips", headers=auth_headers(user))

    assert response.status_code == 403
    assert response.json()["code"] == "forbidden"
