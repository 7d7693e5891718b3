"""
Tests for the operation audit middleware.
"""

import json
from pathlib import Path

import pytest
from fastapi import FastAPI

from dashboard.audit import OperationAuditMiddleware
from dashboard.auth.session import create_session_token
from dashboard.config import settings
from dashboard.models import AuthenticatedUser


def audit_entries() -> list[dict]:
    log_file = Path(settings.logs_dir) / settings.audit.log_file
    if not log_file.exists():
        return []
    return [json.loads(line) for line in log_file.read_text().splitlines() if line]


@pytest.mark.asyncio
async def test_create_server_is_audited_with_user(client):
    user = AuthenticatedUser(id="audit-user", displayName="Auditor")
    client.cookies.set(settings.session.cookie_name, create_session_token(user))
    before = len(audit_entries())

    response = await client.post(
        "/servers", json={"name": "Audited", "host": "audit.example.org", "port": 25565}
    )
    assert response.status_code == 200

    entries = audit_entries()[before:]
    assert len(entries) == 1
    entry = entries[0]
    assert entry["method"] == "POST"
    assert entry["path"] == "/servers"
    assert entry["status_code"] == 200
    assert entry["success"] is True
    assert entry["user_id"] == "audit-user"
    assert entry["display_name"] == "Auditor"
    assert entry["request_body"]["name"] == "Audited"


@pytest.mark.asyncio
async def test_rejected_create_is_audited_as_anonymous(client):
    before = len(audit_entries())

    response = await client.post("/servers", json={"name": "Nope"})
    assert response.status_code == 401

    (entry,) = audit_entries()[before:]
    assert entry["user_id"] is None
    assert entry["display_name"] == "anonymous"
    assert entry["success"] is False


@pytest.mark.asyncio
async def test_reads_are_not_audited(client):
    before = len(audit_entries())

    await client.get("/status")
    await client.get("/search", params={"q": "x"})

    assert audit_entries()[before:] == []


@pytest.mark.asyncio
async def test_oauth_code_is_masked(client):
    before = len(audit_entries())

    await client.get("/auth/google/callback", params={"code": "4/secret", "state": "s"})

    (entry,) = audit_entries()[before:]
    assert entry["path"] == "/auth/google/callback"
    assert entry["query_params"]["code"] == "***MASKED***"
    assert entry["query_params"]["state"] == "s"


def test_mask_sensitive_data_nested():
    middleware = OperationAuditMiddleware(FastAPI())

    masked = middleware._mask_sensitive_data(
        {"name": "x", "Token": "t", "nested": {"secret": "s", "port": 1}}
    )

    assert masked == {
        "name": "x",
        "Token": "***MASKED***",
        "nested": {"secret": "***MASKED***", "port": 1},
    }
