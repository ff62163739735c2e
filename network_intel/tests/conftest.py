"""
Test configuration and fixtures for the network intelligence API tests.

Endpoint and service tests run against an in-memory store patched over the
services' storage methods, so they need no database. Tests marked
`postgres` run the real SQL and are skipped unless POSTGRES_TEST is set.
"""

import itertools
import os
from datetime import datetime as dt
from datetime import timezone as tz
from typing import AsyncGenerator, Callable, Dict, List, Optional, Tuple
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment before importing application modules
os.environ["PYTEST_RUNNING"] = "1"
os.environ["APP_ENV"] = "test"
os.environ["PRIMARY_ADMIN_EMAIL"] = "Chief@Example.com "
os.environ.pop("OWNER_NOTIFY_URL", None)

from network_intel.access_requests import access_request_services  # noqa: E402
from network_intel.access_requests.access_request_models import AccessRequestStatus  # noqa: E402
from network_intel.access_requests.access_request_services import access_request_service  # noqa: E402
from network_intel.admins import admin_services  # noqa: E402
from network_intel.admins.admin_whitelist_service import admin_whitelist_service  # noqa: E402
from network_intel.audit.audit_services import audit_service  # noqa: E402
from network_intel.auth.auth_services import get_optional_user  # noqa: E402
from network_intel.contacts.contact_services import contact_service  # noqa: E402
from network_intel.core.environment import normalize_email  # noqa: E402
from network_intel.core.errors import InvalidStateError  # noqa: E402
from network_intel.main import app  # noqa: E402
from network_intel.notes.note_services import note_service  # noqa: E402

PRIMARY_ADMIN_EMAIL = "chief@example.com"


def _now() -> dt:
    return dt.now(tz.utc)


class InMemoryStore:
    """Dict-backed stand-in for the storage methods of each service."""

    def __init__(self):
        self._ids = itertools.count(1)
        self.whitelist: Dict[str, dict] = {}
        self.requests: Dict[int, dict] = {}
        self.audit: List[dict] = []
        self.notes: Dict[int, dict] = {}
        self.contacts: Dict[int, dict] = {}
        self.fail_audit_writes = False
        self.fail_whitelist_reads = False

    def _next_id(self) -> int:
        return next(self._ids)

    # ================== Whitelist ==================

    async def find_entry(self, email: str) -> Optional[dict]:
        if self.fail_whitelist_reads:
            raise ConnectionError("whitelist store unreachable")
        return self.whitelist.get(normalize_email(email))

    async def upsert_entry(self, email: str, name: Optional[str], approved_by: Optional[str], conn=None) -> dict:
        email = normalize_email(email)
        entry = self.whitelist.get(email)
        if entry:
            entry["approved_by"] = approved_by
            if name is not None:
                entry["name"] = name
        else:
            entry = {
                "id": self._next_id(),
                "email": email,
                "name": name,
                "approved_by": approved_by,
                "created_at": _now(),
            }
            self.whitelist[email] = entry
        return dict(entry)

    async def delete_entry(self, email: str) -> bool:
        return self.whitelist.pop(normalize_email(email), None) is not None

    async def list_entries(self) -> List[dict]:
        return sorted(self.whitelist.values(), key=lambda e: (e["created_at"], e["id"]), reverse=True)

    async def count_whitelist(self) -> int:
        return len(self.whitelist)

    # ================== Access Requests ==================

    async def find_request(self, request_id: int) -> Optional[dict]:
        request = self.requests.get(request_id)
        return dict(request) if request else None

    async def find_pending_by_email(self, email: str) -> Optional[dict]:
        email = normalize_email(email)
        for request in self.requests.values():
            if request["email"] == email and request["status"] == "pending":
                return dict(request)
        return None

    async def insert_request(self, email: str, name: str, reason: Optional[str]) -> Optional[dict]:
        if await self.find_pending_by_email(email):
            return None
        now = _now()
        request = {
            "id": self._next_id(),
            "email": normalize_email(email),
            "name": name,
            "reason": reason,
            "status": "pending",
            "reviewed_by": None,
            "reviewed_at": None,
            "created_at": now,
            "updated_at": now,
        }
        self.requests[request["id"]] = request
        return dict(request)

    async def list_requests(self, status: Optional[AccessRequestStatus] = None) -> List[dict]:
        rows = [r for r in self.requests.values() if status is None or r["status"] == status.value]
        return sorted(rows, key=lambda r: (r["created_at"], r["id"]), reverse=True)

    async def count_pending(self) -> int:
        return sum(1 for r in self.requests.values() if r["status"] == "pending")

    async def apply_decision(self, request: dict, decision: AccessRequestStatus, reviewer_email: str) -> dict:
        stored = self.requests[request["id"]]
        if stored["status"] != "pending":
            raise InvalidStateError(f"Request is already {stored['status']}")
        if decision == AccessRequestStatus.APPROVED:
            await self.upsert_entry(stored["email"], stored["name"], reviewer_email)
        stored.update(status=decision.value, reviewed_by=reviewer_email, reviewed_at=_now(), updated_at=_now())
        return dict(stored)

    # ================== Audit ==================

    async def insert_audit(self, entry: dict) -> dict:
        if self.fail_audit_writes:
            raise ConnectionError("audit store unreachable")
        stored = {"id": self._next_id(), "created_at": _now(), **entry}
        self.audit.append(stored)
        return dict(stored)

    async def fetch_audit(self, action, limit: int, offset: int) -> Tuple[List[dict], int]:
        rows = [e for e in self.audit if action is None or e["action"] == action.value]
        rows = sorted(rows, key=lambda e: (e["created_at"], e["id"]), reverse=True)
        return rows[offset:offset + limit], len(rows)

    async def count_audit(self) -> int:
        return len(self.audit)

    def audit_actions(self) -> List[str]:
        return [e["action"] for e in self.audit]

    # ================== Contacts ==================

    def add_contact(self, name: str, **fields) -> dict:
        now = _now()
        contact = {
            "id": self._next_id(),
            "name": name,
            "role": None,
            "organization": None,
            "location": None,
            "group_name": None,
            "tier": None,
            "email": None,
            "phone": None,
            "notes": None,
            "linkedin_url": None,
            "company_domain": None,
            "company_description": None,
            "sector": None,
            "confidence": None,
            "event": None,
            "last_researched_at": None,
            "last_contacted_at": None,
            "created_at": now,
            "updated_at": now,
        }
        contact.update(fields)
        self.contacts[contact["id"]] = contact
        return contact

    async def get_contact_by_id(self, contact_id: int) -> Optional[dict]:
        contact = self.contacts.get(contact_id)
        return dict(contact) if contact else None

    async def list_contacts(self) -> List[dict]:
        return sorted(self.contacts.values(), key=lambda c: (c["name"], c["id"]))

    async def list_stale_contacts(self, cutoff: dt) -> List[dict]:
        return [
            c for c in self.contacts.values()
            if c["last_contacted_at"] is None or c["last_contacted_at"] < cutoff
        ]

    async def mark_contacted(self, contact_id: int) -> None:
        if contact_id in self.contacts:
            self.contacts[contact_id]["last_contacted_at"] = _now()

    async def count_contacts(self) -> int:
        return len(self.contacts)

    async def update_contact_row(self, contact_id: int, fields: dict) -> Optional[dict]:
        contact = self.contacts.get(contact_id)
        if not contact:
            return None
        contact.update(fields)
        contact["updated_at"] = _now()
        return dict(contact)

    # ================== Notes ==================

    async def insert_note(self, note: dict) -> dict:
        now = _now()
        stored = {"id": self._next_id(), "created_at": now, "updated_at": now, **note}
        self.notes[stored["id"]] = stored
        return dict(stored)

    async def find_note(self, note_id: int) -> Optional[dict]:
        note = self.notes.get(note_id)
        return dict(note) if note else None

    async def delete_note_row(self, note_id: int) -> None:
        self.notes.pop(note_id, None)

    async def list_notes_for_contact(self, contact_id: int) -> List[dict]:
        rows = [n for n in self.notes.values() if n["contact_id"] == contact_id]
        return sorted(rows, key=lambda n: (n["created_at"], n["id"]), reverse=True)

    async def count_notes(self) -> int:
        return len(self.notes)


@pytest.fixture
def memory_store(monkeypatch) -> InMemoryStore:
    """Patch every service's storage methods onto a fresh in-memory store."""
    store = InMemoryStore()

    patches = {
        admin_whitelist_service: {
            "find_entry": store.find_entry,
            "upsert_entry": store.upsert_entry,
            "delete_entry": store.delete_entry,
            "list_entries": store.list_entries,
            "count_entries": store.count_whitelist,
        },
        access_request_service: {
            "find_request": store.find_request,
            "find_pending_by_email": store.find_pending_by_email,
            "insert_request": store.insert_request,
            "list_requests": store.list_requests,
            "count_pending": store.count_pending,
            "apply_decision": store.apply_decision,
        },
        audit_service: {
            "insert_entry": store.insert_audit,
            "fetch_entries": store.fetch_audit,
            "count_entries": store.count_audit,
        },
        contact_service: {
            "get_contact_by_id": store.get_contact_by_id,
            "list_contacts": store.list_contacts,
            "list_stale_contacts": store.list_stale_contacts,
            "mark_contacted": store.mark_contacted,
            "count_contacts": store.count_contacts,
            "update_contact_row": store.update_contact_row,
        },
        note_service: {
            "insert_note": store.insert_note,
            "find_note": store.find_note,
            "delete_note_row": store.delete_note_row,
            "list_notes_for_contact": store.list_notes_for_contact,
            "count_notes": store.count_notes,
        },
    }
    for service, methods in patches.items():
        for name, fake in methods.items():
            monkeypatch.setattr(service, name, fake)

    # Seeded like startup does
    store.whitelist[PRIMARY_ADMIN_EMAIL] = {
        "id": store._next_id(),
        "email": PRIMARY_ADMIN_EMAIL,
        "name": "Admin",
        "approved_by": "system",
        "created_at": _now(),
    }
    return store


@pytest.fixture
def notify_mock(monkeypatch) -> AsyncMock:
    """Replace owner notification in the services that send it."""
    mock = AsyncMock(return_value=True)
    monkeypatch.setattr(access_request_services, "notify_owner", mock)
    monkeypatch.setattr(admin_services, "notify_owner", mock)
    return mock


# ================== Identities ==================

def _identity(user_id: str, email: Optional[str], name: str, role: str = "user") -> dict:
    now = _now()
    return {
        "user_id": user_id,
        "google_id": f"g-{user_id}",
        "email": email,
        "name": name,
        "photo_url": None,
        "role": role,
        "login_method": "google",
        "is_active": True,
        "created_at": now,
        "updated_at": now,
        "last_signed_in": now,
    }


@pytest.fixture
def admin_user() -> dict:
    return _identity("100001", PRIMARY_ADMIN_EMAIL, "Chief", role="admin")


@pytest.fixture
def member_user(memory_store) -> dict:
    """A whitelisted, non-admin user."""
    user = _identity("200002", "member@example.com", "Member")
    memory_store.whitelist["member@example.com"] = {
        "id": memory_store._next_id(),
        "email": "member@example.com",
        "name": "Member",
        "approved_by": PRIMARY_ADMIN_EMAIL,
        "created_at": _now(),
    }
    return user


@pytest.fixture
def other_member_user(memory_store) -> dict:
    user = _identity("300003", "colleague@example.com", "Colleague")
    memory_store.whitelist["colleague@example.com"] = {
        "id": memory_store._next_id(),
        "email": "colleague@example.com",
        "name": "Colleague",
        "approved_by": PRIMARY_ADMIN_EMAIL,
        "created_at": _now(),
    }
    return user


@pytest.fixture
def outsider_user() -> dict:
    """Signed in, not whitelisted."""
    return _identity("400004", "new@x.com", "Newcomer")


@pytest.fixture
def as_user() -> Callable[[Optional[dict]], None]:
    """
    Make requests run as the given identity (None for anonymous).

    Overrides get_optional_user, which every auth dependency builds on.
    """
    def _set(user: Optional[dict]) -> None:
        app.dependency_overrides[get_optional_user] = lambda: user

    yield _set
    app.dependency_overrides.pop(get_optional_user, None)


@pytest_asyncio.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """
    Provide async HTTP client for testing API endpoints.

    ASGITransport does not run the lifespan, so no database is opened.
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client
