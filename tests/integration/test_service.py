"""
Integration tests for the host-facing RegistryService.

Tests cover:
- Tagged results for every operation
- End-to-end authorization scenarios
- Logical clock timestamps
- No partial effects on failure
"""

import threading

import pytest

from vault.repovault_server.errors import NotAuthorized
from vault.repovault_server.registry.store import RepositoryRegistry
from vault.repovault_server.service import LogicalClock, OperationResult, RegistryService

U1 = "user:u1"
U2 = "user:u2"
U3 = "user:u3"
U4 = "user:u4"


class TestRegistryService:
    """End-to-end tests through sessions."""

    @pytest.fixture
    def service(self):
        """Create service over a fresh registry."""
        return RegistryService(RepositoryRegistry(admin_identity="system:admin"))

    def _create(self, session, name="repo-a"):
        return session.create_repository(name, 100, "A repository", [session.caller])

    def test_create_returns_id(self, service):
        """Successful create is tagged ok with the new id."""
        result = self._create(service.session(U1))
        assert result.ok is True
        assert result.value == 1
        assert result.error_code is None

    def test_validation_failure_is_tagged(self, service):
        """Field errors come back as a single error code."""
        result = service.session(U1).create_repository("a" * 65, 100, "d", [U1])
        assert result.ok is False
        assert result.error_code == "INVALID_NAME"
        assert result.value is None
        assert service.registry.last_id == 0

    def test_created_at_from_clock(self, service):
        """created_at comes from the host clock."""
        u1 = service.session(U1)
        self._create(u1)
        self._create(u1)
        first = u1.get_repository(1).value
        second = u1.get_repository(2).value
        assert first.created_at < second.created_at

    def test_custom_clock(self):
        """An injected clock supplies created_at."""
        service = RegistryService(RepositoryRegistry(), clock=lambda: 1_700_000_000)
        u1 = service.session(U1)
        self._create(u1)
        assert u1.get_repository(1).value.created_at == 1_700_000_000

    def test_write_but_not_delete(self, service):
        """Level 2 can modify but not remove."""
        u1, u2 = service.session(U1), service.session(U2)
        repo_id = self._create(u1).value

        assert u1.grant_access(repo_id, U2, 2).ok
        modified = u2.modify_repository(repo_id, "renamed", 200, "Updated", [U2])
        assert modified.ok is True

        removed = u2.remove_repository(repo_id)
        assert removed.ok is False
        assert removed.error_code == "NOT_AUTHORIZED"
        assert u1.get_repository(repo_id).value.name == "renamed"

    def test_manage_delegation(self, service):
        """Manage authorizes granting; read does not."""
        u1, u2, u3 = service.session(U1), service.session(U2), service.session(U3)
        repo_id = self._create(u1).value

        assert u1.grant_access(repo_id, U2, 4).ok
        assert u2.grant_access(repo_id, U3, 1).ok
        denied = u3.grant_access(repo_id, U4, 1)
        assert denied.error_code == "NOT_AUTHORIZED"
        assert u1.check_access_level(repo_id, U4).value == 0

    def test_grant_then_check(self, service):
        """check_access_level reports the granted level."""
        u1 = service.session(U1)
        repo_id = self._create(u1).value
        u1.grant_access(repo_id, U2, 3)
        assert u1.check_access_level(repo_id, U2).value == 3

    def test_revoke_owner_always_fails(self, service):
        """Owner grants cannot be revoked, even by managers."""
        u1, u2 = service.session(U1), service.session(U2)
        repo_id = self._create(u1).value
        u1.grant_access(repo_id, U2, 4)
        result = u2.revoke_access(repo_id, U1)
        assert result.ok is False
        assert result.error_code == "NOT_AUTHORIZED"
        assert isinstance(result.exception, NotAuthorized)

    def test_owner_revoking_self_is_invalid_user(self, service):
        """The identity rule wins over owner protection for the owner's own call."""
        u1, u2 = service.session(U1), service.session(U2)
        repo_id = self._create(u1).value
        result = u1.revoke_access(repo_id, U1)
        assert result.ok is False
        assert result.error_code == "INVALID_USER"
        assert u2.check_access_level(repo_id, U1).value == 4

    def test_manager_cannot_demote_owner(self, service):
        """Lowering the owner through grant is rejected."""
        u1, u2 = service.session(U1), service.session(U2)
        repo_id = self._create(u1).value
        u1.grant_access(repo_id, U2, 4)
        result = u2.grant_access(repo_id, U1, 0)
        assert result.error_code == "NOT_AUTHORIZED"
        assert u1.get_repository(repo_id).ok is True

    def test_ids_monotonic_across_removals(self, service):
        """Ids keep increasing after removals."""
        u1 = service.session(U1)
        ids = []
        for i in range(4):
            ids.append(self._create(u1, name=f"r{i}").value)
            assert u1.remove_repository(ids[-1]).ok
        assert ids == [1, 2, 3, 4]

    def test_invalid_id_codes(self, service):
        """Unissued and removed ids map to distinct codes."""
        u1 = service.session(U1)
        repo_id = self._create(u1).value
        assert u1.get_repository(repo_id + 1).error_code == "INVALID_PROJECT_ID"
        u1.remove_repository(repo_id)
        assert u1.get_repository(repo_id).error_code == "REPO_NOT_FOUND"

    def test_read_denied_code(self, service):
        """Reading without capability is ACCESS_DENIED."""
        repo_id = self._create(service.session(U1)).value
        assert service.session(U2).get_repository(repo_id).error_code == "ACCESS_DENIED"

    def test_list_and_transfer(self, service):
        """Listing and ownership transfer work through sessions."""
        u1, u2 = service.session(U1), service.session(U2)
        repo_id = self._create(u1).value
        assert u2.list_repositories().value == []
        assert u1.transfer_ownership(repo_id, U2).value.owner == U2
        assert [r.id for r in u2.list_repositories().value] == [repo_id]
        assert [g.user for g in u2.list_grants(repo_id).value] == [U1, U2]

    def test_unwrap(self, service):
        """unwrap returns values and re-raises errors."""
        u1 = service.session(U1)
        assert self._create(u1).unwrap() == 1
        with pytest.raises(NotAuthorized):
            service.session(U2).remove_repository(1).unwrap()

    def test_to_dict(self, service):
        """Results serialize with nested records."""
        u1 = service.session(U1)
        self._create(u1)
        assert u1.get_repository(1).to_dict()["value"]["owner"] == U1
        assert u1.get_repository(5).to_dict() == {
            "success": False,
            "error": "Invalid repository id 5 (last issued id is 1)",
            "error_code": "INVALID_PROJECT_ID",
        }

    def test_concurrent_creates_get_unique_ids(self, service):
        """Serialized execution hands out every id exactly once."""
        results: list[OperationResult] = []

        def worker(n):
            session = service.session(f"user:{n}")
            for i in range(20):
                results.append(session.create_repository(f"r{i}", 1, "d", [session.caller]))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        ids = sorted(r.value for r in results)
        assert ids == list(range(1, 101))


class TestLogicalClock:
    """Tests for LogicalClock."""

    def test_monotonic(self):
        """Ticks strictly increase from the start value."""
        clock = LogicalClock(start=10)
        assert [clock(), clock(), clock()] == [10, 11, 12]
