"""Tests for the fixed role registry."""

from __future__ import annotations

import threading

import pytest
from accesscore import (
    FixedRolePrefixMissingError,
    FixedRoleRegistry,
    Permission,
    RegistrationList,
    Role,
    RoleRegistration,
    get_fixed_role_registry,
    reset_fixed_role_registry,
    validate_fixed_role,
)


def _grant_pairs(registry: FixedRoleRegistry) -> set[tuple[str, str]]:
    return {(builtin, name) for builtin, names in registry.grants().items() for name in names}


class TestRegister:
    """Tests for FixedRoleRegistry.register."""

    def test_register_role_without_grants(self, registry: FixedRoleRegistry) -> None:
        """A role with no grants is stored but granted to nobody."""
        role = Role(name="fixed:test:test", version=1)
        registry.register(role)
        assert registry.get_role("fixed:test:test") == role
        assert _grant_pairs(registry) == set()

    def test_register_and_grant(self, registry: FixedRoleRegistry) -> None:
        """Grants are recorded for every built-in role."""
        registry.register(Role(name="fixed:test:test", version=1), ["Viewer", "Editor", "Admin"])
        for builtin in ("Viewer", "Editor", "Admin"):
            assert registry.role_names_for(builtin) == ("fixed:test:test",)

    def test_equal_version_keeps_first_body(self, registry: FixedRoleRegistry) -> None:
        """Same version does not overwrite the stored role."""
        first = Role(name="fixed:test:test", version=1, description="first")
        second = Role(name="fixed:test:test", version=1, description="second")
        registry.register(first)
        registry.register(second)
        assert registry.get_role("fixed:test:test") == first

    def test_lower_version_is_ignored(self, registry: FixedRoleRegistry) -> None:
        """Lower version does not overwrite the stored role."""
        newer = Role(name="fixed:test:test", version=3, description="newer")
        registry.register(newer)
        registry.register(Role(name="fixed:test:test", version=2, description="older"))
        assert registry.get_role("fixed:test:test") == newer

    def test_greater_version_overwrites(self, registry: FixedRoleRegistry) -> None:
        """Strictly greater version replaces the stored role."""
        registry.register(Role(name="fixed:test:test", version=1, description="v1"))
        v2 = Role(
            name="fixed:test:test",
            version=2,
            description="v2",
            permissions=(Permission(action="users:read", scope="users:*"),),
        )
        registry.register(v2)
        assert registry.get_role("fixed:test:test") == v2

    def test_grants_processed_on_version_tie(self, registry: FixedRoleRegistry) -> None:
        """A skipped body still records its new grants."""
        registry.register(Role(name="fixed:test:test", version=1), ["Viewer"])
        registry.register(Role(name="fixed:test:test", version=1), ["Editor"])
        assert registry.role_names_for("Viewer") == ("fixed:test:test",)
        assert registry.role_names_for("Editor") == ("fixed:test:test",)

    def test_duplicate_grant_not_re_added(self, registry: FixedRoleRegistry) -> None:
        """Granting the same role twice keeps one entry."""
        registry.register(Role(name="fixed:test:test", version=1), ["Viewer"])
        registry.register(Role(name="fixed:test:test", version=2), ["Viewer"])
        assert registry.role_names_for("Viewer") == ("fixed:test:test",)

    def test_grants_are_monotonic(self, registry: FixedRoleRegistry) -> None:
        """Every prefix of a registration sequence yields a subset of grants."""
        runs = [
            (Role(name="fixed:a:a", version=1), ["Viewer"]),
            (Role(name="fixed:b:b", version=1), ["Admin"]),
            (Role(name="fixed:a:a", version=2), ["Editor"]),
            (Role(name="fixed:a:a", version=1), []),
            (Role(name="fixed:b:b", version=1), ["Viewer", "Admin"]),
        ]
        previous: set[tuple[str, str]] = set()
        for role, grants in runs:
            registry.register(role, grants)
            current = _grant_pairs(registry)
            assert previous <= current
            previous = current
        assert previous == {
            ("Viewer", "fixed:a:a"),
            ("Admin", "fixed:b:b"),
            ("Editor", "fixed:a:a"),
            ("Viewer", "fixed:b:b"),
        }

    def test_stored_role_is_not_altered(self, registry: FixedRoleRegistry) -> None:
        """The registry keeps the role object it was given."""
        role = Role(
            uid="fixed:test:test",
            name="fixed:test:test",
            version=1,
            description="Test role",
            permissions=(Permission(action="users:read", scope="users:self"),),
        )
        registry.register(role, ["Viewer"])
        assert registry.get_role("fixed:test:test") is role


class TestReads:
    """Tests for registry read helpers."""

    def test_roles_for_skips_unknown_and_duplicates(self, registry: FixedRoleRegistry) -> None:
        """roles_for returns each granted role once."""
        role = Role(name="fixed:test:test", version=1)
        registry.register(role, ["Viewer", "Editor"])
        assert registry.roles_for(["Viewer", "Editor", "Admin"]) == [role]

    def test_views_are_read_only(self, registry: FixedRoleRegistry) -> None:
        """Mappings handed to readers cannot be mutated."""
        registry.register(Role(name="fixed:test:test", version=1), ["Viewer"])
        with pytest.raises(TypeError):
            registry.roles()["fixed:other:other"] = Role(name="fixed:other:other")  # type: ignore[index]
        with pytest.raises(TypeError):
            registry.grants()["Viewer"] = ()  # type: ignore[index]

    def test_snapshot_unchanged_by_later_register(self, registry: FixedRoleRegistry) -> None:
        """A view taken before a write keeps its contents."""
        registry.register(Role(name="fixed:a:a", version=1), ["Viewer"])
        grants_before = registry.grants()
        registry.register(Role(name="fixed:b:b", version=1), ["Viewer"])
        assert grants_before["Viewer"] == ("fixed:a:a",)
        assert registry.role_names_for("Viewer") == ("fixed:a:a", "fixed:b:b")

    def test_concurrent_registrations(self, registry: FixedRoleRegistry) -> None:
        """Concurrent writers do not lose roles or grants."""

        def worker(i: int) -> None:
            registry.register(Role(name=f"fixed:test:{i}", version=1), ["Viewer"])

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(50)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(registry) == 50
        assert len(registry.role_names_for("Viewer")) == 50


class TestValidateFixedRole:
    """Tests for fixed role name validation."""

    def test_valid_prefix(self) -> None:
        validate_fixed_role(Role(name="fixed:test:test"))

    def test_missing_prefix(self) -> None:
        with pytest.raises(FixedRolePrefixMissingError) as exc_info:
            validate_fixed_role(Role(name="custom:test:test"))
        assert exc_info.value.details["role"] == "custom:test:test"


class TestRegistrationList:
    """Tests for RegistrationList."""

    def test_append_and_iterate(self) -> None:
        registrations = RegistrationList()
        first = RoleRegistration(role=Role(name="fixed:a:a"), grants=("Admin",))
        second = RoleRegistration(role=Role(name="fixed:b:b"), grants=("Viewer",))
        registrations.append(first)
        registrations.append(second)
        assert list(registrations) == [first, second]
        assert len(registrations) == 2


class TestSingleton:
    """Singleton factory tests."""

    def setup_method(self) -> None:
        reset_fixed_role_registry()

    def teardown_method(self) -> None:
        reset_fixed_role_registry()

    def test_singleton_created(self) -> None:
        assert get_fixed_role_registry() is get_fixed_role_registry()

    def test_reset_creates_new_instance(self) -> None:
        first = get_fixed_role_registry()
        reset_fixed_role_registry()
        assert get_fixed_role_registry() is not first
