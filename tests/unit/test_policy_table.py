"""
Unit tests for the policy table.

Tests role resolution, the fallback to the student policy and the
capability sets granted to each role.
"""

import dataclasses

import pytest

from sis_policy.policies import (
    POLICY_TABLE,
    Capability,
    ResourceType,
    Role,
    policy_matrix,
    resolve_policy,
)


@pytest.mark.unit
class TestRoleParsing:
    """Test parsing of request roles."""

    def test_known_roles(self):
        assert Role.parse("teacher") is Role.TEACHER
        assert Role.parse(Role.ADMIN) is Role.ADMIN

    def test_unknown_role_is_none(self):
        assert Role.parse("guardian") is None
        assert Role.parse("") is None
        assert Role.parse(None) is None

    def test_role_parsing_is_case_sensitive(self):
        assert Role.parse("Admin") is None


@pytest.mark.unit
class TestResolvePolicy:
    """Test policy resolution."""

    @pytest.mark.parametrize("resource_type", list(ResourceType))
    def test_unknown_role_falls_back_to_student(self, resource_type):
        policy = resolve_policy(resource_type, "guardian")
        assert policy is POLICY_TABLE[(resource_type, Role.STUDENT)]

    def test_missing_role_falls_back_to_student(self):
        assert resolve_policy(ResourceType.GRADE, None).role is Role.STUDENT

    @pytest.mark.parametrize("resource_type", [ResourceType.ASSIGNMENT, ResourceType.STUDENT])
    def test_parent_without_policy_gets_student_policy(self, resource_type):
        policy = resolve_policy(resource_type, "parent")
        assert policy.role is Role.STUDENT

    @pytest.mark.parametrize("resource_type", [ResourceType.ATTENDANCE, ResourceType.GRADE])
    def test_parent_policy_defined(self, resource_type):
        policy = resolve_policy(resource_type, "parent")
        assert policy.role is Role.PARENT
        assert policy.allows(Capability.VIEW_CHILD)

    def test_accepts_string_resource_type(self):
        policy = resolve_policy("attendance", "teacher")
        assert policy.resource_type is ResourceType.ATTENDANCE
        assert policy.allows(Capability.MARK)


@pytest.mark.unit
class TestCapabilities:
    """Test capability sets per role."""

    @pytest.mark.parametrize("resource_type", list(ResourceType))
    def test_admin_has_all_flags(self, resource_type):
        policy = resolve_policy(resource_type, "admin")
        for capability in (
            Capability.VIEW_ALL,
            Capability.EDIT_ALL,
            Capability.DELETE_ALL,
            Capability.CREATE_ALL,
        ):
            assert policy.allows(capability)

    @pytest.mark.parametrize("resource_type", list(ResourceType))
    def test_student_never_deletes_or_creates(self, resource_type):
        policy = resolve_policy(resource_type, "student")
        assert policy.allows(Capability.VIEW_OWN)
        for capability in (
            Capability.DELETE_ALL,
            Capability.DELETE_OWN,
            Capability.CREATE_ALL,
            Capability.CREATE_OWN,
            Capability.EDIT_ALL,
        ):
            assert not policy.allows(capability)

    @pytest.mark.parametrize("resource_type", [ResourceType.ASSIGNMENT, ResourceType.STUDENT])
    def test_teacher_creates_assignments_and_students(self, resource_type):
        assert resolve_policy(resource_type, "teacher").allows(Capability.CREATE_ALL)

    @pytest.mark.parametrize("resource_type", [ResourceType.ATTENDANCE, ResourceType.GRADE])
    def test_teacher_creates_own_attendance_and_grades(self, resource_type):
        policy = resolve_policy(resource_type, "teacher")
        assert policy.allows(Capability.CREATE_OWN)
        assert not policy.allows(Capability.CREATE_ALL)

    def test_student_cannot_edit_assignments(self):
        policy = resolve_policy(ResourceType.ASSIGNMENT, "student")
        assert policy.allows(Capability.SUBMIT_OWN)
        assert not policy.allows(Capability.EDIT_OWN)


@pytest.mark.unit
class TestPolicyTableImmutability:
    """Test that policies cannot change at runtime."""

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            POLICY_TABLE[(ResourceType.GRADE, Role.STUDENT)] = None

    def test_policy_is_frozen(self):
        policy = resolve_policy(ResourceType.GRADE, "teacher")
        with pytest.raises(dataclasses.FrozenInstanceError):
            policy.capabilities = frozenset()

    def test_capabilities_are_frozenset(self):
        policy = resolve_policy(ResourceType.GRADE, "teacher")
        assert isinstance(policy.capabilities, frozenset)


@pytest.mark.unit
class TestPolicyMatrix:
    """Test the role capability matrix."""

    def test_grade_matrix_lists_all_roles(self):
        matrix = policy_matrix(ResourceType.GRADE)
        assert set(matrix) == {"admin", "teacher", "student", "parent"}
        assert matrix["student"] == ["view_own", "view_reports"]

    def test_assignment_matrix_has_no_parent(self):
        assert "parent" not in policy_matrix("assignment")
