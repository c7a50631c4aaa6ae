"""Tests for role-based access rules."""

import pytest

from dependencies.rbac import has_permission, normalize_path, translate_method_to_action


@pytest.mark.parametrize("path,resource", [
    ("/admin/users/3/block", "admin/users"),
    ("/admin/kyc", "admin/kyc"),
    ("/admin", "admin"),
    ("/notifications/5/read", "notifications"),
    ("/saved-listings/2/9", "saved-listings"),
])
def test_normalize_path(path, resource):
    assert normalize_path(path) == resource


def test_method_mapping():
    assert translate_method_to_action("get") == "read"
    assert translate_method_to_action("PATCH") == "write"
    assert translate_method_to_action("DELETE") == "delete"
    assert translate_method_to_action("OPTIONS") == "read"


def test_role_permissions():
    assert has_permission("admin", "admin/users", "write")
    assert has_permission("admin", "admin/anything", "read")
    assert not has_permission("seller", "admin/users", "read")
    assert not has_permission("buyer", "admin/kyc", "read")
    assert has_permission("buyer", "notifications", "write")
    assert has_permission("seller", "notifications", "write")
    assert not has_permission("buyer", "notifications", "delete")
    assert not has_permission("ghost", "notifications", "read")
