"""
CampaignHub — Resource/Action inference tests.
"""

from __future__ import annotations

import pytest

from campaignhub.core.inference import (
    RESOURCE_SEGMENTS,
    infer,
    infer_action,
    infer_resource,
    looks_like_id,
)
from campaignhub.core.permissions import ActionName, ResourceName


class TestResourceInference:
    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/api/v1/users", ResourceName.USERS),
            ("/api/v1/roles/abc", ResourceName.ROLES),
            ("/api/v1/campaigns/9", ResourceName.CAMPAIGNS),
            ("/api/v1/contact-lists/4/contacts", ResourceName.CONTACTS),
            ("/api/v1/audit-logs", ResourceName.AUDIT_LOGS),
            ("/api/v1/assets/upload", ResourceName.ASSETS),
        ],
    )
    def test_known_segments(self, path, expected):
        assert infer_resource(path) == expected

    def test_first_registered_segment_wins_for_nested_paths(self):
        # organizations is listed before employees
        assert infer_resource("/api/v1/organizations/7/employees") == ResourceName.ORGANIZATIONS
        # users is listed before roles
        assert infer_resource("/api/v1/roles/3/users") == ResourceName.USERS

    def test_contact_lists_path_does_not_match_contacts(self):
        assert infer_resource("/api/v1/contact-lists") == ResourceName.CONTACTLISTS

    def test_segment_match_is_case_sensitive(self):
        assert infer_resource("/api/v1/USERS") is None

    def test_unknown_path_is_unresolved(self):
        assert infer_resource("/api/v1/widgets/1") is None
        assert infer_resource("/health") is None

    def test_priority_list_has_no_duplicate_segments(self):
        segments = [s for s, _ in RESOURCE_SEGMENTS]
        assert len(segments) == len(set(segments))


class TestActionInference:
    @pytest.mark.parametrize(
        "method, path, expected",
        [
            ("POST", "/api/v1/users", ActionName.CREATE),
            ("PUT", "/api/v1/users/5", ActionName.UPDATE),
            ("PATCH", "/api/v1/users/5", ActionName.UPDATE),
            ("DELETE", "/api/v1/users/5", ActionName.DELETE),
            ("get", "/api/v1/users", ActionName.LIST),
        ],
    )
    def test_method_mapping(self, method, path, expected):
        assert infer_action(method, path) == expected

    def test_restore_overrides_method(self):
        assert infer_action("POST", "/roles/123/restore") == ActionName.UPDATE
        assert infer_action("GET", "/roles/123/restore") == ActionName.UPDATE

    def test_force_overrides_method(self):
        assert infer_action("DELETE", "/roles/123/force") == ActionName.DELETE
        assert infer_action("POST", "/roles/123/force") == ActionName.DELETE

    def test_export_and_import(self):
        assert infer_action("GET", "/api/v1/contacts/export") == ActionName.EXPORT
        assert infer_action("POST", "/api/v1/contacts/import") == ActionName.IMPORT

    def test_restore_takes_precedence_over_export(self):
        assert infer_action("POST", "/export/1/restore") == ActionName.UPDATE

    def test_unknown_method_is_unresolved(self):
        assert infer_action("OPTIONS", "/api/v1/users") is None
        assert infer_action("HEAD", "/api/v1/users/5") is None


class TestListReadHeuristic:
    def test_collection_is_list(self):
        assert infer_action("GET", "/api/v1/users") == ActionName.LIST

    def test_numeric_id_is_read(self):
        assert infer_action("GET", "/api/v1/users/42") == ActionName.READ

    def test_uuid_is_read(self):
        path = "/api/v1/users/550e8400-e29b-41d4-a716-446655440000"
        assert infer_action("GET", path) == ActionName.READ

    def test_ten_characters_is_not_an_id(self):
        assert looks_like_id("abcdefghij") is False
        assert infer_action("GET", "/api/v1/users/abcdefghij") == ActionName.LIST

    def test_eleven_characters_is_an_id(self):
        assert looks_like_id("abcdefghijk") is True
        assert infer_action("GET", "/api/v1/users/abcdefghijk") == ActionName.READ

    def test_query_string_is_ignored(self):
        assert infer_action("GET", "/api/v1/users?page=2&limit=50") == ActionName.LIST
        assert infer_action("GET", "/api/v1/users/42?expand=roles") == ActionName.READ

    def test_trailing_slash(self):
        assert infer_action("GET", "/api/v1/users/") == ActionName.LIST

    def test_long_collection_name_reads_as_id(self):
        # Known limitation: an 11+ character last segment is taken for an id.
        assert infer_action("GET", "/api/v1/notifications") == ActionName.READ


class TestInfer:
    def test_pair(self):
        assert infer("GET", "/api/v1/users") == (ResourceName.USERS, ActionName.LIST)
        assert infer("DELETE", "/api/v1/users/5") == (ResourceName.USERS, ActionName.DELETE)

    def test_deterministic(self):
        first = infer("POST", "/api/v1/roles/123/restore")
        assert first == infer("POST", "/api/v1/roles/123/restore")
        assert first == (ResourceName.ROLES, ActionName.UPDATE)

    def test_partial_result(self):
        assert infer("GET", "/api/v1/widgets") == (None, ActionName.LIST)
        assert infer("OPTIONS", "/api/v1/users") == (ResourceName.USERS, None)
