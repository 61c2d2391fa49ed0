"""
Parent Reference Extraction Tests

Tests ProductBoard parent objects, data envelopes, feature row
normalization and Azure DevOps hierarchy relations.
"""

import pytest

from plansync.app.models.hierarchy_models import ParentKind, ParentRef
from plansync.core.services.hierarchy import (
    extract_parent_ref,
    normalize_productboard_feature,
    parent_id_from_relations,
    unwrap_data,
)


class TestExtractParentRef:
    """Tests for extract_parent_ref."""

    @pytest.mark.parametrize("kind", ["feature", "component", "initiative", "product"])
    def test_each_kind(self, kind):
        parent = {kind: {"id": "p-1", "links": {"self": "https://api.productboard.com/x"}}}

        assert extract_parent_ref(parent) == ParentRef(kind=ParentKind(kind), id="p-1")

    def test_feature_checked_first(self):
        parent = {"component": {"id": "c-1"}, "feature": {"id": "f-1"}}

        assert extract_parent_ref(parent) == ParentRef(kind=ParentKind.FEATURE, id="f-1")

    def test_bare_id_is_unknown_kind(self):
        assert extract_parent_ref({"id": "x-1"}) == ParentRef(kind=ParentKind.UNKNOWN, id="x-1")

    def test_numeric_id_is_stringified(self):
        assert extract_parent_ref({"product": {"id": 7}}).id == "7"

    @pytest.mark.parametrize("parent", [None, "f-1", [], {}, {"feature": {}}, {"feature": {"id": ""}}])
    def test_no_parent(self, parent):
        assert extract_parent_ref(parent) is None


class TestUnwrapData:
    """Tests for unwrap_data."""

    def test_data_envelope(self):
        assert unwrap_data({"data": {"id": "f-1"}}) == {"id": "f-1"}

    def test_data_envelope_with_links(self):
        assert unwrap_data({"data": {"id": "f-1"}, "links": {"next": None}}) == {"id": "f-1"}

    def test_record_with_data_field_is_not_unwrapped(self):
        record = {"id": "f-1", "data": {"custom": True}}

        assert unwrap_data(record) is record

    def test_non_mapping_passthrough(self):
        assert unwrap_data([1, 2]) == [1, 2]


class TestNormalizeProductboardFeature:
    """Tests for normalize_productboard_feature."""

    def test_full_payload(self):
        raw = {
            "data": {
                "id": "f-1",
                "name": "Instant payouts",
                "description": "<p>Pay out within seconds</p>",
                "type": "subfeature",
                "archived": True,
                "parent": {"feature": {"id": "f-0"}},
                "status": {"id": "s-1", "name": "Planned"},
                "owner": {"email": "pm@example.com"},
                "timeframe": {"startDate": "2026-01-01", "endDate": "2026-03-31", "granularity": "quarter"},
                "createdAt": "2025-11-02T10:00:00Z",
                "updatedAt": "2025-11-03T10:00:00Z",
            }
        }

        row = normalize_productboard_feature(raw)

        assert row == {
            "productboard_id": "f-1",
            "name": "Instant payouts",
            "description": "<p>Pay out within seconds</p>",
            "feature_type": "subfeature",
            "parent_productboard_id": "f-0",
            "parent_type": "feature",
            "status_id": "s-1",
            "status_name": "Planned",
            "owner_email": "pm@example.com",
            "is_archived": True,
            "timeframe_start_date": "2026-01-01",
            "timeframe_end_date": "2026-03-31",
            "timeframe_granularity": "quarter",
            "created_at_timestamp": "2025-11-02T10:00:00Z",
            "updated_at_timestamp": "2025-11-03T10:00:00Z",
        }

    def test_minimal_payload(self):
        row = normalize_productboard_feature({"id": "f-2", "name": "Top level", "parent": None})

        assert row["productboard_id"] == "f-2"
        assert row["parent_productboard_id"] is None
        assert row["parent_type"] is None
        assert row["status_name"] is None
        assert row["is_archived"] is False

    def test_stored_row_is_copied(self):
        stored = {"id": "row-1", "productboard_id": "f-3", "parent_productboard_id": "f-1"}

        row = normalize_productboard_feature(stored)

        assert row == stored
        assert row is not stored

    def test_non_object_rejected(self):
        with pytest.raises(TypeError, match="must be an object"):
            normalize_productboard_feature({"data": ["f-1"]})


class TestParentIdFromRelations:
    """Tests for parent_id_from_relations."""

    def test_hierarchy_reverse(self):
        item = {"relations": [
            {"rel": "System.LinkTypes.Related", "url": "https://dev.azure.com/acme/_apis/wit/workItems/5"},
            {"rel": "System.LinkTypes.Hierarchy-Reverse", "url": "https://dev.azure.com/acme/_apis/wit/workItems/42"},
        ]}

        assert parent_id_from_relations(item) == 42

    def test_forward_link_ignored(self):
        item = {"relations": [
            {"rel": "System.LinkTypes.Hierarchy-Forward", "url": "https://dev.azure.com/acme/_apis/wit/workItems/43"},
        ]}

        assert parent_id_from_relations(item) is None

    def test_non_numeric_segment_skipped(self):
        item = {"relations": [
            {"rel": "System.LinkTypes.Hierarchy-Reverse", "url": "https://dev.azure.com/acme/_apis/wit/workItems/abc"},
            {"rel": "System.LinkTypes.Hierarchy-Reverse", "url": "https://dev.azure.com/acme/_apis/wit/workItems/44/"},
        ]}

        assert parent_id_from_relations(item) == 44

    def test_allowed_picks_first_resolving_relation(self):
        item = {"relations": [
            {"rel": "System.LinkTypes.Hierarchy-Reverse", "url": "https://dev.azure.com/acme/_apis/wit/workItems/41"},
            {"rel": "System.LinkTypes.Hierarchy-Reverse", "url": "https://dev.azure.com/acme/_apis/wit/workItems/42"},
        ]}

        assert parent_id_from_relations(item, allowed={42}) == 42
        assert parent_id_from_relations(item, allowed={41, 42}) == 41
        assert parent_id_from_relations(item, allowed=set()) is None

    @pytest.mark.parametrize("item", [
        {},
        {"relations": None},
        {"relations": 5},
        {"relations": ["junk"]},
        {"relations": [{"rel": "System.LinkTypes.Hierarchy-Reverse", "url": 42}]},
    ])
    def test_no_relations(self, item):
        assert parent_id_from_relations(item) is None
