"""Tests for truckmate.services.verification.policy -- which edits need review."""
import pytest
from types import SimpleNamespace

from truckmate.services.verification.policy import (
    CRITICAL_FIELDS,
    DOCUMENT_FIELDS,
    PROFILE_FIELDS,
    REQUIRED_FIELDS,
    changed_critical_fields,
    changed_fields,
    missing_required_fields,
    normalize_truck_types,
    values_differ,
)


def _profile(**overrides):
    values = dict(
        name="Ravi Kumar",
        license_number="MH12-0001",
        known_truck_types=["container", "trailer"],
        license_photo_front="http://test/uploads/front.jpg",
        license_photo_back="http://test/uploads/back.jpg",
        profile_photo=None,
        location="Pune",
        age=34,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


class TestCriticalFields:

    def test_critical_set(self):
        assert CRITICAL_FIELDS == {
            "name", "known_truck_types", "license_photo_front", "license_photo_back",
        }

    def test_profile_photo_is_not_critical(self):
        assert "profile_photo" in DOCUMENT_FIELDS
        assert "profile_photo" not in CRITICAL_FIELDS

    def test_critical_fields_are_submittable(self):
        assert CRITICAL_FIELDS <= PROFILE_FIELDS | DOCUMENT_FIELDS


class TestNormalizeTruckTypes:

    def test_strips_and_dedupes_in_order(self):
        assert normalize_truck_types([" trailer", "container", "trailer ", ""]) == [
            "trailer", "container",
        ]

    def test_none_is_empty(self):
        assert normalize_truck_types(None) == []


class TestChangedFields:

    def test_same_value_is_not_a_change(self):
        assert changed_fields(_profile(), {"name": "Ravi Kumar", "age": 34}) == set()

    def test_different_value_is_a_change(self):
        assert changed_fields(_profile(), {"age": 35}) == {"age"}

    def test_no_current_profile_counts_everything(self):
        assert changed_fields(None, {"name": "A", "age": 30}) == {"name", "age"}

    def test_truck_type_reorder_is_not_a_change(self):
        assert not values_differ("known_truck_types", ["a", "b"], ["b", "a"])

    def test_truck_type_addition_is_a_change(self):
        assert values_differ("known_truck_types", ["a"], ["a", "b"])

    def test_none_and_empty_truck_types_match(self):
        assert not values_differ("known_truck_types", None, [])


class TestChangedCriticalFields:

    def test_non_critical_changes_ignored(self):
        changes = {"location": "Mumbai", "age": 40, "profile_photo": "http://x/p.jpg"}
        assert changed_critical_fields(_profile(), changes) == set()

    def test_name_change_detected(self):
        assert changed_critical_fields(_profile(), {"name": "Ravi K"}) == {"name"}

    def test_resending_same_license_photo_is_not_critical(self):
        changes = {"license_photo_front": "http://test/uploads/front.jpg"}
        assert changed_critical_fields(_profile(), changes) == set()

    def test_new_license_photo_is_critical(self):
        changes = {"license_photo_back": "http://test/uploads/back-2.jpg", "age": 35}
        assert changed_critical_fields(_profile(), changes) == {"license_photo_back"}

    def test_custom_critical_set(self):
        assert changed_critical_fields(
            _profile(), {"location": "Mumbai"}, frozenset({"location"})
        ) == {"location"}


class TestMissingRequiredFields:

    def test_required_fields_are_form_or_document_fields(self):
        assert REQUIRED_FIELDS <= PROFILE_FIELDS | DOCUMENT_FIELDS
        assert "profile_photo" not in REQUIRED_FIELDS

    def test_nothing_stored_nothing_sent(self):
        assert missing_required_fields(None, {}) == sorted(REQUIRED_FIELDS)

    def test_complete_changes(self):
        changes = {
            "name": "Ravi",
            "known_truck_types": ["container"],
            "license_photo_front": "http://test/f.jpg",
            "license_photo_back": "http://test/b.jpg",
        }
        assert missing_required_fields(None, changes) == []

    def test_stored_values_count(self):
        current = _profile(known_truck_types=[], license_photo_back=None)

        missing = missing_required_fields(current, {"known_truck_types": ["tanker"]})

        assert missing == ["license_photo_back"]

    def test_blank_change_overrides_stored_value(self):
        assert missing_required_fields(_profile(), {"name": ""}) == ["name"]
