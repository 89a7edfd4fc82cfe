"""
Re-verification policy.

Which profile edits force a new admin review. Everything not listed in
``CRITICAL_FIELDS`` (age, location, experience, gender, profile photo,
license number and expiry) can change without affecting the driver's
verification status.
"""
from typing import Any, Iterable, Mapping, Optional

CRITICAL_FIELDS: frozenset[str] = frozenset({
    "name",
    "known_truck_types",
    "license_photo_front",
    "license_photo_back",
})

# A first submission must carry these, from the form or an earlier partial save.
REQUIRED_FIELDS: frozenset[str] = frozenset({
    "name",
    "known_truck_types",
    "license_photo_front",
    "license_photo_back",
})

PROFILE_FIELDS: frozenset[str] = frozenset({
    "name",
    "license_number",
    "license_expiry_date",
    "known_truck_types",
    "experience",
    "gender",
    "age",
    "location",
})

DOCUMENT_FIELDS: frozenset[str] = frozenset({
    "profile_photo",
    "license_photo_front",
    "license_photo_back",
})

# Fields compared as sets: reordering tags is not a change.
_UNORDERED_FIELDS = frozenset({"known_truck_types"})


def normalize_truck_types(values: Optional[Iterable[str]]) -> list[str]:
    """Strip, drop blanks and de-duplicate while keeping first-seen order."""
    seen: dict[str, None] = {}
    for value in values or ():
        tag = value.strip()
        if tag and tag not in seen:
            seen[tag] = None
    return list(seen)


def values_differ(field: str, current: Any, new: Any) -> bool:
    if field in _UNORDERED_FIELDS:
        return set(current or ()) != set(new or ())
    return current != new


def changed_fields(current: Any, changes: Mapping[str, Any]) -> set[str]:
    """Names in ``changes`` whose value differs from ``current``'s attribute.

    ``current`` may be None (no stored profile yet), in which case every
    supplied field counts as changed.
    """
    if current is None:
        return set(changes)
    return {
        field
        for field, value in changes.items()
        if values_differ(field, getattr(current, field, None), value)
    }


def changed_critical_fields(
    current: Any,
    changes: Mapping[str, Any],
    critical_fields: frozenset[str] = CRITICAL_FIELDS,
) -> set[str]:
    """Critical fields among ``changes`` that actually change ``current``."""
    return changed_fields(current, changes) & critical_fields


def missing_required_fields(
    current: Any,
    changes: Mapping[str, Any],
    required_fields: frozenset[str] = REQUIRED_FIELDS,
) -> list[str]:
    """Required fields left empty once ``changes`` is applied to ``current``."""
    missing = []
    for field in sorted(required_fields):
        value = changes[field] if field in changes else getattr(current, field, None)
        if not value:
            missing.append(field)
    return missing
