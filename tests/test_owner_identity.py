"""
Tests for owner id normalization and prioritized key lookup.
"""

from salon_connect.application.utils.owner_identity import (
    ACCEPTED_EVENT_OWNER_PATHS,
    SELECTION_OWNER_PATHS,
    extract_owner_id,
    normalize_identifier,
)
from salon_connect.application.utils.payload_keys import first_present, unwrap_data


def test_normalize_identifier_shapes():
    assert normalize_identifier("abc") == "abc"
    assert normalize_identifier("  abc ") == "abc"
    assert normalize_identifier(42) == "42"
    assert normalize_identifier({"_id": "o1"}) == "o1"
    assert normalize_identifier({"_id": {"$oid": "o2"}}) == "o2"
    assert normalize_identifier("") is None
    assert normalize_identifier(None) is None
    assert normalize_identifier(True) is None
    assert normalize_identifier({"name": "no id"}) is None


def test_selection_top_level_owner_wins():
    payload = {"ownerId": "top", "salon": {"ownerId": "nested", "owner": {"_id": "deep"}}}
    assert extract_owner_id(payload, SELECTION_OWNER_PATHS) == "top"


def test_selection_falls_back_through_nested_paths():
    assert extract_owner_id({"salon": {"ownerId": {"_id": "nested"}}}, SELECTION_OWNER_PATHS) == "nested"
    assert extract_owner_id({"ownerId": "", "salon": {"owner": {"_id": "deep"}}}, SELECTION_OWNER_PATHS) == "deep"
    assert extract_owner_id({"salon": {}}, SELECTION_OWNER_PATHS) is None


def test_accepted_event_owner_order():
    payload = {
        "booking": {"salonOwnerID": "from-booking"},
        "reciever": {"salonOwnerID": "from-receiver"},
    }
    assert extract_owner_id(payload, ACCEPTED_EVENT_OWNER_PATHS) == "from-booking"
    assert extract_owner_id({"salonOwnerId": "top", **payload}, ACCEPTED_EVENT_OWNER_PATHS) == "top"
    assert extract_owner_id({"reciever": {"salonOwnerID": "r"}}, ACCEPTED_EVENT_OWNER_PATHS) == "r"


def test_first_present_skips_empty_but_keeps_falsy_values():
    data = {"a": None, "b": "", "c": 0, "d": "x"}
    assert first_present(data, ("a", "b", "c", "d")) == 0
    assert first_present(data, ("a", "b"), default="fallback") == "fallback"
    assert first_present({"outer": {"inner": "v"}}, (("outer", "inner"),)) == "v"


def test_unwrap_data():
    assert unwrap_data({"data": {"ownerId": "o"}}) == {"ownerId": "o"}
    assert unwrap_data({"ownerId": "o"}) == {"ownerId": "o"}
    assert unwrap_data({"data": ["list"]}) == {"data": ["list"]}
