"""Tests for the URI-addressed inventory provider."""
from unittest.mock import patch

import pytest

from inventory.exceptions import (
    InternalError,
    InvalidPayloadError,
    InvalidUriError,
    UnknownUriError,
    UnsupportedOperationError,
)
from inventory.uri import UriMatch

COLUMNS = ["name", "supplier_name", "supplier_phone", "price", "quantity"]
UNKNOWN_URI = "content://com.example.android.inventory/staff"


def _insert(provider, name="Book", **extra):
    values = {"name": name, "supplier_name": "Supplier", "supplier_phone": "123"}
    values.update(extra)
    return provider.insert(provider.content_uri, values)


def _count(provider, uri=None):
    with provider.query(uri or provider.content_uri) as result:
        return result.count


def test_insert_then_list(provider, harry_potter):
    """Test inserting into an empty catalog and listing it."""
    new_uri = provider.insert(provider.content_uri, harry_potter)

    assert new_uri.endswith("/inventory/1")
    with provider.query(provider.content_uri) as result:
        assert result.count == 1
        assert result.move_to_first()
        row = result.row()
    assert row == {"_id": 1, **harry_potter}


def test_inserted_uri_round_trip(provider, harry_potter):
    new_uri = provider.insert(provider.content_uri, harry_potter)

    with provider.query(new_uri, projection=COLUMNS) as result:
        assert result.all() == [harry_potter]


def test_insert_defaults_numbers_to_zero(provider):
    new_uri = _insert(provider)

    with provider.query(new_uri, projection=["price", "quantity"]) as result:
        assert result.all() == [{"price": 0, "quantity": 0}]


def test_insert_rejects_missing_name(provider):
    with pytest.raises(InvalidPayloadError) as exc_info:
        provider.insert(provider.content_uri, {"supplier_name": "x", "supplier_phone": "y"})

    assert exc_info.value.field == "name"
    assert _count(provider) == 0


def test_insert_rejects_negative_price(provider):
    with pytest.raises(InvalidPayloadError) as exc_info:
        _insert(provider, "a", price=-1)

    assert exc_info.value.field == "price"
    assert _count(provider) == 0


def test_insert_on_item_uri_not_supported(provider):
    item = _insert(provider)

    with pytest.raises(UnsupportedOperationError):
        provider.insert(item, {"name": "a", "supplier_name": "b", "supplier_phone": "c"})


def test_insert_on_unknown_uri_not_supported(provider):
    with pytest.raises(UnsupportedOperationError):
        provider.insert(UNKNOWN_URI, {"name": "a"})


def test_insert_store_failure_returns_none(provider, recorder):
    """Test a row refused by the database yields no URI and no notification."""
    provider.notifier.register(provider.content_uri, recorder)

    with patch.object(provider.database, "insert", return_value=-1):
        assert _insert(provider) is None

    assert recorder.calls == []
    assert _count(provider) == 0


def test_query_item_ignores_caller_selection(provider):
    _insert(provider, "A")
    item = _insert(provider, "B")

    with provider.query(item, selection="name = ?", selection_args=["A"]) as result:
        assert [row["name"] for row in result] == ["B"]


def test_query_unknown_uri(provider):
    with pytest.raises(InvalidUriError):
        provider.query(UNKNOWN_URI)


def test_item_id_beyond_64_bits(provider):
    """Test an ID the database cannot bind is an unrecognized URI, not a crash."""
    uri = provider.content_uri + f"/{2 ** 63}"

    with pytest.raises(InvalidUriError):
        provider.query(uri)
    with pytest.raises(UnsupportedOperationError):
        provider.update(uri, {"name": "x"})
    with pytest.raises(UnsupportedOperationError):
        provider.delete(uri)


def test_query_result_is_tagged_with_uri(provider):
    item = _insert(provider)

    result = provider.query(item)

    assert result.notification_uri == item
    assert provider.notifier.observer_count(item) == 1
    result.close()
    assert provider.notifier.observer_count(item) == 0


def test_query_result_goes_stale_after_update(provider):
    item = _insert(provider, quantity=5)

    with provider.query(provider.content_uri) as result:
        provider.update(item, {"quantity": 4})
        assert result.is_stale


def test_update_item_ignores_caller_selection(provider):
    """Test an item URI overrides the caller's selection."""
    for i in range(7):
        _insert(provider, f"Book {i}", quantity=10)
    item = provider.content_uri + "/7"

    rows = provider.update(item, {"quantity": 3}, "name = 'nothing'", None)

    assert rows == 1
    with provider.query(item, projection=["quantity"]) as result:
        assert result.all() == [{"quantity": 3}]
    with provider.query(provider.content_uri, selection="quantity = ?", selection_args=[10]) as result:
        assert result.count == 6


def test_update_collection_with_selection(provider):
    _insert(provider, "A")
    _insert(provider, "B")
    _insert(provider, "A")

    assert provider.update(provider.content_uri, {"price": 7}, "name = ?", ["A"]) == 2


def test_sale_decrement_until_rejected(provider):
    """Test decrementing quantity down to 0, then -1 is rejected."""
    for i in range(5):
        _insert(provider, f"Book {i}", quantity=2)
    item = provider.content_uri + "/5"

    for expected in (1, 0):
        with provider.query(item, projection=["quantity"]) as result:
            result.move_to_first()
            current = result.get("quantity")
        assert provider.update(item, {"quantity": current - 1}) == 1
        with provider.query(item, projection=["quantity"]) as result:
            assert result.all() == [{"quantity": expected}]

    with pytest.raises(InvalidPayloadError) as exc_info:
        provider.update(item, {"quantity": -1})
    assert exc_info.value.field == "quantity"


def test_update_rejects_null_required_field(provider):
    item = _insert(provider)

    with pytest.raises(InvalidPayloadError):
        provider.update(item, {"supplier_phone": None})


def test_update_empty_payload_short_circuits(provider, recorder):
    item = _insert(provider)
    provider.notifier.register(provider.content_uri, recorder)

    assert provider.update(item, {}) == 0
    assert provider.update(item, None) == 0
    assert recorder.calls == []


def test_update_unknown_uri_not_supported(provider):
    with pytest.raises(UnsupportedOperationError):
        provider.update(UNKNOWN_URI, {"quantity": 1})


def test_update_missing_row_does_not_notify(provider, recorder):
    provider.notifier.register(provider.content_uri, recorder)

    assert provider.update(provider.content_uri + "/99", {"quantity": 1}) == 0
    assert recorder.calls == []


def test_update_notifies_observers(provider, recorder):
    item = _insert(provider)
    provider.notifier.register(item, recorder)

    provider.update(item, {"price": 15})

    assert recorder.calls == [item]


def test_insert_notifies_collection_observers(provider, recorder):
    provider.notifier.register(provider.content_uri, recorder)

    _insert(provider)

    assert recorder.calls == [provider.content_uri]


def test_delete_item(provider):
    item = _insert(provider)

    assert provider.delete(item) == 1
    with provider.query(item) as result:
        assert result.count == 0


def test_delete_all_notifies(provider, recorder):
    """Test deleting the whole collection."""
    for name in ("A", "B", "C"):
        _insert(provider, name)
    provider.notifier.register(provider.content_uri, recorder)

    assert provider.delete(provider.content_uri, None, None) == 3

    assert _count(provider) == 0
    assert recorder.calls == [provider.content_uri]


def test_delete_nothing_does_not_notify(provider, recorder):
    provider.notifier.register(provider.content_uri, recorder)

    assert provider.delete(provider.content_uri + "/1") == 0
    assert recorder.calls == []


def test_delete_collection_notifies_item_observers(provider, recorder):
    item = _insert(provider)
    provider.notifier.register(item, recorder)

    provider.delete(provider.content_uri)

    assert recorder.calls == [provider.content_uri]


def test_delete_unknown_uri_not_supported(provider):
    with pytest.raises(UnsupportedOperationError):
        provider.delete(UNKNOWN_URI)


def test_get_type(provider):
    assert provider.get_type(provider.content_uri) == (
        "vnd.cursor.dir/com.example.android.inventory/inventory"
    )
    assert provider.get_type(provider.content_uri + "/3") == (
        "vnd.cursor.item/com.example.android.inventory/inventory"
    )
    with pytest.raises(UnknownUriError):
        provider.get_type(UNKNOWN_URI)


@pytest.mark.parametrize("price,quantity", [(0, 0), (1, 1), (999, 12345)])
def test_non_negative_numbers_are_stored(provider, price, quantity):
    new_uri = _insert(provider, price=price, quantity=quantity)

    with provider.query(new_uri, projection=["price", "quantity"]) as result:
        assert result.all() == [{"price": price, "quantity": quantity}]


def test_unexpected_match_is_internal_error(provider):
    with patch.object(provider, "match", return_value=UriMatch("bogus")):
        with pytest.raises(InternalError):
            provider.query(provider.content_uri)
        with pytest.raises(InternalError):
            provider.delete(provider.content_uri)
