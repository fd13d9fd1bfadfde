"""Tests for result-sets."""
import pytest

from inventory.cursor import ResultSet
from inventory.exceptions import InvalidQueryError, ResultSetClosedError

URI = "content://com.example.android.inventory/inventory"


def _result_set():
    return ResultSet(["_id", "name"], [(1, "A"), (2, "B")])


def test_forward_iteration():
    result = _result_set()

    assert result.position == -1
    assert result.move_to_next()
    assert result.get("_id") == 1
    assert result.move_to_next()
    assert result.get("name") == "B"
    assert not result.move_to_next()


def test_iterating_yields_rows():
    result = _result_set()

    assert list(result) == [{"_id": 1, "name": "A"}, {"_id": 2, "name": "B"}]
    assert list(result) == []


def test_move_to_first_on_empty():
    result = ResultSet(["_id"], [])

    assert not result.move_to_first()
    assert result.count == 0


def test_get_before_first_row():
    with pytest.raises(IndexError):
        _result_set().get("name")


def test_unknown_column():
    result = _result_set()
    result.move_to_first()

    assert result.column_index("price") == -1
    with pytest.raises(InvalidQueryError):
        result.get("price")


def test_closed_result_set_cannot_be_used():
    result = _result_set()
    result.close()
    result.close()

    assert result.closed
    with pytest.raises(ResultSetClosedError):
        result.move_to_next()
    with pytest.raises(ResultSetClosedError):
        result.count


def test_context_manager_closes():
    with _result_set() as result:
        assert result.count == 2

    assert result.closed


def test_notification_marks_stale_and_forwards(notifier, recorder):
    result = _result_set()
    result.set_notification_uri(notifier, URI)
    result.register_content_observer(recorder)

    assert not result.is_stale
    notifier.notify(URI + "/1")

    assert result.is_stale
    assert recorder.calls == [URI + "/1"]


def test_close_unregisters_from_notifier(notifier, recorder):
    result = _result_set()
    result.set_notification_uri(notifier, URI)
    result.register_content_observer(recorder)

    result.close()
    notifier.notify(URI)

    assert notifier.observer_count() == 0
    assert recorder.calls == []
