import pytest

from core.pagination import chunked, collect_pages


def _pages(*pages):
    calls = []

    def fetch(cursor):
        calls.append(cursor)
        return pages[len(calls) - 1]

    return fetch, calls


def test_stops_when_cursor_absent():
    fetch, calls = _pages({"objects": [1, 2]})
    assert collect_pages(fetch, "objects") == [1, 2]
    assert calls == [None]


def test_two_pages_keep_source_order():
    fetch, calls = _pages(
        {"objects": [{"id": "A"}], "cursor": "abc"},
        {"objects": [{"id": "B"}], "cursor": None},
    )
    result = collect_pages(fetch, "objects")
    assert [o["id"] for o in result] == ["A", "B"]
    assert calls == [None, "abc"]


def test_empty_string_cursor_ends_loop():
    fetch, calls = _pages({"objects": [1], "cursor": ""})
    assert collect_pages(fetch, "objects") == [1]
    assert len(calls) == 1


def test_pages_without_results_key_are_skipped():
    fetch, _ = _pages({"cursor": "x"}, {"objects": [3]})
    assert collect_pages(fetch, "objects") == [3]


def test_page_delay_sleeps_between_pages_only():
    sleeps = []
    fetch, _ = _pages({"objects": [1], "cursor": "a"}, {"objects": [2], "cursor": "b"}, {"objects": [3]})
    collect_pages(fetch, "objects", page_delay=0.2, sleep=sleeps.append)
    assert sleeps == [0.2, 0.2]


def test_failed_page_aborts_fetch():
    def fetch(cursor):
        if cursor:
            raise RuntimeError("boom")
        return {"objects": [1], "cursor": "next"}

    with pytest.raises(RuntimeError):
        collect_pages(fetch, "objects")


def test_chunked():
    assert chunked([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]
    assert chunked([], 100) == []
