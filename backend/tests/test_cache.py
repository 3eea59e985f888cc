import unittest

import pytest

from core.cache import BoundedCache, InsertionOrderPolicy, LRUPolicy


class TestInsertionOrderEviction(unittest.TestCase):
    def setUp(self):
        self.cache = BoundedCache(2, policy=InsertionOrderPolicy())

    def test_evicts_oldest_inserted_when_full(self):
        self.cache.set("a", 1)
        self.cache.set("b", 2)
        self.cache.set("c", 3)
        self.assertIsNone(self.cache.get("a"))
        self.assertEqual(self.cache.get("b"), 2)
        self.assertEqual(self.cache.get("c"), 3)
        self.assertEqual(len(self.cache), 2)

    def test_reads_do_not_protect_an_entry(self):
        self.cache.set("a", 1)
        self.cache.set("b", 2)
        self.cache.get("a")
        self.cache.set("c", 3)
        self.assertNotIn("a", self.cache)
        self.assertIn("b", self.cache)

    def test_overwrite_keeps_size_and_does_not_evict(self):
        self.cache.set("a", 1)
        self.cache.set("b", 2)
        self.cache.set("a", 10)
        self.assertEqual(len(self.cache), 2)
        self.assertEqual(self.cache.get("a"), 10)
        self.assertEqual(self.cache.get("b"), 2)

    def test_clear_empties_everything(self):
        self.cache.set("a", 1)
        self.cache.set("b", 2)
        self.cache.clear()
        self.assertEqual(len(self.cache), 0)
        self.assertIsNone(self.cache.get("a"))


def test_lru_policy_keeps_recently_read_entry():
    cache = BoundedCache(2, policy=LRUPolicy())
    cache.set("a", 1)
    cache.set("b", 2)
    cache.get("a")
    cache.set("c", 3)
    assert "a" in cache
    assert "b" not in cache


def test_invalid_keys_are_ignored():
    cache = BoundedCache(2)
    cache.set("", 1)
    cache.set(None, 1)
    cache.set(5, 1)
    assert len(cache) == 0
    assert cache.get("", "default") == "default"


def test_ttl_expires_entries():
    now = [0.0]
    cache = BoundedCache(10, ttl=5, clock=lambda: now[0])
    cache.set("a", 1)
    now[0] = 4.9
    assert cache.get("a") == 1
    now[0] = 5.0
    assert cache.get("a") is None
    assert len(cache) == 0


def test_falsy_values_are_cached():
    cache = BoundedCache(2)
    cache.set("empty", {})
    assert cache.get("empty", "missing") == {}


def test_max_size_must_be_positive():
    with pytest.raises(ValueError):
        BoundedCache(0)
