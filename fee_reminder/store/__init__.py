"""Persistence for the fee ledger and reminder journal."""

from fee_reminder.store.kv import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore
from fee_reminder.store.school import SchoolDataStore

__all__ = ["InMemoryKeyValueStore", "JsonFileKeyValueStore", "KeyValueStore", "SchoolDataStore"]
