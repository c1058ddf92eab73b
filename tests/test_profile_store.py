"""Tests for profile persistence."""

import json

from examenbuddy.models import UserProfile
from examenbuddy.services.profile_store import (
    PROFILE_KEY,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    ProfileStore,
)


def test_absent_profile_means_onboarding():
    assert ProfileStore(InMemoryKeyValueStore()).load() is None


def test_save_and_load_round_trip_in_file(tmp_path):
    path = tmp_path / "state" / "profile.json"
    store = ProfileStore(JsonFileKeyValueStore(str(path)))
    profile = UserProfile(name="Mila", level="havo", year=4)

    store.save(profile)

    assert ProfileStore(JsonFileKeyValueStore(str(path))).load() == profile
    assert json.loads(json.loads(path.read_text(encoding="utf-8"))[PROFILE_KEY]) == {"name": "Mila", "level": "havo", "year": 4}


def test_corrupt_profile_is_cleared_and_treated_as_absent():
    backend = InMemoryKeyValueStore()
    backend.set(PROFILE_KEY, '{"name": "Mila", "level": "gymnasium"')
    store = ProfileStore(backend)

    assert store.load() is None
    assert backend.get(PROFILE_KEY) is None


def test_clear_removes_profile(tmp_path):
    store = ProfileStore(JsonFileKeyValueStore(str(tmp_path / "profile.json")))
    store.save(UserProfile(name="Mila", level="havo", year=4))

    store.clear()

    assert store.load() is None


def test_unreadable_file_behaves_as_empty(tmp_path):
    path = tmp_path / "profile.json"
    path.write_text("{niet json", encoding="utf-8")

    assert ProfileStore(JsonFileKeyValueStore(str(path))).load() is None
