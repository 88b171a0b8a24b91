"""Unit tests for profile and pantry collaborators."""

import json

import pytest

from sous.models.errors import NoSession
from sous.models.models import UserProfileView
from sous.services.profiles import StaticPantry, StaticProfileStore, load_profile_file


class TestStaticProfileStore:
    def test_returns_profile(self):
        profile = UserProfileView(goal="Maintain")
        assert StaticProfileStore(profile).current_profile() is profile

    def test_no_profile_raises_no_session(self):
        with pytest.raises(NoSession):
            StaticProfileStore().current_profile()


class TestStaticPantry:
    def test_blank_names_dropped(self):
        assert StaticPantry(["Rice", " ", "", " soy sauce "]).missing_names() == {"Rice", "soy sauce"}

    def test_returns_copy(self):
        pantry = StaticPantry(["Rice"])
        pantry.missing_names().add("Beans")
        assert pantry.missing_names() == {"Rice"}


class TestLoadProfileFile:
    """Test JSON profile loading."""

    def test_valid_file(self, tmp_path):
        path = tmp_path / "profile.json"
        path.write_text(
            json.dumps(
                {
                    "goal": "Gain muscle",
                    "current_weight_kg": 70,
                    "dietary_preferences": ["High protein"],
                    "target_date": "2026-06-01",
                    "age": 29,
                }
            )
        )

        profile = load_profile_file(path)

        assert profile.goal == "Gain muscle"
        assert profile.target_date.month == 6
        assert profile.dietary_preferences == ["High protein"]

    def test_missing_file_raises_no_session(self, tmp_path):
        with pytest.raises(NoSession, match="not found"):
            load_profile_file(tmp_path / "missing.json")

    def test_invalid_json_raises_no_session(self, tmp_path):
        path = tmp_path / "profile.json"
        path.write_text("{not json")

        with pytest.raises(NoSession, match="Invalid profile"):
            load_profile_file(path)

    def test_invalid_values_raise_no_session(self, tmp_path):
        path = tmp_path / "profile.json"
        path.write_text(json.dumps({"age": -3}))

        with pytest.raises(NoSession):
            load_profile_file(str(path))
