"""
Unit tests for translation selection and localized views.
"""

from job_catalog.localization.resolver import resolve, resolve_many, select_translation
from job_catalog.localization.views import CategoryView, CityView, CountryView, JobView

CATEGORY = {
    "id": 7,
    "created_at": None,
    "translations": [
        {"id": 1, "lang": "en", "name": "Design"},
        {"id": 2, "lang": "ka", "name": "დიზაინი"},
    ],
}


class TestSelectTranslation:
    """Tests for select_translation fallback rules."""

    def test_exact_match(self):
        """Test the requested language wins."""
        assert select_translation(CATEGORY["translations"], "ka")["name"] == "დიზაინი"

    def test_falls_back_to_first(self):
        """Test a missing language falls back to the first translation."""
        assert select_translation(CATEGORY["translations"], "fr")["lang"] == "en"

    def test_empty(self):
        """Test no translations yield None."""
        assert select_translation([], "en") is None
        assert select_translation(None, "en") is None


class TestResolve:
    """Tests for resolve."""

    def test_exact_language(self):
        """Test resolving with ka yields the ka translation exactly."""
        view = resolve(CATEGORY, "ka", CategoryView)

        assert view.name == "დიზაინი"
        assert view.lang == "ka"

    def test_fallback_language(self):
        """Test resolving with fr yields the first (en) translation."""
        view = resolve(CATEGORY, "fr", CategoryView)

        assert view.name == "Design"
        assert view.lang == "en"

    def test_translations_not_exposed(self):
        """Test the raw translation collection never reaches the view."""
        data = resolve(CATEGORY, "en", CategoryView).model_dump()

        assert "translations" not in data

    def test_no_translations(self):
        """Test an untranslated entity resolves with empty localized fields."""
        view = resolve({"id": 3, "translations": []}, "en", CategoryView)

        assert view.id == 3
        assert view.name is None
        assert view.lang is None

    def test_none_entity(self):
        assert resolve(None, "en", CategoryView) is None

    def test_nested_relation(self):
        """Test relations are resolved with the same language."""
        city = {
            "id": 1,
            "country_id": 1,
            "translations": [
                {"lang": "en", "name": "Tbilisi"},
                {"lang": "ka", "name": "თბილისი"},
            ],
            "country": {
                "id": 1,
                "code": "GE",
                "translations": [
                    {"lang": "en", "name": "Georgia"},
                    {"lang": "ka", "name": "საქართველო"},
                ],
            },
        }
        view = resolve(city, "ka", CityView)

        assert view.name == "თბილისი"
        assert view.country.name == "საქართველო"
        assert view.country.code == "GE"

    def test_nested_list_relation(self):
        """Test list relations are resolved item by item."""
        country = {
            "id": 2,
            "code": "DE",
            "translations": [{"lang": "de", "name": "Deutschland"}],
            "cities": [
                {"id": 5, "country_id": 2, "translations": [{"lang": "de", "name": "Berlin"}]},
            ],
        }
        view = resolve(country, "en", CountryView)

        assert view.name == "Deutschland"
        assert [c.name for c in view.cities] == ["Berlin"]

    def test_sensitive_user_fields_dropped(self):
        """Test the job view exposes only the public user summary."""
        job = {
            "id": 1,
            "type": "FULL_TIME",
            "translations": [{"lang": "en", "title": "Dev", "description": "Code"}],
            "user": {
                "id": 9,
                "email": "owner@example.com",
                "password": "hashed-secret",
                "username": "owner",
            },
        }
        data = resolve(job, "en", JobView).model_dump()

        assert data["user"] == {
            "id": 9,
            "username": "owner",
            "first_name": None,
            "last_name": None,
            "avatar": None,
        }
        assert "password" not in str(data)
        assert "email" not in data["user"]

    def test_camel_case_wire_format(self):
        """Test views serialize with camelCase aliases."""
        job = {
            "id": 1,
            "type": "FULL_TIME",
            "salary_min": 100,
            "is_remote": True,
            "translations": [],
        }
        data = resolve(job, "en", JobView).model_dump(by_alias=True)

        assert data["salaryMin"] == 100
        assert data["isRemote"] is True


class TestResolveMany:
    def test_preserves_order(self):
        """Test list order is kept."""
        other = {"id": 8, "translations": [{"lang": "en", "name": "IT"}]}
        views = resolve_many([other, CATEGORY], "en", CategoryView)

        assert [v.id for v in views] == [8, 7]
