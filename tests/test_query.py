"""Tests for filtering, pagination and search."""

import pytest

from photoshelf.core.exceptions import ValidationError
from photoshelf.models.photo import DatePrecision
from photoshelf.services.query import PhotoFilters, query_photos, search_photos, split_csv


@pytest.fixture
def photos(make_photo):
    return [
        make_photo(
            "p1", "beach.jpg",
            tags=["beach", "sunset"],
            people=["Anna"],
            location={"title": "Nice", "city": "Nice", "country": "France"},
            dateTaken="2019-07-01T10:00:00.000Z",
        ),
        make_photo(
            "p2", "mountains.jpg",
            tags=["mountains"],
            people=["Petr"],
            location={"title": "Alps", "state": "Tyrol", "country": "Austria"},
            dateTaken="2021-02-01T10:00:00.000Z",
            dateTakenPrecision="month",
        ),
        make_photo(
            "p3", "old.jpg",
            tags=["family"],
            people=["Anna", "Petr"],
            dateTaken="1985-06-15T12:00:00.000Z",
            dateTakenPrecision="decade",
        ),
        make_photo("p4", "broken.jpg", dateTaken="", dateTakenPrecision="unknown"),
    ]


def _ids(page_or_list):
    items = page_or_list.items if hasattr(page_or_list, "items") else page_or_list
    return [p.id for p in items]


class TestSplitCsv:
    """Tests for split_csv."""

    def test_trims_and_drops_empty(self):
        assert split_csv(" a, b,,c ") == ["a", "b", "c"]
        assert split_csv(None) == []
        assert split_csv("") == []


class TestFilters:
    """Tests for PhotoFilters."""

    def test_no_filters(self, photos):
        page = query_photos(photos)
        assert _ids(page) == ["p1", "p2", "p3", "p4"]
        assert page.total == 4

    def test_tags_any(self, photos):
        filters = PhotoFilters.from_params(tags="sunset,mountains")
        assert _ids(query_photos(photos, filters)) == ["p1", "p2"]

    def test_tags_case_sensitive(self, photos):
        assert query_photos(photos, PhotoFilters.from_params(tags="Beach")).total == 0

    def test_people_any(self, photos):
        filters = PhotoFilters.from_params(people="Petr")
        assert _ids(query_photos(photos, filters)) == ["p2", "p3"]

    def test_location_substring(self, photos):
        assert _ids(query_photos(photos, PhotoFilters.from_params(location="fran"))) == ["p1"]
        assert _ids(query_photos(photos, PhotoFilters.from_params(location="TYROL"))) == ["p2"]
        assert _ids(query_photos(photos, PhotoFilters.from_params(location="unknown"))) == ["p3", "p4"]

    def test_year_range_inclusive(self, photos):
        filters = PhotoFilters.from_params(year_from=2019, year_to=2021)
        assert _ids(query_photos(photos, filters)) == ["p1", "p2"]

    def test_year_from_only(self, photos):
        filters = PhotoFilters.from_params(year_from=2020)
        assert _ids(query_photos(photos, filters)) == ["p2"]

    def test_year_filter_skips_undated(self, photos):
        filters = PhotoFilters.from_params(year_to=3000)
        assert "p4" not in _ids(query_photos(photos, filters))

    def test_precision(self, photos):
        assert _ids(query_photos(photos, PhotoFilters.from_params(precision="decade"))) == ["p3"]

    def test_precision_multiple(self, photos):
        filters = PhotoFilters.from_params(precision="month,decade")
        assert filters.precisions == [DatePrecision.MONTH, DatePrecision.DECADE]
        assert _ids(query_photos(photos, filters)) == ["p2", "p3"]

    def test_invalid_precision(self):
        with pytest.raises(ValidationError):
            PhotoFilters.from_params(precision="century")

    def test_conjunction(self, photos):
        filters = PhotoFilters.from_params(people="Anna", year_from=2000)
        assert _ids(query_photos(photos, filters)) == ["p1"]


class TestPagination:
    """Tests for limit/offset."""

    def test_slice_after_filter(self, photos):
        page = query_photos(photos, PhotoFilters.from_params(people="Anna,Petr"), limit=1, offset=1)
        assert _ids(page) == ["p2"]
        assert page.total == 3
        assert page.to_dict()["limit"] == 1
        assert page.to_dict()["offset"] == 1

    def test_offset_past_end(self, photos):
        page = query_photos(photos, limit=10, offset=10)
        assert page.items == []
        assert page.total == 4

    def test_zero_limit(self, photos):
        page = query_photos(photos, limit=0)
        assert page.items == []
        assert page.total == 4

    def test_negative_rejected(self, photos):
        with pytest.raises(ValidationError):
            query_photos(photos, limit=-1)
        with pytest.raises(ValidationError):
            query_photos(photos, offset=-1)

    def test_to_dict_keys(self, photos):
        assert set(query_photos(photos).to_dict()) == {"photos", "total", "limit", "offset"}


class TestSearch:
    """Tests for search_photos."""

    def test_matches_any_field(self, photos):
        assert _ids(search_photos(photos, "SUN")) == ["p1"]
        assert _ids(search_photos(photos, "anna")) == ["p1", "p3"]
        assert _ids(search_photos(photos, "austria")) == ["p2"]
        assert _ids(search_photos(photos, "broken")) == ["p4"]

    def test_no_match(self, photos):
        assert search_photos(photos, "zebra") == []

    @pytest.mark.parametrize("query", [None, "", "   "])
    def test_empty_query_rejected(self, photos, query):
        with pytest.raises(ValidationError, match="q is required"):
            search_photos(photos, query)
