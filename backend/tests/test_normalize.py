import pytest

from models import VenueResult
from utils import normalize_results, to_venues

A = {"name": "Museo del Prado", "price": 15}
B = {"name": "Teatro Real", "price": 0}


def test_list_wrapped_results():
    data = [{"results": [A, B], "fallback": False, "debug": {"q": 1}}]
    assert normalize_results(data) == [A, B]


def test_object_results():
    assert normalize_results({"results": [A]}) == [A]


@pytest.mark.parametrize(
    "data",
    [
        {},
        [],
        [{"results": "not-a-list"}],
        {"results": None},
        {"results": {"a": 1}},
        [{}],
        [None],
        [[A, B]],
        None,
        "results",
        42,
        True,
    ],
)
def test_unrecognized_shapes_are_empty(data):
    assert normalize_results(data) == []


def test_normalize_returns_a_copy():
    inner = [A]
    out = normalize_results({"results": inner})
    out.append(B)
    assert inner == [A]


def test_to_venues_falls_back_to_index_for_id():
    venues = to_venues([{"id": "abc", "name": "X"}, {"name": "Y"}, {"name": "Z"}])
    assert [v.id for v in venues] == ["abc", 1, 2]


def test_to_venues_tolerates_bad_fields():
    venues = to_venues(
        [
            {"name": 12, "score": "high", "distanceKm": [1], "price": True, "url": "", "tags": "x"},
            "just a string",
        ]
    )
    first, second = venues
    assert first.name is None
    assert first.score is None
    assert first.distanceKm is None
    assert first.price is None
    assert first.url is None
    assert first.tags is None
    assert isinstance(second, VenueResult)
    assert second.id == 1


def test_to_venues_keeps_free_price_distinct_from_missing():
    free, unknown = to_venues([{"price": 0}, {}])
    assert free.price == 0
    assert unknown.price is None


def test_to_venues_keeps_extra_fields():
    (venue,) = to_venues([{"name": "X", "openingHours": "10-20"}])
    assert venue.model_dump()["openingHours"] == "10-20"
