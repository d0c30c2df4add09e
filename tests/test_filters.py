from cafe_parking.models.schemas import (
    Cafe,
    Coordinate,
    OpeningHours,
    ParkingType,
    SearchFilter,
    SortOption,
)
from cafe_parking.utils.filters import apply_filter, filter_and_sort, passes_filter, sort_cafes

SHIBUYA = Coordinate(latitude=35.6580, longitude=139.7016)
OMOTESANDO = Coordinate(latitude=35.6702, longitude=139.7016)
SHINJUKU = Coordinate(latitude=35.6909, longitude=139.7003)
IKEBUKURO = Coordinate(latitude=35.7295, longitude=139.7104)


def _cafe(cafe_id: str, location=SHIBUYA, **kwargs) -> Cafe:
    return Cafe(id=cafe_id, place_id=cafe_id, name=f"Cafe {cafe_id}", location=location, **kwargs)


def test_rating_below_minimum_is_always_rejected():
    search_filter = SearchFilter(min_rating=4.0)
    for rating in (0.0, 1.5, 3.9, 3.99):
        assert passes_filter(_cafe("c", rating=rating), search_filter) is False
    for rating in (4.0, 4.5, 5.0):
        assert passes_filter(_cafe("c", rating=rating), search_filter) is True


def test_missing_fields_pass_unfiltered_clauses():
    search_filter = SearchFilter(min_rating=4.5, max_price_level=1)
    assert passes_filter(_cafe("c"), search_filter) is True


def test_price_above_maximum_is_rejected():
    search_filter = SearchFilter(max_price_level=2)
    assert passes_filter(_cafe("a", price_level=3), search_filter) is False
    assert passes_filter(_cafe("b", price_level=2), search_filter) is True
    assert passes_filter(_cafe("c", price_level=0), search_filter) is True


def test_open_now_requires_explicit_opening_hours():
    search_filter = SearchFilter(open_now=True)
    assert passes_filter(_cafe("open", opening_hours=OpeningHours(open_now=True)), search_filter)
    assert not passes_filter(_cafe("closed", opening_hours=OpeningHours(open_now=False)), search_filter)
    assert not passes_filter(_cafe("unknown", opening_hours=OpeningHours()), search_filter)
    assert not passes_filter(_cafe("absent"), search_filter)


def test_open_now_off_ignores_opening_hours():
    assert passes_filter(_cafe("closed", opening_hours=OpeningHours(open_now=False)), SearchFilter())


def test_candidate_without_location_is_rejected():
    assert passes_filter(_cafe("nowhere", location=None, rating=5.0), SearchFilter()) is False


def test_parking_types_restrict_tagged_candidates_only():
    search_filter = SearchFilter(parking_types={ParkingType.FREE, ParkingType.GARAGE})
    assert passes_filter(_cafe("free", types=["cafe", "free_parking"]), search_filter)
    assert passes_filter(_cafe("garage", types=["cafe", "parking_garage"]), search_filter)
    assert not passes_filter(_cafe("street", types=["cafe", "street_parking"]), search_filter)
    assert passes_filter(_cafe("mixed", types=["street_parking", "free_parking"]), search_filter)
    assert passes_filter(_cafe("untagged", types=["cafe", "food"]), search_filter)


def test_empty_parking_set_places_no_constraint():
    search_filter = SearchFilter(parking_types=set())
    assert passes_filter(_cafe("street", types=["street_parking"]), search_filter)


def test_apply_filter_keeps_input_order():
    cafes = [_cafe("a", rating=4.1), _cafe("b", rating=2.0), _cafe("c", rating=4.8)]
    assert [c.id for c in apply_filter(cafes, SearchFilter(min_rating=4.0))] == ["a", "c"]


def test_sort_by_price_puts_unlabeled_last():
    cafes = [_cafe("two", price_level=2), _cafe("none"), _cafe("one", price_level=1)]
    result = sort_cafes(cafes, SortOption.PRICE)
    assert [c.price_level for c in result] == [1, 2, None]


def test_sort_by_price_unlabeled_after_every_level_four():
    cafes = [_cafe("none-1"), _cafe("four-1", price_level=4), _cafe("none-2"), _cafe("four-2", price_level=4)]
    result = sort_cafes(cafes, SortOption.PRICE)
    assert [c.id for c in result] == ["four-1", "four-2", "none-1", "none-2"]


def test_sort_by_rating_descending_with_missing_as_zero_and_stable_ties():
    cafes = [
        _cafe("none"),
        _cafe("mid-1", rating=3.5),
        _cafe("top", rating=4.7),
        _cafe("mid-2", rating=3.5),
        _cafe("zero", rating=0.0),
    ]
    result = sort_cafes(cafes, SortOption.RATING)
    assert [c.id for c in result] == ["top", "mid-1", "mid-2", "none", "zero"]


def test_sort_by_distance_uses_origin():
    cafes = [_cafe("ikebukuro", IKEBUKURO), _cafe("shibuya", SHIBUYA), _cafe("shinjuku", SHINJUKU)]
    result = sort_cafes(cafes, SortOption.DISTANCE, origin=OMOTESANDO)
    assert [c.id for c in result] == ["shibuya", "shinjuku", "ikebukuro"]


def test_sort_by_distance_without_origin_keeps_order():
    cafes = [_cafe("ikebukuro", IKEBUKURO), _cafe("shibuya", SHIBUYA), _cafe("shinjuku", SHINJUKU)]
    result = sort_cafes(cafes, SortOption.DISTANCE, origin=None)
    assert [c.id for c in result] == ["ikebukuro", "shibuya", "shinjuku"]


def test_filter_and_sort_is_idempotent():
    cafes = [
        _cafe("a", IKEBUKURO, rating=4.4, price_level=3),
        _cafe("b", SHINJUKU, rating=3.0),
        _cafe("c", SHIBUYA, rating=4.9, price_level=1),
        _cafe("d", None, rating=5.0),
        _cafe("e", OMOTESANDO, price_level=2),
    ]
    for sort_by in SortOption:
        search_filter = SearchFilter(min_rating=3.5, sort_by=sort_by)
        once = filter_and_sort(cafes, search_filter, origin=SHIBUYA)
        twice = filter_and_sort(once, search_filter, origin=SHIBUYA)
        assert [c.id for c in twice] == [c.id for c in once]


def test_min_rating_scenario_in_shibuya():
    cafes = [_cafe("high", SHIBUYA, rating=4.2), _cafe("low", OMOTESANDO, rating=3.8)]
    result = filter_and_sort(cafes, SearchFilter(min_rating=4.0), origin=SHIBUYA)
    assert [c.rating for c in result] == [4.2]
