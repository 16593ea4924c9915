from core.domain.models import PricePoint
from core.pricing import PriceStrategy, pick_price_point, sort_price_points

POINTS = [
    PricePoint(id=3, price=300.0),
    PricePoint(id=1, price=100.0),
    PricePoint(id=2, price=200.0),
    PricePoint(id=4, price=400.0),
]


def test_sort_is_ascending_and_stable():
    tied = [PricePoint(id=9, price=50.0), PricePoint(id=8, price=50.0)]
    assert [pp.id for pp in sort_price_points(POINTS + tied)] == [9, 8, 1, 2, 3, 4]


def test_lowest_and_highest():
    assert pick_price_point(POINTS).id == 1
    assert pick_price_point(POINTS, PriceStrategy.HIGHEST).id == 4


def test_closest_picks_minimum_difference():
    assert pick_price_point(POINTS, "closest", target=260).id == 3
    assert pick_price_point(POINTS, PriceStrategy.PREFER_PRICE, target=190).id == 2


def test_closest_tie_goes_to_cheaper_point():
    assert pick_price_point(POINTS, "closest", target=150).id == 1


def test_closest_without_target_falls_back_to_lowest():
    assert pick_price_point(POINTS, "closest").id == 1


def test_prefer_ids():
    assert pick_price_point(POINTS, "prefer_ids", prefer_ids=[4, 3]).id == 3
    assert pick_price_point(POINTS, "prefer_ids", prefer_ids=[99]).id == 1


def test_empty_points():
    assert pick_price_point([]) is None
