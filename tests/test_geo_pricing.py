import pytest

from foodiebot.services.geo_pricing import GeoPoint, PricingConfig, RateTier, distance_km, resolve_fee

TIERS = [RateTier(5, 20), RateTier(10, 40)]


def test_distance_to_self_is_zero():
    p = GeoPoint(12.9716, 77.5946)
    assert distance_km(p, p) == 0


def test_distance_is_symmetric():
    a = GeoPoint(12.9716, 77.5946)
    b = GeoPoint(13.0827, 80.2707)
    assert distance_km(a, b) == pytest.approx(distance_km(b, a))


def test_one_degree_of_latitude():
    assert distance_km(GeoPoint(0, 0), GeoPoint(1, 0)) == pytest.approx(111.19, abs=0.01)


@pytest.mark.parametrize(
    "distance, fee",
    [(0, 20), (3.2, 20), (5, 20), (5.01, 40), (7, 40), (10, 40)],
)
def test_first_covering_tier_wins(distance, fee):
    assert resolve_fee(distance, TIERS) == fee


def test_beyond_last_tier_charges_largest_tier_fee():
    assert resolve_fee(25, TIERS) == 40


def test_tiers_are_sorted_before_matching():
    assert resolve_fee(4, [RateTier(10, 40), RateTier(5, 20)]) == 20


def test_no_tiers_means_no_fee():
    assert resolve_fee(3, []) == 0


def test_quote_without_location_is_not_calculated():
    config = PricingConfig(shop_location=GeoPoint(12.9716, 77.5946), tiers=TIERS)
    quote = config.quote(None)
    assert quote.calculated is False
    assert quote.fee == 0


def test_quote_without_shop_location_is_not_calculated():
    quote = PricingConfig(tiers=TIERS).quote(GeoPoint(12.9716, 77.5946))
    assert not quote.calculated


def test_quote_seven_km_away():
    config = PricingConfig(shop_location=GeoPoint(12.9716, 77.5946), tiers=TIERS)
    quote = config.quote(GeoPoint(12.9716 + 0.063, 77.5946))
    assert quote.calculated
    assert 6.5 < quote.distance_km < 7.5
    assert quote.fee == 40
