import pytest

from foodlink.core.errors import InvalidPayload, InvalidQuantity, MissingFields
from foodlink.db.types import decode_point, encode_point
from foodlink.services.marketplace import haversine_km, validate_listing


def _payload(**overrides) -> dict:
    payload = {"food_type": "tomatoes", "location": {"lat": 1, "lng": 2}, "price": 5, "quantity": 10}
    payload.update(overrides)
    return payload


def test_valid_payload_is_normalised() -> None:
    data = validate_listing(_payload(food_type="  tomatoes ", quantity=10.0))

    assert data.food_type == "tomatoes"
    assert data.quantity == 10
    assert data.status == "active"
    assert data.notes is None


def test_price_zero_counts_as_present() -> None:
    assert validate_listing(_payload(price=0)).price == 0


def test_quantity_zero_is_a_range_error_not_missing() -> None:
    with pytest.raises(InvalidQuantity):
        validate_listing(_payload(quantity=0))


def test_empty_location_counts_as_missing() -> None:
    with pytest.raises(MissingFields):
        validate_listing(_payload(location={}))


def test_missing_fields_are_named_in_order() -> None:
    with pytest.raises(MissingFields) as excinfo:
        validate_listing({"quantity": 3})

    assert excinfo.value.message == "Missing required fields: food_type, location, price"


def test_type_errors_name_the_field() -> None:
    with pytest.raises(InvalidPayload) as excinfo:
        validate_listing(_payload(location={"lat": "north", "lng": 2}))

    assert "location.lat" in excinfo.value.message


def test_non_object_payload_is_rejected() -> None:
    with pytest.raises(InvalidPayload):
        validate_listing("tomatoes")


def test_point_encoding_puts_longitude_first() -> None:
    assert encode_point(lat=-1.5, lng=36.75) == "POINT(36.75 -1.5)"
    assert decode_point("POINT(36.75 -1.5)") == {"lat": -1.5, "lng": 36.75}


def test_point_decoding_accepts_srid_prefix() -> None:
    assert decode_point("SRID=4326;POINT(2 1)") == {"lat": 1.0, "lng": 2.0}


def test_point_decoding_rejects_other_geometries() -> None:
    with pytest.raises(ValueError):
        decode_point("LINESTRING(0 0, 1 1)")


def test_haversine_known_distance() -> None:
    # One degree of latitude is roughly 111 km
    assert haversine_km(0, 0, 1, 0) == pytest.approx(111.19, abs=0.01)
    assert haversine_km(10, 20, 10, 20) == 0


@pytest.mark.parametrize("price", [float("inf"), float("-inf"), float("nan")])
def test_non_finite_price_is_invalid(price) -> None:
    with pytest.raises(InvalidPayload) as excinfo:
        validate_listing(_payload(price=price))

    assert "finite" in excinfo.value.message


@pytest.mark.parametrize("lat", [float("inf"), float("nan")])
def test_non_finite_latitude_is_invalid(lat) -> None:
    with pytest.raises(InvalidPayload):
        validate_listing(_payload(location={"lat": lat, "lng": 2}))


def test_huge_integer_price_is_a_range_error() -> None:
    with pytest.raises(InvalidQuantity):
        validate_listing(_payload(price=10 ** 400))


@pytest.mark.parametrize("price", [0.001, 1.125, 1e-07])
def test_sub_cent_prices_are_invalid(price) -> None:
    with pytest.raises(InvalidPayload):
        validate_listing(_payload(price=price))


@pytest.mark.parametrize("price", [1.5, 1.25, 100, 0.01])
def test_cent_precision_prices_are_valid(price) -> None:
    assert validate_listing(_payload(price=price)).price == price
