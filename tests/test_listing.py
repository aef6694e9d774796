from __future__ import annotations

import pytest

from conftest import make_vehicle
from models import City, State, Vehicle, VehicleType
from services import DateRange, VehicleListing, filter_vehicles, matches_date_range, matches_search
from store import StoreError


def _seed(store, *vehicles: Vehicle) -> None:
    for v in vehicles:
        store.insert("vehicles", v.to_document())


def test_search_is_case_insensitive_substring_over_any_field() -> None:
    v = make_vehicle(1202890, brand="Chevrolet", chassis_observation="Chassi Remarcado")

    assert matches_search(v, "chev")
    assert matches_search(v, "REMARC")
    assert matches_search(v, "1202")  # número de registro
    assert matches_search(v, "automó")  # tipo
    assert not matches_search(v, "honda")


def test_search_covers_boolean_and_timestamp_fields() -> None:
    with_key = make_vehicle(1, has_key=True)
    without_key = make_vehicle(2, has_key=False)

    assert matches_search(with_key, "true")
    assert not matches_search(without_key, "true")
    assert matches_search(without_key, "fals")
    assert matches_search(with_key, "T10:00")


def test_empty_search_matches_everything() -> None:
    assert matches_search(make_vehicle(1), "")


def test_date_range_is_inclusive_on_both_ends() -> None:
    v = make_vehicle(1, inspection_date="2024-03-15")

    assert matches_date_range(v, DateRange("2024-03-15", "2024-03-15"))
    assert not matches_date_range(v, DateRange("2024-03-15", "2024-03-14"))
    assert not matches_date_range(v, DateRange("2024-03-16", ""))
    assert matches_date_range(v, DateRange("", "2024-12-31"))
    assert matches_date_range(v, DateRange())


def test_filter_is_conjunction_of_both_predicates() -> None:
    records = [
        make_vehicle(5, brand="FIAT", inspection_date="2024-01-10"),
        make_vehicle(4, brand="FIAT", inspection_date="2024-05-10"),
        make_vehicle(3, brand="VW", inspection_date="2024-01-12"),
        make_vehicle(2, brand="Fiat", inspection_date="2024-01-31"),
    ]
    date_range = DateRange("2024-01-01", "2024-01-31")

    kept = filter_vehicles(records, "fiat", date_range)

    assert [v.registration_number for v in kept] == [5, 2]
    for v in records:
        both = matches_search(v, "fiat") and matches_date_range(v, date_range)
        assert (v in kept) == both


def test_list_visible_orders_by_registration_number_desc(store) -> None:
    _seed(store, make_vehicle(1202891), make_vehicle(1202893), make_vehicle(1202892))
    listing = VehicleListing(store)

    numbers = [v.registration_number for v in listing.list_visible("all")]

    assert numbers == [1202893, 1202892, 1202891]


def test_city_filter_is_applied_by_the_store(store) -> None:
    _seed(
        store,
        make_vehicle(1, city=City.MISSAL),
        make_vehicle(2, city=City.MEDIANEIRA),
        make_vehicle(3, city=City.MISSAL),
    )
    listing = VehicleListing(store)

    visible = listing.list_visible("Missal")

    assert [v.registration_number for v in visible] == [3, 1]
    assert all(v.city is City.MISSAL for v in listing.records)


def test_only_city_change_hits_the_store(store) -> None:
    _seed(store, make_vehicle(1, brand="FIAT"), make_vehicle(2, city=City.SMI))
    listing = VehicleListing(store)

    listing.list_visible("all")
    listing.list_visible("all", "fiat")
    listing.list_visible("all", "", DateRange("2024-01-01", ""))
    assert store.fetches == 1

    listing.list_visible("SMI")
    assert store.fetches == 2
    listing.list_visible("SMI", "gol")
    assert store.fetches == 2


def test_invalidate_forces_reload(store) -> None:
    listing = VehicleListing(store)
    assert listing.list_visible("all") == []

    _seed(store, make_vehicle(7))
    assert listing.list_visible("all") == []

    listing.invalidate()
    assert [v.registration_number for v in listing.list_visible("all")] == [7]


def test_fetch_failure_keeps_previous_set(store) -> None:
    _seed(store, make_vehicle(1, city=City.MISSAL), make_vehicle(2, city=City.SMI))
    listing = VehicleListing(store)
    listing.list_visible("all")
    store.fail_fetch = True

    with pytest.raises(StoreError):
        listing.list_visible("Missal")

    assert [v.registration_number for v in listing.records] == [2, 1]
    assert listing.city_filter == "all"


def test_legacy_documents_outside_closed_sets_are_kept(store) -> None:
    doc = make_vehicle(9).to_document()
    doc["city"] = "Foz do Iguaçu"
    store.insert("vehicles", doc)

    (vehicle,) = VehicleListing(store).list_visible("all")
    assert vehicle.city == "Foz do Iguaçu"


def test_reload_flag_refetches_same_city(store) -> None:
    listing = VehicleListing(store)
    listing.list_visible("all")
    _seed(store, make_vehicle(11))

    assert listing.list_visible("all") == []
    assert [v.registration_number for v in listing.list_visible("all", reload=True)] == [11]


def test_null_fields_in_legacy_documents_become_empty_text(store) -> None:
    doc = make_vehicle(12).to_document()
    doc.update(inspectionDate=None, releaseDate=None, plate=None, city=None)
    store.insert("vehicles", doc)
    listing = VehicleListing(store)

    assert listing.list_visible("all", "", DateRange("2024-01-01", "2024-12-31")) == []
    (vehicle,) = listing.list_visible("all")
    assert vehicle.inspection_date == ""
    assert vehicle.release_date == ""
    assert vehicle.plate == ""
    assert vehicle.city == ""
