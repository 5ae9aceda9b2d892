from __future__ import annotations

from datetime import datetime, timezone

import pytest

from garagehub.exceptions import ValidationError
from garagehub.models import Garage, Service
from garagehub.services import GaragePatch, ServiceDescriptor
from garagehub.services.garage_sync import (
    pair_service_uploads,
    parse_service_descriptors,
    reconcile_services,
    reconcile_update,
)


def _garage(**overrides) -> Garage:
    data = dict(
        id="garage_1",
        zone="north",
        name="Joe's",
        location="Main St",
        main_image="uploads/main-1.png",
        gallery_images=["uploads/g-1.png"],
        services=[
            Service(name="Oil Change", price=29.99, image="uploads/s-1.png"),
            Service(name="Tyres", price=80.0, image="uploads/s-2.png"),
        ],
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    data.update(overrides)
    return Garage(**data)


def test_parse_service_descriptors_absent_field_is_none() -> None:
    assert parse_service_descriptors(None) is None
    assert parse_service_descriptors("   ") is None


def test_parse_service_descriptors_accepts_both_key_styles() -> None:
    raw = '[{"name": " Oil Change ", "price": 29.99}, {"ServiceName": "Wash", "ServicePrice": "12.5", "ServiceImage": "uploads/w.png"}]'
    assert parse_service_descriptors(raw) == [
        ServiceDescriptor(name="Oil Change", price=29.99),
        ServiceDescriptor(name="Wash", price=12.5, image="uploads/w.png"),
    ]


def test_parse_service_descriptors_empty_list_is_not_none() -> None:
    assert parse_service_descriptors("[]") == []


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        '{"name": "x"}',
        '["x"]',
        '[{"price": 1}]',
        '[{"name": "x"}]',
        '[{"name": "x", "price": "abc"}]',
        '[{"name": "x", "price": -1}]',
        '[{"name": "x", "price": true}]',
        '[{"name": "x", "price": "nan"}]',
        '[{"name": "x", "price": 1' + "0" * 400 + "}]",
    ],
)
def test_parse_service_descriptors_rejects_malformed_input(raw: str) -> None:
    with pytest.raises(ValidationError):
        parse_service_descriptors(raw)


def test_pair_service_uploads_is_positional_and_drops_extras() -> None:
    descs = [ServiceDescriptor("a", 1.0), ServiceDescriptor("b", 2.0)]
    assert pair_service_uploads(descs, ["u0", "u1", "u2"]) == [(descs[0], "u0"), (descs[1], "u1")]
    assert pair_service_uploads(descs, ["u0"]) == [(descs[0], "u0"), (descs[1], None)]
    assert pair_service_uploads([], ["u0"]) == []


def test_reconcile_services_carries_images_forward_by_position() -> None:
    old = _garage().services
    services, orphans = reconcile_services(
        old, [ServiceDescriptor("Oil Change", 34.99), ServiceDescriptor("Tyres", 85.0)], []
    )
    assert [s.image for s in services] == ["uploads/s-1.png", "uploads/s-2.png"]
    assert [s.price for s in services] == [34.99, 85.0]
    assert orphans == []


def test_reconcile_services_replaced_image_becomes_orphan() -> None:
    old = _garage().services
    services, orphans = reconcile_services(
        old,
        [ServiceDescriptor("Oil Change", 29.99), ServiceDescriptor("Tyres", 80.0)],
        [None, "uploads/s-new.png"],
    )
    assert [s.image for s in services] == ["uploads/s-1.png", "uploads/s-new.png"]
    assert orphans == ["uploads/s-2.png"]


def test_reconcile_services_moves_images_with_positions_on_reorder() -> None:
    old = _garage().services
    services, _ = reconcile_services(
        old, [ServiceDescriptor("Tyres", 80.0), ServiceDescriptor("Oil Change", 29.99)], []
    )
    assert services[0].name == "Tyres"
    assert services[0].image == "uploads/s-1.png"


def test_reconcile_services_shrink_does_not_report_dropped_images() -> None:
    old = _garage().services
    services, orphans = reconcile_services(old, [ServiceDescriptor("Oil Change", 29.99)], [])
    assert len(services) == 1
    assert orphans == []


def test_reconcile_update_merges_scalars_and_keeps_services_when_absent() -> None:
    existing = _garage()
    result = reconcile_update(existing, GaragePatch(name="Joe's Garage"))

    assert result.garage.name == "Joe's Garage"
    assert result.garage.zone == "north"
    assert result.garage.services == existing.services
    assert result.garage.created_at == existing.created_at
    assert result.orphans == []


def test_reconcile_update_new_main_image_orphans_old_one() -> None:
    result = reconcile_update(_garage(), GaragePatch(main_image="uploads/main-2.png"))
    assert result.garage.main_image == "uploads/main-2.png"
    assert result.orphans == ["uploads/main-1.png"]


def test_reconcile_update_appends_gallery_images() -> None:
    result = reconcile_update(_garage(), GaragePatch(gallery_images=["uploads/g-2.png"]))
    assert result.garage.gallery_images == ["uploads/g-1.png", "uploads/g-2.png"]
    assert result.orphans == []


def test_reconcile_update_empty_service_list_clears_services() -> None:
    result = reconcile_update(_garage(), GaragePatch(services=[]))
    assert result.garage.services == []


def test_reconcile_update_does_not_mutate_existing() -> None:
    existing = _garage()
    reconcile_update(
        existing,
        GaragePatch(
            services=[ServiceDescriptor("Oil Change", 1.0)],
            service_image_refs=["uploads/s-new.png"],
        ),
    )
    assert existing.services[0].image == "uploads/s-1.png"
    assert existing.services[0].price == 29.99
