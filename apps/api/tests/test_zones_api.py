from __future__ import annotations

from pathlib import Path


def _png(name: str = "zone.png") -> tuple[str, bytes, str]:
    return (name, b"\x89PNG\x00\x00", "image/png")


def _stored(settings) -> list[str]:
    return sorted("uploads/" + p.name for p in Path(settings.upload_dir).iterdir() if p.is_file())


def _create(client, name: str = "North"):
    return client.post(
        "/api/zones",
        data={"zoneName": name, "uploadedBy": "admin"},
        files={"zoneImage": _png()},
    )


def test_zone_crud_flow(client, settings) -> None:
    res = _create(client)
    assert res.status_code == 201
    zone = res.json()
    assert zone["zone_name"] == "North"
    assert zone["uploaded_by"] == "admin"
    assert zone["zone_image"].startswith("uploads/zoneImage-")
    assert zone["zone_image_url"] == "/" + zone["zone_image"]

    assert [z["id"] for z in client.get("/api/zones").json()] == [zone["id"]]
    assert client.get(f"/api/zones/{zone['id']}").json()["zone_name"] == "North"

    res = client.delete(f"/api/zones/{zone['id']}")
    assert res.status_code == 200
    assert _stored(settings) == []
    assert client.get(f"/api/zones/{zone['id']}").status_code == 404


def test_create_zone_requires_name_and_image(client, settings) -> None:
    res = client.post("/api/zones", data={"zoneName": "North"})
    assert res.status_code == 400
    assert res.json()["message"] == "Zone name and image are required"

    res = client.post("/api/zones", data={"zoneName": "  "}, files={"zoneImage": _png()})
    assert res.status_code == 400
    assert _stored(settings) == []


def test_create_zone_requires_uploaded_by(client, settings) -> None:
    res = client.post("/api/zones", data={"zoneName": "North"}, files={"zoneImage": _png()})
    assert res.status_code == 400
    assert res.json()["message"] == "uploadedBy is required"
    assert _stored(settings) == []


def test_duplicate_zone_name_is_conflict_and_leaves_no_file(client, settings) -> None:
    first = _create(client).json()
    res = _create(client)
    assert res.status_code == 409
    assert res.json()["error"] == "CONFLICT"
    assert _stored(settings) == [first["zone_image"]]


def test_update_zone_replaces_image(client, settings) -> None:
    zone = _create(client).json()

    res = client.put(
        f"/api/zones/{zone['id']}",
        data={"zoneName": "North East"},
        files={"zoneImage": _png("new.png")},
    )
    assert res.status_code == 200
    updated = res.json()
    assert updated["zone_name"] == "North East"
    assert updated["uploaded_by"] == "admin"
    assert updated["zone_image"] != zone["zone_image"]
    assert _stored(settings) == [updated["zone_image"]]


def test_update_zone_without_image_keeps_it(client, settings) -> None:
    zone = _create(client).json()
    res = client.put(f"/api/zones/{zone['id']}", data={"uploadedBy": "ops"})
    assert res.status_code == 200
    assert res.json()["zone_image"] == zone["zone_image"]
    assert res.json()["uploaded_by"] == "ops"
    assert _stored(settings) == [zone["zone_image"]]


def test_delete_unknown_zone_is_404(client) -> None:
    res = client.delete("/api/zones/zone_missing")
    assert res.status_code == 404
    assert res.json()["error"] == "NOT_FOUND"
