from __future__ import annotations


def test_contact_crud_flow(client) -> None:
    res = client.post(
        "/api/contacts",
        json={"name": "Ann", "mobileNumber": "0123456789", "message": "Call me", "program": "Fleet"},
    )
    assert res.status_code == 201
    contact = res.json()
    assert contact["mobile_number"] == "0123456789"
    assert contact["program"] == "Fleet"

    assert [c["id"] for c in client.get("/api/contacts").json()] == [contact["id"]]

    res = client.put(f"/api/contacts/{contact['id']}", json={"message": "Email me"})
    assert res.status_code == 200
    assert res.json()["message"] == "Email me"
    assert res.json()["name"] == "Ann"

    res = client.delete(f"/api/contacts/{contact['id']}")
    assert res.json() == {"message": "Contact deleted successfully"}
    assert client.get(f"/api/contacts/{contact['id']}").status_code == 404


def test_create_contact_requires_name_mobile_and_message(client) -> None:
    res = client.post("/api/contacts", json={"name": "Ann", "message": "hi"})
    assert res.status_code == 400
    assert res.json()["message"] == "Name, Mobile Number, and Message are required"
