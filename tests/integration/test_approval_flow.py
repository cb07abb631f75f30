"""End-to-end flow: a member lists jewelry, it is approved and auctioned."""

import pytest

pytestmark = pytest.mark.integration


def _create_user(client, username, role):
    response = client.post("/api/users", json={
        "username": username,
        "email": f"{username}@example.com",
        "full_name": username.title(),
        "role": role,
    })
    assert response.status_code == 201
    return response.json()


def test_member_to_auction(client):
    member = _create_user(client, "linh", "MEMBER")
    staff = _create_user(client, "bao", "STAFF")
    manager = _create_user(client, "anh", "MANAGER")
    bidder = _create_user(client, "minh", "MEMBER")

    jewelry = client.post("/api/jewelries", json={
        "owner_id": member["id"],
        "name": "Jade Bracelet",
        "material": "jade",
        "weight": 32.5,
        "price": 900.0,
    })
    assert jewelry.status_code == 201
    jewelry = jewelry.json()
    assert jewelry["state"] == "ACTIVE"

    # member asks, staff values, manager escalates
    first = client.post("/api/request-approvals/user", json={
        "sender_id": member["id"], "jewelry_id": jewelry["id"],
    }).json()
    second = client.post("/api/request-approvals/staff", json={
        "sender_id": staff["id"], "request_approval_id": first["id"], "valuation": 850.0,
    }).json()
    third = client.post("/api/request-approvals/manager", json={
        "sender_id": manager["id"], "request_approval_id": second["id"],
    }).json()

    approved = client.put(f"/api/request-approvals/{third['id']}/state", json={
        "responder_id": manager["id"], "state": "APPROVED",
    }).json()
    assert approved["confirm"] is False
    assert approved["staff_id"] == staff["id"]

    confirmed = client.put(f"/api/request-approvals/{third['id']}/confirm", json={
        "responder_id": member["id"],
    }).json()
    assert confirmed["confirm"] is True
    assert confirmed["state"] == "APPROVED"

    passed = client.get("/api/request-approvals/passed").json()
    assert [r["id"] for r in passed["items"]] == [third["id"]]

    auction = client.post("/api/auctions", json={
        "name": "Spring Jade Sale",
        "jewelry_id": jewelry["id"],
        "first_price": third["valuation"],
        "minimum_increment": 50.0,
        "state": "ONGOING",
    })
    assert auction.status_code == 201
    auction = auction.json()
    assert client.get(f"/api/jewelries/{jewelry['id']}").json()["state"] == "AUCTION"

    low = client.post(f"/api/auctions/{auction['id']}/bids", json={
        "user_id": bidder["id"], "price_given": 800.0,
    })
    assert low.status_code == 400

    for price in (850.0, 900.0, 1000.0):
        response = client.post(f"/api/auctions/{auction['id']}/bids", json={
            "user_id": bidder["id"], "price_given": price,
        })
        assert response.status_code == 201

    highest = client.get(f"/api/auctions/{auction['id']}/bids/highest").json()
    assert highest["price_given"] == 1000.0
    assert client.get(f"/api/auctions/{auction['id']}").json()["last_price"] == 1000.0

    bids = client.get(f"/api/auctions/bids/user/{bidder['id']}").json()
    assert bids["total"] == 3

    finished = client.put(f"/api/auctions/{auction['id']}/state", json={"state": "FINISHED"})
    assert finished.json()["state"] == "FINISHED"
    late = client.post(f"/api/auctions/{auction['id']}/bids", json={
        "user_id": bidder["id"], "price_given": 5000.0,
    })
    assert late.status_code == 400


def test_cancelled_jewelry_cannot_be_auctioned(client):
    member = _create_user(client, "hoa", "MEMBER")
    jewelry = client.post("/api/jewelries", json={
        "owner_id": member["id"], "name": "Silver Anklet", "price": 120.0,
    }).json()
    request = client.post("/api/request-approvals/user", json={
        "sender_id": member["id"], "jewelry_id": jewelry["id"],
    }).json()

    client.put("/api/request-approvals/cancel", json={
        "request_id": request["id"], "note": "owner withdrew",
    })

    hidden = client.get("/api/jewelries", params={"state": "HIDDEN"}).json()
    assert [j["id"] for j in hidden["items"]] == [jewelry["id"]]

    response = client.post("/api/auctions", json={
        "name": "Anklets", "jewelry_id": jewelry["id"], "first_price": 100.0,
    })
    assert response.status_code == 400


def test_duplicate_username(client):
    _create_user(client, "quang", "STAFF")
    response = client.post("/api/users", json={
        "username": "quang", "email": "other@example.com",
    })
    assert response.status_code == 409

    staff = client.get("/api/users", params={"role": "STAFF"}).json()
    assert [u["username"] for u in staff["items"]] == ["quang"]


def test_unknown_owner(client):
    response = client.post("/api/jewelries", json={
        "owner_id": 999, "name": "Ghost Ring", "price": 10.0,
    })
    assert response.status_code == 404
    assert client.get("/api/users/999").status_code == 404


def _list_jewelry(client, owner_id, name="Gold Locket"):
    return client.post("/api/jewelries", json={
        "owner_id": owner_id, "name": name, "price": 400.0,
    }).json()


def _pass_approval(client, sender_id, responder_id, jewelry_id):
    request = client.post("/api/request-approvals/user", json={
        "sender_id": sender_id, "jewelry_id": jewelry_id,
    }).json()
    client.put(f"/api/request-approvals/{request['id']}/state", json={
        "responder_id": responder_id, "state": "APPROVED",
    })
    client.put(f"/api/request-approvals/{request['id']}/confirm", json={
        "responder_id": responder_id,
    })
    return request


def test_jewelry_without_passed_approval_cannot_be_auctioned(client):
    member = _create_user(client, "thu", "MEMBER")
    manager = _create_user(client, "khoa", "MANAGER")
    jewelry = _list_jewelry(client, member["id"])

    response = client.post("/api/auctions", json={
        "name": "Lockets", "jewelry_id": jewelry["id"], "first_price": 10.0,
    })
    assert response.status_code == 400
    assert "no passed approval" in response.json()["detail"]

    # approved but not yet confirmed is still not enough
    request = client.post("/api/request-approvals/user", json={
        "sender_id": member["id"], "jewelry_id": jewelry["id"],
    }).json()
    client.put(f"/api/request-approvals/{request['id']}/state", json={
        "responder_id": manager["id"], "state": "APPROVED",
    })
    response = client.post("/api/auctions", json={
        "name": "Lockets", "jewelry_id": jewelry["id"], "first_price": 10.0,
    })
    assert response.status_code == 400
    assert client.get(f"/api/jewelries/{jewelry['id']}").json()["state"] == "ACTIVE"


def test_jewelry_is_auctioned_only_once(client):
    member = _create_user(client, "lan", "MEMBER")
    manager = _create_user(client, "tuan", "MANAGER")
    jewelry = _list_jewelry(client, member["id"])
    _pass_approval(client, member["id"], manager["id"], jewelry["id"])

    body = {"name": "Lockets", "jewelry_id": jewelry["id"], "first_price": 10.0}
    assert client.post("/api/auctions", json=body).status_code == 201

    second = client.post("/api/auctions", json=body)
    assert second.status_code == 400
    assert "already at auction" in second.json()["detail"]


def test_unknown_jewelry_cannot_be_auctioned(client):
    response = client.post("/api/auctions", json={
        "name": "Nothing", "jewelry_id": 4242, "first_price": 10.0,
    })
    assert response.status_code == 404
    assert response.json()["detail"] == "Jewelry 4242 not found"


def test_closed_auction_stays_closed(client):
    member = _create_user(client, "mai", "MEMBER")
    manager = _create_user(client, "son", "MANAGER")
    jewelry = _list_jewelry(client, member["id"])
    _pass_approval(client, member["id"], manager["id"], jewelry["id"])
    auction = client.post("/api/auctions", json={
        "name": "Lockets", "jewelry_id": jewelry["id"], "first_price": 10.0, "state": "ONGOING",
    }).json()

    assert client.put(f"/api/auctions/{auction['id']}/state", json={"state": "CANCELLED"}).status_code == 200

    reopened = client.put(f"/api/auctions/{auction['id']}/state", json={"state": "ONGOING"})
    assert reopened.status_code == 400
    assert client.get(f"/api/auctions/{auction['id']}").json()["state"] == "CANCELLED"

    bid = client.post(f"/api/auctions/{auction['id']}/bids", json={
        "user_id": member["id"], "price_given": 50.0,
    })
    assert bid.status_code == 400


def test_page_size_is_clamped(client):
    for n in range(3):
        _create_user(client, f"staff{n}", "STAFF")

    response = client.get("/api/users", params={"role": "STAFF", "per_page": 500})
    assert response.status_code == 200
    data = response.json()
    assert data["per_page"] == 100
    assert data["total"] == 3
