from sqlalchemy import func, select

from cottagetrip.models.expense import Expense
from cottagetrip.services import rental_services

ROOM = "room-1"


def _shares(expense):
    return [(s["user_id"], s["amount_cents"]) for s in expense["splits"]]


def _payments(res):
    return {p["user_id"]: p for p in res.json()}


async def test_ensure_creates_zero_rental_once(client, room, auth):
    first = await client.post(f"/api/v1/rooms/{ROOM}/rental", headers=auth("bob"))
    assert first.status_code == 200

    rental = first.json()
    assert rental["title"] == "Cottage Rental"
    assert rental["amount_cents"] == 0
    assert rental["is_cottage_rental"] and rental["pinned"]
    assert rental["paid_by_user_id"] == "alice"
    assert rental["receipt_path"] is None
    assert _shares(rental) == [("alice", 0), ("bob", 0), ("carol", 0)]

    second = await client.post(f"/api/v1/rooms/{ROOM}/rental", headers=auth("carol"))
    assert second.json()["id"] == rental["id"]

    listed = await client.get(f"/api/v1/rooms/{ROOM}/expenses", headers=auth("alice"))
    assert len(listed.json()) == 1

    payments = _payments(await client.get(f"/api/v1/rooms/{ROOM}/rental/payments", headers=auth("bob")))
    assert set(payments) == {"alice", "bob", "carol"}
    assert all(not p["paid"] and p["amount_cents"] == 0 for p in payments.values())


async def test_second_pinned_rental_is_rejected(client, room, auth):
    await client.post(f"/api/v1/rooms/{ROOM}/rental", headers=auth("alice"))

    res = await client.put("/api/v1/expense/", json={
        "room_id": ROOM,
        "title": "Another rental",
        "amount_cents": 0,
        "paid_by_user_id": "alice",
        "member_ids": ["alice"],
        "is_cottage_rental": True,
        "pinned": True,
    }, headers=auth("alice"))

    assert res.status_code == 400


async def test_admin_sets_amount_over_current_split_members(client, room, auth):
    await client.post(f"/api/v1/rooms/{ROOM}/rental", headers=auth("alice"))

    res = await client.patch(f"/api/v1/rooms/{ROOM}/rental", json={"amount_cents": 234200}, headers=auth("alice"))

    assert res.status_code == 200
    assert _shares(res.json()) == [("alice", 78067), ("bob", 78067), ("carol", 78066)]

    payments = _payments(await client.get(f"/api/v1/rooms/{ROOM}/rental/payments", headers=auth("alice")))
    assert {uid: p["amount_cents"] for uid, p in payments.items()} == {
        "alice": 78067, "bob": 78067, "carol": 78066
    }


async def test_non_admin_cannot_change_rental(client, room, auth):
    await client.post(f"/api/v1/rooms/{ROOM}/rental", headers=auth("alice"))

    res = await client.patch(f"/api/v1/rooms/{ROOM}/rental", json={"amount_cents": 1000}, headers=auth("bob"))
    assert res.status_code == 403

    res = await client.post(f"/api/v1/rooms/{ROOM}/rental/rebalance", headers=auth("bob"))
    assert res.status_code == 403


async def test_split_subset_drops_rental_payment_rows(client, room, auth):
    await client.post(f"/api/v1/rooms/{ROOM}/rental", headers=auth("alice"))

    res = await client.patch(
        f"/api/v1/rooms/{ROOM}/rental",
        json={"amount_cents": 1001, "member_ids": ["bob", "alice"]},
        headers=auth("alice"),
    )

    assert _shares(res.json()) == [("bob", 501), ("alice", 500)]

    payments = _payments(await client.get(f"/api/v1/rooms/{ROOM}/rental/payments", headers=auth("alice")))
    assert set(payments) == {"alice", "bob"}


async def test_rebalance_uses_full_membership_and_keeps_paid_status(client, room, auth, add_member):
    await client.post(f"/api/v1/rooms/{ROOM}/rental", headers=auth("alice"))
    await client.patch(f"/api/v1/rooms/{ROOM}/rental", json={"amount_cents": 234200}, headers=auth("alice"))

    res = await client.patch(f"/api/v1/rooms/{ROOM}/rental/payments/bob", json={"paid": True}, headers=auth("alice"))
    assert res.status_code == 200
    paid_at = res.json()["paid_at"]
    assert paid_at is not None

    await add_member("dave")

    res = await client.post(f"/api/v1/rooms/{ROOM}/rental/rebalance", headers=auth("alice"))
    assert res.status_code == 200
    assert _shares(res.json()) == [("alice", 58550), ("bob", 58550), ("carol", 58550), ("dave", 58550)]

    payments = _payments(await client.get(f"/api/v1/rooms/{ROOM}/rental/payments", headers=auth("alice")))
    assert set(payments) == {"alice", "bob", "carol", "dave"}
    assert all(p["amount_cents"] == 58550 for p in payments.values())
    assert payments["bob"]["paid"] and payments["bob"]["paid_at"] == paid_at
    assert not payments["dave"]["paid"]


async def test_rebalance_is_reproducible(client, room, auth):
    await client.post(f"/api/v1/rooms/{ROOM}/rental", headers=auth("alice"))
    await client.patch(f"/api/v1/rooms/{ROOM}/rental", json={"amount_cents": 100}, headers=auth("alice"))

    first = await client.post(f"/api/v1/rooms/{ROOM}/rental/rebalance", headers=auth("alice"))
    second = await client.post(f"/api/v1/rooms/{ROOM}/rental/rebalance", headers=auth("alice"))

    assert _shares(first.json()) == _shares(second.json()) == [("alice", 34), ("bob", 33), ("carol", 33)]


async def test_marking_unpaid_clears_paid_at(client, room, auth):
    await client.post(f"/api/v1/rooms/{ROOM}/rental", headers=auth("alice"))

    await client.patch(f"/api/v1/rooms/{ROOM}/rental/payments/carol", json={"paid": True}, headers=auth("alice"))
    res = await client.patch(f"/api/v1/rooms/{ROOM}/rental/payments/carol", json={"paid": False}, headers=auth("alice"))

    assert res.status_code == 200
    assert res.json()["paid"] is False
    assert res.json()["paid_at"] is None


async def test_toggle_requires_admin_and_a_split(client, room, auth):
    await client.post(f"/api/v1/rooms/{ROOM}/rental", headers=auth("alice"))

    res = await client.patch(f"/api/v1/rooms/{ROOM}/rental/payments/bob", json={"paid": True}, headers=auth("bob"))
    assert res.status_code == 403

    res = await client.patch(f"/api/v1/rooms/{ROOM}/rental/payments/zoe", json={"paid": True}, headers=auth("alice"))
    assert res.status_code == 404


async def test_rebalance_without_rental(client, room, auth):
    res = await client.post(f"/api/v1/rooms/{ROOM}/rental/rebalance", headers=auth("alice"))

    assert res.status_code == 404


async def test_only_admin_edits_rental_through_upsert(client, room, auth):
    rental = (await client.post(f"/api/v1/rooms/{ROOM}/rental", headers=auth("alice"))).json()
    update = {
        "expense_id": rental["id"],
        "room_id": ROOM,
        "title": "Cottage Rental",
        "amount_cents": 3000,
        "paid_by_user_id": "alice",
        "member_ids": ["alice", "bob", "carol"],
    }

    res = await client.put("/api/v1/expense/", json=update, headers=auth("bob"))
    assert res.status_code == 403

    res = await client.put("/api/v1/expense/", json=update, headers=auth("alice"))
    assert res.status_code == 200
    assert res.json()["pinned"] is True

    payments = _payments(await client.get(f"/api/v1/rooms/{ROOM}/rental/payments", headers=auth("alice")))
    assert all(p["amount_cents"] == 1000 for p in payments.values())


async def test_only_admin_deletes_rental_even_if_member_created_it(client, room, auth):
    rental = (await client.post(f"/api/v1/rooms/{ROOM}/rental", headers=auth("bob"))).json()
    await client.patch(f"/api/v1/rooms/{ROOM}/rental", json={"amount_cents": 90000}, headers=auth("alice"))
    await client.patch(f"/api/v1/rooms/{ROOM}/rental/payments/carol", json={"paid": True}, headers=auth("alice"))

    res = await client.delete(f"/api/v1/expense/{rental['id']}", headers=auth("bob"))
    assert res.status_code == 403

    payments = _payments(await client.get(f"/api/v1/rooms/{ROOM}/rental/payments", headers=auth("alice")))
    assert set(payments) == {"alice", "bob", "carol"}
    assert payments["carol"]["paid"] is True

    res = await client.delete(f"/api/v1/expense/{rental['id']}", headers=auth("alice"))
    assert res.status_code == 200

    payments = await client.get(f"/api/v1/rooms/{ROOM}/rental/payments", headers=auth("alice"))
    assert payments.json() == []


async def test_unpinned_cottage_expense_follows_ordinary_rules(client, room, auth):
    res = await client.put("/api/v1/expense/", json={
        "room_id": ROOM,
        "title": "Cottage deposit",
        "amount_cents": 0,
        "paid_by_user_id": "bob",
        "member_ids": ["bob"],
        "is_cottage_rental": True,
    }, headers=auth("bob"))
    assert res.status_code == 400

    res = await client.put("/api/v1/expense/", json={
        "room_id": ROOM,
        "title": "Cottage deposit",
        "amount_cents": 5000,
        "paid_by_user_id": "bob",
        "member_ids": ["bob"],
        "is_cottage_rental": True,
    }, headers=auth("bob"))
    assert res.status_code == 400
    assert res.json()["detail"] == "Receipt is required except for the cottage rental"


async def test_concurrent_ensure_returns_the_winner(db, sessionmaker, room, monkeypatch):
    real_find = rental_services.find_pinned_rental
    raced = []

    async def find_after_other_insert(session, room_id):
        if raced:
            return await real_find(session, room_id)

        # another member's request lands between our lookup and our insert
        raced.append(None)
        async with sessionmaker() as other:
            winner = await rental_services.ensure_pinned_rental(other, room_id, "carol")
            raced.append(winner.id)
        return None

    monkeypatch.setattr(rental_services, "find_pinned_rental", find_after_other_insert)

    expense = await rental_services.ensure_pinned_rental(db, ROOM, "alice")

    assert expense.id == raced[1]
    assert expense.created_by_user_id == "carol"

    count = await db.execute(
        select(func.count()).select_from(Expense).where(Expense.room_id == ROOM, Expense.pinned.is_(True))
    )
    assert count.scalar_one() == 1
