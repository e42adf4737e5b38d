import uuid
import pytest
from conftest import auth


@pytest.mark.asyncio
async def test_create_forces_initial_state(client, make_user):
    creator = await make_user("creator")
    r = await client.post("/contest", headers=auth(creator), json={
        "name": "Short Story Cup", "type": "article-writing", "price": 3,
        "status": "approved", "participantsCount": 42, "creatorEmail": "someone@else.io",
    })
    assert r.status_code == 200, r.text
    ch = (await client.get(f"/contest/{r.json()['insertedId']}")).json()
    assert ch["status"] == "pending"
    assert ch["participantsCount"] == 0
    assert ch["creatorEmail"] == creator
    assert ch["createdAt"]


@pytest.mark.asyncio
async def test_lifecycle_pending_to_approved_listing(client, make_user, make_contest):
    contest_id = await make_contest(approve=False, type="business-idea")
    listed = (await client.get("/contests")).json()
    assert contest_id not in {c["id"] for c in listed}

    admin = await make_user("admin")
    r = await client.patch(f"/contest/{contest_id}", headers=auth(admin), json={"status": "approved"})
    assert r.status_code == 200
    assert r.json()["message"] == "Contest updated successfully"

    listed = (await client.get("/contests")).json()
    assert contest_id in {c["id"] for c in listed}
    by_label = (await client.get("/contests", params={"type": "Business Ideas"})).json()
    assert [c["id"] for c in by_label] == [contest_id]
    other = (await client.get("/contests", params={"type": "Gaming Reviews"})).json()
    assert other == []
    everything = (await client.get("/contests", params={"type": "all"})).json()
    assert contest_id in {c["id"] for c in everything}


@pytest.mark.asyncio
async def test_approved_listing_is_newest_first(client, make_contest):
    first = await make_contest(name="First One")
    second = await make_contest(name="Second One")
    ids = [c["id"] for c in (await client.get("/contests")).json()]
    assert ids.index(second) < ids.index(first)


@pytest.mark.asyncio
async def test_creator_listing(client, make_user, make_contest):
    creator = await make_user("creator")
    a = await make_contest(creator=creator, approve=False)
    b = await make_contest(creator=creator)
    await make_contest()
    rows = (await client.get(f"/contest/creator/{creator}")).json()
    assert [c["id"] for c in rows] == [b, a]
    assert len((await client.get("/contest")).json()) == 3


@pytest.mark.asyncio
async def test_popular_orders_by_participants(client, make_contest):
    quiet = await make_contest(name="Quiet Contest")
    busy = await make_contest(name="Busy Contest")
    pending = await make_contest(name="Pending Contest", approve=False)
    for contest_id, n in ((busy, 3), (quiet, 1), (pending, 5)):
        for i in range(n):
            r = await client.post("/participations", json={"contestId": contest_id, "userEmail": f"p{i}@contesthub.io"})
            assert r.status_code == 200

    rows = (await client.get("/contests/popular")).json()
    assert [c["id"] for c in rows] == [busy, quiet]
    assert rows[0]["participantsCount"] == 3


@pytest.mark.asyncio
async def test_fetch_by_id_errors(client):
    r = await client.get("/contest/not-a-valid-id")
    assert r.status_code == 400
    r = await client.get(f"/contest/{uuid.uuid4()}")
    assert r.status_code == 404
    assert r.json()["message"] == "Contest not found"


@pytest.mark.asyncio
async def test_status_change_is_admin_only(client, make_user, make_contest):
    creator = await make_user("creator")
    contest_id = await make_contest(creator=creator, approve=False)

    r = await client.patch(f"/contest/{contest_id}", headers=auth(creator), json={"status": "approved"})
    assert r.status_code == 403

    # owner may still edit content
    r = await client.patch(f"/contest/{contest_id}", headers=auth(creator), json={"description": "Bring colour"})
    assert r.status_code == 200
    assert (await client.get(f"/contest/{contest_id}")).json()["description"] == "Bring colour"

    stranger = await make_user("creator")
    r = await client.patch(f"/contest/{contest_id}", headers=auth(stranger), json={"description": "Mine now"})
    assert r.status_code == 403

    admin = await make_user("admin")
    r = await client.patch(f"/contest/{contest_id}", headers=auth(admin), json={"status": "rejected"})
    assert r.status_code == 200
    assert (await client.get(f"/contest/{contest_id}")).json()["status"] == "rejected"


@pytest.mark.asyncio
async def test_patch_cannot_complete_or_touch_counters(client, make_user, make_contest):
    contest_id = await make_contest()
    admin = await make_user("admin")
    r = await client.patch(f"/contest/{contest_id}", headers=auth(admin), json={"status": "completed"})
    assert r.status_code == 400
    r = await client.patch(f"/contest/{contest_id}", headers=auth(admin), json={"participantsCount": 99})
    assert r.status_code == 400  # nothing patchable in the body
    assert (await client.get(f"/contest/{contest_id}")).json()["participantsCount"] == 0


@pytest.mark.asyncio
async def test_patch_unknown_contest(client, make_user):
    admin = await make_user("admin")
    r = await client.patch(f"/contest/{uuid.uuid4()}", headers=auth(admin), json={"status": "approved"})
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_delete_is_admin_only(client, make_user, make_contest):
    creator = await make_user("creator")
    contest_id = await make_contest(creator=creator)
    r = await client.delete(f"/contest/{contest_id}", headers=auth(creator))
    assert r.status_code == 403

    admin = await make_user("admin")
    r = await client.delete(f"/contest/{contest_id}", headers=auth(admin))
    assert r.status_code == 200
    assert (await client.get(f"/contest/{contest_id}")).status_code == 404
    r = await client.delete(f"/contest/{contest_id}", headers=auth(admin))
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_declare_winner_completes_once(client, make_user, make_contest):
    creator = await make_user("creator")
    contest_id = await make_contest(creator=creator)
    winner = await make_user()
    runner_up = await make_user()
    for email in (winner, runner_up):
        await client.post("/participations", json={"contestId": contest_id, "userEmail": email})
        await client.post("/submissions", json={"contestId": contest_id, "userEmail": email, "taskLink": "https://x.io/w"})

    r = await client.patch(
        f"/contest/declare-winner/{contest_id}", headers=auth(creator),
        json={"winnerEmail": winner, "winnerName": "Nadia", "winnerPhoto": "https://img/n.png"},
    )
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Winner declared"}

    ch = (await client.get(f"/contest/{contest_id}")).json()
    assert ch["status"] == "completed"
    assert ch["winnerEmail"] == winner
    assert ch["winDate"]
    assert (await client.get(f"/users/{winner}")).json()["winCount"] == 1
    assert [c["id"] for c in (await client.get(f"/contest/won/{winner}")).json()] == [contest_id]
    subs = {s["userEmail"]: s["status"] for s in (await client.get(f"/creator/submissions/{contest_id}")).json()}
    assert subs == {winner: "winner", runner_up: "pending"}

    # winner fields are write-once
    r = await client.patch(
        f"/contest/declare-winner/{contest_id}", headers=auth(creator), json={"winnerEmail": runner_up},
    )
    assert r.status_code == 200
    assert r.json() == {"success": False, "message": "Winner already declared"}
    assert (await client.get(f"/contest/{contest_id}")).json()["winnerEmail"] == winner
    assert (await client.get(f"/users/{runner_up}")).json()["winCount"] == 0


@pytest.mark.asyncio
async def test_declare_winner_access(client, make_user, make_contest):
    contest_id = await make_contest()
    winner = await make_user()

    r = await client.patch(f"/contest/declare-winner/{contest_id}", json={"winnerEmail": winner})
    assert r.status_code == 401

    plain = await make_user()
    r = await client.patch(f"/contest/declare-winner/{contest_id}", headers=auth(plain), json={"winnerEmail": winner})
    assert r.status_code == 403

    other_creator = await make_user("creator")
    r = await client.patch(f"/contest/declare-winner/{contest_id}", headers=auth(other_creator), json={"winnerEmail": winner})
    assert r.status_code == 403

    admin = await make_user("admin")
    r = await client.patch(f"/contest/declare-winner/{contest_id}", headers=auth(admin), json={"winnerEmail": winner})
    assert r.json()["success"] is True


@pytest.mark.asyncio
async def test_admin_second_declaration_is_refused_cleanly(client, make_user, make_contest):
    contest_id = await make_contest()
    admin = await make_user("admin")
    first, second = await make_user(), await make_user()

    r = await client.patch(f"/contest/declare-winner/{contest_id}", headers=auth(admin), json={"winnerEmail": first})
    assert r.json() == {"success": True, "message": "Winner declared"}

    r = await client.patch(f"/contest/declare-winner/{contest_id}", headers=auth(admin), json={"winnerEmail": second})
    assert r.status_code == 200
    assert r.json() == {"success": False, "message": "Winner already declared"}
    assert (await client.get(f"/contest/{contest_id}")).json()["winnerEmail"] == first
