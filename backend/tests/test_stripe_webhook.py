import json
import pytest
from sqlalchemy import select, func
from app.models.payment import PaymentRecord


def _event(contest_id, payment_status="paid", pi="pi_hook_1", type_="checkout.session.completed"):
    return {
        "type": type_,
        "data": {"object": {
            "id": "cs_hook_1",
            "payment_status": payment_status,
            "amount_total": 1500,
            "currency": "usd",
            "payment_intent": pi,
            "customer_email": None,
            "customer_details": {"email": "hook@contesthub.io"},
            "metadata": {"contestId": contest_id, "contestName": "Hooked"},
            "created": 1760000000,
        }},
    }


async def _post(client, event, signature="valid-signature"):
    return await client.post("/stripe/webhook", content=json.dumps(event), headers={"Stripe-Signature": signature})


@pytest.mark.asyncio
async def test_webhook_records_paid_session_once(client, sessionmaker, make_contest):
    contest_id = await make_contest()

    r = await _post(client, _event(contest_id))
    assert r.status_code == 200
    assert r.json() == {"ok": True, "recorded": True}

    # browser return and webhook may both arrive; second one is a no-op
    r = await _post(client, _event(contest_id))
    assert r.json() == {"ok": True, "recorded": False}

    async with sessionmaker() as session:
        recs = (await session.execute(select(PaymentRecord))).scalars().all()
    assert len(recs) == 1
    assert recs[0].user_email == "hook@contesthub.io"
    assert recs[0].amount == 15
    assert (await client.get(f"/contest/{contest_id}")).json()["participantsCount"] == 1


@pytest.mark.asyncio
async def test_webhook_rejects_bad_signature(client, make_contest):
    contest_id = await make_contest()
    r = await _post(client, _event(contest_id), signature="forged")
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_webhook_ignores_unpaid_and_other_events(client, sessionmaker, make_contest):
    contest_id = await make_contest()
    r = await _post(client, _event(contest_id, payment_status="unpaid"))
    assert r.json() == {"ok": True, "recorded": False}

    r = await _post(client, _event(contest_id, type_="customer.created"))
    assert r.json() == {"ignored": "customer.created"}

    async with sessionmaker() as session:
        assert await session.scalar(select(func.count()).select_from(PaymentRecord)) == 0
