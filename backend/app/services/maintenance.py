from __future__ import annotations
from sqlalchemy import select, delete, func, inspect, text
from sqlalchemy.engine import Connection
import structlog

from app.models.payment import PaymentRecord

log = structlog.get_logger()

TRANSACTION_INDEX = "uq_payment_records_transaction_id"


def collapse_duplicate_transactions(connection: Connection) -> int:
    """Keep the lowest id per transaction_id, delete the rest. Returns rows removed."""
    groups = connection.execute(
        select(PaymentRecord.transaction_id, func.min(PaymentRecord.id), func.count())
        .group_by(PaymentRecord.transaction_id)
        .having(func.count() > 1)
    ).all()
    removed = 0
    for transaction_id, keep_id, count in groups:
        res = connection.execute(
            delete(PaymentRecord).where(
                PaymentRecord.transaction_id == transaction_id,
                PaymentRecord.id != keep_id,
            )
        )
        removed += res.rowcount
        log.warning("payment_duplicates_collapsed", transaction_id=transaction_id, kept_id=keep_id, removed=res.rowcount, group_size=count)
    return removed


def install_transaction_index(connection: Connection) -> None:
    connection.execute(text(
        f"CREATE UNIQUE INDEX IF NOT EXISTS {TRANSACTION_INDEX} ON payment_records (transaction_id)"
    ))


def repair_payment_records(connection: Connection) -> int:
    """
    One-time data repair run before reconciliation traffic: dedup, then constrain.
    Safe to re-run; once the index exists there is nothing left to collapse.
    """
    removed = collapse_duplicate_transactions(connection)
    install_transaction_index(connection)
    log.info("payment_records_repaired", removed=removed, index=TRANSACTION_INDEX)
    return removed


def startup_repair(connection: Connection) -> int | None:
    """Repair at boot; skipped (None) on a database that has not been migrated yet."""
    if not inspect(connection).has_table(PaymentRecord.__tablename__):
        log.warning("payment_repair_skipped", reason="payment_records table missing, run `alembic upgrade head`")
        return None
    return repair_payment_records(connection)
