"""Adapter: SQLite-backed InventoryStore implementing InventoryStorePort."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Iterator

from ..domain.errors import ConflictError
from ..domain.filters import AdFilter, FilterOp, QueryFilter, SlotFilter
from ..domain.inventory import (
    Ad,
    AdStatus,
    Creative,
    HousePromotion,
    InventorySlot,
    OperatorTask,
    Order,
    OrderLine,
    SlotKey,
    SlotState,
)

BUSY_TIMEOUT_SECONDS = 30.0

# status_reason of an ad rejected by the sweep: prefix + the status it had.
ABANDONED_REASON_PREFIX = "abandoned:"

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS inventory_slots (
        neighborhood_id TEXT NOT NULL,
        date TEXT NOT NULL,
        placement_type TEXT NOT NULL,
        state TEXT NOT NULL CHECK (state IN ('booked', 'blocked')),
        order_id TEXT,
        note TEXT,
        updated_at TEXT NOT NULL,
        PRIMARY KEY (neighborhood_id, date, placement_type)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_inventory_slots_order ON inventory_slots (order_id)",
    """
    CREATE TABLE IF NOT EXISTS orders (
        id TEXT PRIMARY KEY,
        status TEXT NOT NULL,
        total_cents INTEGER NOT NULL,
        currency TEXT NOT NULL,
        contact_email TEXT NOT NULL,
        session_id TEXT UNIQUE,
        created_at TEXT NOT NULL,
        paid_at TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_orders_status_created ON orders (status, created_at)",
    """
    CREATE TABLE IF NOT EXISTS order_lines (
        id TEXT PRIMARY KEY,
        order_id TEXT NOT NULL REFERENCES orders (id),
        neighborhood_id TEXT NOT NULL,
        date TEXT NOT NULL,
        placement_type TEXT NOT NULL,
        price_cents INTEGER NOT NULL,
        activation_error TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_order_lines_order ON order_lines (order_id)",
    """
    CREATE TABLE IF NOT EXISTS ads (
        id TEXT PRIMARY KEY,
        order_line_id TEXT,
        status TEXT NOT NULL,
        scope TEXT NOT NULL,
        neighborhood_id TEXT,
        placement_type TEXT NOT NULL,
        start_date TEXT,
        end_date TEXT,
        paid INTEGER NOT NULL DEFAULT 0,
        headline TEXT NOT NULL DEFAULT '',
        body TEXT NOT NULL DEFAULT '',
        image_url TEXT NOT NULL DEFAULT '',
        click_url TEXT NOT NULL DEFAULT '',
        sponsor_label TEXT NOT NULL DEFAULT '',
        status_reason TEXT,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_ads_status ON ads (status, start_date)",
    "CREATE INDEX IF NOT EXISTS idx_ads_line ON ads (order_line_id)",
    """
    CREATE TABLE IF NOT EXISTS house_promotions (
        id TEXT PRIMARY KEY,
        headline TEXT NOT NULL,
        body TEXT NOT NULL DEFAULT '',
        click_url TEXT NOT NULL,
        image_url TEXT NOT NULL DEFAULT '',
        scope TEXT NOT NULL,
        neighborhood_id TEXT,
        city TEXT,
        weight INTEGER NOT NULL DEFAULT 1,
        active INTEGER NOT NULL DEFAULT 1,
        audience TEXT NOT NULL DEFAULT 'all'
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS operator_queue (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        kind TEXT NOT NULL,
        order_id TEXT,
        session_id TEXT,
        detail TEXT NOT NULL DEFAULT '',
        created_at TEXT NOT NULL,
        resolved_at TEXT
    )
    """,
)


def _ts(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _sql_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, datetime):
        return _ts(value)
    if isinstance(value, date):
        return value.isoformat()
    return value


def _key_params(key: SlotKey) -> tuple[str, str, str]:
    return (key.neighborhood_id, key.date.isoformat(), key.placement_type.value)


class SqliteInventoryStore:
    """Concrete InventoryStorePort backed by a single SQLite file.

    Writes that must be atomic run inside ``BEGIN IMMEDIATE`` so concurrent
    checkouts serialize on the database write lock.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._ensure_parent_dir()
        self._init_schema()

    def _ensure_parent_dir(self) -> None:
        path = Path(self._db_path)
        if path.parent.exists():
            return
        path.parent.mkdir(parents=True, exist_ok=True)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, timeout=BUSY_TIMEOUT_SECONDS, isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    def _init_schema(self) -> None:
        conn = self._connect()
        try:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA synchronous=NORMAL")
            for statement in _SCHEMA:
                conn.execute(statement)
        finally:
            conn.close()

    @contextmanager
    def _read(self) -> Iterator[sqlite3.Connection]:
        conn = self._connect()
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        conn = self._connect()
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------

    def query_slots(self, slot_filter: SlotFilter) -> list[InventorySlot]:
        where, params = self._translate_filter(slot_filter)
        query = (
            "SELECT neighborhood_id, date, placement_type, state, order_id, note "
            "FROM inventory_slots WHERE " + where + " ORDER BY date, neighborhood_id"
        )
        with self._read() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_slot(row) for row in rows]

    def block_slot(self, key: SlotKey, note: str | None = None) -> InventorySlot:
        now = _ts(datetime.now(timezone.utc))
        with self._transaction() as conn:
            row = self._slot_row(conn, key)
            if row is not None and row["state"] == SlotState.booked.value:
                raise ConflictError(
                    f"{key.neighborhood_id} is already booked on {key.date.isoformat()}",
                    item=key,
                    reason=SlotState.booked.value,
                )
            if row is None:
                conn.execute(
                    "INSERT INTO inventory_slots "
                    "(neighborhood_id, date, placement_type, state, order_id, note, updated_at) "
                    "VALUES (?, ?, ?, 'blocked', NULL, ?, ?)",
                    (*_key_params(key), note, now),
                )
            else:
                conn.execute(
                    "UPDATE inventory_slots SET note = ?, updated_at = ? "
                    "WHERE neighborhood_id = ? AND date = ? AND placement_type = ?",
                    (note, now, *_key_params(key)),
                )
        return InventorySlot(
            neighborhood_id=key.neighborhood_id,
            date=key.date,
            placement_type=key.placement_type,
            state=SlotState.blocked,
            note=note,
        )

    def unblock_slot(self, key: SlotKey) -> bool:
        with self._transaction() as conn:
            cur = conn.execute(
                "DELETE FROM inventory_slots "
                "WHERE neighborhood_id = ? AND date = ? AND placement_type = ? AND state = 'blocked'",
                _key_params(key),
            )
            return cur.rowcount == 1

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def reserve_order(self, order: Order, ads: list[Ad], guard_keys: list[SlotKey]) -> None:
        """Book every line and insert the pending order, or nothing at all."""
        now = _ts(order.created_at)
        with self._transaction() as conn:
            self._book_lines(conn, order.id, order.lines, guard_keys, now)
            conn.execute(
                "INSERT INTO orders (id, status, total_cents, currency, contact_email, session_id, created_at, paid_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    order.id,
                    order.status.value,
                    order.total_cents,
                    order.currency,
                    order.contact_email,
                    order.session_id,
                    now,
                    None,
                ),
            )
            conn.executemany(
                "INSERT INTO order_lines (id, order_id, neighborhood_id, date, placement_type, price_cents, activation_error) "
                "VALUES (?, ?, ?, ?, ?, ?, NULL)",
                [
                    (
                        line.id,
                        order.id,
                        line.neighborhood_id,
                        line.date.isoformat(),
                        line.placement_type.value,
                        line.unit_price_cents,
                    )
                    for line in order.lines
                ],
            )
            for ad in ads:
                self._upsert_ad(conn, ad)

    def _book_lines(
        self,
        conn: sqlite3.Connection,
        order_id: str,
        lines: list[OrderLine],
        guard_keys: list[SlotKey],
        now: str,
    ) -> None:
        # Deterministic key order across carts.
        work: list[tuple[tuple, SlotKey, bool]] = [(line.key.sort_key(), line.key, True) for line in lines]
        work += [(key.sort_key(), key, False) for key in guard_keys]
        work.sort(key=lambda entry: (entry[0], not entry[2]))
        for _, key, is_line in work:
            if not is_line:
                row = self._slot_row(conn, key)
                if row is not None:
                    raise ConflictError(
                        f"{key.neighborhood_id} is {row['state']} on {key.date.isoformat()}",
                        item=key,
                        reason=row["state"],
                    )
                continue
            if key.is_takeover:
                # A takeover needs the whole date free.
                row = conn.execute(
                    "SELECT neighborhood_id, state FROM inventory_slots "
                    "WHERE date = ? AND placement_type = ? AND neighborhood_id != ? "
                    "ORDER BY neighborhood_id LIMIT 1",
                    (key.date.isoformat(), key.placement_type.value, key.neighborhood_id),
                ).fetchone()
                if row is not None:
                    raise ConflictError(
                        f"{row['neighborhood_id']} is {row['state']} on {key.date.isoformat()}",
                        item=key,
                        reason=row["state"],
                    )
            try:
                conn.execute(
                    "INSERT INTO inventory_slots "
                    "(neighborhood_id, date, placement_type, state, order_id, note, updated_at) "
                    "VALUES (?, ?, ?, 'booked', ?, NULL, ?)",
                    (*_key_params(key), order_id, now),
                )
            except sqlite3.IntegrityError:
                row = self._slot_row(conn, key)
                state = row["state"] if row is not None else SlotState.booked.value
                raise ConflictError(
                    f"{key.neighborhood_id} is no longer available on {key.date.isoformat()} ({state})",
                    item=key,
                    reason=state,
                ) from None

    def attach_session(self, order_id: str, session_id: str) -> None:
        with self._transaction() as conn:
            conn.execute("UPDATE orders SET session_id = ? WHERE id = ?", (session_id, order_id))

    def release_order(self, order_id: str) -> int:
        with self._transaction() as conn:
            return self._abandon(conn, order_id)

    def _abandon(self, conn: sqlite3.Connection, order_id: str) -> int:
        cur = conn.execute(
            "UPDATE orders SET status = 'abandoned' WHERE id = ? AND status = 'pending'",
            (order_id,),
        )
        if cur.rowcount != 1:
            return 0
        released = conn.execute(
            "DELETE FROM inventory_slots WHERE order_id = ? AND state = 'booked'",
            (order_id,),
        ).rowcount
        # The reason keeps the prior status so a late payment can restore it.
        conn.execute(
            "UPDATE ads SET status = 'rejected', status_reason = ? || status "
            "WHERE order_line_id IN (SELECT id FROM order_lines WHERE order_id = ?) "
            "AND status IN ('pending_review', 'approved')",
            (ABANDONED_REASON_PREFIX, order_id),
        )
        return released

    def get_order(self, order_id: str) -> Order | None:
        with self._read() as conn:
            row = conn.execute("SELECT * FROM orders WHERE id = ?", (order_id,)).fetchone()
            if row is None:
                return None
            return self._row_to_order(conn, row)

    def get_order_by_session(self, session_id: str) -> Order | None:
        with self._read() as conn:
            row = conn.execute("SELECT * FROM orders WHERE session_id = ?", (session_id,)).fetchone()
            if row is None:
                return None
            return self._row_to_order(conn, row)

    def mark_order_paid(self, order_id: str, paid_at: datetime) -> bool:
        with self._transaction() as conn:
            cur = conn.execute(
                "UPDATE orders SET status = 'paid', paid_at = ? WHERE id = ? AND status = 'pending'",
                (_ts(paid_at), order_id),
            )
            return cur.rowcount == 1

    def revive_order(self, order_id: str, paid_at: datetime, guard_keys: list[SlotKey]) -> bool:
        """Re-book an abandoned order whose payment arrived late."""
        conn = self._connect()
        try:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute("SELECT * FROM orders WHERE id = ?", (order_id,)).fetchone()
            if row is None or row["status"] != "abandoned":
                conn.execute("ROLLBACK")
                return False
            order = self._row_to_order(conn, row)
            try:
                self._book_lines(conn, order_id, order.lines, guard_keys, _ts(paid_at))
            except ConflictError:
                conn.execute("ROLLBACK")
                return False
            conn.execute(
                "UPDATE orders SET status = 'paid', paid_at = ? WHERE id = ?",
                (_ts(paid_at), order_id),
            )
            conn.execute(
                "UPDATE ads SET status = substr(status_reason, ?), status_reason = NULL "
                "WHERE order_line_id IN (SELECT id FROM order_lines WHERE order_id = ?) "
                "AND status = 'rejected' AND status_reason IN (?, ?)",
                (
                    len(ABANDONED_REASON_PREFIX) + 1,
                    order_id,
                    ABANDONED_REASON_PREFIX + AdStatus.pending_review.value,
                    ABANDONED_REASON_PREFIX + AdStatus.approved.value,
                ),
            )
            conn.execute("COMMIT")
            return True
        except BaseException:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()

    def expire_pending_orders(self, cutoff: datetime) -> list[tuple[str, int]]:
        expired: list[tuple[str, int]] = []
        with self._transaction() as conn:
            rows = conn.execute(
                "SELECT id FROM orders WHERE status = 'pending' AND created_at < ? ORDER BY created_at",
                (_ts(cutoff),),
            ).fetchall()
            for row in rows:
                expired.append((row["id"], self._abandon(conn, row["id"])))
        return expired

    def flag_line(self, line_id: str, error: str) -> None:
        with self._transaction() as conn:
            conn.execute("UPDATE order_lines SET activation_error = ? WHERE id = ?", (error, line_id))

    # ------------------------------------------------------------------
    # Ads
    # ------------------------------------------------------------------

    def get_ad(self, ad_id: str) -> Ad | None:
        with self._read() as conn:
            row = conn.execute("SELECT * FROM ads WHERE id = ?", (ad_id,)).fetchone()
        return self._row_to_ad(row) if row is not None else None

    def get_ad_for_line(self, line_id: str) -> Ad | None:
        with self._read() as conn:
            row = conn.execute("SELECT * FROM ads WHERE order_line_id = ?", (line_id,)).fetchone()
        return self._row_to_ad(row) if row is not None else None

    def query_ads(self, ad_filter: AdFilter) -> list[Ad]:
        where, params = self._translate_filter(ad_filter)
        with self._read() as conn:
            rows = conn.execute(
                "SELECT * FROM ads WHERE " + where + " ORDER BY created_at, id", params
            ).fetchall()
        return [self._row_to_ad(row) for row in rows]

    def save_ad(self, ad: Ad) -> None:
        with self._transaction() as conn:
            self._upsert_ad(conn, ad)

    @staticmethod
    def _upsert_ad(conn: sqlite3.Connection, ad: Ad) -> None:
        conn.execute(
            """
            INSERT INTO ads (
                id, order_line_id, status, scope, neighborhood_id, placement_type,
                start_date, end_date, paid, headline, body, image_url, click_url,
                sponsor_label, status_reason, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (id) DO UPDATE SET
                status = excluded.status,
                scope = excluded.scope,
                neighborhood_id = excluded.neighborhood_id,
                placement_type = excluded.placement_type,
                start_date = excluded.start_date,
                end_date = excluded.end_date,
                paid = excluded.paid,
                headline = excluded.headline,
                body = excluded.body,
                image_url = excluded.image_url,
                click_url = excluded.click_url,
                sponsor_label = excluded.sponsor_label,
                status_reason = excluded.status_reason
            """,
            (
                ad.id,
                ad.order_line_id,
                ad.status.value,
                ad.scope.value,
                ad.neighborhood_id,
                ad.placement_type.value,
                ad.start_date.isoformat() if ad.start_date else None,
                ad.end_date.isoformat() if ad.end_date else None,
                int(ad.paid),
                ad.creative.headline,
                ad.creative.body,
                ad.creative.image_url,
                ad.creative.click_url,
                ad.creative.sponsor_label,
                ad.status_reason,
                _ts(ad.created_at),
            ),
        )

    # ------------------------------------------------------------------
    # House promotions
    # ------------------------------------------------------------------

    def list_house_promotions(self, active_only: bool = True) -> list[HousePromotion]:
        query = "SELECT * FROM house_promotions"
        if active_only:
            query += " WHERE active = 1"
        with self._read() as conn:
            rows = conn.execute(query + " ORDER BY id").fetchall()
        return [
            HousePromotion(
                id=row["id"],
                headline=row["headline"],
                body=row["body"],
                click_url=row["click_url"],
                image_url=row["image_url"],
                scope=row["scope"],
                neighborhood_id=row["neighborhood_id"],
                city=row["city"],
                weight=row["weight"],
                active=bool(row["active"]),
                audience=row["audience"],
            )
            for row in rows
        ]

    def upsert_house_promotion(self, promotion: HousePromotion) -> None:
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO house_promotions (
                    id, headline, body, click_url, image_url, scope,
                    neighborhood_id, city, weight, active, audience
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    promotion.id,
                    promotion.headline,
                    promotion.body,
                    promotion.click_url,
                    promotion.image_url,
                    promotion.scope,
                    promotion.neighborhood_id,
                    promotion.city,
                    promotion.weight,
                    int(promotion.active),
                    promotion.audience,
                ),
            )

    # ------------------------------------------------------------------
    # Operator queue
    # ------------------------------------------------------------------

    def enqueue_task(self, task: OperatorTask) -> OperatorTask:
        with self._transaction() as conn:
            cur = conn.execute(
                "INSERT INTO operator_queue (kind, order_id, session_id, detail, created_at, resolved_at) "
                "VALUES (?, ?, ?, ?, ?, NULL)",
                (task.kind, task.order_id, task.session_id, task.detail, _ts(task.created_at)),
            )
            task_id = cur.lastrowid
        return task.model_copy(update={"id": task_id})

    def list_tasks(self, open_only: bool = True) -> list[OperatorTask]:
        query = "SELECT * FROM operator_queue"
        if open_only:
            query += " WHERE resolved_at IS NULL"
        with self._read() as conn:
            rows = conn.execute(query + " ORDER BY id").fetchall()
        return [
            OperatorTask(
                id=row["id"],
                kind=row["kind"],
                order_id=row["order_id"],
                session_id=row["session_id"],
                detail=row["detail"],
                created_at=datetime.fromisoformat(row["created_at"]),
                resolved_at=datetime.fromisoformat(row["resolved_at"]) if row["resolved_at"] else None,
            )
            for row in rows
        ]

    def resolve_task(self, task_id: int, resolved_at: datetime) -> bool:
        with self._transaction() as conn:
            cur = conn.execute(
                "UPDATE operator_queue SET resolved_at = ? WHERE id = ? AND resolved_at IS NULL",
                (_ts(resolved_at), task_id),
            )
            return cur.rowcount == 1

    # ------------------------------------------------------------------
    # Filter translation: domain QueryFilter -> SQL WHERE
    # ------------------------------------------------------------------

    @staticmethod
    def _translate_filter(query_filter: QueryFilter) -> tuple[str, list[Any]]:
        clauses: list[str] = []
        params: list[Any] = []
        for f in query_filter.must:
            # Field names are checked against the filter's allowlist on construction.
            column = f.field
            if f.op == FilterOp.equals:
                clauses.append(f"{column} = ?")
                params.append(_sql_value(f.value))
            elif f.op in (FilterOp.any_of, FilterOp.not_in):
                values = [_sql_value(v) for v in f.value]
                if not values:
                    clauses.append("0" if f.op == FilterOp.any_of else "1")
                    continue
                placeholders = ", ".join("?" for _ in values)
                keyword = "IN" if f.op == FilterOp.any_of else "NOT IN"
                clauses.append(f"{column} {keyword} ({placeholders})")
                params.extend(values)
            elif f.op == FilterOp.gte:
                clauses.append(f"{column} >= ?")
                params.append(_sql_value(f.value))
            elif f.op == FilterOp.lte:
                clauses.append(f"{column} <= ?")
                params.append(_sql_value(f.value))
            else:
                raise ValueError(f"Unsupported filter op: {f.op}")
        return (" AND ".join(clauses) if clauses else "1=1"), params

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _slot_row(conn: sqlite3.Connection, key: SlotKey) -> sqlite3.Row | None:
        return conn.execute(
            "SELECT state, order_id FROM inventory_slots "
            "WHERE neighborhood_id = ? AND date = ? AND placement_type = ?",
            _key_params(key),
        ).fetchone()

    @staticmethod
    def _row_to_slot(row: sqlite3.Row) -> InventorySlot:
        return InventorySlot(
            neighborhood_id=row["neighborhood_id"],
            date=date.fromisoformat(row["date"]),
            placement_type=row["placement_type"],
            state=row["state"],
            order_id=row["order_id"],
            note=row["note"],
        )

    @staticmethod
    def _row_to_order(conn: sqlite3.Connection, row: sqlite3.Row) -> Order:
        line_rows = conn.execute(
            "SELECT * FROM order_lines WHERE order_id = ? ORDER BY neighborhood_id, date, placement_type",
            (row["id"],),
        ).fetchall()
        return Order(
            id=row["id"],
            status=row["status"],
            total_cents=row["total_cents"],
            currency=row["currency"],
            contact_email=row["contact_email"],
            session_id=row["session_id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            paid_at=datetime.fromisoformat(row["paid_at"]) if row["paid_at"] else None,
            lines=[
                OrderLine(
                    id=line["id"],
                    order_id=line["order_id"],
                    neighborhood_id=line["neighborhood_id"],
                    date=date.fromisoformat(line["date"]),
                    placement_type=line["placement_type"],
                    unit_price_cents=line["price_cents"],
                    activation_error=line["activation_error"],
                )
                for line in line_rows
            ],
        )

    @staticmethod
    def _row_to_ad(row: sqlite3.Row) -> Ad:
        return Ad(
            id=row["id"],
            order_line_id=row["order_line_id"],
            status=row["status"],
            scope=row["scope"],
            neighborhood_id=row["neighborhood_id"],
            placement_type=row["placement_type"],
            start_date=date.fromisoformat(row["start_date"]) if row["start_date"] else None,
            end_date=date.fromisoformat(row["end_date"]) if row["end_date"] else None,
            paid=bool(row["paid"]),
            creative=Creative(
                headline=row["headline"],
                body=row["body"],
                image_url=row["image_url"],
                click_url=row["click_url"],
                sponsor_label=row["sponsor_label"],
            ),
            status_reason=row["status_reason"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
