"""
Sale storage
Active and closed partitions in DuckDB

Every move between partitions runs in one transaction that deletes the
row from the source with RETURNING and inserts it into the destination,
so a sale is never visible in both partitions or in neither. A second
caller racing on the same ID finds nothing to delete and gets
SaleNotFoundError.
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

import duckdb

from ..core.database import DatabaseManager, db_manager, rows_to_dicts
from ..core.exceptions import SaleNotFoundError
from ..models.sale import (
    ClosedFields,
    DraftLineItem,
    PaymentBreakdown,
    PersistedSale,
    SaleStatus,
)

ACTIVE = "active"
CLOSED = "closed"

_ACTIVE_COLUMNS = "id, items, total_cents, delivery_fee_cents, created_at"
_CLOSED_COLUMNS = (
    "id, items, total_cents, delivery_fee_cents, payment_method, "
    "payment_breakdown, tip_cents, created_at, closed_at"
)


def _dump_items(items: List[DraftLineItem]) -> str:
    return json.dumps([line.model_dump() for line in items], ensure_ascii=False)


def _load_items(raw: Any) -> List[DraftLineItem]:
    data = json.loads(raw) if isinstance(raw, str) else (raw or [])
    return [DraftLineItem.model_validate(entry) for entry in data]


def _row_to_active(row: Dict[str, Any]) -> PersistedSale:
    return PersistedSale(
        id=row["id"],
        items=_load_items(row["items"]),
        total_cents=row["total_cents"],
        delivery_fee_cents=row["delivery_fee_cents"] or 0,
        status=SaleStatus.ACTIVE,
        created_at=row["created_at"],
    )


def _row_to_closed(row: Dict[str, Any]) -> PersistedSale:
    breakdown = None
    if row.get("payment_breakdown"):
        breakdown = PaymentBreakdown.model_validate(json.loads(row["payment_breakdown"]))
    return PersistedSale(
        id=row["id"],
        items=_load_items(row["items"]),
        total_cents=row["total_cents"],
        delivery_fee_cents=row["delivery_fee_cents"] or 0,
        status=SaleStatus.CLOSED,
        created_at=row["created_at"],
        closed_at=row["closed_at"],
        payment_method=row["payment_method"],
        payment_breakdown=breakdown,
        tip_cents=row["tip_cents"] or 0,
    )


class SaleRepository:
    """Storage operations for persisted sales"""

    def __init__(self, db: DatabaseManager = None):
        self.db = db or db_manager

    def list_active(self) -> List[PersistedSale]:
        rows = self.db.query_dicts(
            f"SELECT {_ACTIVE_COLUMNS} FROM sales_active ORDER BY created_at DESC, id DESC"
        )
        return [_row_to_active(row) for row in rows]

    def list_closed(self, limit: Optional[int] = None) -> List[PersistedSale]:
        query = f"SELECT {_CLOSED_COLUMNS} FROM sales_closed ORDER BY closed_at DESC, id DESC"
        params = []
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
        return [_row_to_closed(row) for row in self.db.query_dicts(query, params)]

    def list_closed_between(self, start: Optional[datetime], end: Optional[datetime]) -> List[PersistedSale]:
        """Closed sales by close time, both bounds inclusive and optional"""
        query = f"SELECT {_CLOSED_COLUMNS} FROM sales_closed WHERE 1=1"
        params = []
        if start is not None:
            query += " AND closed_at >= ?"
            params.append(start)
        if end is not None:
            query += " AND closed_at <= ?"
            params.append(end)
        query += " ORDER BY closed_at DESC, id DESC"
        return [_row_to_closed(row) for row in self.db.query_dicts(query, params)]

    def get_active(self, sale_id: str) -> PersistedSale:
        rows = self.db.query_dicts(
            f"SELECT {_ACTIVE_COLUMNS} FROM sales_active WHERE id = ?", [sale_id]
        )
        if not rows:
            raise SaleNotFoundError(sale_id, ACTIVE)
        return _row_to_active(rows[0])

    def get_closed(self, sale_id: str) -> PersistedSale:
        rows = self.db.query_dicts(
            f"SELECT {_CLOSED_COLUMNS} FROM sales_closed WHERE id = ?", [sale_id]
        )
        if not rows:
            raise SaleNotFoundError(sale_id, CLOSED)
        return _row_to_closed(rows[0])

    def insert_active(self, sale: PersistedSale):
        with self.db.transaction() as conn:
            self._insert_active(conn, sale)
            self._log(conn, "sale_create", {"sale_id": sale.id, "total_cents": sale.total_cents})

    def delete_active(self, sale_id: str):
        with self.db.transaction() as conn:
            self._take(conn, "sales_active", _ACTIVE_COLUMNS, sale_id, ACTIVE)
            self._log(conn, "sale_delete", {"sale_id": sale_id, "partition": ACTIVE})

    def delete_closed(self, sale_id: str):
        with self.db.transaction() as conn:
            self._take(conn, "sales_closed", _CLOSED_COLUMNS, sale_id, CLOSED)
            self._log(conn, "sale_delete", {"sale_id": sale_id, "partition": CLOSED})

    def move_active_to_closed(self, sale_id: str, fields: ClosedFields) -> PersistedSale:
        """Close a sale in one transaction"""
        with self.db.transaction() as conn:
            row = self._take(conn, "sales_active", _ACTIVE_COLUMNS, sale_id, ACTIVE)
            conn.execute(
                f"INSERT INTO sales_closed ({_CLOSED_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                [
                    row["id"],
                    row["items"],
                    fields.total_cents,
                    row["delivery_fee_cents"] or 0,
                    fields.payment_method.value,
                    fields.payment_breakdown.model_dump_json(by_alias=True),
                    fields.tip_cents,
                    row["created_at"],
                    fields.closed_at,
                ],
            )
            self._log(conn, "sale_close", {
                "sale_id": sale_id,
                "total_cents": fields.total_cents,
                "tip_cents": fields.tip_cents,
                "payment_method": fields.payment_method.value,
                "payment_breakdown": fields.payment_breakdown.model_dump(by_alias=True),
            })
            closed = dict(row)
            closed.update(
                total_cents=fields.total_cents,
                payment_method=fields.payment_method.value,
                payment_breakdown=fields.payment_breakdown.model_dump_json(by_alias=True),
                tip_cents=fields.tip_cents,
                closed_at=fields.closed_at,
            )
            return _row_to_closed(closed)

    def move_closed_to_active(self, sale_id: str, reopened_at: datetime) -> PersistedSale:
        """
        Reopen a sale in one transaction

        The tip is taken back out of the total and every closing field is
        dropped; created_at restarts at reopened_at.
        """
        with self.db.transaction() as conn:
            row = self._take(conn, "sales_closed", _CLOSED_COLUMNS, sale_id, CLOSED)
            total_cents = row["total_cents"] - (row["tip_cents"] or 0)
            reopened = {
                "id": row["id"],
                "items": row["items"],
                "total_cents": total_cents,
                "delivery_fee_cents": row["delivery_fee_cents"] or 0,
                "created_at": reopened_at,
            }
            conn.execute(
                f"INSERT INTO sales_active ({_ACTIVE_COLUMNS}) VALUES (?, ?, ?, ?, ?)",
                [reopened["id"], reopened["items"], total_cents,
                 reopened["delivery_fee_cents"], reopened_at],
            )
            self._log(conn, "sale_reopen", {
                "sale_id": sale_id,
                "total_cents": total_cents,
                "removed_tip_cents": row["tip_cents"] or 0,
            })
            return _row_to_active(reopened)

    def _insert_active(self, conn: duckdb.DuckDBPyConnection, sale: PersistedSale):
        conn.execute(
            f"INSERT INTO sales_active ({_ACTIVE_COLUMNS}) VALUES (?, ?, ?, ?, ?)",
            [sale.id, _dump_items(sale.items), sale.total_cents,
             sale.delivery_fee_cents, sale.created_at],
        )

    def _take(self, conn: duckdb.DuckDBPyConnection, table: str, columns: str,
              sale_id: str, partition: str) -> Dict[str, Any]:
        """Delete a row and hand it back; absent rows abort the transaction"""
        cursor = conn.execute(f"DELETE FROM {table} WHERE id = ? RETURNING {columns}", [sale_id])
        rows = rows_to_dicts(cursor, cursor.fetchall())
        if not rows:
            raise SaleNotFoundError(sale_id, partition)
        return rows[0]

    def _log(self, conn: duckdb.DuckDBPyConnection, action: str, detail: Dict[str, Any]):
        conn.execute(
            "INSERT INTO logs (action, detail_json, created_at) VALUES (?, ?, ?)",
            [action, json.dumps(detail, ensure_ascii=False), datetime.now()],
        )
