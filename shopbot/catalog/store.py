"""Candidate source abstraction and SQLite-backed product catalog."""

from __future__ import annotations

import logging
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator, Sequence

from shopbot.catalog.models import Product
from shopbot.filters.models import QueryFilter

logger = logging.getLogger("shopbot.catalog")

PRODUCT_COLUMNS = (
    "id",
    "brand",
    "model",
    "type",
    "price",
    "capacity_kg",
    "width_cm",
    "height_cm",
    "depth_cm",
    "description",
)


class CandidateSource(ABC):
    """Structured product queries used by the conversation and search flows."""

    @abstractmethod
    def preview(self, query: QueryFilter, limit: int) -> list[Product]:
        """Return up to ``limit`` exact matches on brand/type/price/capacity, priciest first."""

    @abstractmethod
    def final_candidates(
        self, query: QueryFilter, tolerance_cm: float, fetch_size: int | None = None
    ) -> list[Product]:
        """Return matches including dimension closeness, priciest first; ``None`` fetches all."""

    @abstractmethod
    def list_brands(self) -> list[str]:
        """Return raw distinct brand names."""

    @abstractmethod
    def all_products(self, limit: int | None = None) -> list[Product]:
        """Return unfiltered products, priciest first."""


class SQLiteProductStore(CandidateSource):
    """Product catalog stored in a single SQLite table."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS product (
                    id INTEGER PRIMARY KEY,
                    brand TEXT,
                    model TEXT,
                    type TEXT,
                    price REAL,
                    capacity_kg INTEGER,
                    width_cm REAL,
                    height_cm REAL,
                    depth_cm REAL,
                    description TEXT
                );

                CREATE INDEX IF NOT EXISTS idx_product_price ON product (price DESC);
                """
            )

    def upsert_products(self, products: Iterable[Product]) -> int:
        rows = [tuple(getattr(product, column) for column in PRODUCT_COLUMNS) for product in products]
        if not rows:
            return 0
        placeholders = ", ".join("?" for _ in PRODUCT_COLUMNS)
        update_clause = ", ".join(f"{col}=excluded.{col}" for col in PRODUCT_COLUMNS if col != "id")
        with self._connection() as conn:
            conn.executemany(
                f"""
                INSERT INTO product ({", ".join(PRODUCT_COLUMNS)}) VALUES ({placeholders})
                ON CONFLICT(id) DO UPDATE SET {update_clause}
                """,
                rows,
            )
        logger.info("Upserted %d products into %s", len(rows), self.db_path)
        return len(rows)

    def count(self) -> int:
        with self._connection() as conn:
            row = conn.execute("SELECT COUNT(*) AS total FROM product").fetchone()
        return int(row["total"])

    def preview(self, query: QueryFilter, limit: int) -> list[Product]:
        clauses, params = _core_clauses(query)
        return self._select(clauses, params, max(1, limit))

    def final_candidates(
        self, query: QueryFilter, tolerance_cm: float, fetch_size: int | None = None
    ) -> list[Product]:
        clauses, params = _core_clauses(query)
        dimension_clauses, dimension_params = _dimension_clauses(query, tolerance_cm)
        limit = None if fetch_size is None else max(1, fetch_size)
        return self._select(clauses + dimension_clauses, params + dimension_params, limit)

    def list_brands(self) -> list[str]:
        with self._connection() as conn:
            rows = conn.execute("SELECT DISTINCT brand FROM product WHERE brand IS NOT NULL").fetchall()
        return [row["brand"] for row in rows]

    def all_products(self, limit: int | None = None) -> list[Product]:
        return self._select([], [], limit)

    def _select(self, clauses: Sequence[str], params: Sequence[Any], limit: int | None) -> list[Product]:
        sql = f"SELECT {', '.join(PRODUCT_COLUMNS)} FROM product"
        if clauses:
            sql = f"{sql} WHERE {' AND '.join(clauses)}"
        sql += " ORDER BY price DESC, id ASC"
        bound = list(params)
        if limit is not None:
            sql += " LIMIT ?"
            bound.append(limit)

        with self._connection() as conn:
            rows = conn.execute(sql, bound).fetchall()
        return [Product.from_mapping(dict(row)) for row in rows]


def _core_clauses(query: QueryFilter) -> tuple[list[str], list[Any]]:
    clauses: list[str] = []
    params: list[Any] = []

    if query.brand is not None:
        clauses.append("LOWER(brand) = LOWER(?)")
        params.append(query.brand)
    if query.type is not None:
        clauses.append("LOWER(type) = LOWER(?)")
        params.append(query.type)

    for column, low, high in (
        ("price", query.min_price, query.max_price),
        ("capacity_kg", query.min_capacity_kg, query.max_capacity_kg),
    ):
        if low is not None and high is not None:
            clauses.append(f"{column} BETWEEN ? AND ?")
            params.extend([low, high])
        elif low is not None:
            clauses.append(f"{column} >= ?")
            params.append(low)
        elif high is not None:
            clauses.append(f"{column} <= ?")
            params.append(high)

    return clauses, params


def _dimension_clauses(query: QueryFilter, tolerance_cm: float) -> tuple[list[str], list[Any]]:
    clauses: list[str] = []
    params: list[Any] = []
    for column, expected in (
        ("width_cm", query.width_cm),
        ("height_cm", query.height_cm),
        ("depth_cm", query.depth_cm),
    ):
        if expected is None:
            continue
        clauses.append(f"{column} BETWEEN ? AND ?")
        params.extend([expected - tolerance_cm, expected + tolerance_cm])
    return clauses, params
