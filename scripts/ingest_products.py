"""Load a JSON washing-machine catalogue into the SQLite product store."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

REPO_ROOT = Path(__file__).resolve().parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from shopbot.catalog.models import Product  # noqa: E402
from shopbot.catalog.store import SQLiteProductStore  # noqa: E402

DEFAULT_RAW_PATH = Path("../db/raw/products.json")
DEFAULT_DB_PATH = Path("../db/products.db")

FIELD_ALIASES = {
    "capacity": "capacity_kg",
    "width": "width_cm",
    "height": "height_cm",
    "depth": "depth_cm",
    "name": "model",
}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ingest washing-machine catalogue into SQLite")
    parser.add_argument(
        "--input-file",
        type=Path,
        default=DEFAULT_RAW_PATH,
        help="Path to local JSON file containing an array of product records.",
    )
    parser.add_argument(
        "--db-path",
        type=Path,
        default=DEFAULT_DB_PATH,
        help="SQLite database file that will receive the products.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse input but skip writing to the database (useful for validation).",
    )
    return parser.parse_args()


def load_catalogue(path: Path) -> list[dict[str, Any]]:
    if not path or not path.exists():
        raise FileNotFoundError(
            f"Catalogue file not found at {path}. Supply --input-file pointing to a local JSON export."
        )

    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)

    if not isinstance(data, list):
        raise ValueError("Expected top-level JSON array of product records")

    return data


def normalise_record(record: dict[str, Any], fallback_id: int) -> Product:
    row = {FIELD_ALIASES.get(key, key): value for key, value in record.items()}
    row.setdefault("id", fallback_id)
    product_type = row.get("type")
    if isinstance(product_type, str):
        lowered = product_type.strip().lower()
        row["type"] = "top" if lowered.startswith("top") else "front" if lowered.startswith("front") else lowered
    for key in ("brand", "model", "description"):
        if isinstance(row.get(key), str):
            row[key] = row[key].strip() or None
    return Product.from_mapping(row)


def main() -> None:
    args = parse_args()
    catalogue = load_catalogue(args.input_file)
    products = [normalise_record(record, index) for index, record in enumerate(catalogue, start=1)]
    print(f"Loaded {len(products)} washing machines from {args.input_file}")

    brands = sorted({product.brand for product in products if product.brand}, key=str.casefold)
    print(f"Brands: {', '.join(brands) or 'none'}")

    if args.dry_run:
        print("Dry-run enabled; skipping database write")
        return

    store = SQLiteProductStore(args.db_path)
    written = store.upsert_products(products)
    print(f"Wrote {written} products to {args.db_path} (total {store.count()})")


if __name__ == "__main__":
    main()
