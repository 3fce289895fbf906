"""One-time seeding of the product catalog.

When the configured products database does not exist yet, copy the seed file
bundled with the image (``/app/db-seed/products.db`` by default). Replacing
the catalog later only requires updating the mounted volume.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from shopbot.core.config import get_settings

logger = logging.getLogger("shopbot.init")

DEFAULT_SEED_DIR = Path("/app/db-seed")


def copy_if_missing(src: Path, dst: Path) -> bool:
    if dst.exists() or not src.exists():
        return False
    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, dst)
    except OSError as exc:
        logger.warning("Failed to seed %s to %s: %s", src, dst, exc)
        return False
    logger.info("Seeded %s -> %s", src, dst)
    return True


def seed_on_startup(seed_dir: Path = DEFAULT_SEED_DIR, products_db_path: Path | None = None) -> bool:
    target = Path(products_db_path or get_settings().products_db_path)
    if not seed_dir.exists():
        logger.debug("No seed directory present; skipping data seeding")
        return False
    return copy_if_missing(seed_dir / "products.db", target)
