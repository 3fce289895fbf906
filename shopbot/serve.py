"""Launch script: seed the catalog if needed, then start Uvicorn."""

from __future__ import annotations

import importlib
import logging
import os

import uvicorn

from shopbot.init_data import seed_on_startup

logger = logging.getLogger("shopbot.launcher")


def main() -> None:
    # Seed before the app module is imported so the store opens the copied file.
    try:
        seed_on_startup()
    except OSError as exc:
        logger.warning("Data seeding step skipped: %s", exc)

    app_module = importlib.import_module("shopbot.main")
    app = app_module.app  # type: ignore[attr-defined]

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "8000"))
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
