from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_DEFAULT_SEED = Path(__file__).resolve().parent.parent / "data" / "restaurants.csv"


@dataclass(frozen=True)
class CatalogConfig:
    """
    Configuration for the in-memory restaurant catalog.
    """

    seed_path: Path = Path(os.getenv("CATALOG_SEED_PATH", str(_DEFAULT_SEED)))
    seed_on_startup: bool = os.getenv("CATALOG_SEED", "true").lower() == "true"


DEFAULT_CATALOG_CONFIG = CatalogConfig()
