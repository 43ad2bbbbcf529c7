#!/usr/bin/env python3
"""Load internal marketplace listings from a CSV or JSON export.

Usage:
  python scripts/seed_listings.py --input ./data/seeds/listings.csv
  python scripts/seed_listings.py --input ./data/seeds/listings.json --migrate

Columns follow the `listings` table; `images` and `highlights` may be JSON
arrays or `|`-separated strings. Rows without an `id` get a fresh UUID.
"""
import argparse, json, sys, uuid
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd
from alembic.config import Config as AlembicConfig
from alembic import command as alembic_command

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.app.core.settings import settings  # noqa: E402
from backend.app.db import models  # noqa: E402
from backend.app.db.session import session_scope  # noqa: E402

TEXT_COLUMNS = [
    "miles", "location", "youtube_url", "description", "engine",
    "transmission", "drivetrain", "vin", "seller_name", "seller_id",
]


def _list_value(raw: Any) -> List[str]:
    if raw is None or (isinstance(raw, float) and pd.isna(raw)):
        return []
    if isinstance(raw, list):
        return [str(v) for v in raw if v]
    text = str(raw).strip()
    if text.startswith("["):
        try:
            return [str(v) for v in json.loads(text) if v]
        except json.JSONDecodeError:
            pass
    return [part.strip() for part in text.split("|") if part.strip()]


def _clean(raw: Any) -> Any:
    if raw is None or (isinstance(raw, float) and pd.isna(raw)):
        return None
    return raw


def read_export(path: Path) -> pd.DataFrame:
    if path.suffix.lower() == ".json":
        return pd.read_json(path)
    return pd.read_csv(path)


def row_to_listing(row: Dict[str, Any]) -> models.Listing:
    status = str(_clean(row.get("status")) or "pending").lower()
    if status not in models.LISTING_STATUSES:
        status = "pending"
    listing = models.Listing(
        id=str(_clean(row.get("id")) or uuid.uuid4()),
        year=int(row["year"]),
        make=str(row["make"]),
        model=str(row["model"]),
        price=int(float(row["price"])),
        images=_list_value(row.get("images")),
        highlights=_list_value(row.get("highlights")),
        status=status,
    )
    for column in TEXT_COLUMNS:
        value = _clean(row.get(column))
        setattr(listing, column, str(value) if value is not None else None)
    if listing.miles is None:
        listing.miles = "0"
    if listing.location is None:
        listing.location = "Location Unknown"
    return listing


def load_listings(path: Path) -> int:
    df = read_export(path)
    missing = {"year", "make", "model", "price"} - set(df.columns)
    if missing:
        raise ValueError(f"Export is missing required columns: {sorted(missing)}")
    count = 0
    with session_scope() as session:
        for record in df.to_dict(orient="records"):
            session.merge(row_to_listing(record))
            count += 1
    return count


def migrate() -> None:
    alembic_cfg = AlembicConfig(str(ROOT / "alembic.ini"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.database_url)
    alembic_command.upgrade(alembic_cfg, "head")


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--input", type=str, required=True, help="Path to listings CSV or JSON")
    ap.add_argument("--migrate", action="store_true", help="Run Alembic migrations first")
    args = ap.parse_args()

    if args.migrate:
        migrate()

    count = load_listings(Path(args.input))
    print(f"Loaded {count} listings into {settings.database_url}")


if __name__ == "__main__":
    main()
