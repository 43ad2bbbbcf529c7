from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.db import models

INTERNAL_ORIGIN = "Tribe"


def is_internal_id(value: str) -> bool:
    try:
        uuid.UUID(value)
    except (TypeError, ValueError, AttributeError):
        return False
    return True


def serialize_listing(listing: models.Listing) -> Dict[str, Any]:
    return {
        "_id": listing.id,
        "id": listing.id,
        "year": listing.year,
        "make": listing.make,
        "model": listing.model,
        "price": listing.price,
        "miles": listing.miles,
        "location": listing.location,
        "images": list(listing.images or []),
        "youtubeUrl": listing.youtube_url,
        "description": listing.description,
        "highlights": list(listing.highlights or []),
        "specs": {
            "engine": listing.engine,
            "transmission": listing.transmission,
            "drivetrain": listing.drivetrain,
            "vin": listing.vin,
        },
        "seller": {
            "name": listing.seller_name,
            "id": listing.seller_id,
        },
        "status": listing.status,
        "createdAt": listing.created_at.isoformat() if listing.created_at else None,
        "origin": INTERNAL_ORIGIN,
    }


def list_active(session: Session) -> List[Dict[str, Any]]:
    stmt = (
        select(models.Listing)
        .where(models.Listing.status == "active")
        .order_by(models.Listing.created_at.desc())
    )
    return [serialize_listing(row) for row in session.execute(stmt).scalars()]


def get_listing(session: Session, listing_id: str) -> Optional[Dict[str, Any]]:
    listing = session.get(models.Listing, listing_id)
    if listing is None:
        return None
    return serialize_listing(listing)
