from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.db.session import get_session
from backend.app.services import composite_id, internal_listings
from backend.app.services.aggregator import ListingAggregator

logger = logging.getLogger(__name__)

router = APIRouter()


def _radius_miles(raw: Optional[str]) -> Optional[int]:
    # bad values fall back to the client default radius
    try:
        radius = int(raw) if raw else None
    except ValueError:
        return None
    return radius if radius and radius > 0 else None


def get_aggregator(request: Request) -> ListingAggregator:
    return request.app.state.aggregator


@router.get("/all")
async def all_listings(
    search: Optional[str] = None,
    zip_code: Optional[str] = Query(default=None, alias="zip"),
    radius: Optional[str] = None,
    aggregator: ListingAggregator = Depends(get_aggregator),
    db: Session = Depends(get_session),
):
    external = await aggregator.search(search, zip_code, _radius_miles(radius))
    try:
        internal = internal_listings.list_active(db)
    except SQLAlchemyError as exc:
        logger.error("Internal listing query failed: %s", exc)
        internal = []
    return [*internal, *(listing.to_json() for listing in external)]


@router.get("/listing/{listing_id}")
async def listing_detail(
    listing_id: str,
    aggregator: ListingAggregator = Depends(get_aggregator),
    db: Session = Depends(get_session),
):
    if composite_id.is_composite_id(listing_id):
        listing = await aggregator.lookup(listing_id)
        if listing is None:
            raise HTTPException(status_code=404, detail="Vehicle not found in Tribe or Dealer networks")
        return listing.to_json()

    if not internal_listings.is_internal_id(listing_id):
        raise HTTPException(status_code=400, detail="Invalid listing ID format")

    row = internal_listings.get_listing(db, listing_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Vehicle not found in Tribe or Dealer networks")
    return row


@router.get("/test-api")
async def test_api(aggregator: ListingAggregator = Depends(get_aggregator)):
    report = await aggregator.check_connection()
    if report["status"] != "success":
        return JSONResponse(status_code=500, content=report)
    return report
