import uuid

import pytest

from backend.app.db import models
from backend.app.db.session import build_engine, make_session_factory, session_scope
from backend.app.services import internal_listings


@pytest.fixture()
def session():
    engine = build_engine("sqlite://")
    models.Base.metadata.create_all(engine)
    factory = make_session_factory(engine)
    with factory() as db:
        yield db
    engine.dispose()


def _add(db, status="active", **fields):
    listing = models.Listing(
        id=str(uuid.uuid4()),
        year=1969,
        make="Chevrolet",
        model="Camaro SS",
        price=65000,
        miles="48,000",
        location="Tulsa, OK",
        images=["https://img.test/camaro.jpg"],
        highlights=["Numbers matching 396"],
        engine="396 V8",
        status=status,
        seller_name="Rick",
        **fields,
    )
    db.add(listing)
    db.commit()
    return listing


def test_list_active_excludes_pending_and_sold(session):
    active = _add(session)
    _add(session, status="pending")
    _add(session, status="sold")
    rows = internal_listings.list_active(session)
    assert [row["id"] for row in rows] == [active.id]


def test_serialized_shape(session):
    listing = _add(session, vin="124379N600001")
    row = internal_listings.get_listing(session, listing.id)
    assert row["_id"] == row["id"] == listing.id
    assert row["specs"] == {"engine": "396 V8", "transmission": None, "drivetrain": None, "vin": "124379N600001"}
    assert row["seller"] == {"name": "Rick", "id": None}
    assert row["images"] == ["https://img.test/camaro.jpg"]
    assert row["origin"] == "Tribe"


def test_get_listing_missing(session):
    assert internal_listings.get_listing(session, str(uuid.uuid4())) is None


def test_is_internal_id():
    assert internal_listings.is_internal_id(str(uuid.uuid4()))
    assert not internal_listings.is_internal_id("mc-VIN-123")
    assert not internal_listings.is_internal_id("507f1f77bcf86cd7994390")


def test_session_scope_rolls_back_on_error():
    engine = build_engine("sqlite://")
    models.Base.metadata.create_all(engine)
    factory = make_session_factory(engine)
    listing_id = str(uuid.uuid4())

    with pytest.raises(RuntimeError):
        with session_scope(factory) as db:
            db.add(models.Listing(id=listing_id, year=1987, make="Buick", model="GNX", price=1, miles="1", location="X"))
            db.flush()
            raise RuntimeError("abort")

    with session_scope(factory) as db:
        assert internal_listings.get_listing(db, listing_id) is None
    engine.dispose()
