"""Map raw MarketCheck records onto the platform listing shape."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field

from backend.app.services import composite_id

DEFAULT_YEAR = 2024
DEFAULT_MAKE = "Unknown"
DEFAULT_MODEL = "Vehicle"
DEFAULT_DEALER_NAME = "Verified Dealer"
NOT_AVAILABLE = "N/A"
PLACEHOLDER_IMAGE_URL = (
    "https://images.unsplash.com/photo-1492144534655-ae79c964c9d7?auto=format&fit=crop&w=800&q=80"
)
ORIGIN = "Marketplace"
SOURCE = "marketcheck"

TAG_EURO = "Euro"
TAG_JDM = "JDM"
TAG_MUSCLE = "Muscle"
TAG_CLASSIC = "Classic"

TRIBE_MAKES = {
    TAG_EURO: {"BMW", "MERCEDES-BENZ", "AUDI", "VOLKSWAGEN", "PORSCHE", "VOLVO", "FERRARI", "LAMBORGHINI"},
    TAG_JDM: {"NISSAN", "TOYOTA", "HONDA", "SUBARU", "MAZDA", "MITSUBISHI", "LEXUS", "ACURA"},
    TAG_MUSCLE: {"FORD", "CHEVROLET", "DODGE", "PONTIAC", "CHRYSLER"},
}


class ListingMedia(BaseModel):
    photo_links: List[str] = Field(default_factory=list)


class ListingSpecs(BaseModel):
    engine: str = NOT_AVAILABLE
    transmission: str = NOT_AVAILABLE
    vin: Optional[str] = None


class ListingSeller(BaseModel):
    name: str = DEFAULT_DEALER_NAME
    type: str = "dealer"
    tribes: List[str] = Field(default_factory=list)
    avatar: Optional[str] = None


class MarketListing(BaseModel):
    listing_id: str = Field(serialization_alias="_id")
    id: str
    year: int = DEFAULT_YEAR
    make: str = DEFAULT_MAKE
    model: str = DEFAULT_MODEL
    price: int = 0
    msrp: int = 0
    current_bid: int = Field(default=0, serialization_alias="currentBid")
    tag: str = TAG_CLASSIC
    miles: int = 0
    miles_display: str = "New"
    city: str = "Unknown"
    state: str = ""
    location: str = "Location Unknown"
    description: str = ""
    media: ListingMedia = Field(default_factory=ListingMedia)
    images: List[str] = Field(default_factory=list)
    image_url: str = Field(default=PLACEHOLDER_IMAGE_URL, serialization_alias="imageUrl")
    specs: ListingSpecs = Field(default_factory=ListingSpecs)
    engine_description: Optional[str] = None
    transmission_description: Optional[str] = None
    vin: Optional[str] = None
    dealer_name: str = DEFAULT_DEALER_NAME
    seller: ListingSeller = Field(default_factory=ListingSeller)
    origin: str = ORIGIN
    source: str = SOURCE

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


def assign_tribe_tag(make: Optional[str]) -> str:
    if not make or not isinstance(make, str):
        return TAG_CLASSIC
    upper = make.strip().upper()
    for tag, makes in TRIBE_MAKES.items():
        if upper in makes:
            return tag
    return TAG_CLASSIC


def _section(record: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = record.get(key)
    return value if isinstance(value, Mapping) else {}


def _as_int(value: Any, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default
    return number or default


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _photo_links(media: Mapping[str, Any]) -> List[str]:
    links = media.get("photo_links")
    if not isinstance(links, list):
        return []
    return [link for link in links if isinstance(link, str) and link]


def normalize_listing(record: Mapping[str, Any]) -> MarketListing:
    build = _section(record, "build")
    dealer = _section(record, "dealer")
    media = _section(record, "media")
    extra = _section(record, "extra")

    vin = _text(record.get("vin"))
    listing_id = composite_id.encode(vin, _text(record.get("id")))

    make = _text(build.get("make"))
    model = _text(build.get("model")) or DEFAULT_MODEL
    tag = assign_tribe_tag(make)
    make = make or DEFAULT_MAKE

    price = _as_int(record.get("price"), 0)
    miles = _as_int(record.get("miles"), 0)

    city = _text(dealer.get("city"))
    state = _text(dealer.get("state")) or ""
    dealer_name = _text(dealer.get("name")) or DEFAULT_DEALER_NAME

    photos = _photo_links(media)
    engine = _text(build.get("engine"))
    transmission = _text(build.get("transmission"))

    description = (
        _text(extra.get("description"))
        or _text(extra.get("ft"))
        or f"{make} {model} available now."
    )

    return MarketListing(
        listing_id=listing_id,
        id=listing_id,
        year=_as_int(build.get("year"), DEFAULT_YEAR),
        make=make,
        model=model,
        price=price,
        msrp=price,
        current_bid=price,
        tag=tag,
        miles=miles,
        miles_display=f"{miles:,} mi" if miles else "New",
        city=city or "Unknown",
        state=state,
        location=f"{city}, {state}" if city else "Location Unknown",
        description=description,
        media=ListingMedia(photo_links=photos),
        images=photos,
        image_url=photos[0] if photos else PLACEHOLDER_IMAGE_URL,
        specs=ListingSpecs(
            engine=engine or NOT_AVAILABLE,
            transmission=transmission or NOT_AVAILABLE,
            vin=vin,
        ),
        engine_description=engine,
        transmission_description=transmission,
        vin=vin,
        dealer_name=dealer_name,
        seller=ListingSeller(name=dealer_name, tribes=[tag]),
    )
