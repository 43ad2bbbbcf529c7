from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, text
from sqlalchemy.orm import declarative_base

Base = declarative_base()

LISTING_STATUSES = ("pending", "active", "sold")

class Listing(Base):
    __tablename__ = "listings"
    id = Column(String(36), primary_key=True)
    year = Column(Integer, nullable=False)
    make = Column(Text, nullable=False)
    model = Column(Text, nullable=False)
    price = Column(Integer, nullable=False)
    miles = Column(Text, nullable=False)
    location = Column(Text, nullable=False)
    images = Column(JSON)
    youtube_url = Column(Text)
    description = Column(Text)
    highlights = Column(JSON)
    engine = Column(Text)
    transmission = Column(Text)
    drivetrain = Column(Text)
    vin = Column(String(17))
    seller_name = Column(Text)
    seller_id = Column(String(36))
    status = Column(Text, nullable=False, default="pending")  # pending|active|sold
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))
