from sqlalchemy import Column, String, Numeric, Integer, ForeignKey, DateTime, Text, CheckConstraint
from sqlalchemy.orm import declared_attr, relationship
from foodlink.db.types import GeoPoint
from foodlink.models.base import BaseModel

class ListingMixin:
    """Columns shared by the three role-owned record kinds."""

    food_type = Column(String(100), nullable=False)
    location = Column(GeoPoint, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default="active")
    notes = Column(Text)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    @declared_attr
    def user_id(cls):
        return Column(String(64), ForeignKey("profiles.id"), nullable=False, index=True)

    @declared_attr
    def owner(cls):
        return relationship("Profile")

    @declared_attr
    def __table_args__(cls):
        return (
            CheckConstraint("price >= 0", name=f"ck_{cls.__tablename__}_price"),
            CheckConstraint("quantity >= 1", name=f"ck_{cls.__tablename__}_quantity"),
        )

class ProduceListing(ListingMixin, BaseModel):
    __tablename__ = "produce_listings"

class PurchaseRequest(ListingMixin, BaseModel):
    __tablename__ = "purchase_requests"

class AssistanceProgram(ListingMixin, BaseModel):
    __tablename__ = "assistance_programs"
