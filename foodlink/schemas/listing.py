import math
from decimal import Decimal
from typing import Optional, Union
from datetime import datetime
from pydantic import BaseModel, StrictFloat, StrictInt, field_validator
from foodlink.schemas.base import BaseSchema, TimestampSchema

Number = Union[StrictInt, StrictFloat]

PRICE_DECIMAL_PLACES = 2

class Location(BaseModel):
    lat: float
    lng: float

class LocationIn(BaseModel):
    lat: Number
    lng: Number

    @field_validator("lat")
    @classmethod
    def check_lat(cls, value):
        if not -90 <= value <= 90:
            raise ValueError("latitude must be between -90 and 90")
        return value

    @field_validator("lng")
    @classmethod
    def check_lng(cls, value):
        if not -180 <= value <= 180:
            raise ValueError("longitude must be between -180 and 180")
        return value

class ListingCreate(BaseModel):
    food_type: str
    location: LocationIn
    price: Number
    quantity: StrictInt
    status: str = "active"
    notes: Optional[str] = None

    @field_validator("price")
    @classmethod
    def check_price_precision(cls, value):
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError("price must be a finite number")
        # Stored as Numeric(10, 2); more places would be rounded away
        if Decimal(str(value)).as_tuple().exponent < -PRICE_DECIMAL_PLACES:
            raise ValueError(f"price must have at most {PRICE_DECIMAL_PLACES} decimal places")
        return value

    @field_validator("food_type")
    @classmethod
    def strip_food_type(cls, value: str) -> str:
        return value.strip()

    @field_validator("quantity", mode="before")
    @classmethod
    def integral_float_quantity(cls, value):
        # JSON clients may send 10.0 for 10
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value

class Listing(TimestampSchema):
    id: int
    user_id: str
    food_type: str
    location: Location
    price: float
    quantity: int
    status: str
    notes: Optional[str] = None
    deleted_at: Optional[datetime] = None

class Match(BaseSchema):
    id: int
    kind: str
    name: str
    food_type: str
    quantity: int
    price: float
    location: Location
    status: str
    created_at: datetime
    distance_km: Optional[float] = None

class ListingStats(BaseModel):
    role: str
    kind: str
    total: int
    active: int
    total_quantity: int
    average_price: float
