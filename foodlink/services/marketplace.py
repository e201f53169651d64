"""Role dispatch, payload validation and storage access for marketplace records.

Each role owns exactly one storage target. ``STORAGE_TARGETS`` is the only
place that knows which table belongs to which role and which roles a caller
is matched against, so create, list, match and stats all dispatch through it.
"""
import logging
import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Tuple, Type

from pydantic import ValidationError
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from foodlink.auth.security import Caller
from foodlink.core.errors import (
    InvalidPayload,
    InvalidQuantity,
    InvalidRole,
    MissingFields,
    StorageError,
)
from foodlink.models.listing import AssistanceProgram, ListingMixin, ProduceListing, PurchaseRequest
from foodlink.models.profile import Role
from foodlink.schemas.listing import ListingCreate, ListingStats, Match

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("food_type", "location", "price", "quantity")
ACTIVE_STATUS = "active"
EARTH_RADIUS_KM = 6371.0

# Column limits: Numeric(10, 2) for price, 32-bit Integer for quantity
MAX_PRICE = 10 ** 8
MAX_QUANTITY = 2 ** 31 - 1


@dataclass(frozen=True)
class StorageTarget:
    model: Type[ListingMixin]
    label: str
    match_roles: Tuple[Role, ...]

    @property
    def table(self) -> str:
        return self.model.__tablename__


STORAGE_TARGETS: Dict[Role, StorageTarget] = {
    Role.farmer: StorageTarget(ProduceListing, "Produce Listing", (Role.ngo,)),
    Role.retailer: StorageTarget(PurchaseRequest, "Purchase Request", (Role.farmer,)),
    Role.ngo: StorageTarget(AssistanceProgram, "Assistance Program", (Role.farmer,)),
}


def target_for(role: Role) -> StorageTarget:
    try:
        return STORAGE_TARGETS[role]
    except KeyError:
        raise InvalidRole()


# --------------------------------------------------------------------
# Validation
# --------------------------------------------------------------------
def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (dict, list)):
        return len(value) == 0
    return False


def _describe(exc: ValidationError) -> str:
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error["loc"])
    return f"Invalid value for {field}: {error['msg']}"


def validate_listing(payload) -> ListingCreate:
    """Validate a raw JSON body, stopping at the first rule it breaks.

    Zero is a present value for ``price`` and ``quantity``; range checks,
    including the upper bounds the columns can hold, are reported as
    ``InvalidQuantity`` after presence and type checks pass.
    """
    if not isinstance(payload, dict):
        raise InvalidPayload("Request body must be a JSON object")

    missing = [name for name in REQUIRED_FIELDS if _is_blank(payload.get(name))]
    if missing:
        raise MissingFields(f"Missing required fields: {', '.join(missing)}")

    try:
        data = ListingCreate.model_validate(payload)
    except ValidationError as exc:
        raise InvalidPayload(_describe(exc))

    if not 0 <= data.price < MAX_PRICE or not 1 <= data.quantity <= MAX_QUANTITY:
        raise InvalidQuantity()
    return data


# --------------------------------------------------------------------
# Create / list own
# --------------------------------------------------------------------
def create_listing(db: Session, caller: Caller, data: ListingCreate) -> ListingMixin:
    target = target_for(caller.role)
    record = target.model(
        user_id=caller.user_id,
        food_type=data.food_type,
        location={"lat": data.location.lat, "lng": data.location.lng},
        price=Decimal(str(data.price)),
        quantity=data.quantity,
        status=data.status,
        notes=data.notes,
    )
    try:
        db.add(record)
        db.commit()
        db.refresh(record)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Insert into %s failed for user %s", target.table, caller.user_id)
        raise StorageError()

    logger.info("Created %s %s for user %s", target.label, record.id, caller.user_id)
    return record


def _own_rows(db: Session, caller: Caller, model):
    return db.query(model).filter(
        model.user_id == caller.user_id,
        model.deleted_at.is_(None),
    )


def list_own(db: Session, caller: Caller) -> List[ListingMixin]:
    model = target_for(caller.role).model
    try:
        return (
            _own_rows(db, caller, model)
            .order_by(model.created_at.desc(), model.id.desc())
            .all()
        )
    except SQLAlchemyError:
        logger.exception("Select from %s failed for user %s", model.__tablename__, caller.user_id)
        raise StorageError()


# --------------------------------------------------------------------
# Matches
# --------------------------------------------------------------------
def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(dlng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def _origin(lat: Optional[float], lng: Optional[float], radius_km: Optional[float]):
    if (lat is None) != (lng is None):
        raise InvalidPayload("Both lat and lng are required for a reference point")
    if radius_km is not None and lat is None:
        raise InvalidPayload("radius_km requires lat and lng")
    if lat is None:
        return None
    return lat, lng


def find_matches(
    db: Session,
    caller: Caller,
    food_type: Optional[str] = None,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    radius_km: Optional[float] = None,
    limit: int = 20,
) -> List[Match]:
    """Active counterpart records other users have posted, nearest or newest first."""
    origin = _origin(lat, lng, radius_km)
    matches: List[Match] = []

    for role in target_for(caller.role).match_roles:
        model = STORAGE_TARGETS[role].model
        query = (
            db.query(model)
            .options(joinedload(model.owner))
            .filter(
                model.status == ACTIVE_STATUS,
                model.deleted_at.is_(None),
                model.user_id != caller.user_id,
            )
        )
        if food_type:
            query = query.filter(func.lower(model.food_type) == food_type.strip().lower())
        try:
            rows = query.all()
        except SQLAlchemyError:
            logger.exception("Match lookup in %s failed", model.__tablename__)
            raise StorageError()

        for row in rows:
            distance = None
            if origin is not None:
                distance = haversine_km(origin[0], origin[1], row.location["lat"], row.location["lng"])
                if radius_km is not None and distance > radius_km:
                    continue
            matches.append(Match(
                id=row.id,
                kind=model.__tablename__,
                name=row.owner.display_name if row.owner else "Anonymous",
                food_type=row.food_type,
                quantity=row.quantity,
                price=row.price,
                location=row.location,
                status=row.status,
                created_at=row.created_at,
                distance_km=round(distance, 3) if distance is not None else None,
            ))

    if origin is not None:
        matches.sort(key=lambda match: (match.distance_km, -match.id))
    else:
        matches.sort(key=lambda match: (match.created_at, match.id), reverse=True)
    return matches[:limit]


# --------------------------------------------------------------------
# Stats
# --------------------------------------------------------------------
def listing_stats(db: Session, caller: Caller) -> ListingStats:
    target = target_for(caller.role)
    model = target.model
    try:
        total, total_quantity, average_price = (
            _own_rows(db, caller, model)
            .with_entities(func.count(model.id), func.sum(model.quantity), func.avg(model.price))
            .one()
        )
        active = (
            _own_rows(db, caller, model)
            .filter(model.status == ACTIVE_STATUS)
            .with_entities(func.count(model.id))
            .scalar()
        )
    except SQLAlchemyError:
        logger.exception("Stats query on %s failed for user %s", target.table, caller.user_id)
        raise StorageError()

    return ListingStats(
        role=caller.role.value,
        kind=target.table,
        total=total or 0,
        active=active or 0,
        total_quantity=int(total_quantity or 0),
        average_price=round(float(average_price), 2) if average_price is not None else 0.0,
    )
