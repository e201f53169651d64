import json
import logging
import math
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from foodlink.auth.security import Caller, get_current_caller
from foodlink.core.errors import InvalidPayload, MarketplaceError, RateLimited
from foodlink.db.session import get_db
from foodlink.schemas.listing import Listing, ListingStats, Match
from foodlink.services.marketplace import (
    create_listing,
    find_matches,
    list_own,
    listing_stats,
    validate_listing,
)

logger = logging.getLogger(__name__)

router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def check_submission_rate(request: Request, caller: Caller = Depends(get_current_caller)) -> Caller:
    limiter = request.app.state.submission_limiter
    if not limiter.hit(caller.user_id):
        logger.info("Submission rate limit reached for user %s", caller.user_id)
        retry_after = math.ceil(limiter.retry_after(caller.user_id))
        raise RateLimited(headers={"Retry-After": str(retry_after)})
    return caller


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


async def json_body(request: Request):
    raw = await request.body()
    try:
        return json.loads(raw, parse_constant=_reject_constant)
    except ValueError:
        raise InvalidPayload("Request body must be valid JSON")


@router.options("", include_in_schema=False)
def preflight():
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=CORS_HEADERS)


@router.post(
    "",
    response_model=Listing,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a listing, purchase request or assistance program",
    description="The caller's role decides which kind of record is created.",
)
def create_submission(
    caller: Caller = Depends(check_submission_rate),
    payload=Depends(json_body),
    db: Session = Depends(get_db),
):
    """
    Create one record owned by the caller.

    - **food_type**: what is offered or needed (required)
    - **location**: `{lat, lng}` (required)
    - **price**: unit price, zero or more (required)
    - **quantity**: whole units, at least one (required)
    - **status**: lifecycle label, defaults to `active`
    - **notes**: free text, e.g. a voice-entry transcript
    """
    try:
        data = validate_listing(payload)
    except MarketplaceError as exc:
        logger.info("Rejected submission from user %s: %s", caller.user_id, exc.message)
        raise
    return create_listing(db, caller, data)


@router.get(
    "",
    response_model=List[Listing],
    summary="List my records",
    description="The caller's own records that are not soft-deleted, newest first.",
)
def read_submissions(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    return list_own(db, caller)


@router.api_route("", methods=["PUT", "PATCH", "DELETE"], include_in_schema=False)
def method_not_allowed(caller: Caller = Depends(get_current_caller)):
    return PlainTextResponse("Method not allowed", status_code=status.HTTP_405_METHOD_NOT_ALLOWED)


@router.get(
    "/matches",
    response_model=List[Match],
    summary="Cross-role matches",
    description="Active records posted by other users in the roles the caller is matched with.",
)
def read_matches(
    food_type: Optional[str] = Query(None, description="Only matches for this food type"),
    lat: Optional[float] = Query(None, ge=-90, le=90, description="Reference latitude"),
    lng: Optional[float] = Query(None, ge=-180, le=180, description="Reference longitude"),
    radius_km: Optional[float] = Query(None, gt=0, description="Maximum distance from the reference point"),
    limit: int = Query(20, ge=1, le=100, description="Maximum number of matches (1-100)"),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    return find_matches(
        db,
        caller,
        food_type=food_type,
        lat=lat,
        lng=lng,
        radius_km=radius_km,
        limit=limit,
    )


@router.get("/stats", response_model=ListingStats, summary="Summary of my records")
def read_stats(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    return listing_stats(db, caller)
