from datetime import timedelta

import pytest
from jose import jwt

from foodlink.auth.security import create_access_token, decode_access_token, resolve_role
from foodlink.core.config import get_settings
from foodlink.core.errors import InvalidRole, Unauthenticated
from foodlink.models.profile import Role


def test_token_round_trip_returns_subject() -> None:
    assert decode_access_token(create_access_token("user-42")) == "user-42"


def test_expired_token_is_rejected() -> None:
    token = create_access_token("user-42", expires_delta=timedelta(seconds=-5))

    with pytest.raises(Unauthenticated):
        decode_access_token(token)


def test_token_without_subject_is_rejected() -> None:
    settings = get_settings()
    token = jwt.encode({"role": "farmer"}, settings.secret_key, algorithm=settings.algorithm)

    with pytest.raises(Unauthenticated):
        decode_access_token(token)


def test_garbage_token_is_rejected() -> None:
    with pytest.raises(Unauthenticated):
        decode_access_token("invalid")


@pytest.mark.parametrize("value", ["farmer", "retailer", "ngo"])
def test_known_roles_resolve(value) -> None:
    assert resolve_role(value) is Role(value)


@pytest.mark.parametrize("value", ["admin", "Farmer", "", None])
def test_unknown_roles_are_rejected(value) -> None:
    with pytest.raises(InvalidRole):
        resolve_role(value)
