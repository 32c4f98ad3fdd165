import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Request, Response, status

from restapi.core.domain.user import User, UserStorage
from restapi.core.errors import PersistenceError
from restapi.infrastructure.security import passwords
from restapi.interfaces.api.errors import ErrorMappingRoute
from restapi.interfaces.api.schemas import (
    ErrorResponse,
    UserCreate,
    UserPatch,
    UserPublic,
    UserUpdate,
)

USERS_URL = "/users"
USER_URL = "/users/{user_id}"

router = APIRouter(
    tags=["users"],
    route_class=ErrorMappingRoute,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
logger = logging.getLogger("users")


def get_user_storage(request: Request) -> UserStorage:
    storage = getattr(request.app.state, "user_storage", None)
    if storage is None:
        raise PersistenceError("user storage is not initialized")
    return storage


def _resolve_password_hash(
    password: Optional[str], password_hash: Optional[str]
) -> Optional[str]:
    if password is not None:
        return passwords.hash_password(password)
    return password_hash


def _to_public(user: User) -> UserPublic:
    return UserPublic(id=user.id, username=user.username, email=user.email)


@router.get(USERS_URL, response_model=List[UserPublic])
def list_users(storage: UserStorage = Depends(get_user_storage)) -> List[UserPublic]:
    return [_to_public(u) for u in storage.find_all()]


@router.post(
    USERS_URL, response_model=UserPublic, status_code=status.HTTP_201_CREATED
)
def create_user(
    payload: UserCreate,
    response: Response,
    storage: UserStorage = Depends(get_user_storage),
) -> UserPublic:
    user = User(
        username=payload.username,
        email=payload.email,
        password_hash=_resolve_password_hash(payload.password, payload.password_hash)
        or "",
    )
    user.id = storage.create(user)
    logger.info("User created", extra={"user_id": user.id})
    response.headers["Location"] = f"{USERS_URL}/{user.id}"
    return _to_public(user)


@router.get(USER_URL, response_model=UserPublic)
def get_user(user_id: str, storage: UserStorage = Depends(get_user_storage)) -> UserPublic:
    return _to_public(storage.find_one(user_id))


@router.put(USER_URL, status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def update_user(
    user_id: str,
    payload: UserUpdate,
    storage: UserStorage = Depends(get_user_storage),
) -> Response:
    # The path is the only source of the identifier.
    user = User(
        id=user_id,
        username=payload.username,
        email=payload.email,
        password_hash=_resolve_password_hash(payload.password, payload.password_hash)
        or "",
    )
    storage.update(user)
    logger.info("User updated", extra={"user_id": user_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    USER_URL, status_code=status.HTTP_204_NO_CONTENT, response_class=Response
)
def partially_update_user(
    user_id: str,
    payload: UserPatch,
    storage: UserStorage = Depends(get_user_storage),
) -> Response:
    fields = {}
    if payload.username is not None:
        fields["username"] = payload.username
    if payload.email is not None:
        fields["email"] = payload.email
    password_hash = _resolve_password_hash(payload.password, payload.password_hash)
    if password_hash is not None:
        fields["password_hash"] = password_hash

    storage.partial_update(user_id, fields)
    logger.info(
        "User partially updated",
        extra={"user_id": user_id, "fields": sorted(fields)},
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    USER_URL, status_code=status.HTTP_204_NO_CONTENT, response_class=Response
)
def delete_user(user_id: str, storage: UserStorage = Depends(get_user_storage)) -> Response:
    storage.delete(user_id)
    logger.info("User deleted", extra={"user_id": user_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
