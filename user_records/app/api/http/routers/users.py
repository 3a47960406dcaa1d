"""User API router with CRUD operations."""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from user_records.app.api.http.deps import get_user_storage
from user_records.app.core.exceptions import UserNotFoundError
from user_records.app.core.storage import UserStorage
from user_records.app.entities.user import User, UserData, UserPatch

router = APIRouter(prefix="/users", tags=["users"])

USER_NOT_FOUND = "User not found"


@router.get("", response_model=list[User])
@router.get("/", response_model=list[User], include_in_schema=False)
def list_users(
    storage: UserStorage = Depends(get_user_storage),
) -> list[User]:
    """List all users."""
    return storage.list_all()


@router.get("/{user_id}", response_model=User)
def get_user(
    user_id: int,
    storage: UserStorage = Depends(get_user_storage),
) -> User:
    """Get a user by ID."""
    try:
        return storage.get(user_id)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail=USER_NOT_FOUND)


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
@router.post(
    "/",
    response_model=User,
    status_code=status.HTTP_201_CREATED,
    include_in_schema=False,
)
def create_user(
    user: UserData,
    response: Response,
    storage: UserStorage = Depends(get_user_storage),
) -> User:
    """Create a new user."""
    created = storage.create(user)
    response.headers["Location"] = f"/users/{created.id}"
    return created


@router.put("/{user_id}", response_model=User)
def update_user(
    user_id: int,
    user: UserData,
    storage: UserStorage = Depends(get_user_storage),
) -> User:
    """Replace a user. The path id wins over any id in the body."""
    try:
        return storage.update(user_id, user)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail=USER_NOT_FOUND)


@router.patch("/{user_id}", response_model=User)
def patch_user(
    user_id: int,
    fields: UserPatch | None = None,
    storage: UserStorage = Depends(get_user_storage),
) -> User:
    """Partially update a user's username, email or phone."""
    try:
        return storage.patch(user_id, fields or UserPatch())
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail=USER_NOT_FOUND)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
def delete_user(
    user_id: int,
    storage: UserStorage = Depends(get_user_storage),
) -> Response:
    """Delete a user."""
    try:
        storage.delete(user_id)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail=USER_NOT_FOUND)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
