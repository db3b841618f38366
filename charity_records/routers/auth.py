from fastapi import APIRouter, Depends, Form, HTTPException
from fastapi.responses import JSONResponse

from charity_records import crud
from charity_records.auth import authenticate, get_store, require_manager, require_user
from charity_records.config import settings
from charity_records.schemas import IdList, PasswordChange, User, UserCreate, UserUpdate
from charity_records.security import create_session_token
from charity_records.store import DocumentStore

router = APIRouter()


def public_user(user: User) -> dict:
    return user.model_dump(exclude={"password"})


# --- LOGIN / LOGOUT ---

@router.post("/login")
async def login_submit(
    store: DocumentStore = Depends(get_store),
    username: str = Form(""),
    password: str = Form(""),
):
    user = authenticate(store.document, username, password)
    if not user:
        raise HTTPException(status_code=400, detail="اسم المستخدم أو كلمة المرور غير صحيحة.")

    response = JSONResponse(public_user(user))
    response.set_cookie(
        key="session_token",
        value=create_session_token(user.username),
        httponly=True,
        max_age=settings.SESSION_MAX_AGE,
    )
    return response


@router.get("/logout")
async def logout():
    response = JSONResponse({"detail": "Logged out"})
    response.delete_cookie("session_token")
    return response


@router.get("/me")
async def me(user: User = Depends(require_user)):
    return public_user(user)


# --- USER MANAGEMENT (MANAGERS ONLY) ---

@router.get("/users")
async def list_users(store: DocumentStore = Depends(get_store), user: User = Depends(require_manager)):
    return [public_user(u) for u in store.document.users]


@router.post("/users", status_code=201)
async def create_new_user(
    data: UserCreate,
    store: DocumentStore = Depends(get_store),
    user: User = Depends(require_manager),
):
    document, created = crud.create_user(store.document, data)
    store.commit(document)
    return public_user(created)


@router.put("/users/{user_id}")
async def edit_user(
    user_id: int,
    data: UserUpdate,
    store: DocumentStore = Depends(get_store),
    user: User = Depends(require_manager),
):
    store.commit(crud.update_user(store.document, user_id, data))
    return public_user(store.document.get_user(user_id))


@router.post("/users/{user_id}/password")
async def change_password(
    user_id: int,
    data: PasswordChange,
    store: DocumentStore = Depends(get_store),
    user: User = Depends(require_manager),
):
    store.commit(crud.change_user_password(store.document, user_id, data.password))
    return {"detail": "Password changed"}


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: int,
    store: DocumentStore = Depends(get_store),
    user: User = Depends(require_manager),
):
    document, deleted = crud.delete_users(store.document, [user_id], acting_user_id=user.id)
    store.commit(document)
    return {"deleted": deleted}


@router.post("/users/delete")
async def bulk_delete_users(
    data: IdList,
    store: DocumentStore = Depends(get_store),
    user: User = Depends(require_manager),
):
    document, deleted = crud.delete_users(store.document, data.ids, acting_user_id=user.id)
    store.commit(document)
    return {"deleted": deleted}
