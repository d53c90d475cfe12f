import os
import logging
import time
from typing import Any, Dict, Optional

from fastapi import APIRouter, FastAPI, HTTPException, Depends, Body, Query, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from database import Store, AVATAR_URL, to_document, utcnow_iso
from schemas import (
    User as UserSchema,
    Message as MessageSchema,
    SignupRequest,
    SigninRequest,
    MessageCreate,
    MessageUpdate,
    ThemeChange,
)
from security import verify_password, get_password_hash

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ALLOW_ORIGINS = [o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()]
MESSAGE_PAGE_SIZE = int(os.getenv("MESSAGE_PAGE_SIZE", "50"))
SEED_DEMO_DATA = os.getenv("SEED_DEMO_DATA", "true").lower() == "true"

PRIVATE_USER_FIELDS = ("password", "passwordHash")

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
LOGGER = logging.getLogger("chat")

router = APIRouter()

# ------------ Helpers ------------

def get_store(request: Request) -> Store:
    return request.app.state.store


def to_public_user(user: dict) -> dict:
    return {k: v for k, v in user.items() if k not in PRIVATE_USER_FIELDS}


def next_user_id(users) -> int:
    taken = {u["id"] for u in users}
    user_id = int(time.time() * 1000)
    while user_id in taken:
        user_id += 1
    return user_id


def next_message_id(messages) -> int:
    taken = {m["id"] for m in messages}
    message_id = max(taken, default=0) + 1
    while message_id in taken:
        message_id += 1
    return message_id


def parse_limit(raw: Optional[str]) -> int:
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        return MESSAGE_PAGE_SIZE
    return limit if limit > 0 else MESSAGE_PAGE_SIZE


def theme_payload(store: Store) -> dict:
    return {"currentTheme": store.active_theme(), "availableThemes": store.get_themes()}

# ------------ Error envelope ------------

async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # bare OPTIONS (no CORS preflight headers) is answered for every route
    if request.method == "OPTIONS" and exc.status_code == 405:
        return Response(status_code=200)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"message": "ข้อมูลไม่ถูกต้อง", "errors": jsonable_encoder(exc.errors())},
    )


async def catch_unhandled_errors(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception:
        LOGGER.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"message": "เกิดข้อผิดพลาดในเซิร์ฟเวอร์"})

# ------------ Auth & Users ------------

@router.post("/auth/signup", status_code=201)
def signup(data: SignupRequest, store: Store = Depends(get_store)):
    users = store.get_users()
    if any(u["username"] == data.username or u["email"] == data.email for u in users):
        raise HTTPException(status_code=409, detail="ชื่อผู้ใช้หรืออีเมลนี้มีอยู่แล้ว")

    now = utcnow_iso()
    user = UserSchema(
        id=next_user_id(users),
        username=data.username,
        email=data.email,
        password_hash=get_password_hash(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
        avatar=AVATAR_URL.format(seed=data.username),
        is_online=True,
        last_activity=now,
        created_at=now,
    )
    doc = to_document(user)
    users.append(doc)
    store.touch()
    LOGGER.info("Signed up user %s (%s), total users: %s", doc["id"], doc["username"], len(users))
    return to_public_user(doc)


@router.post("/auth/signin")
def signin(data: SigninRequest, store: Store = Depends(get_store)):
    user = next(
        (
            u for u in store.get_users()
            if (data.username and u["username"] == data.username)
            or (data.email and u["email"] == data.email)
        ),
        None,
    )
    if not user or not verify_password(data.password, user.get("passwordHash", "")):
        LOGGER.warning("Failed signin for %s", data.username or data.email)
        raise HTTPException(status_code=401, detail="ชื่อผู้ใช้หรือรหัสผ่านไม่ถูกต้อง")

    user["lastActivity"] = utcnow_iso()
    user["isOnline"] = True
    store.touch()
    LOGGER.info("User %s signed in", user["id"])
    return to_public_user(user)


@router.get("/users/count")
def count_users(store: Store = Depends(get_store)):
    return {"count": len(store.get_users())}


@router.get("/users/{user_id}/profile")
def get_profile(user_id: int, store: Store = Depends(get_store)):
    index = store.find_user(user_id)
    if index == -1:
        raise HTTPException(status_code=404, detail="ไม่พบผู้ใช้งาน")
    return to_public_user(store.get_users()[index])


@router.put("/users/{user_id}/profile")
def update_profile(user_id: int, update: Dict[str, Any] = Body(...), store: Store = Depends(get_store)):
    users = store.get_users()
    index = store.find_user(user_id)
    if index == -1:
        raise HTTPException(status_code=404, detail="ไม่พบผู้ใช้งาน")

    # shallow merge: any wire field may be overwritten, the hash only through "password"
    update_dict = {k: v for k, v in update.items() if k not in PRIVATE_USER_FIELDS}
    if update.get("password"):
        update_dict["passwordHash"] = get_password_hash(str(update["password"]))
    updated = {**users[index], **update_dict}
    users[index] = updated
    store.touch()
    LOGGER.info("Updated profile of user %s: %s", user_id, sorted(update_dict))
    return {**to_public_user(updated), "message": "อัปเดตโปรไฟล์เรียบร้อยแล้ว"}

# ------------ Messages ------------

@router.get("/messages")
def list_messages(limit: Optional[str] = Query(None), store: Store = Depends(get_store)):
    messages = store.get_messages()
    page = messages[-parse_limit(limit):]
    LOGGER.debug("Returning %s of %s messages", len(page), len(messages))
    return page


@router.post("/messages", status_code=201)
def create_message(msg: MessageCreate, store: Store = Depends(get_store)):
    messages = store.get_messages()
    message = MessageSchema(
        id=next_message_id(messages),
        content=msg.content.strip(),
        username=msg.username,
        user_id=msg.user_id,
        attachment_url=msg.attachment_url or None,
        attachment_type=msg.attachment_type or None,
        attachment_name=msg.attachment_name or None,
        created_at=utcnow_iso(),
        updated_at=None,
    )
    doc = to_document(message)
    messages.append(doc)
    store.touch()
    LOGGER.info("Created message %s, total messages: %s", doc["id"], len(messages))
    return doc


@router.put("/messages/{message_id}")
def update_message(message_id: int, data: MessageUpdate, store: Store = Depends(get_store)):
    index = store.find_message(message_id)
    if index == -1:
        raise HTTPException(status_code=404, detail="ไม่พบข้อความ")

    # edits are not restricted to the author, unlike deletes
    message = store.get_messages()[index]
    if not data.content.strip() and not (message["attachmentUrl"] and message["attachmentType"]):
        raise HTTPException(status_code=400, detail="กรุณาระบุข้อความหรือแนบไฟล์")
    message["content"] = data.content
    message["updatedAt"] = utcnow_iso()
    store.touch()
    LOGGER.info("Edited message %s", message_id)
    return {**message, "message": "แก้ไขข้อความเรียบร้อยแล้ว"}


@router.delete("/messages/{message_id}", status_code=204)
def delete_message(
    message_id: int,
    user_id: Optional[int] = Query(None, alias="userId"),
    store: Store = Depends(get_store),
):
    if not user_id:
        raise HTTPException(status_code=400, detail="ต้องระบุ User ID")

    messages = store.get_messages()
    index = store.find_message(message_id)
    if index == -1:
        raise HTTPException(status_code=404, detail="ไม่พบข้อความ")
    owner_id = messages[index]["userId"]
    if owner_id != user_id:
        LOGGER.warning("User %s tried to delete message %s owned by %s", user_id, message_id, owner_id)
        raise HTTPException(status_code=403, detail="คุณไม่สามารถลบข้อความของผู้อื่นได้")

    del messages[index]
    store.touch()
    LOGGER.info("Deleted message %s by user %s, remaining: %s", message_id, user_id, len(messages))
    return Response(status_code=204)

# ------------ Theme ------------

@router.get("/theme")
def get_theme(store: Store = Depends(get_store)):
    return theme_payload(store)


@router.api_route("/theme", methods=["POST", "PUT"])
def change_theme(data: ThemeChange, store: Store = Depends(get_store)):
    themes = store.get_themes()
    key = data.key
    # id first, then name
    selected = next((t for t in themes if str(t["id"]) == str(key)), None)
    if selected is None:
        selected = next((t for t in themes if t["name"] == key), None)
    if selected is None:
        raise HTTPException(status_code=404, detail="ไม่พบธีมที่เลือก")

    store.set_active_theme(selected["id"])
    LOGGER.info("Active theme changed to %s (%s)", selected["id"], selected["name"])
    return {"success": True, "message": "เปลี่ยนธีมสำเร็จ", **theme_payload(store)}

# ------------ Health ------------

@router.get("/")
def root():
    return {"message": "Chat backend running"}

# ------------ App ------------

def create_app(seed: Optional[bool] = None) -> FastAPI:
    app = FastAPI(title="Thai Chat API")
    app.state.store = Store(seed=SEED_DEMO_DATA if seed is None else seed)

    # added first, so it runs inside CORSMiddleware
    app.middleware("http")(catch_unhandled_errors)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.include_router(router)
    return app


app = create_app()
