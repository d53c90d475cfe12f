"""
In-memory store for the chat app

One Store instance owns the users, messages and themes collections plus the
active theme pointer. Records are kept as plain dicts in their camelCase wire
shape, built from the pydantic models in schemas.py. Nothing is persisted:
a new process starts again from the seed data below.
"""

import time
from datetime import datetime, timezone
from typing import List, Optional

from schemas import User as UserSchema, Message as MessageSchema, Theme as ThemeSchema
from security import get_password_hash

AVATAR_URL = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"

SEED_USERS = [
    {
        "id": 18581680,
        "username": "panida",
        "email": "panida@gmail.com",
        "password": "12345qazAZ",
        "first_name": "Panida",
        "last_name": "ใสใจ",
        "avatar": AVATAR_URL.format(seed="panida"),
        "bio": "รักการเขียนโปรแกรม และการสร้างแอปแชท",
        "location": "กรุงเทพฯ",
        "website": "https://github.com/panida",
        "date_of_birth": "1995-05-15",
        "created_at": "2025-07-22T12:00:00.000Z",
    },
    {
        "id": 71157855,
        "username": "kuyyy",
        "email": "kuy@gmail.com",
        "password": "12345qazAZ",
        "first_name": "Kuy",
        "last_name": "Kuy",
        "avatar": AVATAR_URL.format(seed="kuy"),
        "bio": "Hello world! 👋 ชื่อจริงของผมคือ กุย",
        "location": "เชียงใหม่",
        "website": "https://github.com/kuyyy",
        "date_of_birth": "1992-10-10",
        "created_at": "2025-07-23T03:09:13.000Z",
    },
    {
        "id": 12345678,
        "username": "admin",
        "email": "admin@thaichat.com",
        "password": "admin123",
        "first_name": "Admin",
        "last_name": "System",
        "avatar": AVATAR_URL.format(seed="admin"),
        "bio": "ผู้ดูแลระบบแชทไทย",
        "location": "กรุงเทพฯ",
        "website": "https://thaichat.com",
        "date_of_birth": "1990-01-01",
        "created_at": "2025-07-22T10:00:00.000Z",
    },
]

SEED_MESSAGES = [
    {
        "id": 1,
        "content": "สวัสดีครับ ยินดีต้อนรับสู่ห้องแชท!",
        "username": "Panida ใสใจ",
        "user_id": 18581680,
        "created_at": "2025-07-22T12:00:00.000Z",
    },
    {
        "id": 2,
        "content": "สวัสดีครับ ผมชื่อ Kuy",
        "username": "kuyyy",
        "user_id": 71157855,
        "created_at": "2025-07-23T03:10:00.000Z",
    },
    {
        "id": 3,
        "content": "แอปนี้ทำงานได้ดีมากเลย!",
        "username": "Panida ใสใจ",
        "user_id": 18581680,
        "created_at": "2025-07-23T03:15:00.000Z",
    },
]

SEED_THEMES = [
    {
        "id": 1,
        "name": "Classic Blue",
        "primary_color": "#3b82f6",
        "secondary_color": "#1e40af",
        "background_color": "#ffffff",
        "message_background_self": "#3b82f6",
        "message_background_other": "#f1f5f9",
        "text_color": "#1e293b",
    },
    {
        "id": 2,
        "name": "Sunset Orange",
        "primary_color": "#f97316",
        "secondary_color": "#ea580c",
        "background_color": "#ffffff",
        "message_background_self": "#f97316",
        "message_background_other": "#fed7aa",
        "text_color": "#9a3412",
    },
    {
        "id": 3,
        "name": "Forest Green",
        "primary_color": "#059669",
        "secondary_color": "#047857",
        "background_color": "#ffffff",
        "message_background_self": "#059669",
        "message_background_other": "#bbf7d0",
        "text_color": "#064e3b",
    },
    {
        "id": 4,
        "name": "Purple Dreams",
        "primary_color": "#9333ea",
        "secondary_color": "#7c3aed",
        "background_color": "#ffffff",
        "message_background_self": "#9333ea",
        "message_background_other": "#e9d5ff",
        "text_color": "#581c87",
    },
]


def utcnow_iso() -> str:
    """UTC timestamp in the same shape as the seed data, e.g. 2025-07-22T12:00:00.000Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def to_document(model) -> dict:
    return model.model_dump(by_alias=True)


def seed_users() -> List[dict]:
    now = utcnow_iso()
    users = []
    for data in SEED_USERS:
        fields = {k: v for k, v in data.items() if k != "password"}
        user = UserSchema(
            **fields,
            password_hash=get_password_hash(data["password"]),
            is_online=True,
            last_activity=now,
        )
        users.append(to_document(user))
    return users


def seed_messages() -> List[dict]:
    return [to_document(MessageSchema(**data)) for data in SEED_MESSAGES]


def seed_themes() -> List[dict]:
    return [to_document(ThemeSchema(**data)) for data in SEED_THEMES]


class Store:
    """Owner of every mutable collection for one running process."""

    def __init__(self, seed: bool = True):
        self.users: List[dict] = seed_users() if seed else []
        self.messages: List[dict] = seed_messages() if seed else []
        self.themes: List[dict] = seed_themes() if seed else []
        self.active_theme_id: Optional[int] = self.themes[0]["id"] if self.themes else None
        self.last_modified = int(time.time() * 1000)

    def get_users(self) -> List[dict]:
        return self.users

    def get_messages(self) -> List[dict]:
        return self.messages

    def get_themes(self) -> List[dict]:
        return self.themes

    def find_user(self, user_id) -> int:
        for index, user in enumerate(self.users):
            if user["id"] == user_id:
                return index
        return -1

    def find_message(self, message_id) -> int:
        for index, message in enumerate(self.messages):
            if message["id"] == message_id:
                return index
        return -1

    def active_theme(self) -> Optional[dict]:
        for theme in self.themes:
            if theme["id"] == self.active_theme_id:
                return theme
        # stale pointer resolves to the first catalog entry
        return self.themes[0] if self.themes else None

    def set_active_theme(self, theme_id: int) -> dict:
        for theme in self.themes:
            if theme["id"] == theme_id:
                self.active_theme_id = theme_id
                self.touch()
                return theme
        raise KeyError(theme_id)

    def touch(self):
        self.last_modified = int(time.time() * 1000)
