"""
Schemas for the Thai chat app

Record models describe what the in-memory store keeps for each collection
(users, messages, themes). Request models validate incoming JSON bodies.
Attributes are snake_case in Python and camelCase on the wire.
"""

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from typing import Annotated, Literal, Optional, Union


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def check_email(value: str) -> str:
    # format check only; the caller's text is kept as typed
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValueError(str(exc))
    return value


EmailAddress = Annotated[str, AfterValidator(check_email)]


# ------------ Records ------------

class User(CamelModel):
    id: int = Field(..., description="Unique numeric id")
    username: str = Field(..., description="Unique username")
    email: str = Field(..., description="Unique email")
    password_hash: str = Field(..., description="Salted password hash, never returned")
    first_name: str
    last_name: str
    avatar: Optional[str] = Field(None, description="Avatar image URL")
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    date_of_birth: Optional[str] = None
    is_online: bool = Field(default=True)
    last_activity: str
    created_at: str


class Message(CamelModel):
    id: int
    content: str = Field(..., description="Text content, may be empty for attachment-only posts")
    username: str = Field(..., description="Author display name at the time of posting")
    user_id: int = Field(..., description="Id of the owning user")
    created_at: str
    updated_at: Optional[str] = None
    attachment_url: Optional[str] = None
    attachment_type: Optional[Literal["image", "file", "gif"]] = None
    attachment_name: Optional[str] = None


class Theme(CamelModel):
    id: int
    name: str
    primary_color: str
    secondary_color: str
    background_color: str
    message_background_self: str
    message_background_other: str
    text_color: str


# ------------ Requests ------------

class SignupRequest(CamelModel):
    username: str = Field(..., min_length=1)
    email: EmailAddress
    password: str = Field(..., min_length=6)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)


class SigninRequest(CamelModel):
    username: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailAddress] = None
    password: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def require_identifier(self):
        if not self.username and not self.email:
            raise ValueError("กรุณากรอกชื่อผู้ใช้หรืออีเมล")
        return self


class MessageCreate(CamelModel):
    content: str = ""
    username: str = Field(..., min_length=1)
    user_id: int = Field(..., strict=True)
    attachment_url: Optional[str] = None
    attachment_type: Optional[Literal["image", "file", "gif"]] = None
    attachment_name: Optional[str] = None

    @model_validator(mode="after")
    def require_content_or_attachment(self):
        # attachment-only posts (image/gif) may leave content blank
        if not self.content.strip() and not (self.attachment_url and self.attachment_type):
            raise ValueError("กรุณาระบุข้อความหรือแนบไฟล์")
        return self


class MessageUpdate(CamelModel):
    content: str = Field(..., min_length=1)


class ThemeChange(CamelModel):
    theme_id: Optional[Union[int, str]] = Field(None, description="Theme id, or its name")
    name: Optional[str] = None

    @model_validator(mode="after")
    def require_theme(self):
        if self.theme_id is None and not self.name:
            raise ValueError("กรุณาเลือกธีม")
        return self

    @property
    def key(self) -> Union[int, str]:
        return self.theme_id if self.theme_id is not None else self.name
