import enum

from sqlalchemy import Column, String, Text, Enum

from models.base_model import Base, BaseModel
from utils.security import hash_password, verify_password


class SessionState(enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class User(BaseModel, Base):
    __tablename__ = "users"
    username = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    full_name = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)
    avatar_url = Column(String(1024), nullable=False)
    cover_image_url = Column(String(1024), nullable=False, default="")
    # current rotating refresh token; None while logged out
    refresh_token = Column(Text, nullable=True)
    session_state = Column(
        Enum(SessionState, values_callable=lambda e: [m.value for m in e], native_enum=False),
        nullable=False,
        default=SessionState.UNAUTHENTICATED,
    )

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")

    @password.setter
    def password(self, plaintext: str):
        self.password_hash = hash_password(plaintext)

    def is_password_correct(self, password: str) -> bool:
        return verify_password(password, self.password_hash)

    def __repr__(self):
        return f"<User {self.username}>"
