from sqlalchemy import Column, Integer, String, DateTime, Text, Index
from datetime import datetime
from .db import Base

EMAIL_INDEX = "idx_users_email"
USERNAME_UNIQUE_INDEX = "uq_users_username"


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    username = Column(String(50), nullable=False)
    email = Column(String(100), unique=True, nullable=False)
    # bcrypt hash, never serialized
    password = Column(Text, nullable=False)
    profile_image = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index(EMAIL_INDEX, 'email'),
        # Only created when USERNAME_UNIQUE is enabled, see schema.ensure_schema
        Index(USERNAME_UNIQUE_INDEX, 'username', unique=True),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"
