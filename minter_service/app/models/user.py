from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func

from minter_service.app.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    handle = Column(String, unique=True, index=True, nullable=False)
    # opaque HandCash token; the only credential we hold for the user
    auth_token = Column(String, index=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
