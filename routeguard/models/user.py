"""User and SystemRight models.

A user's ``access_level`` drives level-rights checks. ``SystemRight`` rows
hold the per-tool special rights (access/read/write/delete flags), one row
per ``(user_id, tool)``.
"""

from sqlalchemy import Column, String, DateTime, Boolean, Integer, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class User(Base):
    """Account whose access level and special rights are checked per request.

    An access level equal to the configured superuser level (100 by
    default) passes every level-rights check.
    """

    __tablename__ = "users"

    user_id = Column(String(50), primary_key=True)
    display_name = Column(String(255), nullable=False, default="Default User")
    access_level = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    rights = relationship(
        "SystemRight",
        back_populates="user",
        cascade="all, delete-orphan",
    )


class SystemRight(Base):
    """Special-rights grant for one tool.

    ``tool`` is the key a route declares in ``special_rights``.
    """

    __tablename__ = "system_rights"

    user_id = Column(
        String(50),
        ForeignKey("users.user_id", ondelete="CASCADE"),
        primary_key=True,
    )
    tool = Column(String(100), primary_key=True)
    access = Column(Boolean, nullable=False, default=False)
    read = Column(Boolean, nullable=False, default=False)
    write = Column(Boolean, nullable=False, default=False)
    delete = Column(Boolean, nullable=False, default=False)

    user = relationship("User", back_populates="rights")
