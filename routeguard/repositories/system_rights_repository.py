"""Repository for per-user special-rights rows."""

import logging
from typing import Dict, Mapping

from sqlalchemy.orm import Session

from ..models.user import SystemRight
from ..services.authorization import GrantRow

logger = logging.getLogger(__name__)


class SystemRightsRepository:
    """Data access for ``system_rights``, keyed by ``(user_id, tool)``.

    Database errors are not caught here; they reach the caller as raised.
    """

    def __init__(self, db: Session):
        self.db = db

    def load_user_grants(self, user_id: str) -> Dict[str, GrantRow]:
        """All grants of a user, keyed by tool."""
        rows = (
            self.db.query(SystemRight)
            .filter(SystemRight.user_id == user_id)
            .order_by(SystemRight.tool)
            .all()
        )
        return {
            row.tool: GrantRow(
                access=row.access, read=row.read, write=row.write, delete=row.delete,
            )
            for row in rows
        }

    def replace_user_grants(self, user_id: str, grants: Mapping[str, GrantRow]) -> int:
        """Delete every grant of ``user_id``, then insert ``grants``.

        The delete and the insert are committed separately. A failure in
        between leaves the user with no grants at all.

        Returns:
            Number of rows written.
        """
        removed = (
            self.db.query(SystemRight)
            .filter(SystemRight.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()

        rows = [
            SystemRight(
                user_id=user_id,
                tool=tool,
                access=grant.access,
                read=grant.read,
                write=grant.write,
                delete=grant.delete,
            )
            for tool, grant in grants.items()
        ]
        if rows:
            self.db.add_all(rows)
            self.db.commit()

        logger.info(
            "Replaced special rights",
            extra={"user_id": user_id, "removed": removed, "written": len(rows)},
        )
        return len(rows)
