from sqlalchemy import func, or_, select

from app.tcg.core.ids import parse_uuid
from app.tcg.db.models import User


class UserRepository:
    def __init__(self, db):
        self.db = db

    def get_by_id(self, user_id):
        parsed = parse_uuid(user_id)
        if parsed is None:
            return None
        return self.db.get(User, parsed)

    def get_by_username_or_email(self, identifier: str):
        normalized = identifier.strip().lower()
        return (
            self.db.execute(
                select(User).where(
                    or_(func.lower(User.username) == normalized, func.lower(User.email) == normalized)
                )
            )
            .scalars()
            .first()
        )

    def count_assigned_to_store(self, store_id) -> int:
        query = select(func.count()).select_from(User).where(User.assigned_store_id == store_id, User.is_active.is_(True))
        return int(self.db.execute(query).scalar_one())
