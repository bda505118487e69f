from sqlalchemy import or_, select

from app.tcg.core.config import settings
from app.tcg.core.enums import PARTNER
from app.tcg.core.security import get_password_hash
from app.tcg.db.models import User


def _get_or_create_partner(db):
    user = (
        db.execute(
            select(User).where(
                or_(User.username == settings.PARTNER_USERNAME, User.email == settings.PARTNER_EMAIL)
            )
        )
        .scalars()
        .first()
    )
    if user:
        return user
    user = User(
        username=settings.PARTNER_USERNAME,
        email=settings.PARTNER_EMAIL,
        hashed_password=get_password_hash(settings.PARTNER_PASSWORD),
        role=PARTNER,
        assigned_store_id=None,
        is_active=True,
    )
    db.add(user)
    return user


def run_seed(db):
    user = _get_or_create_partner(db)
    db.commit()
    return user


def main() -> int:
    from app.tcg.db.session import SessionLocal

    with SessionLocal() as db:
        user = run_seed(db)
        print(f"Partner account ready: {user.username}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
