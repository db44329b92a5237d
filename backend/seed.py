"""Default rows inserted at startup when the tables are empty."""

import logging

from sqlalchemy.orm import Session

from backend.auth.passwords import hash_password
from backend.core import config
from backend.models.doctor import Doctor
from backend.models.user import User

logger = logging.getLogger(__name__)


def seed_doctors(db: Session, names: list[str]) -> int:
    if db.query(Doctor.id).first() is not None:
        return 0

    for name in names:
        db.add(Doctor(name=name))
    db.commit()
    logger.info('Seeded %d default doctors.', len(names))
    return len(names)


def seed_admin_user(db: Session, username: str, password: str) -> bool:
    if not username or not password:
        return False

    if db.query(User.id).filter(User.username == username).first() is not None:
        return False

    db.add(User(username=username, hashed_password=hash_password(password)))
    db.commit()
    logger.info('Seeded initial user %s.', username)
    return True


def seed_default_data(db: Session) -> None:
    seed_doctors(db, config.DEFAULT_DOCTORS)
    seed_admin_user(db, config.DEFAULT_ADMIN_USERNAME, config.DEFAULT_ADMIN_PASSWORD)
