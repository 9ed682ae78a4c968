from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from app.crud.base import CRUDBase
from app.models.user import User
from app.schemas.user import UserCreate, UserUpdate


class CRUDUser(CRUDBase[User, UserCreate, UserUpdate]):
    search_fields = ("first_name", "last_name", "email")

    def query(self, db: Session):
        return db.query(User).options(selectinload(User.institute), selectinload(User.zone))

    def get_by_email(self, db: Session, *, email: str) -> Optional[User]:
        return db.query(User).filter(func.lower(User.email) == email.lower()).first()


user = CRUDUser(User)
