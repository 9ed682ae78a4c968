from typing import Optional
from sqlalchemy.orm import Session, selectinload

from app.crud.base import CRUDBase
from app.models.institute import Institute
from app.models.user import User
from app.schemas.institute import InstituteCreate, InstituteUpdate


class CRUDInstitute(CRUDBase[Institute, InstituteCreate, InstituteUpdate]):
    search_fields = ("name", "code", "email")

    def query(self, db: Session):
        return db.query(Institute).options(selectinload(Institute.zone))

    def get_by_code(self, db: Session, *, code: str) -> Optional[Institute]:
        return db.query(Institute).filter(Institute.code == code).first()

    def count_users(self, db: Session, *, institute_id: int) -> int:
        return db.query(User).filter(User.institute_id == institute_id).count()


institute = CRUDInstitute(Institute)
