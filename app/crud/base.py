from typing import Any, Dict, Generic, List, Optional, Sequence, Tuple, Type, TypeVar, Union
from pydantic import BaseModel
from sqlalchemy import or_
from sqlalchemy.orm import Query, Session
from app.core.database import Base
from datetime import datetime

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


def escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    search_fields: Sequence[str] = ()

    def __init__(self, model: Type[ModelType]):
        self.model = model

    def query(self, db: Session) -> Query:
        return db.query(self.model)

    def get(self, db: Session, id: Any) -> Optional[ModelType]:
        return db.query(self.model).filter(self.model.id == id).first()

    def apply_search(self, query: Query, search: Optional[str]) -> Query:
        if not search or not self.search_fields:
            return query
        pattern = f"%{escape_like(search)}%"
        return query.filter(or_(*[
            getattr(self.model, field).ilike(pattern, escape="\\") for field in self.search_fields
        ]))

    def paginate(self, query: Query, *, page: int, limit: int, order_by: Sequence[Any] = ()) -> Tuple[List[ModelType], int]:
        total = query.order_by(None).count()
        if order_by:
            query = query.order_by(*order_by)
        items = query.offset((page - 1) * limit).limit(limit).all()
        return items, total

    def create(self, db: Session, *, obj_in: Union[CreateSchemaType, Dict[str, Any]], commit: bool = True) -> ModelType:
        obj_in_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        db_obj = self.model(**obj_in_data)
        db.add(db_obj)
        db.flush() # Populate ID
        if commit:
            db.commit()
        db.refresh(db_obj)
        return db_obj

    def update(
        self, db: Session, *, db_obj: ModelType, obj_in: Union[UpdateSchemaType, Dict[str, Any]]
    ) -> ModelType:
        columns = {column.name for column in self.model.__table__.columns}
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            if field in columns:
                setattr(db_obj, field, value)
        if hasattr(db_obj, "updated_at"):
            db_obj.updated_at = datetime.utcnow()
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def delete(self, db: Session, *, db_obj: ModelType) -> ModelType:
        db.delete(db_obj)
        db.commit()
        return db_obj

    def bulk_update_status(self, db: Session, *, ids: Sequence[int], is_active: bool) -> int:
        if not ids:
            return 0
        values = {"status": "active" if is_active else "inactive"}
        if hasattr(self.model, "updated_at"):
            values["updated_at"] = datetime.utcnow()
        count = (
            db.query(self.model)
            .filter(self.model.id.in_(list(ids)))
            .update(values, synchronize_session=False)
        )
        db.commit()
        return count

    def bulk_delete(self, db: Session, *, ids: Sequence[int]) -> int:
        if not ids:
            return 0
        count = db.query(self.model).filter(self.model.id.in_(list(ids))).delete(synchronize_session=False)
        db.commit()
        return count
