# app/repositories/base_repository.py
from typing import TypeVar, Generic, Optional, Type, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from app.core.database import Base
from app.core.exceptions import NotFoundError

# Type générique pour les modèles
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Repository générique pour les opérations CRUD de base"""

    def __init__(self, model: Type[ModelType], db: Session):
        self.model = model
        self.db = db

    def get_by_id(self, id: int) -> Optional[ModelType]:
        """Récupère un enregistrement par son ID"""
        try:
            return self.db.query(self.model).filter(self.model.id == id).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise e

    def get_by_id_or_raise(self, id: int) -> ModelType:
        """Récupère un enregistrement par son ID, NotFoundError sinon"""
        db_obj = self.get_by_id(id)
        if db_obj is None:
            raise NotFoundError(f"{self.model.__name__} {id} not found")
        return db_obj

    def get_by_field(self, field: str, value: Any) -> Optional[ModelType]:
        """Récupère un enregistrement par un champ spécifique"""
        try:
            return self.db.query(self.model).filter(getattr(self.model, field) == value).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise e

    def get_by_name_or_raise(self, name: str) -> ModelType:
        """Récupère un enregistrement par son nom, NotFoundError sinon"""
        db_obj = self.get_by_field("name", name)
        if db_obj is None:
            raise NotFoundError(f"Failed to get {self.model.__tablename__[:-1]} by name({name})")
        return db_obj

    def create(self, obj_data: Dict[str, Any]) -> ModelType:
        """Crée un nouvel enregistrement"""
        try:
            db_obj = self.model(**obj_data)
            self.db.add(db_obj)
            self.db.commit()
            self.db.refresh(db_obj)
            return db_obj
        except SQLAlchemyError as e:
            self.db.rollback()
            raise e

    def save(self, db_obj: ModelType) -> ModelType:
        """Persiste un enregistrement déjà chargé et modifié"""
        try:
            self.db.add(db_obj)
            self.db.commit()
            self.db.refresh(db_obj)
            return db_obj
        except SQLAlchemyError as e:
            self.db.rollback()
            raise e
