"""
CRUD base genérico con las operaciones de almacenamiento comunes.

Expone la capacidad mínima que usan los servicios: load (por id),
find (consulta filtrada), save (insertar o actualizar el registro completo)
y create.
"""
from typing import Generic, TypeVar, Type, Optional, List, Any, Dict
from sqlalchemy.orm import Session
from pydantic import BaseModel
from app.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """Clase base para operaciones CRUD sobre un modelo."""

    def __init__(self, model: Type[ModelType]):
        """
        Inicializar CRUD con el modelo ORM.

        Args:
            model: Modelo ORM de SQLAlchemy
        """
        self.model = model

    def load(self, db: Session, id: Any) -> Optional[ModelType]:
        """
        Obtener un registro por ID.

        Args:
            db: Sesión de base de datos
            id: ID del registro

        Returns:
            Registro encontrado o None
        """
        return db.get(self.model, id)

    def find(self, db: Session, *criteria, order_by: Optional[List[Any]] = None) -> List[ModelType]:
        """
        Obtener registros que cumplan los criterios.

        Args:
            db: Sesión de base de datos
            criteria: Expresiones de filtro de SQLAlchemy
            order_by: Expresiones de ordenamiento

        Returns:
            Lista de registros
        """
        query = db.query(self.model)
        if criteria:
            query = query.filter(*criteria)
        if order_by:
            query = query.order_by(*order_by)
        return query.all()

    def save(self, db: Session, db_obj: ModelType) -> ModelType:
        """
        Persistir el registro completo (insertar o actualizar).

        Args:
            db: Sesión de base de datos
            db_obj: Objeto de base de datos

        Returns:
            Registro persistido
        """
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def create(self, db: Session, *, obj_in: CreateSchemaType, **extra: Any) -> ModelType:
        """
        Crear un nuevo registro.

        Args:
            db: Sesión de base de datos
            obj_in: Schema con datos de entrada
            extra: Campos adicionales asignados por el servidor

        Returns:
            Registro creado
        """
        obj_in_data = obj_in.model_dump()
        db_obj = self.model(**obj_in_data, **extra)
        return self.save(db, db_obj)

    def update(
        self,
        db: Session,
        *,
        db_obj: ModelType,
        obj_in: UpdateSchemaType | Dict[str, Any]
    ) -> ModelType:
        """
        Actualizar un registro existente.

        Args:
            db: Sesión de base de datos
            db_obj: Objeto de base de datos a actualizar
            obj_in: Schema o dict con datos de actualización

        Returns:
            Registro actualizado
        """
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(exclude_unset=True)

        for field in update_data:
            if hasattr(db_obj, field):
                setattr(db_obj, field, update_data[field])

        return self.save(db, db_obj)
