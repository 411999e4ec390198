from app import db
import enum
from datetime import date, datetime
from typing import Any, Dict, List


class ValidationError(Exception):
    """Error de validación a nivel de modelo."""


class TimestampMixin:
    """Columnas de auditoría comunes."""
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class BaseModel(db.Model):
    """Base de todos los modelos: serialización común."""
    __abstract__ = True

    def to_dict(self, include_relations: List[str] = None) -> Dict[str, Any]:
        """
        Serializa las columnas del modelo, convirtiendo enums y fechas a
        valores compatibles con JSON.

        Args:
            include_relations: Relaciones a incluir (se serializan con to_dict)
        """
        data = {}
        for column in self.__table__.columns:
            value = getattr(self, column.name)
            if isinstance(value, enum.Enum):
                value = value.value
            elif isinstance(value, (date, datetime)):
                value = value.isoformat()
            data[column.name] = value

        for relation in include_relations or []:
            related = getattr(self, relation, None)
            if related is None:
                data[relation] = None
            elif isinstance(related, BaseModel):
                data[relation] = related.to_dict()
            else:
                data[relation] = [item.to_dict() for item in related]

        return data

    def to_json(self, include_relations: List[str] = None) -> Dict[str, Any]:
        return self.to_dict(include_relations=include_relations)
