from app import db
from typing import Dict, Any
from werkzeug.security import generate_password_hash, check_password_hash
from app.models.base_model import BaseModel, TimestampMixin, ValidationError
import enum
import logging

logger = logging.getLogger(__name__)


class Role(enum.Enum):
    Administrador = 'Administrador'
    Propietario = 'Propietario'
    Trabajador = 'Trabajador'


class User(BaseModel, TimestampMixin):
    """Cuenta autenticada del sistema.

    El propietario asociado (si existe) se resuelve a través de
    Owners.user_id; un administrador normalmente no tiene uno.
    """
    __tablename__ = 'user'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    identification = db.Column(db.BigInteger, unique=True, nullable=False)
    fullname = db.Column(db.String(120), nullable=False)
    password = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    role = db.Column(db.Enum(Role), nullable=False)
    status = db.Column(db.Boolean, default=True, nullable=False)

    owner = db.relationship('Owners', back_populates='user', uselist=False, lazy='select')

    __table_args__ = (
        db.Index('idx_user_identification', 'identification'),
        db.Index('idx_user_role', 'role'),
    )

    def to_json(self) -> Dict[str, Any]:
        """Serialización sin datos sensibles."""
        return {
            'id': self.id,
            'identification': self.identification,
            'fullname': self.fullname,
            'email': self.email,
            'role': self.role.value if self.role else None,
            'status': self.status,
            'owner_id': self.owner.id if self.owner else None
        }

    def set_password(self, password: str) -> None:
        if not password or len(password) < 8:
            raise ValidationError("La contraseña debe tener al menos 8 caracteres")
        self.password = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password, password)

    def is_admin(self) -> bool:
        return self.role == Role.Administrador

    def __repr__(self):
        return f'<User {self.id}: {self.identification}>'
