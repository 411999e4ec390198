from app import db
import enum
from app.models.base_model import BaseModel, TimestampMixin

class Sex(enum.Enum):
    """Enumeración para el sexo de los animales"""
    Hembra = 'Hembra'
    Macho = 'Macho'

class Animals(BaseModel, TimestampMixin):
    """Animal individual registrado en un rebaño."""
    __tablename__ = 'animals'

    id = db.Column(db.Integer, primary_key=True)
    record = db.Column(db.String(255), nullable=False, unique=True)
    sex = db.Column(db.Enum(Sex), nullable=False)
    birth_date = db.Column(db.Date, nullable=True)
    herd_id = db.Column(db.Integer, db.ForeignKey('herds.id'), nullable=False)
    archived = db.Column(db.Boolean, default=False, nullable=False)

    herd = db.relationship('Herds', back_populates='animals', lazy='select')

    __table_args__ = (
        db.Index('idx_animals_herd', 'herd_id'),
        db.Index('idx_animals_herd_archived', 'herd_id', 'archived'),
        db.Index('idx_animals_record', 'record'),
    )

    @classmethod
    def active(cls):
        """Animales no archivados."""
        return cls.query.filter(cls.archived.is_(False))

    def __repr__(self):
        return f'<Animal {self.id}: {self.record}>'
