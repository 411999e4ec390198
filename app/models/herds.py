from app import db
from app.models.base_model import BaseModel, TimestampMixin

class Herds(BaseModel, TimestampMixin):
    """Rebaño dentro de una finca."""
    __tablename__ = 'herds'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(150), nullable=False)
    farm_id = db.Column(db.Integer, db.ForeignKey('farms.id'), nullable=False)
    archived = db.Column(db.Boolean, default=False, nullable=False)

    farm = db.relationship('Farms', back_populates='herds', lazy='select')
    animals = db.relationship('Animals', back_populates='herd', lazy='dynamic')

    __table_args__ = (
        db.Index('idx_herds_farm', 'farm_id'),
        db.Index('idx_herds_farm_archived', 'farm_id', 'archived'),
    )

    @classmethod
    def active(cls):
        """Rebaños no archivados."""
        return cls.query.filter(cls.archived.is_(False))

    def __repr__(self):
        return f'<Herd {self.id}: {self.name}>'
