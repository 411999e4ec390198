from app import db
from app.models.base_model import BaseModel, TimestampMixin

class Farms(BaseModel, TimestampMixin):
    """Finca: pertenece a un propietario y agrupa rebaños y personal."""
    __tablename__ = 'farms'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(150), nullable=False)
    location = db.Column(db.String(255), nullable=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('owners.id'), nullable=False)
    archived = db.Column(db.Boolean, default=False, nullable=False)

    owner = db.relationship('Owners', back_populates='farms', lazy='select')
    herds = db.relationship('Herds', back_populates='farm', lazy='dynamic')
    personnel = db.relationship('FarmPersonnel', back_populates='farm', lazy='dynamic')

    __table_args__ = (
        db.Index('idx_farms_owner', 'owner_id'),
        db.Index('idx_farms_owner_archived', 'owner_id', 'archived'),
    )

    @classmethod
    def active(cls):
        """Fincas no archivadas."""
        return cls.query.filter(cls.archived.is_(False))

    def __repr__(self):
        return f'<Farm {self.id}: {self.name}>'
