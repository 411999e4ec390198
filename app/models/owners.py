from app import db
from app.models.base_model import BaseModel, TimestampMixin

class Owners(BaseModel, TimestampMixin):
    """Propietario de una o más fincas."""
    __tablename__ = 'owners'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(150), nullable=False)
    document = db.Column(db.String(40), nullable=False, unique=True)
    phone = db.Column(db.String(40), nullable=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True, unique=True)

    user = db.relationship('User', back_populates='owner', lazy='select')
    farms = db.relationship('Farms', back_populates='owner', lazy='dynamic')

    __table_args__ = (
        db.Index('idx_owners_user_id', 'user_id'),
    )

    def __repr__(self):
        return f'<Owner {self.id}: {self.name}>'
