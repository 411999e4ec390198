from app import db
from app.models.base_model import BaseModel, TimestampMixin

class FarmPersonnel(BaseModel, TimestampMixin):
    """Asignación de un trabajador a una finca.

    No tiene bandera de archivado: todas las asignaciones cuentan.
    """
    __tablename__ = 'farm_personnel'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    farm_id = db.Column(db.Integer, db.ForeignKey('farms.id'), nullable=False)
    full_name = db.Column(db.String(150), nullable=False)
    worker_type = db.Column(db.String(60), nullable=False)
    hired_on = db.Column(db.Date, nullable=True)

    farm = db.relationship('Farms', back_populates='personnel', lazy='select')

    __table_args__ = (
        db.Index('idx_farm_personnel_farm', 'farm_id'),
        db.Index('idx_farm_personnel_type', 'worker_type'),
    )

    def __repr__(self):
        return f'<FarmPersonnel {self.id}: {self.full_name} ({self.worker_type})>'
