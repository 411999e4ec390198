# Registrar todos los modelos para que las relaciones por nombre se resuelvan
from app.models.user import User, Role
from app.models.owners import Owners
from app.models.farms import Farms
from app.models.herds import Herds
from app.models.animals import Animals, Sex
from app.models.farm_personnel import FarmPersonnel

__all__ = [
    'User', 'Role', 'Owners', 'Farms', 'Herds', 'Animals', 'Sex', 'FarmPersonnel',
]
