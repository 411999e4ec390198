"""
Estadísticas consolidadas de fincas.

Resuelve el alcance de autorización del usuario (propietario y finca
opcional) y ejecuta un conjunto fijo de conteos agrupados sobre fincas,
rebaños, animales y personal. Solo lectura.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import enum
import logging

from sqlalchemy import func

from app import db
from app.models.owners import Owners
from app.models.farms import Farms
from app.models.herds import Herds
from app.models.animals import Animals
from app.models.farm_personnel import FarmPersonnel
from app.utils.validators import PerformanceLogger

logger = logging.getLogger(__name__)


class StatisticsError(Exception):
    """Error terminal del cálculo de estadísticas."""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(StatisticsError):
    status_code = 404


class ForbiddenError(StatisticsError):
    status_code = 403


@dataclass(frozen=True)
class StatisticsScope:
    """Criterio de filtrado inmutable que recibe cada consulta."""
    owner_id: Optional[int] = None
    farm_id: Optional[int] = None

    def farm_criteria(self) -> List[Any]:
        criteria = []
        if self.owner_id is not None:
            criteria.append(Farms.owner_id == self.owner_id)
        if self.farm_id is not None:
            criteria.append(Farms.id == self.farm_id)
        return criteria


@dataclass(frozen=True)
class FarmDetail:
    farm_id: int
    name: str
    herd_count: int
    animal_count: int
    personnel_count: int

    def to_json(self) -> Dict[str, Any]:
        return {
            'farm_id': self.farm_id,
            'name': self.name,
            'herd_count': self.herd_count,
            'animal_count': self.animal_count,
            'personnel_count': self.personnel_count,
        }


@dataclass(frozen=True)
class HerdDetail:
    herd_id: int
    farm_id: int
    name: str
    animal_count: int

    def to_json(self) -> Dict[str, Any]:
        return {
            'herd_id': self.herd_id,
            'farm_id': self.farm_id,
            'name': self.name,
            'animal_count': self.animal_count,
        }


@dataclass
class FarmStatistics:
    total_farms: int
    total_herds: int
    total_animals: int
    total_personnel: int
    animals_by_sex: Dict[str, int] = field(default_factory=dict)
    personnel_by_type: Dict[str, int] = field(default_factory=dict)
    farms: List[FarmDetail] = field(default_factory=list)
    herds: List[HerdDetail] = field(default_factory=list)

    def to_json(self) -> Dict[str, Any]:
        return {
            'summary': {
                'total_farms': self.total_farms,
                'total_herds': self.total_herds,
                'total_animals': self.total_animals,
                'total_personnel': self.total_personnel,
            },
            'animals_by_sex': dict(self.animals_by_sex),
            'personnel_by_type': dict(self.personnel_by_type),
            'farms': [farm.to_json() for farm in self.farms],
            'herds': [herd.to_json() for herd in self.herds],
        }


def _group_key(value: Any) -> str:
    if isinstance(value, enum.Enum):
        return value.value
    return str(value)


def resolve_scope(caller, owner_id: Optional[int] = None,
                  farm_id: Optional[int] = None) -> StatisticsScope:
    """
    Determina el alcance de la consulta según el rol del usuario.

    Un administrador puede elegir propietario (o ninguno: todas las fincas).
    Cualquier otro usuario queda fijado a su propio propietario y el
    parámetro owner_id se ignora.

    Raises:
        NotFoundError: El propietario solicitado por el administrador no existe
        ForbiddenError: El usuario no administrador no tiene propietario asociado
    """
    if caller.is_admin():
        if owner_id is None:
            return StatisticsScope(farm_id=farm_id)
        owner = db.session.get(Owners, owner_id)
        if owner is None:
            raise NotFoundError("Propietario no encontrado")
        return StatisticsScope(owner_id=owner.id, farm_id=farm_id)

    owner = caller.owner
    if owner is None:
        raise ForbiddenError("Usuario no es propietario")
    if owner_id is not None and owner_id != owner.id:
        logger.debug(f"owner_id={owner_id} ignorado para usuario no administrador {caller.id}")
    return StatisticsScope(owner_id=owner.id, farm_id=farm_id)


def _herd_counts_by_farm(farm_ids: List[int]) -> Dict[int, int]:
    rows = db.session.query(
        Herds.farm_id, func.count(Herds.id)
    ).filter(
        Herds.farm_id.in_(farm_ids),
        Herds.archived.is_(False)
    ).group_by(Herds.farm_id).all()
    return {farm_id: count for farm_id, count in rows}


def _animals_by_sex(herd_ids: List[int]) -> Dict[str, int]:
    rows = db.session.query(
        Animals.sex, func.count(Animals.id)
    ).filter(
        Animals.herd_id.in_(herd_ids),
        Animals.archived.is_(False)
    ).group_by(Animals.sex).all()
    return {_group_key(sex): count for sex, count in rows}


def _animal_counts_by_herd(herd_ids: List[int]) -> Dict[int, int]:
    rows = db.session.query(
        Animals.herd_id, func.count(Animals.id)
    ).filter(
        Animals.herd_id.in_(herd_ids),
        Animals.archived.is_(False)
    ).group_by(Animals.herd_id).all()
    return {herd_id: count for herd_id, count in rows}


def _animal_counts_by_farm(farm_ids: List[int]) -> Dict[int, int]:
    # Solo animales activos dentro de rebaños activos
    rows = db.session.query(
        Herds.farm_id, func.count(Animals.id)
    ).select_from(Animals).join(
        Herds, Animals.herd_id == Herds.id
    ).filter(
        Herds.farm_id.in_(farm_ids),
        Animals.archived.is_(False),
        Herds.archived.is_(False)
    ).group_by(Herds.farm_id).all()
    return {farm_id: count for farm_id, count in rows}


def _personnel_by_type(farm_ids: List[int]) -> Dict[str, int]:
    rows = db.session.query(
        FarmPersonnel.worker_type, func.count(FarmPersonnel.id)
    ).filter(
        FarmPersonnel.farm_id.in_(farm_ids)
    ).group_by(FarmPersonnel.worker_type).all()
    return {_group_key(worker_type): count for worker_type, count in rows}


def _personnel_counts_by_farm(farm_ids: List[int]) -> Dict[int, int]:
    rows = db.session.query(
        FarmPersonnel.farm_id, func.count(FarmPersonnel.id)
    ).filter(
        FarmPersonnel.farm_id.in_(farm_ids)
    ).group_by(FarmPersonnel.farm_id).all()
    return {farm_id: count for farm_id, count in rows}


def collect_statistics(scope: StatisticsScope) -> FarmStatistics:
    """
    Ejecuta los conteos agrupados para el alcance dado.

    Raises:
        NotFoundError: No hay fincas activas en el alcance
    """
    farms = Farms.active().filter(*scope.farm_criteria()).order_by(Farms.id).all()
    if not farms:
        raise NotFoundError("No se encontraron fincas")
    return _aggregate(farms)


@PerformanceLogger.log_database_query("farm statistics")
def _aggregate(farms: List[Farms]) -> FarmStatistics:
    farm_ids = [farm.id for farm in farms]

    herds = Herds.active().filter(Herds.farm_id.in_(farm_ids)).order_by(Herds.id).all()
    herd_ids = [herd.id for herd in herds]
    herd_counts_by_farm = _herd_counts_by_farm(farm_ids)

    if herd_ids:
        total_animals = Animals.active().filter(Animals.herd_id.in_(herd_ids)).count()
        animals_by_sex = _animals_by_sex(herd_ids)
        animal_counts_by_herd = _animal_counts_by_herd(herd_ids)
    else:
        total_animals = 0
        animals_by_sex = {}
        animal_counts_by_herd = {}
    animal_counts_by_farm = _animal_counts_by_farm(farm_ids)

    # El personal no se filtra por archivado
    total_personnel = FarmPersonnel.query.filter(FarmPersonnel.farm_id.in_(farm_ids)).count()
    personnel_by_type = _personnel_by_type(farm_ids)
    personnel_counts_by_farm = _personnel_counts_by_farm(farm_ids)

    farm_details = [
        FarmDetail(
            farm_id=farm.id,
            name=farm.name,
            herd_count=herd_counts_by_farm.get(farm.id, 0),
            animal_count=animal_counts_by_farm.get(farm.id, 0),
            personnel_count=personnel_counts_by_farm.get(farm.id, 0),
        )
        for farm in farms
    ]
    herd_details = [
        HerdDetail(
            herd_id=herd.id,
            farm_id=herd.farm_id,
            name=herd.name,
            animal_count=animal_counts_by_herd.get(herd.id, 0),
        )
        for herd in herds
    ]

    return FarmStatistics(
        total_farms=len(farms),
        total_herds=len(herds),
        total_animals=total_animals,
        total_personnel=total_personnel,
        animals_by_sex=animals_by_sex,
        personnel_by_type=personnel_by_type,
        farms=farm_details,
        herds=herd_details,
    )


def compute_farm_statistics(caller, owner_id: Optional[int] = None,
                            farm_id: Optional[int] = None) -> FarmStatistics:
    """
    Estadísticas de fincas para el usuario autenticado.

    Args:
        caller: Usuario autenticado (User)
        owner_id: Propietario a consultar; solo lo respeta un administrador
        farm_id: Finca concreta a consultar (opcional)

    Returns:
        FarmStatistics con el resumen y el detalle por finca y rebaño

    Raises:
        NotFoundError: Propietario inexistente o ninguna finca en el alcance
        ForbiddenError: Usuario no administrador sin propietario asociado
    """
    scope = resolve_scope(caller, owner_id=owner_id, farm_id=farm_id)
    logger.info(f"Calculando estadísticas de fincas: owner_id={scope.owner_id}, farm_id={scope.farm_id}")

    statistics = collect_statistics(scope)

    logger.debug(
        f"Estadísticas: fincas={statistics.total_farms}, rebaños={statistics.total_herds}, "
        f"animales={statistics.total_animals}, personal={statistics.total_personnel}"
    )
    return statistics
