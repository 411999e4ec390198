import itertools
import os
import sys
from types import SimpleNamespace

import pytest
from flask_jwt_extended import create_access_token

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app, db
from app.models.user import User, Role
from app.models.owners import Owners
from app.models.farms import Farms
from app.models.herds import Herds
from app.models.animals import Animals, Sex
from app.models.farm_personnel import FarmPersonnel


@pytest.fixture()
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


def _user(identification, fullname, role, status=True):
    user = User(
        identification=identification,
        fullname=fullname,
        email=f'{identification}@example.com',
        role=role,
        status=status,
    )
    user.set_password('password123')
    db.session.add(user)
    return user


_records = itertools.count(1)


def _animals(herd, sexes, archived=False):
    for sex in sexes:
        db.session.add(Animals(
            record=f'BOV-{next(_records):04d}',
            sex=sex,
            herd=herd,
            archived=archived,
        ))


@pytest.fixture()
def seeded(app):
    """
    Propietario O con dos fincas activas:
      F1: H1 (2 hembras + 1 macho activos, 1 animal archivado), H2 (vacío),
          un rebaño archivado con 2 animales, 1 vaquero.
      F2: H3 (1 macho).
    Además una finca archivada de O con rebaño, animales y personal.
    Propietario P con F3: H4 (1 hembra), 1 vaquero y 1 administrador.
    Propietario R con F5 sin rebaños y 1 ordeñador.
    Propietario Q sin fincas.
    """
    admin = _user(1001, 'Admin General', Role.Administrador)
    owner_user = _user(1002, 'Olga Ortiz', Role.Propietario)
    other_owner_user = _user(1003, 'Pedro Pérez', Role.Propietario)
    no_farms_user = _user(1004, 'Quique Quintero', Role.Propietario)
    herdless_user = _user(1005, 'Rosa Rincón', Role.Propietario)
    worker = _user(1006, 'Walter Wilches', Role.Trabajador)
    inactive_user = _user(1007, 'Inés Inactiva', Role.Propietario, status=False)

    owner = Owners(name='Olga Ortiz', document='O-1', user=owner_user)
    other_owner = Owners(name='Pedro Pérez', document='P-1', user=other_owner_user)
    no_farms_owner = Owners(name='Quique Quintero', document='Q-1', user=no_farms_user)
    herdless_owner = Owners(name='Rosa Rincón', document='R-1', user=herdless_user)
    inactive_owner = Owners(name='Inés Inactiva', document='I-1', user=inactive_user)
    db.session.add_all([owner, other_owner, no_farms_owner, herdless_owner, inactive_owner])

    f1 = Farms(name='La Esperanza', owner=owner)
    f2 = Farms(name='El Recreo', owner=owner)
    archived_farm = Farms(name='Vieja Finca', owner=owner, archived=True)
    f3 = Farms(name='Los Pinos', owner=other_owner)
    f5 = Farms(name='Sin Rebaños', owner=herdless_owner)
    db.session.add_all([f1, f2, archived_farm, f3, f5])

    h1 = Herds(name='H1', farm=f1)
    h2 = Herds(name='H2', farm=f1)
    archived_herd = Herds(name='H-archivado', farm=f1, archived=True)
    h3 = Herds(name='H3', farm=f2)
    herd_in_archived_farm = Herds(name='H-vieja', farm=archived_farm)
    h4 = Herds(name='H4', farm=f3)
    db.session.add_all([h1, h2, archived_herd, h3, herd_in_archived_farm, h4])
    db.session.flush()

    _animals(h1, [Sex.Hembra, Sex.Hembra, Sex.Macho])
    _animals(h1, [Sex.Macho], archived=True)
    _animals(archived_herd, [Sex.Hembra, Sex.Hembra])
    _animals(h3, [Sex.Macho])
    _animals(herd_in_archived_farm, [Sex.Hembra, Sex.Macho])
    _animals(h4, [Sex.Hembra])

    db.session.add_all([
        FarmPersonnel(farm=f1, full_name='Valentín Vaquero', worker_type='Vaquero'),
        FarmPersonnel(farm=archived_farm, full_name='Ana Antigua', worker_type='Vaquero'),
        FarmPersonnel(farm=f3, full_name='Pablo Peón', worker_type='Vaquero'),
        FarmPersonnel(farm=f3, full_name='Ada Administra', worker_type='Administrador'),
        FarmPersonnel(farm=f5, full_name='Olivia Ordeño', worker_type='Ordeñador'),
    ])
    db.session.commit()

    return SimpleNamespace(
        admin=admin, owner_user=owner_user, other_owner_user=other_owner_user,
        no_farms_user=no_farms_user, herdless_user=herdless_user, worker=worker,
        inactive_user=inactive_user,
        owner=owner, other_owner=other_owner, no_farms_owner=no_farms_owner,
        herdless_owner=herdless_owner,
        f1=f1, f2=f2, archived_farm=archived_farm, f3=f3, f5=f5,
        h1=h1, h2=h2, archived_herd=archived_herd, h3=h3,
        herd_in_archived_farm=herd_in_archived_farm, h4=h4,
    )


@pytest.fixture()
def auth_headers(app):
    def _headers(user):
        token = create_access_token(
            identity=str(user.id),
            additional_claims={'id': user.id, 'role': user.role.value}
        )
        return {'Authorization': f'Bearer {token}'}
    return _headers
