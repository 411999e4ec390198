"""
Tests del cálculo de estadísticas de fincas (sin capa HTTP).
"""
import logging

import pytest

from app.services.farm_statistics import (
    compute_farm_statistics, resolve_scope, collect_statistics,
    StatisticsScope, NotFoundError, ForbiddenError,
)


def _farm(statistics, farm):
    return next(detail for detail in statistics.farms if detail.farm_id == farm.id)


def _herd(statistics, herd):
    return next(detail for detail in statistics.herds if detail.herd_id == herd.id)


# ============================================================================
# RESOLUCIÓN DEL ALCANCE
# ============================================================================

def test_admin_without_owner_filter_spans_all_owners(seeded):
    scope = resolve_scope(seeded.admin)
    assert scope == StatisticsScope(owner_id=None, farm_id=None)


def test_admin_with_owner_filter_scopes_to_that_owner(seeded):
    scope = resolve_scope(seeded.admin, owner_id=seeded.other_owner.id, farm_id=7)
    assert scope == StatisticsScope(owner_id=seeded.other_owner.id, farm_id=7)


def test_admin_with_unknown_owner_is_not_found(seeded):
    with pytest.raises(NotFoundError) as exc:
        resolve_scope(seeded.admin, owner_id=9999)
    assert exc.value.message == "Propietario no encontrado"
    assert exc.value.status_code == 404


def test_non_admin_owner_filter_is_ignored(seeded):
    scope = resolve_scope(seeded.owner_user, owner_id=seeded.other_owner.id)
    assert scope.owner_id == seeded.owner.id


@pytest.mark.parametrize('owner_id, farm_id', [(None, None), (1, None), (None, 1), (9999, 9999)])
def test_non_admin_without_owner_is_forbidden_regardless_of_filters(seeded, owner_id, farm_id):
    with pytest.raises(ForbiddenError) as exc:
        compute_farm_statistics(seeded.worker, owner_id=owner_id, farm_id=farm_id)
    assert exc.value.message == "Usuario no es propietario"
    assert exc.value.status_code == 403


def test_scope_is_immutable():
    scope = StatisticsScope(owner_id=1)
    with pytest.raises(AttributeError):
        scope.owner_id = 2


# ============================================================================
# ESCENARIO PRINCIPAL: PROPIETARIO CON DOS FINCAS
# ============================================================================

def test_owner_scenario_summary(seeded):
    statistics = compute_farm_statistics(seeded.owner_user)

    assert statistics.total_farms == 2
    assert statistics.total_herds == 3
    assert statistics.total_animals == 4
    assert statistics.total_personnel == 1


def test_owner_scenario_farm_details(seeded):
    statistics = compute_farm_statistics(seeded.owner_user)

    f1 = _farm(statistics, seeded.f1)
    assert (f1.name, f1.herd_count, f1.animal_count, f1.personnel_count) == ('La Esperanza', 2, 3, 1)

    f2 = _farm(statistics, seeded.f2)
    assert (f2.name, f2.herd_count, f2.animal_count, f2.personnel_count) == ('El Recreo', 1, 1, 0)


def test_owner_scenario_herd_details(seeded):
    statistics = compute_farm_statistics(seeded.owner_user)

    assert [herd.herd_id for herd in statistics.herds] == [seeded.h1.id, seeded.h2.id, seeded.h3.id]
    assert _herd(statistics, seeded.h1).animal_count == 3
    assert _herd(statistics, seeded.h2).animal_count == 0
    assert _herd(statistics, seeded.h3).animal_count == 1
    assert _herd(statistics, seeded.h3).farm_id == seeded.f2.id


def test_owner_scenario_breakdowns(seeded):
    statistics = compute_farm_statistics(seeded.owner_user)

    assert statistics.animals_by_sex == {'Hembra': 2, 'Macho': 2}
    assert statistics.personnel_by_type == {'Vaquero': 1}


def test_farms_follow_primary_key_order(seeded):
    statistics = compute_farm_statistics(seeded.admin)
    farm_ids = [farm.farm_id for farm in statistics.farms]
    assert farm_ids == sorted(farm_ids)


# ============================================================================
# INVARIANTES
# ============================================================================

@pytest.mark.parametrize('user_attr', ['admin', 'owner_user', 'other_owner_user', 'herdless_user'])
def test_totals_are_consistent_with_details(seeded, user_attr):
    statistics = compute_farm_statistics(getattr(seeded, user_attr))

    assert statistics.total_farms == len(statistics.farms)
    assert statistics.total_herds == len(statistics.herds)
    assert sum(farm.animal_count for farm in statistics.farms) == statistics.total_animals
    assert sum(farm.herd_count for farm in statistics.farms) == statistics.total_herds
    assert sum(farm.personnel_count for farm in statistics.farms) == statistics.total_personnel
    assert sum(statistics.animals_by_sex.values()) == statistics.total_animals
    assert sum(statistics.personnel_by_type.values()) == statistics.total_personnel


def test_archived_records_are_never_counted(seeded):
    statistics = compute_farm_statistics(seeded.admin)

    farm_ids = {farm.farm_id for farm in statistics.farms}
    herd_ids = {herd.herd_id for herd in statistics.herds}
    assert seeded.archived_farm.id not in farm_ids
    assert seeded.archived_herd.id not in herd_ids
    assert seeded.herd_in_archived_farm.id not in herd_ids
    # Archivados: 1 animal en H1, 2 en el rebaño archivado, 2 en la finca archivada
    assert statistics.total_animals == 5


def test_admin_without_filters_sees_every_active_farm(seeded):
    statistics = compute_farm_statistics(seeded.admin)

    assert statistics.total_farms == 4
    assert statistics.total_herds == 4
    assert statistics.total_animals == 5
    assert statistics.total_personnel == 4
    assert statistics.animals_by_sex == {'Hembra': 3, 'Macho': 2}
    assert statistics.personnel_by_type == {'Vaquero': 2, 'Administrador': 1, 'Ordeñador': 1}


def test_personnel_counted_without_archived_filter(seeded):
    # Sin fincas archivadas en el alcance, todo el personal cuenta
    statistics = collect_statistics(StatisticsScope(owner_id=seeded.other_owner.id))
    assert statistics.total_personnel == 2
    assert statistics.personnel_by_type == {'Vaquero': 1, 'Administrador': 1}


def test_farm_without_herds_reports_zero_animals(seeded):
    statistics = compute_farm_statistics(seeded.herdless_user)

    assert statistics.total_herds == 0
    assert statistics.total_animals == 0
    assert statistics.animals_by_sex == {}
    assert statistics.herds == []
    assert _farm(statistics, seeded.f5).animal_count == 0
    assert _farm(statistics, seeded.f5).personnel_count == 1


# ============================================================================
# FILTRO DE FINCA
# ============================================================================

def test_farm_filter_limits_to_one_farm(seeded):
    statistics = compute_farm_statistics(seeded.owner_user, farm_id=seeded.f2.id)

    assert [farm.farm_id for farm in statistics.farms] == [seeded.f2.id]
    assert [herd.herd_id for herd in statistics.herds] == [seeded.h3.id]
    assert statistics.total_animals == 1
    assert statistics.total_personnel == 0


def test_farm_filter_for_farm_of_another_owner_is_not_found(seeded):
    with pytest.raises(NotFoundError) as exc:
        compute_farm_statistics(seeded.owner_user, farm_id=seeded.f3.id)
    assert exc.value.message == "No se encontraron fincas"


def test_empty_farm_set_is_not_logged_as_query_error(seeded, caplog):
    with caplog.at_level(logging.DEBUG, logger='app'):
        with pytest.raises(NotFoundError):
            collect_statistics(StatisticsScope(owner_id=seeded.no_farms_owner.id))

    assert not [record for record in caplog.records if record.levelno >= logging.ERROR]
    assert not [record for record in caplog.records if 'DB QUERY' in record.getMessage()]


def test_aggregation_queries_are_timed(seeded, caplog):
    with caplog.at_level(logging.DEBUG, logger='app'):
        collect_statistics(StatisticsScope(owner_id=seeded.owner.id))

    assert any('DB QUERY END: farm statistics' in record.getMessage() for record in caplog.records)


def test_farm_filter_on_archived_farm_is_not_found(seeded):
    with pytest.raises(NotFoundError):
        compute_farm_statistics(seeded.owner_user, farm_id=seeded.archived_farm.id)


def test_owner_without_farms_is_not_found(seeded):
    with pytest.raises(NotFoundError) as exc:
        compute_farm_statistics(seeded.no_farms_user)
    assert exc.value.message == "No se encontraron fincas"


def test_admin_with_owner_and_farm_of_other_owner_is_not_found(seeded):
    with pytest.raises(NotFoundError):
        compute_farm_statistics(seeded.admin, owner_id=seeded.owner.id, farm_id=seeded.f3.id)


# ============================================================================
# SERIALIZACIÓN
# ============================================================================

def test_to_json_shape(seeded):
    data = compute_farm_statistics(seeded.owner_user, farm_id=seeded.f1.id).to_json()

    assert data['summary'] == {
        'total_farms': 1,
        'total_herds': 2,
        'total_animals': 3,
        'total_personnel': 1,
    }
    assert data['farms'] == [{
        'farm_id': seeded.f1.id,
        'name': 'La Esperanza',
        'herd_count': 2,
        'animal_count': 3,
        'personnel_count': 1,
    }]
    assert data['herds'][1] == {
        'herd_id': seeded.h2.id,
        'farm_id': seeded.f1.id,
        'name': 'H2',
        'animal_count': 0,
    }
    assert data['animals_by_sex'] == {'Hembra': 2, 'Macho': 1}
    assert data['personnel_by_type'] == {'Vaquero': 1}
