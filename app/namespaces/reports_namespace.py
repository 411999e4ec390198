from flask_restx import Namespace, Resource, fields
from flask import request
from flask_jwt_extended import jwt_required, get_jwt_identity
from app.models.user import User
from app.services.farm_statistics import (
    compute_farm_statistics, resolve_scope, StatisticsError, NotFoundError
)
from app.utils.response_handler import APIResponse
from app.utils.validators import RequestValidator, PerformanceLogger
import logging

# Crear el namespace
reports_ns = Namespace(
    'reports',
    description='📊 Reportes y Estadísticas de Fincas',
    path='/reports'
)

logger = logging.getLogger(__name__)

# Modelos para respuestas
summary_model = reports_ns.model('FarmStatisticsSummary', {
    'total_farms': fields.Integer(description='Fincas activas en el alcance'),
    'total_herds': fields.Integer(description='Rebaños activos'),
    'total_animals': fields.Integer(description='Animales activos'),
    'total_personnel': fields.Integer(description='Asignaciones de personal')
})

farm_detail_model = reports_ns.model('FarmStatisticsFarm', {
    'farm_id': fields.Integer(description='ID de la finca'),
    'name': fields.String(description='Nombre de la finca'),
    'herd_count': fields.Integer(description='Rebaños activos de la finca'),
    'animal_count': fields.Integer(description='Animales activos de la finca'),
    'personnel_count': fields.Integer(description='Personal asignado a la finca')
})

herd_detail_model = reports_ns.model('FarmStatisticsHerd', {
    'herd_id': fields.Integer(description='ID del rebaño'),
    'farm_id': fields.Integer(description='ID de la finca'),
    'name': fields.String(description='Nombre del rebaño'),
    'animal_count': fields.Integer(description='Animales activos del rebaño')
})

farm_statistics_model = reports_ns.model('FarmStatistics', {
    'summary': fields.Nested(summary_model),
    'animals_by_sex': fields.Raw(description='Conteo de animales por sexo', example={'Hembra': 3, 'Macho': 1}),
    'personnel_by_type': fields.Raw(description='Conteo de personal por tipo de trabajador', example={'Vaquero': 1}),
    'farms': fields.List(fields.Nested(farm_detail_model)),
    'herds': fields.List(fields.Nested(herd_detail_model))
})

farm_statistics_response_model = reports_ns.model('FarmStatisticsResponse', {
    'success': fields.Boolean(example=True),
    'message': fields.String(example='Estadísticas de fincas'),
    'data': fields.Nested(farm_statistics_model)
})

error_response_model = reports_ns.model('ReportErrorResponse', {
    'success': fields.Boolean(example=False),
    'message': fields.String(example='No se encontraron fincas'),
    'error': fields.Raw(description='Código y detalles del error')
})


def _statistics_error_response(error):
    if isinstance(error, NotFoundError):
        return APIResponse.not_found_message(error.message)
    return APIResponse.forbidden(error.message)


@reports_ns.route('/farm-statistics')
class FarmStatisticsReport(Resource):
    @reports_ns.doc(
        'get_farm_statistics',
        description='''
        **Estadísticas consolidadas de fincas**

        Retorna el resumen de fincas, rebaños, animales y personal del propietario
        autenticado, con el detalle por finca y por rebaño.

        **Parámetros opcionales:**
        - `owner_id`: Propietario a consultar (solo administradores; si se omite,
          el administrador obtiene todas las fincas)
        - `farm_id`: Limitar el reporte a una finca

        **Reglas:**
        - Fincas, rebaños y animales archivados no se cuentan
        - El personal se cuenta sin filtro de archivado
        - Un usuario que no es administrador solo ve sus propias fincas y su owner_id se ignora
        - Un valor 0 equivale a omitir el parámetro
        ''',
        security=['Bearer', 'Cookie'],
        params={
            'owner_id': {'description': 'ID del propietario (solo administradores)', 'type': 'integer'},
            'farm_id': {'description': 'ID de la finca', 'type': 'integer'}
        },
        responses={
            200: ('Estadísticas de fincas', farm_statistics_response_model),
            401: 'Token JWT requerido o inválido',
            403: ('Usuario no es propietario', error_response_model),
            404: ('Propietario o fincas no encontrados', error_response_model),
            422: 'Parámetros inválidos'
        }
    )
    @PerformanceLogger.log_request_performance
    @jwt_required()
    def get(self):
        """Obtener estadísticas de fincas"""
        user_id = get_jwt_identity()
        caller = User.query.filter_by(id=int(user_id)).first()
        if not caller or not caller.status:
            return APIResponse.unauthorized('Usuario no encontrado o inactivo')

        # owner_id solo aplica a administradores; para el resto ni se valida
        owner_id = None
        if caller.is_admin():
            try:
                owner_id = RequestValidator.parse_optional_int(request.args, 'owner_id')
            except ValueError as e:
                return APIResponse.validation_error({'owner_id': str(e)}, "Parámetros inválidos")

        # La autorización se resuelve antes de validar farm_id
        try:
            scope = resolve_scope(caller, owner_id=owner_id)
        except StatisticsError as e:
            return _statistics_error_response(e)

        try:
            farm_id = RequestValidator.parse_optional_int(request.args, 'farm_id')
        except ValueError as e:
            return APIResponse.validation_error({'farm_id': str(e)}, "Parámetros inválidos")

        try:
            statistics = compute_farm_statistics(caller, owner_id=scope.owner_id, farm_id=farm_id)
        except StatisticsError as e:
            return _statistics_error_response(e)

        return APIResponse.success(
            data=statistics.to_json(),
            message="Estadísticas de fincas"
        )
