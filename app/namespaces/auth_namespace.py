from flask_restx import Namespace, Resource
from flask import request, jsonify, current_app
from flask_jwt_extended import (
    create_access_token, create_refresh_token, jwt_required,
    get_jwt_identity, get_jwt, set_access_cookies, set_refresh_cookies,
    unset_jwt_cookies
)
from app.models.user import User
from app.utils.response_handler import APIResponse
from flask_restx import fields
from datetime import timedelta
import logging

# Crear el namespace
auth_ns = Namespace(
    'auth',
    description='🔐 Autenticación',
    path='/auth'
)

logger = logging.getLogger(__name__)

login_model = auth_ns.model('Login', {
    'identification': fields.Integer(required=True, description='Número de identificación del usuario', example=12345678),
    'password': fields.String(required=True, description='Contraseña del usuario', example='password123')
})

login_response_model = auth_ns.model('LoginResponse', {
    'message': fields.String(description='Mensaje de éxito'),
    'user': fields.Raw(description='Datos del usuario autenticado'),
    'access_token': fields.String(description='Token de acceso JWT'),
    'refresh_token': fields.String(description='Token de renovación JWT')
})


def _user_claims(user: User) -> dict:
    return {
        'id': user.id,
        'identification': user.identification,
        'role': user.role.value,
        'fullname': user.fullname
    }


@auth_ns.route('/login')
class Login(Resource):
    @auth_ns.doc(
        'login_user',
        description='''
        **Autenticar usuario y generar tokens JWT**

        Valida identificación y contraseña, genera los tokens de acceso y
        renovación y los establece como cookies HTTPOnly.
        ''',
        responses={
            200: ('Autenticación exitosa', login_response_model),
            400: 'Datos de entrada inválidos',
            401: 'Credenciales incorrectas o usuario inactivo'
        }
    )
    @auth_ns.expect(login_model, validate=True)
    def post(self):
        """Autenticar usuario y generar tokens JWT"""
        data = request.get_json() or {}
        identification = data.get('identification')
        password = data.get('password')

        if not identification or not password:
            return APIResponse.error('Identificación y contraseña son requeridos', status_code=400)

        user = User.query.filter_by(identification=identification).first()

        # Mismo mensaje para usuario inexistente y contraseña incorrecta
        if not user or not user.check_password(password):
            logger.warning(f"Intento de login fallido para {identification}")
            return APIResponse.unauthorized('Credenciales incorrectas')

        if not user.status:
            return APIResponse.unauthorized('Usuario inactivo')

        access_token = create_access_token(
            identity=str(user.id),
            additional_claims=_user_claims(user),
            expires_delta=current_app.config.get('JWT_ACCESS_TOKEN_EXPIRES', timedelta(hours=1))
        )
        refresh_token = create_refresh_token(
            identity=str(user.id),
            additional_claims=_user_claims(user)
        )

        response = jsonify({
            'message': 'Autenticación exitosa',
            'user': user.to_json(),
            'access_token': access_token,
            'refresh_token': refresh_token
        })
        set_access_cookies(response, access_token)
        set_refresh_cookies(response, refresh_token)

        logger.info(f"Usuario {user.identification} autenticado exitosamente")
        return response

@auth_ns.route('/refresh')
class RefreshToken(Resource):
    @auth_ns.doc(
        'refresh_token',
        description='Renueva el token de acceso usando el refresh token.',
        security=['Bearer', 'Cookie'],
        responses={
            200: 'Token renovado exitosamente',
            401: 'Refresh token inválido o expirado'
        }
    )
    @jwt_required(refresh=True)
    def post(self):
        """Renovar token de acceso usando refresh token"""
        user_id = get_jwt_identity()
        claims = get_jwt()

        new_access_token = create_access_token(
            identity=user_id,
            additional_claims={
                'id': claims.get('id'),
                'identification': claims.get('identification'),
                'role': claims.get('role'),
                'fullname': claims.get('fullname')
            },
            expires_delta=current_app.config.get('JWT_ACCESS_TOKEN_EXPIRES', timedelta(hours=1))
        )

        response = jsonify({
            'message': 'Token renovado exitosamente',
            'access_token': new_access_token
        })
        set_access_cookies(response, new_access_token)

        logger.info(f"Token renovado para usuario {claims.get('identification')}")
        return response

@auth_ns.route('/logout')
class Logout(Resource):
    @auth_ns.doc(
        'logout_user',
        description='Limpia las cookies de autenticación. Los JWT no se invalidan del lado del servidor.',
        responses={200: 'Logout exitoso'}
    )
    def post(self):
        """Cerrar sesión y limpiar tokens"""
        response = jsonify({'message': 'Logout exitoso'})
        unset_jwt_cookies(response)
        logger.info("Usuario cerró sesión")
        return response

@auth_ns.route('/me')
class CurrentUser(Resource):
    @auth_ns.doc(
        'get_current_user',
        description='Información actualizada del usuario autenticado.',
        security=['Bearer', 'Cookie'],
        responses={
            200: 'Información del usuario actual',
            401: 'Token JWT requerido, inválido o usuario inactivo'
        }
    )
    @jwt_required()
    def get(self):
        """Obtener información del usuario autenticado"""
        user = User.query.filter_by(id=int(get_jwt_identity())).first()

        if not user or not user.status:
            return APIResponse.unauthorized('Usuario no encontrado o inactivo')

        return APIResponse.success(
            data=user.to_json(),
            message='Información del usuario obtenida exitosamente'
        )
