from flask import Flask, Blueprint, request, jsonify, current_app
from flask_sqlalchemy import SQLAlchemy
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_restx import Api
from datetime import timezone, datetime
from config import config
import logging
import sys
import time
from werkzeug.middleware.proxy_fix import ProxyFix
from sqlalchemy import text

from app.utils.middleware import RequestMiddleware, SecurityMiddleware
from app.utils.response_handler import APIResponse

# ====================================================================
# 1. Inicialización de extensiones (sin enlazarlas a la app aún)
# ====================================================================
db = SQLAlchemy()
jwt = JWTManager()

# ====================================================================
# 2. Funciones de ayuda y configuración modular
# ====================================================================
def configure_logging(app):
    """Configura el sistema de logging de la aplicación."""
    log_level = app.config.get('LOG_LEVEL', logging.INFO)

    log_format = (
        '%(asctime)s - [%(levelname)s] - %(name)s - '
        '%(funcName)s:%(lineno)d - %(message)s'
    )

    handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(log_format))
    handlers.append(console_handler)

    # Handler para archivo si está habilitado
    if app.config.get('LOG_FILE_ENABLED', False):
        file_handler = logging.FileHandler(app.config.get('LOG_FILE', 'app.log'))
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(log_format))
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=handlers,
        force=True  # Sobrescribir configuración existente
    )

    logging.getLogger('werkzeug').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)

    app_logger = logging.getLogger('app')
    app_logger.setLevel(log_level)

    app_logger.info("Sistema de logging configurado exitosamente")

def configure_jwt_handlers():
    """Configura los handlers para errores de JWT. Se llama después de jwt.init_app()."""
    logger = logging.getLogger(__name__)

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        exp_utc = datetime.fromtimestamp(jwt_payload['exp'], tz=timezone.utc)
        logger.warning(f"Expired token for identity {jwt_payload.get('sub')}, expired at {exp_utc.isoformat()}")
        return APIResponse.error(
            message='Token has expired',
            status_code=401,
            error_code='TOKEN_EXPIRED',
            details={'expired_at_utc': exp_utc.isoformat()}
        )

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        logger.error(f"Invalid token: {error}")
        return APIResponse.error(
            message=f'Invalid token: {error}',
            status_code=401,
            error_code='INVALID_TOKEN'
        )

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        logger.warning(f"Missing token: {error}")
        return APIResponse.unauthorized('Missing token in request')

    @jwt.additional_claims_loader
    def add_claims_to_jwt(identity):
        return {
            'server_env': current_app.config.get('CONFIG_NAME')
        }

# ====================================================================
# 3. La función principal de creación de la aplicación
# ====================================================================
def create_app(config_name='production'):
    app = Flask(__name__)

    # ProxyFix para entornos detrás de Nginx u otros proxies
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    app_config = config.get(config_name, config['default'])
    app.config.from_object(app_config)
    app.config['CONFIG_NAME'] = config_name
    # Las excepciones de JWT deben llegar a los handlers de Flask-JWT-Extended
    # y no al manejador genérico de Flask-RESTX
    app.config['PROPAGATE_EXCEPTIONS'] = True

    # Configura el logging (antes de cualquier otra cosa)
    configure_logging(app)
    logger = logging.getLogger(__name__)

    logger.info("Initializing Flask app...")
    logger.debug(f"Using configuration: {config_name}")

    db.init_app(app)
    jwt.init_app(app)

    CORS(
        app,
        origins=app.config['CORS_ORIGINS'],
        methods=["GET", "POST", "OPTIONS"],
        allow_headers=[
            "Content-Type",
            "Authorization",
            "X-Requested-With",
            "Accept",
            "Origin",
        ],
        expose_headers=["X-Request-ID", "X-Response-Time"],
        supports_credentials=True,
        max_age=86400
    )
    logger.info(f"CORS habilitado. Orígenes permitidos: {app.config['CORS_ORIGINS']}")

    configure_jwt_handlers()

    RequestMiddleware(app)
    SecurityMiddleware(app)
    logger.info("Middlewares inicializados")

    api_bp = Blueprint('api', __name__, url_prefix='/api/v1')

    api = Api(
        api_bp,
        version='1.0',
        title='Reportes Ganaderos API',
        description='Estadísticas consolidadas de fincas, rebaños, animales y personal',
        doc='/docs/',
        authorizations={
            'Bearer': {
                'type': 'apiKey',
                'in': 'header',
                'name': 'Authorization',
                'description': 'JWT token. Formato: Bearer <token>'
            },
            'Cookie': {
                'type': 'apiKey',
                'in': 'cookie',
                'name': 'access_token_cookie',
                'description': 'JWT token en cookie (autenticación automática)'
            }
        },
        security=['Bearer', 'Cookie']
    )

    from app.namespaces.auth_namespace import auth_ns
    from app.namespaces.reports_namespace import reports_ns

    api.add_namespace(auth_ns)
    api.add_namespace(reports_ns)

    app.register_blueprint(api_bp)

    @app.route('/health', methods=['GET'])
    def health_check():
        """Endpoint de verificación de salud del sistema."""
        try:
            db.session.execute(text('SELECT 1'))
            db_status = 'healthy'
        except Exception as e:
            logger.error(f"Health check: base de datos no disponible: {e}")
            db_status = 'unhealthy'

        health_data = {
            'status': 'healthy' if db_status == 'healthy' else 'unhealthy',
            'timestamp': datetime.utcnow().isoformat() + 'Z',
            'version': '1.0.0',
            'services': {
                'database': db_status
            },
            'uptime_seconds': time.time() - app.config.get('START_TIME', time.time())
        }

        status_code = 200 if health_data['status'] == 'healthy' else 503
        return jsonify(health_data), status_code

    @app.before_request
    def log_request_info():
        if app.config.get('DEBUG', False) and request.path.startswith('/api/v1/auth'):
            logger.debug(f"REQUEST: {request.method} {request.path}")
            if request.cookies:
                logger.debug(f"Cookies present: {list(request.cookies.keys())}")

    app.config['START_TIME'] = time.time()

    logger.info("Flask app initialization complete.")
    return app
