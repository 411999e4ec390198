from flask import request, g, current_app
import logging
import time
import traceback
import uuid
from werkzeug.exceptions import HTTPException
from app.utils.response_handler import APIResponse

logger = logging.getLogger(__name__)

class RequestMiddleware:
    """
    Middleware centralizado para manejo de requests y respuestas.
    """

    def __init__(self, app=None):
        self.app = app
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        """Inicializa el middleware con la aplicación Flask."""
        app.before_request(self.before_request)
        app.after_request(self.after_request)
        app.teardown_appcontext(self.teardown_request)

        # Registrar manejadores de errores
        app.errorhandler(400)(self.handle_bad_request)
        app.errorhandler(401)(self.handle_unauthorized)
        app.errorhandler(403)(self.handle_forbidden)
        app.errorhandler(404)(self.handle_not_found)
        app.errorhandler(405)(self.handle_method_not_allowed)
        app.errorhandler(422)(self.handle_unprocessable_entity)
        app.errorhandler(500)(self.handle_internal_error)
        app.errorhandler(Exception)(self.handle_generic_exception)

    def before_request(self):
        """Ejecuta antes de cada request."""
        g.request_id = str(uuid.uuid4())[:8]
        g.start_time = time.time()

        logger.info(
            f"[{g.request_id}] REQUEST START: {request.method} {request.path} | "
            f"IP: {request.remote_addr} | "
            f"User-Agent: {request.headers.get('User-Agent', 'Unknown')[:50]}"
        )

    def after_request(self, response):
        """Ejecuta después de cada request."""
        if hasattr(g, 'start_time'):
            response_time = round((time.time() - g.start_time) * 1000, 2)

            response.headers['X-Request-ID'] = getattr(g, 'request_id', 'unknown')
            response.headers['X-Response-Time'] = f"{response_time}ms"
            response.headers['X-API-Version'] = '1.0'

            logger.info(
                f"[{getattr(g, 'request_id', 'unknown')}] REQUEST END: "
                f"{request.method} {request.path} | Status: {response.status_code} | "
                f"Time: {response_time}ms"
            )

            if response_time > current_app.config.get('SLOW_REQUEST_THRESHOLD_MS', 1000):
                logger.warning(
                    f"[{getattr(g, 'request_id', 'unknown')}] SLOW REQUEST: "
                    f"{request.method} {request.path} | Time: {response_time}ms"
                )

        return response

    def teardown_request(self, exception):
        """Ejecuta al final del contexto del request."""
        if exception:
            logger.error(
                f"[{getattr(g, 'request_id', 'unknown')}] REQUEST EXCEPTION: {str(exception)}"
            )

    # Manejadores de errores centralizados
    def handle_bad_request(self, error):
        """Maneja errores 400."""
        logger.warning(f"[{getattr(g, 'request_id', 'unknown')}] Bad Request: {str(error)}")
        return APIResponse.error(
            message="Solicitud incorrecta",
            status_code=400,
            error_code="BAD_REQUEST",
            details={'description': str(error)}
        )

    def handle_unauthorized(self, error):
        """Maneja errores 401."""
        logger.warning(f"[{getattr(g, 'request_id', 'unknown')}] Unauthorized: {str(error)}")
        return APIResponse.unauthorized("Acceso no autorizado")

    def handle_forbidden(self, error):
        """Maneja errores 403."""
        logger.warning(f"[{getattr(g, 'request_id', 'unknown')}] Forbidden: {str(error)}")
        return APIResponse.forbidden("Acceso prohibido")

    def handle_not_found(self, error):
        """Maneja errores 404."""
        logger.warning(f"[{getattr(g, 'request_id', 'unknown')}] Not Found: {request.path}")
        return APIResponse.not_found("Endpoint")

    def handle_method_not_allowed(self, error):
        """Maneja errores 405."""
        logger.warning(
            f"[{getattr(g, 'request_id', 'unknown')}] Method Not Allowed: "
            f"{request.method} {request.path}"
        )
        return APIResponse.error(
            message=f"Método {request.method} no permitido para este endpoint",
            status_code=405,
            error_code="METHOD_NOT_ALLOWED"
        )

    def handle_unprocessable_entity(self, error):
        """Maneja errores 422."""
        logger.warning(f"[{getattr(g, 'request_id', 'unknown')}] Validation Error: {str(error)}")
        return APIResponse.validation_error(
            errors={'validation': str(error)},
            message="Error de validación"
        )

    def handle_internal_error(self, error):
        """Maneja errores 500."""
        logger.error(
            f"[{getattr(g, 'request_id', 'unknown')}] Internal Server Error: {str(error)}\n"
            f"Traceback: {traceback.format_exc()}"
        )

        # En producción, no mostrar detalles del error
        if current_app.config.get('DEBUG', False):
            details = {'error': str(error), 'traceback': traceback.format_exc()}
        else:
            details = {'request_id': getattr(g, 'request_id', 'unknown')}

        return APIResponse.error(
            message="Error interno del servidor",
            status_code=500,
            error_code="INTERNAL_SERVER_ERROR",
            details=details
        )

    def handle_generic_exception(self, error):
        """Maneja excepciones no capturadas."""
        if isinstance(error, HTTPException):
            return APIResponse.error(
                message=error.description or error.name,
                status_code=error.code or 500
            )

        logger.error(
            f"[{getattr(g, 'request_id', 'unknown')}] Unhandled Exception: {str(error)}\n"
            f"Type: {type(error).__name__}"
        )

        return self.handle_internal_error(error)


class SecurityMiddleware:
    """
    Cabeceras de seguridad para todas las respuestas.
    """

    def __init__(self, app=None):
        self.app = app
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        app.after_request(self.add_security_headers)

    def add_security_headers(self, response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'

        # CORS lo gestiona Flask-CORS según la configuración en app/__init__.py
        return response
