from datetime import datetime
import logging
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

class APIResponse:
    """
    Respuestas estandarizadas de la API.
    Todas las respuestas comparten la envoltura {success, message, ...}
    y devuelven una tupla (dict, status_code) que Flask / Flask-RESTX serializan.
    """

    @staticmethod
    def success(data: Any = None, message: str = "Operación exitosa",
                status_code: int = 200, meta: Optional[Dict] = None) -> tuple:
        """
        Respuesta de éxito estandarizada.

        Args:
            data: Datos a retornar (puede ser dict, list, etc.)
            message: Mensaje descriptivo
            status_code: Código HTTP (200, 201, etc.)
            meta: Metadatos adicionales

        Returns:
            Tuple con (response_json, status_code)
        """
        response = {
            "success": True,
            "message": message,
            "data": data,
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "status_code": status_code
        }

        if meta:
            response["meta"] = meta

        logger.info(f"Success response: {status_code} - {message}")
        return response, status_code

    @staticmethod
    def error(message: str, status_code: int = 400,
              error_code: Optional[str] = None,
              details: Optional[Dict] = None) -> tuple:
        """
        Respuesta de error estandarizada.

        Args:
            message: Mensaje de error descriptivo
            status_code: Código HTTP de error
            error_code: Código interno de error (opcional)
            details: Detalles adicionales del error

        Returns:
            Tuple con (response_json, status_code)
        """
        response = {
            "success": False,
            "message": message,
            "error": {
                "code": error_code or f"HTTP_{status_code}",
                "details": details or {},
                "timestamp": datetime.utcnow().isoformat() + "Z"
            },
            "status_code": status_code
        }

        if status_code >= 500:
            logger.error(f"Error response: {status_code} - {message}")
        else:
            logger.warning(f"Error response: {status_code} - {message}")
        return response, status_code

    @staticmethod
    def validation_error(errors: Union[Dict, List],
                         message: str = "Errores de validación") -> tuple:
        """Respuesta 422 con el detalle de los campos inválidos."""
        return APIResponse.error(
            message=message,
            status_code=422,
            error_code="VALIDATION_ERROR",
            details={"validation_errors": errors}
        )

    @staticmethod
    def not_found(resource: str = "Recurso") -> tuple:
        """Respuesta 404 para un recurso identificado por nombre."""
        return APIResponse.not_found_message(f"{resource} no encontrado")

    @staticmethod
    def not_found_message(message: str) -> tuple:
        """Respuesta 404 con un mensaje completo."""
        return APIResponse.error(
            message=message,
            status_code=404,
            error_code="NOT_FOUND"
        )

    @staticmethod
    def unauthorized(message: str = "Acceso no autorizado") -> tuple:
        return APIResponse.error(
            message=message,
            status_code=401,
            error_code="UNAUTHORIZED"
        )

    @staticmethod
    def forbidden(message: str = "Acceso prohibido") -> tuple:
        return APIResponse.error(
            message=message,
            status_code=403,
            error_code="FORBIDDEN"
        )
