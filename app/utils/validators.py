from functools import wraps
from flask import request
import logging
import time
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

class RequestValidator:
    """
    Validaciones de parámetros de entrada para endpoints.
    """

    @staticmethod
    def parse_optional_int(args: Mapping[str, str], field: str) -> Optional[int]:
        """
        Convierte un parámetro de query opcional a entero positivo.

        Un valor 0 equivale a no filtrar, igual que un parámetro vacío.

        Args:
            args: Parámetros de la petición (request.args)
            field: Nombre del parámetro

        Returns:
            El entero, o None si el parámetro no viene, está vacío o es 0

        Raises:
            ValueError: Si el valor no es un entero o es negativo
        """
        raw = args.get(field)
        if raw is None or not str(raw).strip():
            return None
        try:
            value = int(str(raw).strip())
        except ValueError:
            raise ValueError(f"El parámetro '{field}' debe ser un entero")
        if value < 0:
            raise ValueError(f"El parámetro '{field}' no puede ser negativo")
        return value or None


class PerformanceLogger:
    """
    Logging de rendimiento para requests y consultas.
    """

    @staticmethod
    def log_request_performance(f):
        """
        Decorator que registra el tiempo de respuesta de un endpoint.
        """
        @wraps(f)
        def decorated_function(*args, **kwargs):
            start_time = time.time()

            try:
                result = f(*args, **kwargs)
            except Exception as e:
                response_time = round((time.time() - start_time) * 1000, 2)
                logger.error(
                    f"REQUEST ERROR: {request.method} {request.path} | "
                    f"Error: {str(e)} | Time: {response_time}ms"
                )
                raise

            response_time = round((time.time() - start_time) * 1000, 2)

            status_code = 200
            if isinstance(result, tuple) and len(result) > 1:
                status_code = result[1]

            logger.info(
                f"ENDPOINT: {request.method} {request.path} | "
                f"Status: {status_code} | Time: {response_time}ms"
            )

            return result

        return decorated_function

    @staticmethod
    def log_database_query(query_description: str):
        """
        Decorator para logging de consultas a base de datos.
        """
        def decorator(f):
            @wraps(f)
            def decorated_function(*args, **kwargs):
                start_time = time.time()

                logger.debug(f"DB QUERY START: {query_description}")

                try:
                    result = f(*args, **kwargs)
                except Exception as e:
                    query_time = round((time.time() - start_time) * 1000, 2)
                    logger.error(
                        f"DB QUERY ERROR: {query_description} | "
                        f"Error: {str(e)} | Time: {query_time}ms"
                    )
                    raise

                query_time = round((time.time() - start_time) * 1000, 2)
                logger.debug(f"DB QUERY END: {query_description} | Time: {query_time}ms")

                if query_time > 500:
                    logger.warning(f"SLOW QUERY: {query_description} | Time: {query_time}ms")

                return result

            return decorated_function
        return decorator
