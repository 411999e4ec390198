import os
from datetime import timedelta
import secrets
import logging

class Config:
    """Configuración base de la aplicación. Aplica a todos los entornos."""

    # Configuración de Base de Datos
    USER = os.getenv('DB_USER', 'root')
    PASSWORD = os.getenv('DB_PASSWORD', 'password')
    HOST = os.getenv('DB_HOST', 'localhost')
    PORT = os.getenv('DB_PORT', '3306')
    DATABASE = os.getenv('DB_NAME', 'ganaderia_db')
    SQLALCHEMY_DATABASE_URI = os.getenv(
        'DATABASE_URL',
        f'mysql+pymysql://{USER}:{PASSWORD}@{HOST}:{PORT}/{DATABASE}'
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': 10,
        'max_overflow': 20,
        'pool_timeout': 20,
        'pool_recycle': 3600,
        'pool_pre_ping': True,
        'echo': False,
        'connect_args': {
            'charset': 'utf8mb4',
            'connect_timeout': 10,
            'read_timeout': 30,
        }
    }

    # Umbral (ms) para advertir sobre requests lentos
    SLOW_REQUEST_THRESHOLD_MS = 1000

    # Configuración base de JWT
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', secrets.token_hex(32))
    JWT_TOKEN_LOCATION = ['cookies', 'headers']
    JWT_COOKIE_HTTPONLY = True
    JWT_ACCESS_COOKIE_NAME = 'access_token_cookie'
    JWT_REFRESH_COOKIE_NAME = 'refresh_token_cookie'
    JWT_COOKIE_SAMESITE = 'None'
    JWT_COOKIE_CSRF_PROTECT = False

    # Configuración de CORS
    CORS_ORIGINS = [
        "http://localhost:5173",
        "https://localhost:5173",
        "http://localhost:3000",
        "https://localhost:3000",
    ]

    # Nivel de logging por defecto
    LOG_LEVEL = logging.INFO
    LOG_FILE_ENABLED = False
    LOG_FILE = os.getenv('LOG_FILE', 'app.log')

class DevelopmentConfig(Config):
    """Configuración para desarrollo (localhost)."""
    DEBUG = True
    LOG_LEVEL = logging.DEBUG

    # HTTP local: las cookies no pueden ser Secure
    JWT_COOKIE_SECURE = False
    JWT_COOKIE_SAMESITE = 'Lax'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=2)
    JWT_COOKIE_DOMAIN = None
    JWT_COOKIE_PATH = '/'

    CORS_ORIGINS = Config.CORS_ORIGINS + [
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ]

class TestingConfig(Config):
    """Configuración para la suite de pruebas (SQLite en memoria)."""
    TESTING = True
    DEBUG = False
    LOG_LEVEL = logging.WARNING

    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}

    JWT_SECRET_KEY = 'testing-secret-key-with-enough-length-for-hs256'
    JWT_COOKIE_SECURE = False
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=15)

class ProductionConfig(Config):
    """Configuración para producción (HTTPS)."""
    DEBUG = False
    LOG_LEVEL = logging.INFO

    JWT_COOKIE_SECURE = True

    @classmethod
    def validate_production_env(cls):
        """Valida variables de entorno requeridas para producción"""
        if not os.getenv('JWT_SECRET_KEY'):
            raise ValueError("La variable JWT_SECRET_KEY DEBE estar definida en producción.")
        if not os.getenv('JWT_COOKIE_DOMAIN'):
            raise ValueError("La variable JWT_COOKIE_DOMAIN DEBE estar definida en producción.")

    # Dominio principal (con punto inicial) para que sea válido en subdominios
    JWT_COOKIE_DOMAIN = os.getenv('JWT_COOKIE_DOMAIN')

    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=30)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=7)

    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv('CORS_ORIGINS', '').split(',')
        if origin.strip()
    ]

# Diccionario de configuración final
config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
