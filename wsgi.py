import os
from dotenv import load_dotenv

# Detectar entorno y cargar el archivo .env apropiado
flask_env = os.getenv('FLASK_ENV')
if flask_env == 'production':
    load_dotenv('.env.production')
    config_name = 'production'
else:
    load_dotenv()
    config_name = os.getenv('FLASK_ENV', 'development')

from config import ProductionConfig
from app import create_app

if config_name == 'production':
    ProductionConfig.validate_production_env()

app = create_app(config_name)
