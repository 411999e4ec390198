import os
from dotenv import load_dotenv

# Cargar variables de entorno desde el archivo .env
load_dotenv()

from app import create_app, db

app = create_app(os.getenv('FLASK_ENV', 'development'))

with app.app_context():
    db.create_all()

# -------------------------------------------------------------
# Resolver contexto SSL desde variables de entorno.
# Sin certificado provisto se usa 'adhoc' (requiere cryptography).
# -------------------------------------------------------------

def _resolve_ssl_context():
    use_https = os.getenv('USE_HTTPS', 'false').lower() == 'true'
    if not use_https:
        print("[RUN] HTTPS desactivado (USE_HTTPS=false)")
        return None

    cert_file = os.getenv('SSL_CERT_FILE')
    key_file = os.getenv('SSL_KEY_FILE')

    if cert_file and key_file and os.path.exists(cert_file) and os.path.exists(key_file):
        print(f"[RUN] HTTPS con certificado provisto\n  CERT: {cert_file}\n  KEY : {key_file}")
        return (cert_file, key_file)

    print("[RUN] HTTPS con certificado adhoc (autofirmado)")
    return 'adhoc'

if __name__ == "__main__":
    port = int(os.environ.get('PORT', 8081))
    app.run(host="0.0.0.0", port=port, debug=True, ssl_context=_resolve_ssl_context())
