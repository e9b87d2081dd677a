# ficha/config.py
import os

# Base URL of the catalogs REST API, without a trailing slash.
API_BASE_URL: str = os.environ.get('API_BASE_URL', 'http://localhost:8080/api/fichas-utez').rstrip('/')
CATALOG_TIMEOUT: float = float(os.environ.get('CATALOG_TIMEOUT', '10'))

HOST: str = os.environ.get('HOST', '0.0.0.0')
PORT: int = int(os.environ.get('PORT', 8080))
LOG_LEVEL: str = os.environ.get('LOG_LEVEL', 'INFO').upper()
