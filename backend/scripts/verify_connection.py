"""
Verifica la conexión a la base de datos y al backend de caché antes de levantar el API.

Ejecutar desde el directorio backend:
  python scripts/verify_connection.py
"""
import sys
import os

script_dir = os.path.dirname(os.path.abspath(__file__))
backend_dir = os.path.dirname(script_dir)
os.chdir(backend_dir)
sys.path.insert(0, backend_dir)

import logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

env_file = os.path.join(backend_dir, '.env')
if not os.path.exists(env_file):
    logger.warning(f"⚠️  Archivo .env no encontrado en {env_file}; se usan sólo variables de entorno")

try:
    import redis
    from sqlalchemy import inspect, text
    from helpdesk.config import get_settings
    from helpdesk.db import engine
except Exception as e:
    logger.error(f"\n❌ Error importando módulos: {str(e)}")
    logger.error("\n📝 Variables requeridas: APP_SECRET, SECRET_JWT_REFRESH, SECRET_JWT_REGISTER")
    logger.error("   y DATABASE_URL o DB_USER / DB_PASSWORD / DB_HOST / DB_PORT / DB_NAME")
    sys.exit(1)

REQUIRED_TABLES = ['roles', 'users', 'categories', 'priorities', 'tickets', 'tokens']


def verify_database() -> bool:
    logger.info("🔍 Verificando base de datos...")
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
            logger.info(f"✅ Conexión exitosa ({engine.dialect.name})")

            existing = set(inspect(connection).get_table_names())
            ok = True
            for table in REQUIRED_TABLES:
                if table in existing:
                    count = connection.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar()
                    logger.info(f"  ✅ {table}: {count:,} registros")
                else:
                    logger.error(f"  ❌ {table}: NO ENCONTRADA (ejecuta alembic upgrade head o DB_AUTO_CREATE=true)")
                    ok = False
            return ok
    except Exception as e:
        logger.error(f"\n❌ ERROR DE CONEXIÓN: {str(e)}")
        return False


def verify_cache() -> bool:
    settings = get_settings()
    if settings.CACHE_BACKEND.strip().lower() != "redis":
        logger.info(f"ℹ️  CACHE_BACKEND={settings.CACHE_BACKEND}: no se verifica Redis")
        return True
    logger.info("🔍 Verificando Redis...")
    try:
        client = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            username=settings.REDIS_USERNAME,
            password=settings.REDIS_PASSWORD,
            db=settings.REDIS_DB,
            socket_connect_timeout=5,
        )
        client.ping()
        logger.info(f"✅ Redis responde en {settings.REDIS_HOST}:{settings.REDIS_PORT}")
        return True
    except redis.RedisError as e:
        logger.error(f"❌ Redis no disponible: {str(e)}")
        return False


if __name__ == "__main__":
    db_ok = verify_database()
    cache_ok = verify_cache()
    sys.exit(0 if db_ok and cache_ok else 1)
