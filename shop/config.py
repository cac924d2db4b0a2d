# shop/config.py: configuração via ambiente (+ instance/.env opcional)
import os
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy.engine import URL

BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / "instance" / ".env"

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:3001",
    "http://localhost:3002",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:3001",
    "http://127.0.0.1:3002",
]


def _flag(value, default=False) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def normalize_database_url(raw_url: str) -> str:
    """
    Aceita DATABASE_URL nos formatos:
      - postgres://...    (troca para postgresql+psycopg://)
      - postgresql://...  (adiciona o driver psycopg)
    Outros esquemas (sqlite:// etc.) passam sem alteração.
    """
    url = raw_url
    if url.startswith("postgres://"):
        url = "postgresql+psycopg://" + url[len("postgres://"):]
    elif url.startswith("postgresql://"):
        url = "postgresql+psycopg://" + url[len("postgresql://"):]
    return url


def build_database_url() -> str:
    raw_url = os.getenv("DATABASE_URL", "")
    if raw_url:
        return normalize_database_url(raw_url)
    # monta a partir das variáveis DB_* (mesmos defaults do Postgres local)
    host = os.getenv("DB_HOST", "localhost")
    port = os.getenv("DB_PORT", "5432")
    user = os.getenv("DB_USER", "postgres")
    password = os.getenv("DB_PASSWORD", "")
    name = os.getenv("DB_NAME", "postgres")
    sslmode = os.getenv("DB_SSLMODE", "disable")
    return postgres_url(host, port, user, password, name, sslmode)


def postgres_url(host, port, user, password, name, sslmode="disable") -> str:
    url = URL.create(
        "postgresql+psycopg",
        username=user or None,
        password=password or None,
        host=host or None,
        port=int(port) if port else None,
        database=name or None,
        query={"sslmode": sslmode},
    )
    return url.render_as_string(hide_password=False)


def load_config(overrides=None) -> dict:
    if ENV_PATH.exists():
        load_dotenv(ENV_PATH)

    origins = os.getenv("CORS_ORIGINS")
    config = {
        "SECRET_KEY": os.getenv("SECRET_KEY", "vue_shop_secret_key_dev"),
        "SQLALCHEMY_DATABASE_URI": build_database_url(),
        "SQLALCHEMY_TRACK_MODIFICATIONS": False,
        "SHOP_STORE": os.getenv("SHOP_STORE", "auto").lower(),
        "DB_CONNECT_TIMEOUT": int(os.getenv("DB_CONNECT_TIMEOUT", 5)),
        "ORDER_NUMBER_PREFIX": os.getenv("ORDER_NUMBER_PREFIX", "VUE"),
        "ORDER_NUMBER_BASE": int(os.getenv("ORDER_NUMBER_BASE", 1000)),
        "ADMIN_AUTH_REQUIRED": _flag(os.getenv("ADMIN_AUTH_REQUIRED"), default=True),
        "CORS_ORIGINS": [o.strip() for o in origins.split(",") if o.strip()] if origins else DEFAULT_CORS_ORIGINS,
        "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO").upper(),
        "DEBUG_ROUTES": _flag(os.getenv("DEBUG_ROUTES")),
    }
    if overrides:
        config.update(overrides)
    config["ADMIN_AUTH_REQUIRED"] = _flag(config["ADMIN_AUTH_REQUIRED"], default=True)
    config["DEBUG_ROUTES"] = _flag(config["DEBUG_ROUTES"])
    return config
