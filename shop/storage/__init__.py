"""
Seleção do backend de armazenamento.
Roda uma única vez na criação do app: testa a conexão com o banco e, se não
responder, cai para o backend em memória.
"""

import logging

from sqlalchemy import create_engine, text

from .base import OrderNumberSequence, Store
from .memory import MemoryStore
from .seed import DEMO_USERS, demo_products, hash_seed_user
from .sql import SqlStore

logger = logging.getLogger(__name__)

__all__ = ["Store", "MemoryStore", "SqlStore", "OrderNumberSequence", "select_store", "ping_database"]


def _engine_options(url: str, timeout: int) -> dict:
    options = {"pool_pre_ping": True}
    if url.startswith("postgresql"):
        options["connect_args"] = {"connect_timeout": timeout}
        options["pool_recycle"] = 2 * 60 * 60
        options["pool_size"] = 5
        options["max_overflow"] = 5
    return options


def ping_database(url: str, timeout: int = 5) -> None:
    """
    Abre uma conexão avulsa e executa SELECT 1.
    Levanta a exceção original do driver/SQLAlchemy se falhar.
    """
    engine = create_engine(url, **_engine_options(url, timeout))
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    finally:
        engine.dispose()


def _memory_store(sequence: OrderNumberSequence) -> MemoryStore:
    users = [hash_seed_user(u, user_id=i) for i, u in enumerate(DEMO_USERS, start=1)]
    return MemoryStore(sequence, products=demo_products(), users=users)


def _sql_store(app, sequence: OrderNumberSequence) -> SqlStore:
    from ..models import db

    url = app.config["SQLALCHEMY_DATABASE_URI"]
    app.config.setdefault("SQLALCHEMY_ENGINE_OPTIONS", _engine_options(url, app.config["DB_CONNECT_TIMEOUT"]))
    db.init_app(app)
    with app.app_context():
        with db.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        db.create_all()
        store = SqlStore(db, sequence)
        stats = store.stats()
        if stats.products == 0 or stats.users == 0:
            store.seed(demo_products(), DEMO_USERS)
        store.sync_sequence()
    return store


def select_store(app) -> Store:
    mode = app.config["SHOP_STORE"]
    sequence = OrderNumberSequence(app.config["ORDER_NUMBER_PREFIX"], app.config["ORDER_NUMBER_BASE"])

    if mode == "memory":
        logger.info("Backend em memória (SHOP_STORE=memory)")
        return _memory_store(sequence)

    try:
        store = _sql_store(app, sequence)
    except Exception as e:
        if mode == "sql":
            raise
        logger.warning(f"Banco não conectado: {e} (usando dados em memória)")
        return _memory_store(sequence)

    logger.info("Banco conectado e pronto")
    return store
