from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

import mysql.connector
from mysql.connector import pooling

logger = logging.getLogger(__name__)


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = 5

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "event_registration")),
            pool_size=int(db_config.get("pool_size", 5)),
        )


class DatabaseConnection:
    """Singleton-like DB connection factory backed by a connection pool.

    The pool is created lazily on first use so the app can start (and tests can
    build a container) without a reachable MySQL server.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None
        self._lock = threading.Lock()

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    @property
    def config(self) -> DBConfig:
        return self._config

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        with self._lock:
            if self._pool is None:
                logger.info(
                    "Opening MySQL pool %s@%s:%s/%s (size=%s)",
                    self._config.user,
                    self._config.host,
                    self._config.port,
                    self._config.database,
                    self._config.pool_size,
                )
                self._pool = pooling.MySQLConnectionPool(
                    pool_name="event_registration",
                    pool_size=self._config.pool_size,
                    host=self._config.host,
                    port=int(self._config.port),
                    user=self._config.user,
                    password=self._config.password,
                    database=self._config.database,
                    autocommit=False,
                )
            return self._pool

    def connect(self):
        try:
            return self._get_pool().get_connection()
        except mysql.connector.errors.PoolError:
            # Pool exhausted: fall back to a one-off connection.
            logger.warning("MySQL pool exhausted, opening a direct connection")
            return mysql.connector.connect(
                host=self._config.host,
                port=int(self._config.port),
                user=self._config.user,
                password=self._config.password,
                database=self._config.database,
            )
