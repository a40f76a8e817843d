from pathlib import Path
from typing import Any, Callable, Dict, Optional

from finance_tracker.config.settings import ConfigLoader
from finance_tracker.database.connection import DatabaseConfig, DatabaseManager
from finance_tracker.repositories.base import TransactionRepository
from finance_tracker.repositories.json_file_repository import JsonFileTransactionRepository
from finance_tracker.repositories.sqlite_transaction_repository import SQLiteTransactionRepository

StoreBuilder = Callable[[Dict[str, Any]], TransactionRepository]


def _build_json_store(config: Dict[str, Any]) -> TransactionRepository:
    return JsonFileTransactionRepository(Path(config["data_path"]))


def _build_sqlite_store(config: Dict[str, Any]) -> TransactionRepository:
    db_manager = DatabaseManager(DatabaseConfig(config["db_path"]))
    db_manager.initialize()
    return SQLiteTransactionRepository(db_manager)


class RepositoryFactory:
    """
    Factory for transaction stores.

    Uses a registry pattern to map store names from the app config
    ('json', 'sqlite') to builders.
    """

    _registry: Dict[str, StoreBuilder] = {
        "json": _build_json_store,
        "sqlite": _build_sqlite_store,
    }

    @classmethod
    def register(cls, store_name: str, builder: StoreBuilder) -> None:
        """
        Register a builder for a store

        Raises:
            ValueError: If a store with that name is already registered
        """
        if store_name in cls._registry:
            raise ValueError(f"Store '{store_name}' is already registered")
        cls._registry[store_name] = builder

    @classmethod
    def available_stores(cls) -> list[str]:
        return list(cls._registry.keys())

    @classmethod
    def create(cls, config: Optional[Dict[str, Any]] = None) -> TransactionRepository:
        """
        Create the store named in the config.

        Args:
            config: Optional app config dict. If None, loads from ConfigLoader.

        Raises:
            ValueError: If the configured store is unknown
        """
        if config is None:
            config = ConfigLoader.load_app_config()

        store_name = config.get("store", "json")
        if store_name not in cls._registry:
            available = ', '.join(cls._registry.keys())
            raise ValueError(
                f"Unknown store '{store_name}'. "
                f"Available stores: {available}"
            )

        return cls._registry[store_name](config)
