from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from finance_tracker.domain.models import Transaction

class TransactionNotFoundError(Exception):
    """Raised when a transaction cannot be found."""
    pass

class StoreError(Exception):
    """Raised when the backing store cannot be read or written."""
    pass

class TransactionRepository(ABC):
    """
    Abstract repository for transaction persistence.

    The aggregation layer only ever sees `list()` snapshots, so any
    backend implementing this contract can sit behind the service.
    """

    @abstractmethod
    def save(self, transaction: Transaction) -> Transaction:
        """
        Create a transaction.

        Args:
            transaction: Transaction to save, without an ID

        Returns:
            Transaction with ID and timestamps populated
        """
        pass

    @abstractmethod
    def get_by_id(self, transaction_id: str) -> Optional[Transaction]:
        """
        Retrieve a transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction if found, None otherwise
        """
        pass

    @abstractmethod
    def list(self) -> List[Transaction]:
        """
        Retrieve every transaction.

        Returns:
            Full snapshot, newest date first
        """
        pass

    @abstractmethod
    def update(self, transaction: Transaction) -> Transaction:
        """
        Replace an existing transaction.

        The stored ID, type and creation time are kept; updated_at is refreshed.

        Args:
            transaction: Transaction with updated values

        Returns:
            Updated transaction

        Raises:
            TransactionNotFoundError: If transaction doesn't exist
        """
        pass

    @abstractmethod
    def delete(self, transaction_id: str) -> bool:
        """
        Delete a transaction by ID.

        Args:
            transaction_id: ID of transaction to delete

        Returns:
            True if deleted, False if not found
        """
        pass

    def suggestion_lists(self) -> Dict[str, List[str]]:
        """
        Names the store remembers for auto-suggest, keyed
        'incomeSources', 'expenseCategories' and 'expenseItems'.

        Stores that keep no such lists return an empty dict.
        """
        return {}
