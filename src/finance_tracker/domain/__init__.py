from finance_tracker.domain.enums import Controllability, TransactionType
from finance_tracker.domain.models import Transaction

__all__ = ["Controllability", "Transaction", "TransactionType"]
