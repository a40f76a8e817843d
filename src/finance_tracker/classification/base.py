from abc import ABC, abstractmethod
from typing import Optional

from finance_tracker.domain.enums import Controllability
from finance_tracker.domain.models import Transaction


def normalize(value: Optional[str]) -> str:
    """Trim surrounding whitespace and lowercase, treating None as empty"""
    return (value or "").strip().lower()


class ClassificationRule(ABC):
    """
    Abstract base class for all controllability rules.

    Implements Chain of Responsibility:
    - Each rule tries to classify a transaction
    - If it can't it passes to the next rule
    - Rules are tried in table order, first match wins

    Usage:
        ```
        emi_rule = CategoryRule(["emi", "emis"])
        home_rule = CategoryItemRule("home", "home")
        default_rule = DefaultRule()

        emi_rule.set_next(home_rule).set_next(default_rule)

        controllability = emi_rule.classify(transaction)
        ```
    """

    def __init__(self, result: Controllability = Controllability.NON_CONTROLLABLE):
        self.result = result
        self._next_rule: Optional['ClassificationRule'] = None

    def set_next(self, rule: 'ClassificationRule') -> 'ClassificationRule':
        """
        Set the next rule in the chain.

        Args:
            rule: The next rule to try if this one doesn't match

        Returns:
            The rule that was set (for chaining)
        """
        self._next_rule = rule
        return rule

    @property
    def next_rule(self) -> Optional['ClassificationRule']:
        return self._next_rule

    @abstractmethod
    def matches(self, transaction: Transaction) -> bool:
        """
        Check if this rule matches the transaction.

        Args:
            transaction: Transaction to check

        Returns:
            True if this rule decides the transaction's controllability
        """
        pass

    def classify(self, transaction: Transaction) -> Optional[Controllability]:
        """
        Attempt to classify a transaction.

        Returns this rule's result on a match, otherwise defers to the
        next rule in the chain.

        Returns:
            Controllability, or None if no rule matched
        """
        if self.matches(transaction):
            return self.result

        if self._next_rule:
            return self._next_rule.classify(transaction)

        return None

    def __repr__(self):
        return f"{self.__class__.__name__}()"
