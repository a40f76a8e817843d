from typing import Iterable

from finance_tracker.classification.base import ClassificationRule, normalize
from finance_tracker.domain.enums import Controllability
from finance_tracker.domain.models import Transaction


class CategoryRule(ClassificationRule):
    """
    Rule that matches the transaction category against a set of names.

    Matching is done on the trimmed, lowercased category.

    Example:
        ```
        # "EMI", " emis ", "Investments" -> non-controllable
        rule = CategoryRule(["emi", "emis", "investment", "investments"])
        ```
    """

    def __init__(
        self,
        categories: Iterable[str],
        result: Controllability = Controllability.NON_CONTROLLABLE,
    ):
        super().__init__(result)
        self.categories = frozenset(normalize(c) for c in categories)

    def matches(self, transaction: Transaction) -> bool:
        """Check if the normalized category is one of ours"""
        return normalize(transaction.category) in self.categories

    def __repr__(self):
        names = ", ".join(sorted(self.categories))
        return f"CategoryRule([{names}] -> {self.result.value})"


class CategoryItemRule(ClassificationRule):
    """
    Rule that requires both category and item to match.

    Example:
        ```
        # category "Home" with item "home" -> non-controllable,
        # category "Home" with item "Rent" is left to the next rule
        rule = CategoryItemRule("home", "home")
        ```
    """

    def __init__(
        self,
        category: str,
        item: str,
        result: Controllability = Controllability.NON_CONTROLLABLE,
    ):
        super().__init__(result)
        self.category = normalize(category)
        self.item = normalize(item)

    def matches(self, transaction: Transaction) -> bool:
        return (
            normalize(transaction.category) == self.category
            and normalize(transaction.item) == self.item
        )

    def __repr__(self):
        return f"CategoryItemRule('{self.category}/{self.item}' -> {self.result.value})"


class DefaultRule(ClassificationRule):
    """
    Fallback rule that always matches.

    Should be the last rule in the chain.
    """

    def __init__(self, result: Controllability = Controllability.CONTROLLABLE):
        super().__init__(result)

    def matches(self, _: Transaction) -> bool:
        """Always matches"""
        return True

    def __repr__(self) -> str:
        return f"DefaultRule('{self.result.value}')"
