from typing import Any, Dict, List, Optional

from finance_tracker.classification.base import ClassificationRule
from finance_tracker.classification.rules import CategoryRule, CategoryItemRule, DefaultRule
from finance_tracker.classification.table import DEFAULT_RULE_TABLE
from finance_tracker.config.settings import ConfigLoader
from finance_tracker.domain.enums import Controllability
from finance_tracker.domain.models import Transaction
from finance_tracker.logging_setup import get_logger

logger = get_logger("finance_tracker.classification")


def build_rule(rule_def: Dict[str, Any]) -> ClassificationRule:
    """
    Build a single rule from its table definition.

    Args:
        rule_def: One row of a rule table, e.g.
            `{"type": "category", "categories": ["emi"]}` or
            `{"type": "category_item", "category": "home", "item": "home"}`.
            An optional "result" key ("controllable"/"non-controllable")
            overrides the default non-controllable result.

    Raises:
        ValueError: If the rule type is unknown or a required key is missing
    """
    rule_type = rule_def.get("type", "category")
    result = Controllability(rule_def.get("result", Controllability.NON_CONTROLLABLE.value))

    try:
        if rule_type == "category":
            return CategoryRule(rule_def["categories"], result)
        if rule_type == "category_item":
            return CategoryItemRule(rule_def["category"], rule_def["item"], result)
    except KeyError as e:
        raise ValueError(f"Rule {rule_def!r} is missing key {e}") from e

    raise ValueError(f"Unknown rule type '{rule_type}'")


class ControllabilityClassifier:
    """
    Decides whether an expense is controllable.

    Builds a chain of rules in priority order:
    1. User-defined rules (from config)
    2. Built-in rule table
    3. Default (controllable)

    Usage:
        # Production - loads user rules through ConfigLoader
        classifier = ControllabilityClassifier()

        # Testing - inject custom config
        classifier = ControllabilityClassifier(config={"rules": [...]})

        controllability = classifier.classify(transaction)
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        use_defaults: bool = True
    ):
        """
        Initialize the classifier.

        Args:
            config: Optional config dict. If None, loads from ConfigLoader.
            use_defaults: Whether to include the built-in rule table
        """
        self.use_defaults = use_defaults
        self._rule_chain: Optional[ClassificationRule] = None
        self._build_rule_chain(config)

    def _load_user_rules_config(
        self,
        config: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        if config is not None:
            return config

        try:
            return ConfigLoader.load_controllability_rules()
        except FileNotFoundError:
            # No custom rules - the built-in table applies
            return {"rules": []}

    def _build_rule_chain(self, user_config: Optional[Dict[str, Any]] = None) -> None:
        rules: List[ClassificationRule] = []

        user_rules_config = self._load_user_rules_config(user_config)
        rules.extend(build_rule(rule_def) for rule_def in user_rules_config.get("rules", []))

        if self.use_defaults:
            rules.extend(build_rule(rule_def) for rule_def in DEFAULT_RULE_TABLE)

        rules.append(DefaultRule(Controllability.CONTROLLABLE))

        self._rule_chain = rules[0]
        for i in range(len(rules) - 1):
            rules[i].set_next(rules[i + 1])

        logger.debug("Built controllability chain with %d rules", len(rules))

    @property
    def rules(self) -> List[ClassificationRule]:
        """The rules in evaluation order"""
        chain = []
        current = self._rule_chain
        while current:
            chain.append(current)
            current = current.next_rule
        return chain

    def classify(self, transaction: Transaction) -> Controllability:
        """
        Classify a single transaction.

        Example:
            ```
            >>> classifier = ControllabilityClassifier()
            >>> classifier.classify(Transaction(..., category=" Home ", item="HOME "))
            <Controllability.NON_CONTROLLABLE: 'non-controllable'>
            ```
        """
        if not self._rule_chain:
            raise RuntimeError("Rule chain not initialized")

        result = self._rule_chain.classify(transaction)

        assert result is not None, "Rule chain should never return None"

        return result

    def is_controllable(self, transaction: Transaction) -> bool:
        return self.classify(transaction) == Controllability.CONTROLLABLE

    def get_rule_chain_info(self) -> str:
        """String description of the active rule chain, one rule per line"""
        return "\n".join(
            f"{priority}. {rule}" for priority, rule in enumerate(self.rules, start=1)
        )

    def __repr__(self) -> str:
        return f"ControllabilityClassifier({len(self.rules)} rules in chain)"


_default_classifier: Optional[ControllabilityClassifier] = None


def default_classifier() -> ControllabilityClassifier:
    """Lazily built classifier using the built-in table only"""
    global _default_classifier
    if _default_classifier is None:
        _default_classifier = ControllabilityClassifier(config={"rules": []})
    return _default_classifier


def classify_controllability(
    transaction: Transaction,
    classifier: Optional[ControllabilityClassifier] = None,
) -> Controllability:
    """
    Classify a transaction as controllable or non-controllable.

    Args:
        transaction: Transaction to classify
        classifier: Classifier to use. Defaults to the built-in rule table.
    """
    return (classifier or default_classifier()).classify(transaction)
