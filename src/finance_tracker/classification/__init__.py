"""
Controllability classification for expenses.

Expenses are split into controllable (discretionary) and non-controllable
(EMIs, investments, the home payment) using a chain of rules built from
a rule table.

Quick Start:
    >>> from finance_tracker.classification import classify_controllability
    >>>
    >>> classify_controllability(transaction)
    <Controllability.CONTROLLABLE: 'controllable'>
"""
from finance_tracker.classification.base import ClassificationRule
from finance_tracker.classification.classifier import (
    ControllabilityClassifier,
    build_rule,
    classify_controllability,
    default_classifier,
)
from finance_tracker.classification.rules import CategoryRule, CategoryItemRule, DefaultRule
from finance_tracker.classification.table import DEFAULT_RULE_TABLE

__all__ = [
    "ClassificationRule",
    "ControllabilityClassifier",
    "CategoryRule",
    "CategoryItemRule",
    "DefaultRule",
    "DEFAULT_RULE_TABLE",
    "build_rule",
    "classify_controllability",
    "default_classifier",
]
