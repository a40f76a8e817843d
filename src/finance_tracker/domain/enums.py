from enum import Enum

class TransactionType(Enum):
    """Represents whether money is coming in or out"""
    INCOME = "income" # in
    EXPENSE = "expense" # out

class Controllability(Enum):
    """Whether an expense is discretionary or a fixed commitment"""
    CONTROLLABLE = "controllable"
    NON_CONTROLLABLE = "non-controllable"
