"""
Built-in controllability rule table.

Expenses matching any row are fixed commitments (non-controllable);
everything else is controllable. Rows are evaluated top to bottom.
"""
from typing import Any, Dict, List

DEFAULT_RULE_TABLE: List[Dict[str, Any]] = [
    {
        "type": "category",
        "categories": ["emi", "emis", "investment", "investments"],
    },
    {
        "type": "category_item",
        "category": "home",
        "item": "home",
    },
]
