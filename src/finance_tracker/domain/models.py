from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from datetime import date, datetime
from typing import Any, Dict, Optional, Union
from finance_tracker.dates import to_calendar_date
from finance_tracker.domain.enums import TransactionType

DateLike = Union[date, datetime, str]

@dataclass
class Transaction:
    """Core domain model representing a single income or expense record"""
    type: TransactionType
    amount: Decimal
    category: str
    date: DateLike
    item: str = ""
    description: str = ""
    id: Optional[str] = None
    created_at: Optional[datetime] = field(default=None, compare=False)
    updated_at: Optional[datetime] = field(default=None, compare=False)

    @property
    def calendar_date(self) -> Optional[date]:
        """The calendar day this transaction belongs to, or None if the date is malformed"""
        return to_calendar_date(self.date)

    @property
    def display_name(self) -> str:
        """Item for expenses that have one, category otherwise"""
        if self.type == TransactionType.EXPENSE and self.item:
            return self.item
        return self.category

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Transaction":
        """
        Build a transaction from a plain store record.

        Args:
            record: Mapping with the JSON store keys (camelCase timestamps)

        Returns:
            Transaction

        Raises:
            ValueError: If the type or amount cannot be understood
        """
        created_at = record.get("createdAt") or record.get("timestamp")
        updated_at = record.get("updatedAt")
        raw_id = record.get("id")

        return cls(
            id=str(raw_id) if raw_id is not None else None,
            type=TransactionType(record["type"]),
            amount=to_decimal(record["amount"]),
            category=record.get("category") or "",
            item=record.get("item") or "",
            date=record.get("date") or "",
            description=record.get("description") or "",
            created_at=_parse_timestamp(created_at),
            updated_at=_parse_timestamp(updated_at),
        )

    def to_record(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable store record"""
        record_date = self.date
        if isinstance(record_date, (date, datetime)):
            record_date = record_date.isoformat()

        return {
            "id": self.id,
            "type": self.type.value,
            "amount": str(self.amount), # Store as string for precision
            "category": self.category,
            "item": self.item,
            "date": record_date,
            "description": self.description,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        sign = "+" if self.type == TransactionType.INCOME else "-"
        return f"Transaction({self.date}, {self.category[:30]}, {sign}{self.amount})"


def to_decimal(value: Any) -> Decimal:
    """
    Convert a store amount to Decimal without binary float noise.

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")
    if not isinstance(value, Decimal):
        try:
            value = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise ValueError(f"Invalid amount: {value!r}") from e
    # Infinity and NaN can't be summed or compared
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return value


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
