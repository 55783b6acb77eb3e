from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

from models.category import CategoryRef


@dataclass(frozen=True)
class Transaction:
    id: str
    date: Union[date, datetime]
    amount: Decimal  # signed: positive for deposits, negative for withdrawals
    category: CategoryRef
    description: str = ""
    institution_id: Optional[str] = None
    institution_type: Optional[str] = None  # e.g. "bank", "credit_card", "securities"

    @property
    def month_key(self) -> str:
        """Get the calendar month of the transaction as "YYYY-MM"."""
        return f"{self.date.year:04d}-{self.date.month:02d}"

    @property
    def calendar_date(self) -> date:
        """Get the transaction date without any time component."""
        if isinstance(self.date, datetime):
            return self.date.date()
        return self.date

    def to_dict(self) -> dict:
        """Convert transaction to a JSON-ready dictionary."""
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "amount": float(self.amount),
            "category_id": self.category.id,
            "category_name": self.category.name,
            "category_type": self.category.type.value,
            "description": self.description,
            "institution_id": self.institution_id,
            "institution_type": self.institution_type,
        }
