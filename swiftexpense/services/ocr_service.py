"""Placeholder OCR integration."""
from __future__ import annotations

import hashlib
import os
from typing import Any, Dict

from swiftexpense.models import ExpenseCategory
from swiftexpense.utils.dates import utcnow

_MERCHANTS = ("Starbucks", "McDonald's", "Uber", "Amazon", "Flipkart")
_CATEGORIES = (ExpenseCategory.FOOD, ExpenseCategory.FOOD, ExpenseCategory.TRAVEL, ExpenseCategory.OFFICE, ExpenseCategory.OTHER)


def extract_expense_data(file_path: str, currency: str = "INR") -> Dict[str, Any]:
    """Placeholder for OCR-based receipt parsing.

    No image processing happens; the values are derived from a digest of the
    file so the same receipt always yields the same result.
    """
    with open(file_path, "rb") as handle:
        digest = hashlib.sha256(handle.read()).digest()

    index = digest[0] % len(_MERCHANTS)
    amount = 100 + int.from_bytes(digest[1:3], "big") % 4900
    return {
        "file_processed": os.path.basename(file_path),
        "status": "mock_ocr",
        "amount": amount,
        "currency": currency,
        "merchant": _MERCHANTS[index],
        "category": _CATEGORIES[index].value,
        "date": utcnow().date().isoformat(),
        "confidence": round(0.85 + (digest[3] % 10) / 100, 2),
        "line_items": [],
    }
