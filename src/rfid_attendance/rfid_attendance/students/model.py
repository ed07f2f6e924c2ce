from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class Student:
    """Domain entity: a student and the RFID badge (card_id) they scan with."""

    student_id: int
    card_id: str
    name: str
    class_name: Optional[str] = None
    roll_number: Optional[str] = None
    registered_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.student_id,
            "card_id": self.card_id,
            "name": self.name,
            "class_name": self.class_name,
            "roll_number": self.roll_number,
            "registered_at": self.registered_at.isoformat() if self.registered_at else None,
        }


@dataclass
class BulkImportResult:
    success: int = 0
    failed: int = 0
    errors: List[dict] = field(default_factory=list)

    def fail(self, row: int, error: str, *, card_id: Optional[str] = None) -> None:
        self.failed += 1
        entry: dict = {"row": row, "error": error}
        if card_id:
            entry["card_id"] = card_id
        self.errors.append(entry)

    def to_dict(self) -> dict:
        return {"success": self.success, "failed": self.failed, "errors": list(self.errors)}
