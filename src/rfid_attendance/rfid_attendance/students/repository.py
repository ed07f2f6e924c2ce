from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Student


class StudentRepository(Protocol):
    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_by_card_id(self, card_id: str) -> Optional[Student]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Student]:
        raise NotImplementedError

    def list_by_class(self, class_name: str) -> Sequence[Student]:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def create(
        self,
        *,
        card_id: str,
        name: str,
        class_name: Optional[str],
        roll_number: Optional[str],
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        student_id: int,
        *,
        card_id: str,
        name: str,
        class_name: Optional[str],
        roll_number: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def delete_by_id(self, student_id: int) -> bool:
        raise NotImplementedError
