from __future__ import annotations

from typing import ContextManager, Optional, Protocol, Sequence

from .model import Assignment


class AssignmentStore(Protocol):
    """Reads and writes on the teacher/class relation.

    Rows are keyed by (teacher_id, class_name); read results carry teacher_name.
    """

    def get(self, *, teacher_id: int, class_name: str) -> Optional[Assignment]:
        raise NotImplementedError

    def get_by_teacher(self, teacher_id: int) -> Sequence[Assignment]:
        raise NotImplementedError

    def get_by_class(self, class_name: str) -> Sequence[Assignment]:
        raise NotImplementedError

    def get_all(self) -> Sequence[Assignment]:
        """All rows ordered by class name, CT first within a class."""

        raise NotImplementedError

    def get_ct_assignment(self, teacher_id: int) -> Optional[Assignment]:
        raise NotImplementedError

    def get_class_ct(self, class_name: str) -> Optional[Assignment]:
        raise NotImplementedError

    def upsert(self, *, teacher_id: int, class_name: str, is_class_teacher: bool) -> None:
        """Insert the row or overwrite the flag of the existing (teacher, class) row."""

        raise NotImplementedError

    def remove(self, *, teacher_id: int, class_name: str) -> bool:
        raise NotImplementedError


class AssignmentRepository(AssignmentStore, Protocol):
    def transaction(self) -> ContextManager[AssignmentStore]:
        """Serialized unit of work for assignment mutations.

        Reads and writes made through the yielded store are committed together, and
        no other transaction() on the same repository runs in between.
        """

        raise NotImplementedError
