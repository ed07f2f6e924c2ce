from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced teacher, student or assignment does not exist."""


class InvalidTargetError(DomainError):
    """Raised when an operation targets an account that is not eligible for it."""


class DuplicateError(DomainError):
    """Raised when a unique value (username, email, card id) is already taken."""


class AssignmentConflictError(DomainError):
    """Base for class teacher invariant violations."""


class ConflictingClassTeacherError(AssignmentConflictError):
    def __init__(self, current_class: str):
        self.current_class = current_class
        super().__init__(
            f"This teacher is already Class Teacher of {current_class}. "
            "A teacher can only be CT of ONE class. Remove that assignment first "
            "or assign as Subject Teacher instead."
        )


class ClassAlreadyHasClassTeacherError(AssignmentConflictError):
    def __init__(self, class_name: str, teacher_name: str):
        self.class_name = class_name
        self.teacher_name = teacher_name
        super().__init__(
            f"Class {class_name} already has a Class Teacher: {teacher_name}. "
            "Remove them first or assign as Subject Teacher instead."
        )


class CannotDowngradeError(AssignmentConflictError):
    def __init__(self, class_name: str):
        self.class_name = class_name
        super().__init__(
            f"This teacher is already Class Teacher of {class_name}. "
            "Cannot downgrade to Subject Teacher. Remove the assignment first."
        )


class AuthenticationError(DomainError):
    """Raised when there is no valid session or login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class StorageError(Exception):
    """Raised when the database fails underneath a repository call.

    `transient` is True for connectivity problems, False for rejected statements
    (e.g. an integrity error).
    """

    def __init__(self, message: str, *, transient: bool = False):
        super().__init__(message)
        self.transient = transient
