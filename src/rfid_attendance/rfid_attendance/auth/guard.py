from __future__ import annotations

from ..assignments.service import AssignmentService
from ..core.enums import CapabilityKind, Role
from ..core.exceptions import AuthorizationError, ValidationError
from .model import AccessDecision, Capability, CurrentUser


class AccessGuard:
    """Decides whether an authenticated identity may act.

    The role tag only gates coarse checks (AdminOnly, ClassTeacherRole). Class-scoped
    checks look at assignment rows, never at the role tag alone.
    """

    def __init__(self, assignments: AssignmentService):
        self._assignments = assignments

    def authorize(self, user: CurrentUser, capability: Capability) -> AccessDecision:
        kind = capability.kind

        if kind == CapabilityKind.ADMIN_ONLY:
            if not user.is_admin:
                raise AuthorizationError("Admin access required")
            return AccessDecision(user=user, capability=capability)

        if kind == CapabilityKind.CLASS_TEACHER_ROLE:
            if user.role not in (Role.ADMIN, Role.CLASS_TEACHER):
                raise AuthorizationError("Class teacher access required")
            return AccessDecision(user=user, capability=capability)

        if kind == CapabilityKind.HAS_CLASS_ACCESS:
            return self._class_access(user, capability)

        if kind == CapabilityKind.CAN_MARK_ATTENDANCE:
            return self._mark_attendance(user, capability)

        raise AuthorizationError("Unsupported capability")

    def _class_access(self, user: CurrentUser, capability: Capability) -> AccessDecision:
        class_name = (capability.class_name or "").strip()
        if not class_name:
            raise ValidationError("Class name is required")

        if user.is_admin:
            return AccessDecision(user=user, capability=capability)

        rows = [a for a in self._assignments.get_by_teacher(user.teacher_id) if a.class_name == class_name]
        if not rows:
            raise AuthorizationError("You do not have access to this class")

        return AccessDecision(
            user=user,
            capability=capability,
            is_class_teacher_for_class=any(a.is_class_teacher for a in rows),
        )

    def _mark_attendance(self, user: CurrentUser, capability: Capability) -> AccessDecision:
        if user.is_admin:
            return AccessDecision(user=user, capability=capability)

        if user.role != Role.CLASS_TEACHER:
            raise AuthorizationError("Only class teachers can mark attendance")

        class_name = (capability.class_name or "").strip()
        if class_name:
            if not self._assignments.is_class_teacher_of(user.teacher_id, class_name):
                raise AuthorizationError("You are not the class teacher for this class")
            return AccessDecision(user=user, capability=capability, is_class_teacher_for_class=True)

        return AccessDecision(user=user, capability=capability)
