"""
Member grade rules.

Roles map to ordered numeric grades. Anonymous visitors are grade 0.
"""

from __future__ import annotations

from typing import Optional, Union

from unipivot.core.models.domain.enums import UserRole

GUEST = 0

ROLE_GRADES: dict[str, int] = {
    UserRole.user.value: 1,
    UserRole.member.value: 2,
    UserRole.staff.value: 3,
    UserRole.admin.value: 4,
    UserRole.super_admin.value: 5,
}

# Minimum role needed to write each kind of content
WRITE_PERMISSIONS: dict[str, UserRole] = {
    "program": UserRole.admin,
    "notice": UserRole.admin,
    "blog": UserRole.admin,
    "report": UserRole.member,
    "community": UserRole.member,
    "comment": UserRole.user,
}

# Programs a USER has to complete before becoming a MEMBER
PROGRAMS_FOR_MEMBERSHIP = 1

RoleLike = Union[UserRole, str, None]


def grade_of(role: RoleLike) -> int:
    """Numeric grade of a role; unknown or missing roles are guests."""
    if role is None:
        return GUEST
    key = role.value if isinstance(role, UserRole) else str(role)
    return ROLE_GRADES.get(key, GUEST)


def has_grade(role: RoleLike, required: RoleLike) -> bool:
    return grade_of(role) >= grade_of(required)


def is_member(role: RoleLike) -> bool:
    return has_grade(role, UserRole.member)


def is_staff(role: RoleLike) -> bool:
    return has_grade(role, UserRole.staff)


def is_admin(role: RoleLike) -> bool:
    return has_grade(role, UserRole.admin)


def is_super_admin(role: RoleLike) -> bool:
    return grade_of(role) == ROLE_GRADES[UserRole.super_admin.value]


def can_write(content_type: str, role: RoleLike) -> bool:
    """Whether a role may create content of the given type. Unknown types are denied."""
    required = WRITE_PERMISSIONS.get(content_type)
    if required is None:
        return False
    return has_grade(role, required)


def can_change_grade(changer: RoleLike, target_current: RoleLike, target_new: RoleLike) -> bool:
    """
    Whether ``changer`` may move a user from ``target_current`` to ``target_new``.

    - Only a super admin may change the role of an admin or super admin.
    - Below super admin, nobody may grant a grade above their own.
    - Below super admin, nobody may change a user at or above their own grade.
    - Staff and below cannot change grades at all.
    """
    changer_grade = grade_of(changer)
    if is_super_admin(changer):
        return True
    if not is_admin(changer):
        return False
    if grade_of(target_current) >= grade_of(UserRole.admin):
        return False
    if grade_of(target_new) > changer_grade:
        return False
    if grade_of(target_current) >= changer_grade:
        return False
    return True


def should_upgrade_to_member(role: RoleLike, completed_programs: int) -> bool:
    """A plain USER becomes a MEMBER after completing enough programs."""
    return grade_of(role) == ROLE_GRADES[UserRole.user.value] and completed_programs >= PROGRAMS_FOR_MEMBERSHIP


def role_label(role: Optional[str]) -> str:
    labels = {
        UserRole.user.value: "일반회원",
        UserRole.member.value: "정회원",
        UserRole.staff.value: "운영진",
        UserRole.admin.value: "관리자",
        UserRole.super_admin.value: "최고관리자",
    }
    return labels.get(role or "", "비회원")
