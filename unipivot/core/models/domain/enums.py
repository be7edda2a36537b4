"""Domain enums shared by entities, schemas and services."""

from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """
    Member grade of an account.

    Grades are ordered; see ``unipivot.core.rules.grades`` for the numeric levels.
    """

    user = "USER"  # Signed-up account.
    member = "MEMBER"  # Completed at least one program.
    staff = "STAFF"  # Runs programs and evaluates participants.
    admin = "ADMIN"
    super_admin = "SUPER_ADMIN"


class UserStatus(str, Enum):
    active = "ACTIVE"
    banned = "BANNED"


class ProgramType(str, Enum):
    bookclub = "BOOKCLUB"
    seminar = "SEMINAR"
    kmove = "KMOVE"
    debate = "DEBATE"
    other = "OTHER"


class ProgramStatus(str, Enum):
    """Lifecycle status of a program. Only OPEN programs accept registrations."""

    draft = "DRAFT"
    open = "OPEN"
    closed = "CLOSED"
    completed = "COMPLETED"


class RefundPolicyType(str, Enum):
    one_time = "ONE_TIME"
    attendance_only = "ATTENDANCE_ONLY"
    attendance_and_report = "ATTENDANCE_AND_REPORT"


class RegistrationStatus(str, Enum):
    pending = "PENDING"
    approved = "APPROVED"
    rejected = "REJECTED"
    waitlist = "WAITLIST"
    cancelled = "CANCELLED"


class DepositStatus(str, Enum):
    none = "NONE"
    paid = "PAID"
    refunded = "REFUNDED"
    forfeited = "FORFEITED"


class AttendanceStatus(str, Enum):
    present = "PRESENT"
    late = "LATE"
    absent = "ABSENT"
    excused = "EXCUSED"


class DonationType(str, Enum):
    one_time = "ONE_TIME"
    regular = "REGULAR"


class DonationMethod(str, Enum):
    card = "CARD"
    bank_transfer = "BANK_TRANSFER"


class DonationStatus(str, Enum):
    pending = "PENDING"
    completed = "COMPLETED"
    cancelled = "CANCELLED"
    refunded = "REFUNDED"


class PointType(str, Enum):
    earn = "EARN"
    spend = "SPEND"


class PointCategory(str, Enum):
    attendance = "ATTENDANCE"
    report = "REPORT"
    donation = "DONATION"
    program = "PROGRAM"
    event = "EVENT"
    exchange = "EXCHANGE"
    admin = "ADMIN"


class Visibility(str, Enum):
    public = "PUBLIC"
    private = "PRIVATE"


class ReportStatus(str, Enum):
    draft = "DRAFT"
    submitted = "SUBMITTED"
    approved = "APPROVED"
    rejected = "REJECTED"


class ProjectStatus(str, Enum):
    planning = "PLANNING"
    in_progress = "IN_PROGRESS"
    completed = "COMPLETED"
    on_hold = "ON_HOLD"


class ChangeAction(str, Enum):
    create = "CREATE"
    update = "UPDATE"
    delete = "DELETE"
    restore = "RESTORE"


class RollbackType(str, Enum):
    single = "SINGLE"
    batch = "BATCH"
    restore_point = "RESTORE_POINT"


class CardType(str, Enum):
    warning = "WARNING"
    praise = "PRAISE"


class PermissionStatus(str, Enum):
    """Participation permission, ordered from least to most restrictive."""

    allowed = "ALLOWED"
    restricted = "RESTRICTED"
    banned = "BANNED"


class BadgeCategory(str, Enum):
    attendance = "ATTENDANCE"
    report = "REPORT"
    reading = "READING"
    level = "LEVEL"
    community = "COMMUNITY"


class PopupInteraction(str, Enum):
    show = "show"
    click = "click"
    close = "close"
    conversion = "conversion"


class ButtonInteraction(str, Enum):
    impression = "impression"
    click = "click"
