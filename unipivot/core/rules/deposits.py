"""
Deposit refund rules.

Programs collect a deposit up front. How much is returned depends on the
program's refund policy:

- ``ONE_TIME``: a single meeting; full refund when attended, nothing otherwise.
- ``ATTENDANCE_ONLY``: graded by the attendance rate.
- ``ATTENDANCE_AND_REPORT``: graded by attendance rate and book report rate.

If the program requires the satisfaction survey and it was not submitted,
nothing is refunded regardless of the policy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from unipivot.core.models.domain.enums import RefundPolicyType

from .numbers import round_half_up


@dataclass(frozen=True)
class RefundPolicyCriteria:
    min_attendance: int
    refund_rate: int
    label: str
    min_report: Optional[int] = None


DEFAULT_REFUND_POLICIES: dict[RefundPolicyType, list[RefundPolicyCriteria]] = {
    RefundPolicyType.one_time: [
        RefundPolicyCriteria(min_attendance=100, refund_rate=100, label="참석 시 전액 반환"),
        RefundPolicyCriteria(min_attendance=0, refund_rate=0, label="불참 시 미반환"),
    ],
    RefundPolicyType.attendance_only: [
        RefundPolicyCriteria(min_attendance=100, refund_rate=100, label="출석 100%"),
        RefundPolicyCriteria(min_attendance=80, refund_rate=80, label="출석 80% 이상"),
        RefundPolicyCriteria(min_attendance=60, refund_rate=60, label="출석 60% 이상"),
        RefundPolicyCriteria(min_attendance=0, refund_rate=0, label="출석 60% 미만"),
    ],
    RefundPolicyType.attendance_and_report: [
        RefundPolicyCriteria(min_attendance=100, min_report=100, refund_rate=100, label="출석 100%, 독후감 100%"),
        RefundPolicyCriteria(min_attendance=100, min_report=80, refund_rate=90, label="출석 100%, 독후감 80%+"),
        RefundPolicyCriteria(min_attendance=80, min_report=80, refund_rate=80, label="출석 80%+, 독후감 80%+"),
        RefundPolicyCriteria(min_attendance=80, min_report=60, refund_rate=70, label="출석 80%+, 독후감 60%+"),
        RefundPolicyCriteria(min_attendance=60, min_report=60, refund_rate=60, label="출석 60%+, 독후감 60%+"),
        RefundPolicyCriteria(min_attendance=0, min_report=0, refund_rate=0, label="기준 미달"),
    ],
}


@dataclass
class DepositCalculationInput:
    deposit_amount: int
    refund_policy_type: RefundPolicyType
    total_sessions: int = 0
    attended_sessions: int = 0
    submitted_reports: int = 0
    approved_reports: Optional[int] = None
    survey_submitted: bool = False
    survey_required: bool = False
    attended: bool = False
    refund_policy: Optional[Sequence[RefundPolicyCriteria]] = None

    def policies(self) -> Sequence[RefundPolicyCriteria]:
        if self.refund_policy is not None:
            return self.refund_policy
        return DEFAULT_REFUND_POLICIES[RefundPolicyType(self.refund_policy_type)]


@dataclass
class DepositCalculationResult:
    attendance_rate: int
    report_rate: int
    refund_rate: int
    refund_amount: int
    reason: str
    eligible: bool
    ineligible_reason: Optional[str] = None
    matched_policy: Optional[RefundPolicyCriteria] = None


@dataclass
class SessionRefundInput:
    attended: bool
    report_submitted: bool = False
    report_approved: Optional[bool] = None


@dataclass
class SessionRefundResult:
    refundable: bool
    amount: int
    reason: str


@dataclass
class PerSessionRefundResult:
    total_refund: int
    session_results: list[SessionRefundResult] = field(default_factory=list)


def _percent(part: int, whole: int) -> int:
    return round_half_up(part / whole * 100) if whole > 0 else 0


def calculate_refund(data: DepositCalculationInput) -> DepositCalculationResult:
    """Compute the refund of a deposit under the program's policy."""
    if data.survey_required and not data.survey_submitted:
        return DepositCalculationResult(
            attendance_rate=0,
            report_rate=0,
            refund_rate=0,
            refund_amount=0,
            reason="만족도 조사 미제출",
            eligible=False,
            ineligible_reason="만족도 조사에 응답하지 않아 보증금이 반환되지 않습니다.",
        )

    policy_type = RefundPolicyType(data.refund_policy_type)
    policies = list(data.policies())

    if policy_type == RefundPolicyType.one_time:
        if data.attended:
            return DepositCalculationResult(
                attendance_rate=100,
                report_rate=0,
                refund_rate=100,
                refund_amount=data.deposit_amount,
                reason="참석 완료",
                eligible=True,
                matched_policy=policies[0] if policies else None,
            )
        return DepositCalculationResult(
            attendance_rate=0,
            report_rate=0,
            refund_rate=0,
            refund_amount=0,
            reason="불참",
            eligible=False,
            ineligible_reason="프로그램에 불참하여 보증금이 반환되지 않습니다.",
            matched_policy=policies[1] if len(policies) > 1 else None,
        )

    attendance_rate = _percent(data.attended_sessions, data.total_sessions)
    # approved reports take precedence over merely submitted ones
    report_count = data.approved_reports if data.approved_reports is not None else data.submitted_reports
    report_rate = _percent(report_count, data.total_sessions)

    matched: Optional[RefundPolicyCriteria] = None
    reason = ""
    for policy in sorted(policies, key=lambda p: p.min_attendance, reverse=True):
        if policy_type == RefundPolicyType.attendance_only:
            if attendance_rate >= policy.min_attendance:
                matched = policy
                reason = f"출석률 {attendance_rate}% ({policy.label})"
                break
        elif attendance_rate >= policy.min_attendance and report_rate >= (policy.min_report or 0):
            matched = policy
            reason = f"출석 {attendance_rate}%, 독후감 {report_rate}% ({policy.label})"
            break

    refund_rate = matched.refund_rate if matched else 0
    refund_amount = round_half_up(data.deposit_amount * refund_rate / 100)
    return DepositCalculationResult(
        attendance_rate=attendance_rate,
        report_rate=report_rate,
        refund_rate=refund_rate,
        refund_amount=refund_amount,
        reason=reason,
        eligible=refund_amount > 0,
        ineligible_reason=(
            f"출석률({attendance_rate}%) 또는 독후감 제출률({report_rate}%)이 기준에 미달합니다."
            if refund_amount == 0
            else None
        ),
        matched_policy=matched,
    )


def calculate_per_session_refund(
    deposit_per_session: int,
    sessions: Sequence[SessionRefundInput],
    require_report: bool,
    survey_submitted: bool,
    survey_required: bool,
) -> PerSessionRefundResult:
    """Refund ``deposit_per_session`` for every session whose conditions are met."""
    if survey_required and not survey_submitted:
        return PerSessionRefundResult(
            total_refund=0,
            session_results=[SessionRefundResult(False, 0, "만족도 조사 미제출") for _ in sessions],
        )

    results = []
    for number, session in enumerate(sessions, start=1):
        if not session.attended:
            results.append(SessionRefundResult(False, 0, f"{number}회차 불참"))
        elif require_report and not session.report_submitted:
            results.append(SessionRefundResult(False, 0, f"{number}회차 독후감 미제출"))
        elif require_report and session.report_approved is False:
            results.append(SessionRefundResult(False, 0, f"{number}회차 독후감 미승인"))
        else:
            results.append(SessionRefundResult(True, deposit_per_session, f"{number}회차 조건 충족"))

    return PerSessionRefundResult(total_refund=sum(r.amount for r in results), session_results=results)


def format_currency(amount: int) -> str:
    """Format an amount as Korean won, e.g. ``₩100,000``."""
    sign = "-" if amount < 0 else ""
    return f"{sign}₩{round_half_up(abs(amount)):,}"


def get_refund_status_label(refund_rate: int) -> dict[str, str]:
    if refund_rate == 100:
        return {"label": "전액 반환", "color": "green"}
    if refund_rate >= 80:
        return {"label": "대부분 반환", "color": "blue"}
    if refund_rate >= 60:
        return {"label": "일부 반환", "color": "yellow"}
    if refund_rate > 0:
        return {"label": "최소 반환", "color": "orange"}
    return {"label": "미반환", "color": "red"}
