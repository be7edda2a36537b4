"""Unit tests for deposit refund calculation."""

import pytest

from unipivot.core.models.domain.enums import RefundPolicyType
from unipivot.core.rules.deposits import (
    DepositCalculationInput,
    RefundPolicyCriteria,
    SessionRefundInput,
    calculate_per_session_refund,
    calculate_refund,
    format_currency,
    get_refund_status_label,
)


class TestCalculateRefund:
    """Refund amounts under each policy type."""

    def test_missing_required_survey_refunds_nothing(self):
        result = calculate_refund(
            DepositCalculationInput(
                deposit_amount=50000,
                refund_policy_type=RefundPolicyType.attendance_only,
                total_sessions=4,
                attended_sessions=4,
                survey_required=True,
                survey_submitted=False,
            )
        )
        assert result.refund_amount == 0
        assert result.eligible is False
        assert result.ineligible_reason

    def test_one_time_attended_refunds_everything(self):
        result = calculate_refund(
            DepositCalculationInput(deposit_amount=30000, refund_policy_type=RefundPolicyType.one_time, attended=True)
        )
        assert result.refund_amount == 30000
        assert result.refund_rate == 100

    def test_one_time_absent_refunds_nothing(self):
        result = calculate_refund(
            DepositCalculationInput(deposit_amount=30000, refund_policy_type=RefundPolicyType.one_time)
        )
        assert result.refund_amount == 0
        assert result.eligible is False

    @pytest.mark.parametrize(
        "attended,expected_rate",
        [(5, 100), (4, 80), (3, 60), (2, 0)],
    )
    def test_attendance_only_tiers(self, attended, expected_rate):
        result = calculate_refund(
            DepositCalculationInput(
                deposit_amount=50000,
                refund_policy_type=RefundPolicyType.attendance_only,
                total_sessions=5,
                attended_sessions=attended,
            )
        )
        assert result.refund_rate == expected_rate
        assert result.refund_amount == 50000 * expected_rate // 100

    def test_attendance_and_report_uses_both_rates(self):
        result = calculate_refund(
            DepositCalculationInput(
                deposit_amount=100000,
                refund_policy_type=RefundPolicyType.attendance_and_report,
                total_sessions=5,
                attended_sessions=5,
                submitted_reports=4,
            )
        )
        assert result.attendance_rate == 100
        assert result.report_rate == 80
        assert result.refund_rate == 90
        assert result.refund_amount == 90000

    def test_approved_reports_take_precedence(self):
        result = calculate_refund(
            DepositCalculationInput(
                deposit_amount=100000,
                refund_policy_type=RefundPolicyType.attendance_and_report,
                total_sessions=5,
                attended_sessions=5,
                submitted_reports=5,
                approved_reports=3,
            )
        )
        assert result.report_rate == 60
        assert result.refund_rate == 70

    def test_no_sessions_gives_zero_rates(self):
        result = calculate_refund(
            DepositCalculationInput(deposit_amount=10000, refund_policy_type=RefundPolicyType.attendance_only)
        )
        assert result.attendance_rate == 0
        assert result.refund_amount == 0

    def test_custom_policy_overrides_defaults(self):
        custom = [
            RefundPolicyCriteria(min_attendance=50, refund_rate=100, label="half is enough"),
            RefundPolicyCriteria(min_attendance=0, refund_rate=0, label="none"),
        ]
        result = calculate_refund(
            DepositCalculationInput(
                deposit_amount=20000,
                refund_policy_type=RefundPolicyType.attendance_only,
                total_sessions=4,
                attended_sessions=2,
                refund_policy=custom,
            )
        )
        assert result.refund_amount == 20000
        assert result.matched_policy == custom[0]


    def test_half_percent_rounds_up(self):
        result = calculate_refund(
            DepositCalculationInput(
                deposit_amount=10000,
                refund_policy_type=RefundPolicyType.attendance_only,
                total_sessions=8,
                attended_sessions=5,
            )
        )
        assert result.attendance_rate == 63
        assert result.refund_rate == 60

    def test_half_won_refund_rounds_up(self):
        result = calculate_refund(
            DepositCalculationInput(
                deposit_amount=25,
                refund_policy_type=RefundPolicyType.attendance_and_report,
                total_sessions=5,
                attended_sessions=5,
                submitted_reports=4,
            )
        )
        assert result.refund_rate == 90
        assert result.refund_amount == 23

class TestPerSessionRefund:
    def test_each_session_is_judged_separately(self):
        result = calculate_per_session_refund(
            10000,
            [
                SessionRefundInput(attended=True, report_submitted=True, report_approved=True),
                SessionRefundInput(attended=False),
                SessionRefundInput(attended=True, report_submitted=False),
                SessionRefundInput(attended=True, report_submitted=True, report_approved=False),
            ],
            require_report=True,
            survey_submitted=True,
            survey_required=True,
        )
        assert result.total_refund == 10000
        assert [r.refundable for r in result.session_results] == [True, False, False, False]

    def test_missing_survey_blocks_all_sessions(self):
        result = calculate_per_session_refund(
            10000,
            [SessionRefundInput(attended=True)],
            require_report=False,
            survey_submitted=False,
            survey_required=True,
        )
        assert result.total_refund == 0
        assert result.session_results[0].refundable is False


def test_format_currency():
    assert format_currency(100000) == "₩100,000"
    assert format_currency(0) == "₩0"
    assert format_currency(-1500) == "-₩1,500"


def test_refund_status_labels():
    assert get_refund_status_label(100)["color"] == "green"
    assert get_refund_status_label(80)["color"] == "blue"
    assert get_refund_status_label(60)["color"] == "yellow"
    assert get_refund_status_label(10)["color"] == "orange"
    assert get_refund_status_label(0)["color"] == "red"
