"""集計エンジンのユニットテスト。"""

import pytest

from colophon.models.request import ValidatorAssignment
from colophon.models.aggregation import compute_status, count_decisions


def slots(*statuses: str, mandatory: bool = True) -> list[ValidatorAssignment]:
    return [ValidatorAssignment(role=f"role-{i}", status=s, mandatory=mandatory) for i, s in enumerate(statuses)]


class TestAllPolicy:
    def test_all_approved_is_approved(self) -> None:
        assert compute_status("all", slots("approved", "approved")) == "approved"

    def test_partial_approval_is_pending(self) -> None:
        assert compute_status("all", slots("approved", "pending")) == "pending"

    def test_single_rejection_is_rejected(self) -> None:
        assert compute_status("all", slots("approved", "rejected", "pending")) == "rejected"

    def test_no_mandatory_validators_is_approved(self) -> None:
        assert compute_status("all", []) == "approved"

    def test_optional_validators_are_ignored(self) -> None:
        assignments = slots("approved") + slots("rejected", "pending", mandatory=False)
        assert compute_status("all", assignments) == "approved"

    def test_only_optional_validators_is_approved(self) -> None:
        assert compute_status("all", slots("pending", mandatory=False)) == "approved"


class TestMajorityPolicy:
    def test_two_of_three_approved(self) -> None:
        assert compute_status("majority", slots("approved", "approved", "pending")) == "approved"

    def test_one_of_three_approved_is_pending(self) -> None:
        assert compute_status("majority", slots("approved", "pending", "pending")) == "pending"

    def test_two_of_three_rejected(self) -> None:
        assert compute_status("majority", slots("rejected", "rejected", "approved")) == "rejected"

    def test_even_split_is_pending(self) -> None:
        assert compute_status("majority", slots("approved", "rejected")) == "pending"

    def test_half_of_four_is_not_a_majority(self) -> None:
        assert compute_status("majority", slots("approved", "approved", "pending", "pending")) == "pending"

    def test_single_validator(self) -> None:
        assert compute_status("majority", slots("approved")) == "approved"
        assert compute_status("majority", slots("rejected")) == "rejected"

    def test_no_mandatory_validators_is_pending(self) -> None:
        assert compute_status("majority", []) == "pending"


class TestAnyPolicy:
    def test_one_approval_is_approved(self) -> None:
        assert compute_status("any", slots("rejected", "approved", "pending")) == "approved"

    def test_one_rejection_is_still_pending(self) -> None:
        assert compute_status("any", slots("rejected", "pending")) == "pending"

    def test_all_rejected_is_rejected(self) -> None:
        assert compute_status("any", slots("rejected", "rejected")) == "rejected"

    def test_no_mandatory_validators_is_rejected(self) -> None:
        assert compute_status("any", []) == "rejected"

    def test_optional_approval_does_not_count(self) -> None:
        assignments = slots("rejected") + slots("approved", mandatory=False)
        assert compute_status("any", assignments) == "rejected"


class TestUnknownPolicy:
    @pytest.mark.parametrize("validation_type", ["weighted", "", "ALL"])
    def test_unknown_policy_is_pending(self, validation_type: str) -> None:
        assert compute_status(validation_type, slots("approved", "approved")) == "pending"
        assert compute_status(validation_type, []) == "pending"


class TestPurity:
    @pytest.mark.parametrize("validation_type", ["all", "majority", "any"])
    def test_recomputing_unchanged_set_is_stable(self, validation_type: str) -> None:
        assignments = slots("approved", "rejected", "pending")
        before = [a.model_copy() for a in assignments]

        first = compute_status(validation_type, assignments)
        second = compute_status(validation_type, assignments)

        assert first == second
        assert assignments == before


class TestCountDecisions:
    def test_counts_mandatory_only(self) -> None:
        tally = count_decisions(slots("approved", "rejected", "pending") + slots("approved", mandatory=False))
        assert tally.total == 3
        assert tally.approved == 1
        assert tally.rejected == 1
        assert tally.pending == 1
