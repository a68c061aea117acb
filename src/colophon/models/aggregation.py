"""個別判定から依頼全体のステータスを導出する集計エンジン。

副作用のない純粋関数のみで構成する。ストレージや時刻には触れない。
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from colophon.models.request import DecisionStatus, ValidatorAssignment


@dataclass(frozen=True)
class DecisionTally:
    """必須バリデータの判定件数。任意バリデータは集計に含めない。"""

    total: int
    approved: int
    rejected: int

    @property
    def pending(self) -> int:
        return self.total - self.approved - self.rejected


def count_decisions(assignments: Iterable["ValidatorAssignment"]) -> DecisionTally:
    statuses = [a.status for a in assignments if a.mandatory]
    return DecisionTally(
        total=len(statuses),
        approved=statuses.count("approved"),
        rejected=statuses.count("rejected"),
    )


def compute_status(validation_type: str, assignments: Iterable["ValidatorAssignment"]) -> "DecisionStatus":
    """集計ポリシーに従って依頼全体のステータスを計算する。

    必須バリデータが0件の場合の結果はポリシーごとに異なる:
    all は approved、majority は pending、any は rejected になる。

    Args:
        validation_type: 集計ポリシー（"all" / "majority" / "any"）。
        assignments: 依頼のバリデータ枠。

    Returns:
        "pending" / "approved" / "rejected"。未知のポリシーは常に "pending"。
    """
    tally = count_decisions(assignments)

    match validation_type:
        case "all":
            if tally.rejected > 0:
                return "rejected"
            if tally.approved == tally.total:
                return "approved"
            return "pending"
        case "majority":
            if tally.approved > tally.total // 2:
                return "approved"
            if tally.rejected > tally.total // 2:
                return "rejected"
            return "pending"
        case "any":
            # 1件の却下では確定しない。全員が却下した場合のみ rejected
            if tally.approved > 0:
                return "approved"
            if tally.rejected == tally.total:
                return "rejected"
            return "pending"
        case _:
            return "pending"
