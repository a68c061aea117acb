"""判定者の権限確認を行うコラボレータ。"""

from typing import Protocol

from colophon.models.request import ValidationRequest, ValidatorAssignment


class Authorizer(Protocol):
    """判定者がバリデータ枠の役割として判定できるかを確認する。

    ロール所属の解決は呼び出し側のID基盤が行う。
    """

    async def can_decide(self, principal: str, assignment: ValidatorAssignment, request: ValidationRequest) -> bool: ...


class TargetedAssignmentAuthorizer:
    """特定ユーザーに割り当てられた枠は、そのユーザーのみ判定できる。

    user_idが未設定の枠は、呼び出し側が確認済みのものとして許可する。
    """

    async def can_decide(self, principal: str, assignment: ValidatorAssignment, request: ValidationRequest) -> bool:
        return assignment.user_id is None or assignment.user_id == principal
