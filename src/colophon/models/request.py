"""バリデーション依頼関連のデータモデル。"""

import uuid
from datetime import UTC, datetime
from typing import Literal, get_args

from pydantic import Field, field_serializer, model_validator

from colophon.models.aggregation import compute_status
from colophon.models.errors import (
    InvalidInputError,
    RequestAlreadyClosedError,
    ValidatorAlreadyDecidedError,
    ValidatorSlotNotFoundError,
)
from colophon.models.template import DocumentModel, Template, ValidatorRequirement, first_value

DecisionStatus = Literal["pending", "approved", "rejected"]
Decision = Literal["approved", "rejected"]
ValidationType = Literal["all", "majority", "any"]

TERMINAL_STATUSES: frozenset[str] = frozenset({"approved", "rejected"})
DECISIONS: frozenset[str] = frozenset(get_args(Decision))
VALIDATION_TYPES: frozenset[str] = frozenset(get_args(ValidationType))


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.now(UTC)


def format_timestamp(value: datetime | None) -> str | None:
    """UTC・マイクロ秒固定の形式で文字列化する。文字列の順序が時刻の順序と一致する。"""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class TemplateLink(DocumentModel):
    """依頼作成時点のテンプレートのスナップショット。

    テンプレートへの参照ではなく値のコピーであり、作成後にテンプレートが
    編集されても依頼には影響しない。
    """

    rel: str = "template"
    href: str
    entity_id: str
    title: str

    @classmethod
    def from_template(cls, template: Template) -> "TemplateLink":
        return cls(
            href=f"/templates/{template.entity_id}",
            entity_id=template.entity_id,
            title=template.display_title,
        )


class ValidatorAssignment(DocumentModel):
    """依頼内の一人分のバリデータ枠と、その判定。"""

    id: str = Field(default_factory=_new_id)
    role: str = Field(min_length=1)
    user_id: str | None = None
    display_name: str | None = None
    status: DecisionStatus = "pending"
    comment: str | None = None
    decided_at: datetime | None = None
    decided_by: str | None = None
    order: int = Field(default=1, ge=1)
    mandatory: bool = True

    @field_serializer("decided_at", when_used="json")
    def _serialize_decided_at(self, value: datetime | None) -> str | None:
        return format_timestamp(value)

    @classmethod
    def from_requirement(cls, requirement: ValidatorRequirement) -> "ValidatorAssignment":
        return cls(
            role=requirement.role,
            display_name=first_value(requirement.title, requirement.role),
            order=requirement.order,
            mandatory=requirement.mandatory,
        )

    @property
    def is_decided(self) -> bool:
        return self.status != "pending"


class ValidationRequest(DocumentModel):
    """書籍1冊に対する複数バリデータによる承認依頼（集約ルート）。

    statusは判定の記録によってのみ変化し、外部から直接設定しない。
    completed_atはstatusが確定状態（approved / rejected）の場合にのみ設定される。
    versionは楽観的排他制御用で、保存に成功するたびに1ずつ増える。
    """

    entity_id: str = Field(default_factory=_new_id)
    book_id: str = Field(min_length=1)
    book_title: str | None = None
    template: TemplateLink | None = None
    status: DecisionStatus = "pending"
    validation_type: ValidationType = "all"
    validators: list[ValidatorAssignment] = Field(default_factory=list)
    created_by: str | None = None
    created_at: datetime = Field(default_factory=_now)
    completed_at: datetime | None = None
    request_message: str | None = None
    version: int = Field(default=1, ge=1)

    @field_serializer("created_at", "completed_at", when_used="json")
    def _serialize_timestamps(self, value: datetime | None) -> str | None:
        return format_timestamp(value)

    @model_validator(mode="after")
    def _check_completed_at(self) -> "ValidationRequest":
        if self.is_closed and self.completed_at is None:
            raise ValueError(f"completedAt is required when status is {self.status}")
        if not self.is_closed and self.completed_at is not None:
            raise ValueError("completedAt must be empty while status is pending")
        return self

    @property
    def is_closed(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def get_validator(self, slot_id: str) -> ValidatorAssignment:
        """バリデータ枠を取得する。

        Raises:
            ValidatorSlotNotFoundError: 枠が存在しない場合。
        """
        for assignment in self.validators:
            if assignment.id == slot_id:
                return assignment
        raise ValidatorSlotNotFoundError(self.entity_id, slot_id)

    def pending_validators_for_role(self, role: str) -> list[ValidatorAssignment]:
        return [v for v in self.validators if v.role == role and v.status == "pending"]

    def refresh_status(self, now: datetime | None = None) -> DecisionStatus:
        """集計エンジンで全体ステータスを再計算する。

        確定状態に遷移した場合はcompleted_atを記録する。
        """
        self.status = compute_status(self.validation_type, self.validators)
        if self.is_closed and self.completed_at is None:
            self.completed_at = now or _now()
        return self.status

    def record_decision(
        self,
        slot_id: str,
        decision: str,
        decided_by: str,
        comment: str | None = None,
        *,
        decided_at: datetime | None = None,
    ) -> ValidatorAssignment:
        """バリデータ枠に判定を記録し、全体ステータスを再計算する。

        Args:
            slot_id: バリデータ枠ID。
            decision: "approved" または "rejected"。
            decided_by: 判定者の識別子。
            comment: 判定コメント。
            decided_at: 判定日時。省略時は現在時刻。

        Returns:
            判定が記録されたバリデータ枠。

        Raises:
            InvalidInputError: decisionが不正な場合。
            RequestAlreadyClosedError: 依頼が既に確定している場合。
            ValidatorSlotNotFoundError: 枠が存在しない場合。
            ValidatorAlreadyDecidedError: 枠が既に判定済みの場合。
        """
        if decision not in DECISIONS:
            raise InvalidInputError("decision", f"must be one of {sorted(DECISIONS)}, got {decision!r}")
        if self.is_closed:
            raise RequestAlreadyClosedError(self.entity_id, self.status)

        assignment = self.get_validator(slot_id)
        if assignment.is_decided:
            raise ValidatorAlreadyDecidedError(self.entity_id, slot_id)

        now = decided_at or _now()
        assignment.status = decision  # type: ignore[assignment]
        assignment.comment = comment
        assignment.decided_at = now
        assignment.decided_by = decided_by

        self.refresh_status(now)
        return assignment
