"""複数バリデータによる承認フローを管理するサービス。"""

import asyncio
import logging

from colophon.models.errors import (
    ConflictError,
    DecisionNotAuthorizedError,
    InvalidInputError,
    StaleDocumentError,
    TemplateInactiveError,
    TemplateNotFoundError,
)
from colophon.models.request import VALIDATION_TYPES, TemplateLink, ValidationRequest, ValidatorAssignment
from colophon.services.authorization import Authorizer
from colophon.storage.repositories import TemplateRepository, ValidationRequestRepository

logger = logging.getLogger(__name__)


def _require(field: str, value: str | None) -> str:
    if value is None or not value.strip():
        raise InvalidInputError(field, "must not be empty")
    return value


class ValidationService:
    """バリデーション依頼の作成、判定の記録、照会を行う。

    各操作はストアから読み込み、計算し、書き戻す。インスタンス内に
    依頼の状態は保持しない。判定の記録は依頼のversionを条件に書き込み、
    並行更新で衝突した場合は読み込みからやり直す。
    """

    def __init__(
        self,
        templates: TemplateRepository,
        requests: ValidationRequestRepository,
        *,
        authorizer: Authorizer | None = None,
        max_write_attempts: int = 3,
        retry_backoff: float = 0.05,
    ) -> None:
        if max_write_attempts < 1:
            raise ValueError("max_write_attempts must be at least 1")
        self._templates = templates
        self._requests = requests
        self._authorizer = authorizer
        self._max_write_attempts = max_write_attempts
        self._retry_backoff = retry_backoff

    async def create_request(
        self,
        template_id: str,
        book_id: str,
        book_title: str | None,
        created_by: str | None,
        message: str | None = None,
        *,
        validation_type: str = "all",
    ) -> ValidationRequest:
        """テンプレートから書籍のバリデーション依頼を作成する。

        テンプレートの必須バリデータ定義を依頼にコピーする。以降テンプレートが
        編集されても、作成済みの依頼には反映されない。

        Args:
            template_id: テンプレートID。
            book_id: 書籍ID。
            book_title: 書籍タイトル（表示用のコピー）。
            created_by: 依頼者。
            message: 依頼者からのメッセージ。
            validation_type: 集計ポリシー（"all" / "majority" / "any"）。

        Returns:
            作成された依頼。

        Raises:
            InvalidInputError: 必須項目が空、またはポリシーが不正な場合。
            TemplateNotFoundError: テンプレートが存在しない場合。
            TemplateInactiveError: テンプレートが有効でない場合。
        """
        _require("templateId", template_id)
        _require("bookId", book_id)
        if validation_type not in VALIDATION_TYPES:
            raise InvalidInputError(
                "validationType", f"must be one of {sorted(VALIDATION_TYPES)}, got {validation_type!r}"
            )

        template = await self._templates.find_active(template_id)
        if template is None:
            if await self._templates.find(template_id) is not None:
                raise TemplateInactiveError(template_id)
            raise TemplateNotFoundError(template_id)

        requirements = sorted(template.required_validators, key=lambda r: r.order)
        request = ValidationRequest(
            book_id=book_id,
            book_title=book_title,
            template=TemplateLink.from_template(template),
            validation_type=validation_type,  # type: ignore[arg-type]
            validators=[ValidatorAssignment.from_requirement(r) for r in requirements],
            created_by=created_by,
            request_message=message,
        )
        # 必須バリデータがいない場合はポリシーによって作成時点で確定する
        request.refresh_status(request.created_at)

        await self._requests.add(request)
        logger.info(
            "Created validation request %s for book %s from template %s (%d validators, status=%s)",
            request.entity_id,
            book_id,
            template_id,
            len(request.validators),
            request.status,
        )
        return request

    async def get_request(self, request_id: str) -> ValidationRequest:
        """バリデーション依頼を取得する。

        Raises:
            ValidationRequestNotFoundError: 依頼が存在しない場合。
        """
        return await self._requests.get(request_id)

    async def list_pending_for_role(self, role: str) -> list[ValidationRequest]:
        """指定ロールの判定待ちがある未確定の依頼を返す。"""
        _require("role", role)
        return await self._requests.list_pending_for_role(role)

    async def list_requests_for_book(self, book_id: str) -> list[ValidationRequest]:
        """書籍のバリデーション依頼を新しい順に返す。"""
        _require("bookId", book_id)
        return await self._requests.list_for_book(book_id)

    async def record_decision(
        self,
        request_id: str,
        validator_id: str,
        decision: str,
        decided_by: str,
        comment: str | None = None,
    ) -> ValidationRequest:
        """バリデータの判定を記録し、依頼全体のステータスを更新する。

        Args:
            request_id: 依頼ID。
            validator_id: バリデータ枠ID。
            decision: "approved" または "rejected"。
            decided_by: 判定者。
            comment: 判定コメント。

        Returns:
            更新後の依頼。

        Raises:
            InvalidInputError: 入力が不正な場合。
            ValidationRequestNotFoundError: 依頼が存在しない場合。
            ValidatorSlotNotFoundError: バリデータ枠が存在しない場合。
            RequestAlreadyClosedError: 依頼が既に確定している場合。
            ValidatorAlreadyDecidedError: バリデータ枠が既に判定済みの場合。
            DecisionNotAuthorizedError: 判定者に権限がない場合。
            ConflictError: 並行更新の衝突がリトライ上限まで続いた場合。
        """
        _require("requestId", request_id)
        _require("validatorId", validator_id)
        _require("decidedBy", decided_by)

        for attempt in range(1, self._max_write_attempts + 1):
            request = await self._requests.get(request_id)
            if self._authorizer is not None and not request.is_closed:
                assignment = request.get_validator(validator_id)
                if not await self._authorizer.can_decide(decided_by, assignment, request):
                    raise DecisionNotAuthorizedError(decided_by, validator_id)

            request.record_decision(validator_id, decision, decided_by, comment)
            try:
                await self._requests.save(request)
            except StaleDocumentError:
                logger.warning(
                    "Concurrent update on validation request %s (attempt %d/%d)",
                    request_id,
                    attempt,
                    self._max_write_attempts,
                )
                if attempt < self._max_write_attempts:
                    await asyncio.sleep(self._retry_backoff * attempt)
                continue

            logger.info(
                "Recorded %s by %s on validator %s of request %s",
                decision,
                decided_by,
                validator_id,
                request_id,
            )
            if request.is_closed:
                logger.info("Validation request %s closed as %s", request_id, request.status)
            return request

        raise ConflictError(request_id, self._max_write_attempts)
