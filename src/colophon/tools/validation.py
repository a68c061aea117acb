"""バリデーション依頼のMCPツール定義。"""

from collections.abc import Awaitable, Callable
from typing import Any

from fastmcp import FastMCP

from colophon.models.errors import ColophonError
from colophon.models.request import ValidationRequest
from colophon.services.validation import ValidationService


def _dump(request: ValidationRequest) -> dict[str, Any]:
    return request.model_dump(mode="json", by_alias=True)


async def _noop() -> None:
    return None


def register_validation_tools(
    mcp: FastMCP,
    validation_service: ValidationService,
    *,
    prepare_templates: Callable[[], Awaitable[None]] = _noop,
) -> None:
    """バリデーション関連のMCPツールを登録する。

    prepare_templatesは依頼作成の前に呼ばれる（テンプレートの初期投入など）。
    """

    @mcp.tool()
    async def create_validation_request(
        template_id: str,
        book_id: str,
        book_title: str | None = None,
        created_by: str | None = None,
        message: str | None = None,
        validation_type: str = "all",
    ) -> dict[str, Any]:
        """テンプレートから書籍のバリデーション依頼を作成する。

        テンプレートの必須バリデータが依頼のバリデータ枠としてコピーされます。
        返却されるentityIdと各バリデータ枠のidを判定の記録に使用します。

        Args:
            template_id: テンプレートID。
            book_id: 書籍ID。
            book_title: 書籍タイトル。
            created_by: 依頼者。
            message: 依頼メッセージ。
            validation_type: 集計ポリシー（all: 全員承認 / majority: 過半数 / any: 一人の承認）。
        """
        try:
            await prepare_templates()
            request = await validation_service.create_request(
                template_id,
                book_id,
                book_title,
                created_by,
                message,
                validation_type=validation_type,
            )
            return _dump(request)
        except ColophonError as e:
            return {"error": type(e).__name__, "message": str(e)}

    @mcp.tool()
    async def get_validation_request(request_id: str) -> dict[str, Any]:
        """バリデーション依頼を取得する。

        Args:
            request_id: 依頼ID（entityId）。
        """
        try:
            return _dump(await validation_service.get_request(request_id))
        except ColophonError as e:
            return {"error": type(e).__name__, "message": str(e)}

    @mcp.tool()
    async def list_pending_validations(role: str) -> dict[str, Any]:
        """指定ロールが判定すべき未確定の依頼を一覧する。

        Args:
            role: バリデータのロール。
        """
        try:
            requests = await validation_service.list_pending_for_role(role)
            return {"role": role, "count": len(requests), "requests": [_dump(r) for r in requests]}
        except ColophonError as e:
            return {"error": type(e).__name__, "message": str(e)}

    @mcp.tool()
    async def record_decision(
        request_id: str,
        validator_id: str,
        decision: str,
        decided_by: str,
        comment: str | None = None,
    ) -> dict[str, Any]:
        """バリデータの判定（approved / rejected）を記録する。

        判定は枠ごとに一度だけ記録できます。記録後に依頼全体のステータスが
        再計算され、確定した場合はcompletedAtが設定されます。

        Args:
            request_id: 依頼ID（entityId）。
            validator_id: バリデータ枠ID。
            decision: "approved" または "rejected"。
            decided_by: 判定者。
            comment: コメント（却下理由など）。
        """
        try:
            request = await validation_service.record_decision(
                request_id, validator_id, decision, decided_by, comment
            )
            return _dump(request)
        except ColophonError as e:
            return {"error": type(e).__name__, "message": str(e)}

    @mcp.tool()
    async def list_book_validations(book_id: str) -> dict[str, Any]:
        """書籍のバリデーション依頼を新しい順に一覧する。

        Args:
            book_id: 書籍ID。
        """
        try:
            requests = await validation_service.list_requests_for_book(book_id)
            return {"bookId": book_id, "count": len(requests), "requests": [_dump(r) for r in requests]}
        except ColophonError as e:
            return {"error": type(e).__name__, "message": str(e)}
