"""モデルとドキュメントの相互変換、および検索条件を担うリポジトリ。"""

from colophon.models.errors import StaleDocumentError, ValidationRequestNotFoundError
from colophon.models.request import ValidationRequest
from colophon.models.template import Template
from colophon.storage.store import DESCENDING, ID_FIELD, DocumentStore

TEMPLATES = "templates"
VALIDATION_REQUESTS = "validation-requests"


class TemplateRepository:
    """テンプレートの読み込み。コアはテンプレートを更新しない。"""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def find(self, template_id: str) -> Template | None:
        document = await self._store.find_one(TEMPLATES, {ID_FIELD: template_id})
        return Template.model_validate(document) if document is not None else None

    async def find_active(self, template_id: str) -> Template | None:
        document = await self._store.find_one(TEMPLATES, {ID_FIELD: template_id, "status": "active"})
        return Template.model_validate(document) if document is not None else None

    async def add(self, template: Template) -> None:
        """テンプレートを登録する。カタログの初期投入にのみ使用する。"""
        await self._store.insert_one(TEMPLATES, template.model_dump(mode="json", by_alias=True))


class ValidationRequestRepository:
    """バリデーション依頼の永続化。"""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def get(self, request_id: str) -> ValidationRequest:
        """依頼を取得する。

        Raises:
            ValidationRequestNotFoundError: 依頼が存在しない場合。
        """
        document = await self._store.find_one(VALIDATION_REQUESTS, {ID_FIELD: request_id})
        if document is None:
            raise ValidationRequestNotFoundError(request_id)
        return ValidationRequest.model_validate(document)

    async def add(self, request: ValidationRequest) -> None:
        await self._store.insert_one(VALIDATION_REQUESTS, request.model_dump(mode="json", by_alias=True))

    async def save(self, request: ValidationRequest) -> None:
        """依頼を丸ごと置き換えて保存する。

        読み込み時のversionと保存先のversionが一致する場合のみ書き込み、
        成功するとrequest.versionを1増やす。

        Raises:
            StaleDocumentError: 読み込み後に他から更新されていた場合。
            ValidationRequestNotFoundError: 依頼が存在しない場合。
        """
        expected_version = request.version
        document = request.model_dump(mode="json", by_alias=True)
        document["version"] = expected_version + 1

        replaced = await self._store.replace_one(
            VALIDATION_REQUESTS,
            {ID_FIELD: request.entity_id, "version": expected_version},
            document,
        )
        if not replaced:
            if await self._store.find_one(VALIDATION_REQUESTS, {ID_FIELD: request.entity_id}) is None:
                raise ValidationRequestNotFoundError(request.entity_id)
            raise StaleDocumentError(VALIDATION_REQUESTS, request.entity_id, expected_version)
        request.version = expected_version + 1

    async def list_pending_for_role(self, role: str) -> list[ValidationRequest]:
        documents = await self._store.find_many(
            VALIDATION_REQUESTS,
            {"status": "pending", "validators": {"$elemMatch": {"role": role, "status": "pending"}}},
            sort=[("createdAt", DESCENDING)],
        )
        return [ValidationRequest.model_validate(d) for d in documents]

    async def list_for_book(self, book_id: str) -> list[ValidationRequest]:
        documents = await self._store.find_many(
            VALIDATION_REQUESTS,
            {"bookId": book_id},
            sort=[("createdAt", DESCENDING)],
        )
        return [ValidationRequest.model_validate(d) for d in documents]
