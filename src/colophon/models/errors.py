"""Colophonのカスタム例外クラス。"""


class ColophonError(Exception):
    """Colophonの基底例外クラス。"""


class NotFoundError(ColophonError):
    """対象が存在しない場合の例外の基底クラス。"""


class TemplateNotFoundError(NotFoundError):
    """テンプレートが見つからない場合の例外。"""

    def __init__(self, template_id: str) -> None:
        super().__init__(f"Template not found: {template_id}")
        self.template_id = template_id


class ValidationRequestNotFoundError(NotFoundError):
    """バリデーション依頼が見つからない場合の例外。"""

    def __init__(self, request_id: str) -> None:
        super().__init__(f"Validation request not found: {request_id}")
        self.request_id = request_id


class ValidatorSlotNotFoundError(NotFoundError):
    """依頼内に指定されたバリデータ枠が存在しない場合の例外。"""

    def __init__(self, request_id: str, slot_id: str) -> None:
        super().__init__(f"Validator slot {slot_id} not found in validation request {request_id}")
        self.request_id = request_id
        self.slot_id = slot_id


class InvalidStateError(ColophonError):
    """現在の状態では許可されない操作の例外の基底クラス。"""


class TemplateInactiveError(InvalidStateError):
    """テンプレートが有効でない場合の例外。"""

    def __init__(self, template_id: str) -> None:
        super().__init__(f"Template is not active: {template_id}")
        self.template_id = template_id


class RequestAlreadyClosedError(InvalidStateError):
    """依頼が既に承認・却下で確定している場合の例外。"""

    def __init__(self, request_id: str, status: str) -> None:
        super().__init__(f"Validation request {request_id} is already closed ({status})")
        self.request_id = request_id
        self.status = status


class ValidatorAlreadyDecidedError(InvalidStateError):
    """バリデータ枠に既に判定が記録されている場合の例外。"""

    def __init__(self, request_id: str, slot_id: str) -> None:
        super().__init__(f"Validator slot {slot_id} of request {request_id} has already decided")
        self.request_id = request_id
        self.slot_id = slot_id


class InvalidInputError(ColophonError):
    """入力値が不正な場合の例外。"""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"Invalid {field}: {message}")
        self.field = field


class DecisionNotAuthorizedError(ColophonError):
    """判定者がバリデータ枠に対して判定する権限を持たない場合の例外。"""

    def __init__(self, principal: str, slot_id: str) -> None:
        super().__init__(f"{principal} is not allowed to decide validator slot {slot_id}")
        self.principal = principal
        self.slot_id = slot_id


class ConflictError(ColophonError):
    """並行更新の衝突がリトライ上限まで解消しなかった場合の例外。"""

    def __init__(self, request_id: str, attempts: int) -> None:
        super().__init__(f"Validation request {request_id} was modified concurrently ({attempts} attempts)")
        self.request_id = request_id
        self.attempts = attempts


class StorageError(ColophonError):
    """ストレージ操作のエラー。"""


class DuplicateDocumentError(StorageError):
    """同じ業務IDのドキュメントが既に存在する場合の例外。"""

    def __init__(self, collection: str, entity_id: str) -> None:
        super().__init__(f"Document already exists in {collection}: {entity_id}")
        self.collection = collection
        self.entity_id = entity_id


class StaleDocumentError(StorageError):
    """読み込み後にドキュメントが他から更新されていた場合の例外。"""

    def __init__(self, collection: str, entity_id: str, expected_version: int) -> None:
        super().__init__(f"Document {entity_id} in {collection} is no longer at version {expected_version}")
        self.collection = collection
        self.entity_id = entity_id
        self.expected_version = expected_version
