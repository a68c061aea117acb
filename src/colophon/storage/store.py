"""汎用ドキュメントストアのインターフェースとインメモリ実装。

クエリはMongoDB風のdictで表す。対応する演算子:
    {"field": value}                       等価比較（"a.b" のドット記法可）
    {"list_field": {"$elemMatch": {...}}}  配列要素のいずれかが条件に一致
"""

import copy
from typing import Any, Protocol

from colophon.models.errors import DuplicateDocumentError, StorageError

Document = dict[str, Any]
Query = dict[str, Any]
Sort = list[tuple[str, int]]

ASCENDING = 1
DESCENDING = -1

ID_FIELD = "entityId"

_MISSING = object()


class DocumentStore(Protocol):
    """コレクション単位でドキュメントを読み書きするストア。"""

    async def find_one(self, collection: str, query: Query) -> Document | None: ...

    async def find_many(self, collection: str, query: Query, sort: Sort | None = None) -> list[Document]: ...

    async def insert_one(self, collection: str, document: Document) -> None: ...

    async def replace_one(self, collection: str, query: Query, document: Document) -> bool:
        """クエリに一致するドキュメントを置き換える。一致しなければFalseを返す。"""
        ...


def _get_path(document: Document, path: str) -> Any:
    value: Any = document
    for key in path.split("."):
        if not isinstance(value, dict) or key not in value:
            return _MISSING
        value = value[key]
    return value


def matches(document: Document, query: Query) -> bool:
    """ドキュメントがクエリに一致するか判定する。"""
    for path, condition in query.items():
        value = _get_path(document, path)
        if isinstance(condition, dict) and "$elemMatch" in condition:
            if not isinstance(value, list):
                return False
            if not any(isinstance(item, dict) and matches(item, condition["$elemMatch"]) for item in value):
                return False
        elif isinstance(condition, dict) and any(k.startswith("$") for k in condition):
            raise StorageError(f"Unsupported query operator: {sorted(condition)}")
        elif value is _MISSING or value != condition:
            return False
    return True


def sort_documents(documents: list[Document], sort: Sort | None) -> list[Document]:
    """sort指定に従って並べ替える。後ろのキーから安定ソートを重ねる。"""
    if not sort:
        return documents
    result = list(documents)
    for path, direction in reversed(sort):
        result.sort(key=lambda d, p=path: _sort_key(_get_path(d, p)), reverse=direction < 0)
    return result


def _sort_key(value: Any) -> Any:
    return "" if value is _MISSING or value is None else value


def document_id(document: Document) -> str:
    entity_id = document.get(ID_FIELD)
    if not isinstance(entity_id, str) or not entity_id:
        raise StorageError(f"Document has no {ID_FIELD}")
    return entity_id


class InMemoryDocumentStore:
    """プロセス内のdictに保存するドキュメントストア。

    各メソッドは途中でイベントループに制御を返さないため、
    replace_oneの条件判定と置き換えは不可分に行われる。
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, Document]] = {}

    def _collection(self, name: str) -> dict[str, Document]:
        return self._collections.setdefault(name, {})

    async def find_one(self, collection: str, query: Query) -> Document | None:
        for document in self._collection(collection).values():
            if matches(document, query):
                return copy.deepcopy(document)
        return None

    async def find_many(self, collection: str, query: Query, sort: Sort | None = None) -> list[Document]:
        found = [copy.deepcopy(d) for d in self._collection(collection).values() if matches(d, query)]
        return sort_documents(found, sort)

    async def insert_one(self, collection: str, document: Document) -> None:
        entity_id = document_id(document)
        documents = self._collection(collection)
        if entity_id in documents:
            raise DuplicateDocumentError(collection, entity_id)
        documents[entity_id] = copy.deepcopy(document)

    async def replace_one(self, collection: str, query: Query, document: Document) -> bool:
        documents = self._collection(collection)
        for entity_id, stored in documents.items():
            if matches(stored, query):
                if document_id(document) != entity_id:
                    raise StorageError(f"Replacement must keep {ID_FIELD} {entity_id}")
                documents[entity_id] = copy.deepcopy(document)
                return True
        return False
