"""ローカルファイルシステムベースのドキュメントストア。"""

import asyncio
import json
from pathlib import Path

from colophon.models.errors import DuplicateDocumentError, StorageError
from colophon.storage.store import Document, Query, Sort, document_id, matches, sort_documents


class FileSystemDocumentStore:
    """ローカルファイルシステムを利用したドキュメントストア。

    ドキュメントは <data_dir>/<collection>/<entityId>.json に1件ずつ保存する。
    書き込みはコレクション単位のasyncio.Lockで直列化し、
    replace_oneの条件判定と書き込みを不可分にする。
    """

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = data_dir
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock(self, collection: str) -> asyncio.Lock:
        if collection not in self._locks:
            self._locks[collection] = asyncio.Lock()
        return self._locks[collection]

    def _collection_dir(self, collection: str) -> Path:
        return self._data_dir / self._safe_name(collection)

    def _document_file(self, collection: str, entity_id: str) -> Path:
        return self._collection_dir(collection) / f"{self._safe_name(entity_id)}.json"

    @staticmethod
    def _safe_name(name: str) -> str:
        # ディレクトリトラバーサル防止
        safe = Path(name).name
        if not name or safe != name or name in (".", ".."):
            raise StorageError(f"Invalid document path component: {name}")
        return safe

    def _read_all(self, collection: str) -> list[Document]:
        collection_dir = self._collection_dir(collection)
        if not collection_dir.exists():
            return []
        return [json.loads(f.read_text(encoding="utf-8")) for f in sorted(collection_dir.glob("*.json"))]

    def _write(self, collection: str, document: Document) -> None:
        path = self._document_file(collection, document_id(document))
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(path)

    async def find_one(self, collection: str, query: Query) -> Document | None:
        for document in self._read_all(collection):
            if matches(document, query):
                return document
        return None

    async def find_many(self, collection: str, query: Query, sort: Sort | None = None) -> list[Document]:
        return sort_documents([d for d in self._read_all(collection) if matches(d, query)], sort)

    async def insert_one(self, collection: str, document: Document) -> None:
        entity_id = document_id(document)
        async with self._lock(collection):
            if self._document_file(collection, entity_id).exists():
                raise DuplicateDocumentError(collection, entity_id)
            self._write(collection, document)

    async def replace_one(self, collection: str, query: Query, document: Document) -> bool:
        async with self._lock(collection):
            for stored in self._read_all(collection):
                if matches(stored, query):
                    if document_id(stored) != document_id(document):
                        raise StorageError(f"Replacement must keep entityId {document_id(stored)}")
                    self._write(collection, document)
                    return True
            return False
