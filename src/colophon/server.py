"""FastMCPベースのMCPサーバーエントリポイント。"""

import asyncio
import logging

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from colophon.config import ServerConfig
from colophon.resources.templates import register_template_resources
from colophon.services.authorization import Authorizer, TargetedAssignmentAuthorizer
from colophon.services.catalog import TemplateCatalog
from colophon.services.validation import ValidationService
from colophon.storage.filesystem import FileSystemDocumentStore
from colophon.storage.repositories import TemplateRepository, ValidationRequestRepository
from colophon.storage.store import DocumentStore, InMemoryDocumentStore
from colophon.tools.validation import register_validation_tools

logger = logging.getLogger(__name__)


def create_store(config: ServerConfig) -> DocumentStore:
    """設定に応じたドキュメントストアを作成する。"""
    if config.store_backend == "memory":
        return InMemoryDocumentStore()
    return FileSystemDocumentStore(data_dir=config.data_dir)


def create_authorizer(config: ServerConfig) -> Authorizer | None:
    """設定に応じた判定権限の確認方法を返す。Noneの場合は呼び出し側を信頼する。"""
    if config.enforce_targeted_assignments:
        return TargetedAssignmentAuthorizer()
    return None


class TemplateBootstrap:
    """依頼作成の前に一度だけカタログのテンプレートを投入する。

    カタログファイルがない場合は警告を出して投入を省略する。
    """

    def __init__(self, catalog: TemplateCatalog, repository: TemplateRepository, *, enabled: bool = True) -> None:
        self._catalog = catalog
        self._repository = repository
        self._done = not enabled
        self._lock = asyncio.Lock()

    async def __call__(self) -> None:
        if self._done:
            return
        async with self._lock:
            if self._done:
                return
            if self._catalog.path.exists():
                await self._catalog.seed(self._repository)
            else:
                logger.warning("Template catalog not found, skipping template seeding: %s", self._catalog.path)
            self._done = True


def create_server(config: ServerConfig | None = None) -> FastMCP:
    """Colophon MCPサーバーを作成し、ツール・リソースを登録する。

    Args:
        config: サーバー設定。Noneの場合はデフォルト設定を使用。

    Returns:
        設定済みのFastMCPインスタンス。
    """
    if config is None:
        config = ServerConfig()

    mcp = FastMCP("colophon")

    # データアクセス層
    store = create_store(config)
    template_repository = TemplateRepository(store)
    request_repository = ValidationRequestRepository(store)
    catalog = TemplateCatalog(config.config_dir)

    # サービス層
    validation_service = ValidationService(
        template_repository,
        request_repository,
        authorizer=create_authorizer(config),
        max_write_attempts=config.max_write_attempts,
        retry_backoff=config.retry_backoff_seconds,
    )

    # MCPインターフェース登録
    bootstrap = TemplateBootstrap(catalog, template_repository, enabled=config.seed_templates)
    register_validation_tools(mcp, validation_service, prepare_templates=bootstrap)
    register_template_resources(mcp, catalog)

    # ヘルスチェックエンドポイント
    @mcp.custom_route("/health", methods=["GET"])
    async def health_check(request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok"})

    return mcp
