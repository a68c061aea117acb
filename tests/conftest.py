"""テスト共通フィクスチャ。"""

from pathlib import Path

import pytest

from colophon.config import ServerConfig
from colophon.models.template import LocalizedString, Template, ValidatorRequirement
from colophon.services.catalog import TemplateCatalog
from colophon.services.validation import ValidationService
from colophon.storage.repositories import TemplateRepository, ValidationRequestRepository
from colophon.storage.store import InMemoryDocumentStore


def make_template(
    entity_id: str,
    roles: list[str],
    *,
    status: str = "active",
    mandatory: bool = True,
) -> Template:
    """ロール一覧から全員order=1のテンプレートを作る。"""
    return Template(
        entity_id=entity_id,
        title=[LocalizedString(lang="en", value=f"Template {entity_id}")],
        status=status,  # type: ignore[arg-type]
        required_validators=[ValidatorRequirement(role=role, order=1, mandatory=mandatory) for role in roles],
    )


@pytest.fixture
def tmp_data_dir(tmp_path: Path) -> Path:
    """テスト用の一時データディレクトリ。"""
    return tmp_path / "colophon-test"


@pytest.fixture
def config_dir() -> Path:
    """設定ファイルディレクトリ。"""
    return Path(__file__).parent.parent / "config"


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """テスト用InMemoryDocumentStore。"""
    return InMemoryDocumentStore()


@pytest.fixture
def template_repository(store: InMemoryDocumentStore) -> TemplateRepository:
    """テスト用TemplateRepository。"""
    return TemplateRepository(store)


@pytest.fixture
def request_repository(store: InMemoryDocumentStore) -> ValidationRequestRepository:
    """テスト用ValidationRequestRepository。"""
    return ValidationRequestRepository(store)


@pytest.fixture
async def templates(template_repository: TemplateRepository) -> dict[str, Template]:
    """登録済みのテスト用テンプレート。"""
    defined = [
        make_template("T1", ["legal", "editorial"]),
        make_template("T3", ["legal", "editorial", "marketing"]),
        make_template("T-empty", []),
        make_template("T-inactive", ["legal"], status="inactive"),
    ]
    for template in defined:
        await template_repository.add(template)
    return {t.entity_id: t for t in defined}


@pytest.fixture
def validation_service(
    template_repository: TemplateRepository,
    request_repository: ValidationRequestRepository,
) -> ValidationService:
    """テスト用ValidationService。"""
    return ValidationService(template_repository, request_repository, retry_backoff=0)


@pytest.fixture
def catalog(config_dir: Path) -> TemplateCatalog:
    """テスト用TemplateCatalog。"""
    return TemplateCatalog(config_dir)


@pytest.fixture
def server_config(tmp_data_dir: Path, config_dir: Path) -> ServerConfig:
    """テスト用ServerConfig。"""
    return ServerConfig(data_dir=tmp_data_dir, config_dir=config_dir, retry_backoff_seconds=0)
