"""YAMLのテンプレートカタログを読み込み、ストアへ初期投入する。"""

import logging
from pathlib import Path

import yaml

from colophon.models.errors import StorageError
from colophon.models.template import Template
from colophon.storage.repositories import TemplateRepository

logger = logging.getLogger(__name__)

CATALOG_FILE = "templates.yaml"


class TemplateCatalog:
    """config_dir/templates.yaml に定義されたテンプレートのカタログ。"""

    def __init__(self, config_dir: Path) -> None:
        self._config_dir = config_dir
        self._templates: list[Template] | None = None

    @property
    def path(self) -> Path:
        return self._config_dir / CATALOG_FILE

    def load(self) -> list[Template]:
        """テンプレート定義を読み込む。"""
        if self._templates is None:
            try:
                with open(self.path, encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
            except FileNotFoundError:
                raise StorageError(f"Template catalog not found: {self.path}") from None
            self._templates = [Template.model_validate(t) for t in data.get("templates", [])]
        return self._templates

    async def seed(self, repository: TemplateRepository) -> list[str]:
        """未登録のテンプレートのみストアに登録する。既存のテンプレートは上書きしない。

        Returns:
            新たに登録したテンプレートIDのリスト。
        """
        added: list[str] = []
        for template in self.load():
            if await repository.find(template.entity_id) is not None:
                continue
            await repository.add(template)
            added.append(template.entity_id)
        if added:
            logger.info("Seeded %d templates from %s", len(added), self.path)
        return added
