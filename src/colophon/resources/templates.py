"""テンプレートカタログのMCPリソース定義。"""

import yaml
from fastmcp import FastMCP

from colophon.services.catalog import TemplateCatalog


def register_template_resources(mcp: FastMCP, catalog: TemplateCatalog) -> None:
    """テンプレート関連のMCPリソースを登録する。"""

    @mcp.resource("colophon://templates")
    async def templates() -> str:
        """承認テンプレートの一覧を取得する。

        テンプレートID、状態、必須バリデータのロール・順序を返します。
        """
        data = {"templates": [t.model_dump(mode="json", by_alias=True) for t in catalog.load()]}
        return yaml.dump(data, allow_unicode=True, default_flow_style=False, sort_keys=False)
