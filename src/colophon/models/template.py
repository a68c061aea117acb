"""テンプレート関連のデータモデル。"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

TemplateStatus = Literal["active", "inactive"]


class DocumentModel(BaseModel):
    """ドキュメントストアに保存されるモデルの共通設定。

    属性名はsnake_case、保存・送信時のフィールド名はcamelCaseとする。
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LocalizedString(DocumentModel):
    """言語ごとの表示文字列。"""

    lang: str
    value: str


def first_value(titles: list[LocalizedString], default: str) -> str:
    """最初の空でない表示文字列を返す。なければdefaultを返す。"""
    for title in titles:
        if title.value:
            return title.value
    return default


class ValidatorRequirement(DocumentModel):
    """テンプレートが要求するバリデータの定義。

    同じorderのバリデータは並行して判定できる。
    """

    role: str = Field(min_length=1)
    title: list[LocalizedString] = Field(default_factory=list)
    order: int = Field(default=1, ge=1)
    mandatory: bool = True


class Template(DocumentModel):
    """書籍の種別ごとの承認テンプレート。"""

    entity_id: str = Field(min_length=1)
    title: list[LocalizedString] = Field(default_factory=list)
    status: TemplateStatus = "active"
    required_validators: list[ValidatorRequirement] = Field(default_factory=list)

    @property
    def display_title(self) -> str:
        return first_value(self.title, self.entity_id)
