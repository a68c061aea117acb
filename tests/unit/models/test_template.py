"""Template関連データモデルのユニットテスト。"""

import pytest
from pydantic import ValidationError

from colophon.models.template import LocalizedString, Template, ValidatorRequirement, first_value


class TestTemplate:
    def test_create_template_with_defaults(self) -> None:
        template = Template(entity_id="T1")
        assert template.status == "active"
        assert template.required_validators == []
        assert template.display_title == "T1"

    def test_entity_id_is_required(self) -> None:
        with pytest.raises(ValidationError):
            Template(entity_id="")

    def test_unknown_status_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Template(entity_id="T1", status="draft")  # type: ignore[arg-type]

    def test_load_from_camel_case_document(self) -> None:
        template = Template.model_validate(
            {
                "entityId": "T1",
                "title": [{"lang": "en", "value": "Novels"}],
                "requiredValidators": [{"role": "legal", "order": 2, "mandatory": False}],
            }
        )
        assert template.display_title == "Novels"
        assert template.required_validators[0].order == 2
        assert template.required_validators[0].mandatory is False


class TestValidatorRequirement:
    def test_defaults(self) -> None:
        requirement = ValidatorRequirement(role="legal")
        assert requirement.order == 1
        assert requirement.mandatory is True

    def test_role_is_required(self) -> None:
        with pytest.raises(ValidationError):
            ValidatorRequirement(role="")


class TestFirstValue:
    def test_skips_empty_values(self) -> None:
        titles = [LocalizedString(lang="fr", value=""), LocalizedString(lang="en", value="Legal")]
        assert first_value(titles, "legal") == "Legal"

    def test_default_when_empty(self) -> None:
        assert first_value([], "legal") == "legal"
