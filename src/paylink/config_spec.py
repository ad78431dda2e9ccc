from __future__ import annotations

from pathlib import Path

import pytest

from paylink.config import PaylinkSettings, load_settings
from paylink.errors import ConfigurationError


class DescribeLoadSettings:
    def it_should_return_defaults_when_file_missing(self, tmp_path: Path):
        settings = load_settings(tmp_path / "paylink.yml")

        assert settings.payed_sum_scale == 1
        assert settings.token_env == "PAYLINK_TOKEN"
        assert settings.attachment_attribute is None

    def it_should_load_attribute_descriptor(self, tmp_path: Path):
        path = tmp_path / "paylink.yml"
        path.write_text(
            "payed_sum_scale: 100\n"
            "attachment_attribute:\n"
            "  meta:\n"
            "    href: https://x/attributes/a1\n"
            "    type: attributemetadata\n"
            "  id: a1\n"
            "  name: Привязан к счету\n",
            encoding="utf-8",
        )

        settings = load_settings(path)

        assert settings.payed_sum_scale == 100
        attr = settings.require_attribute()
        assert attr.meta["href"] == "https://x/attributes/a1"
        assert attr.name == "Привязан к счету"

    def it_should_reject_unknown_scale(self, tmp_path: Path):
        path = tmp_path / "paylink.yml"
        path.write_text("payed_sum_scale: 10\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_settings(path)

    def it_should_reject_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "paylink.yml"
        path.write_text("api_url: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_settings(path)

    def it_should_reject_non_mapping_documents(self, tmp_path: Path):
        path = tmp_path / "paylink.yml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_settings(path)


class DescribePaylinkSettings:
    def it_should_require_attribute_for_a_run(self):
        with pytest.raises(ConfigurationError):
            PaylinkSettings().require_attribute()
