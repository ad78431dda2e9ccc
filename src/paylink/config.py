from __future__ import annotations

"""
Settings for a reconciliation run (config/paylink.yml).

Example:

    api_url: https://api.moysklad.ru/api/remap/1.2
    token_env: PAYLINK_TOKEN
    page_size: 100
    payed_sum_scale: 1        # 100 if payedSum is reported in major units
    attachment_attribute:
      meta:
        href: https://api.moysklad.ru/api/remap/1.2/entity/paymentin/metadata/attributes/<id>
        type: attributemetadata
        mediaType: application/json
      id: <id>
      name: Привязан к счету
      type: boolean
"""

from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from paylink.errors import ConfigurationError
from paylink.model.documents import AttachmentAttribute
from paylink.moysklad.client import DEFAULT_API_URL

DEFAULT_TOKEN_ENV = "PAYLINK_TOKEN"


class PaylinkSettings(BaseModel):
    api_url: str = DEFAULT_API_URL
    token_env: str = DEFAULT_TOKEN_ENV
    page_size: int = Field(default=100, ge=1, le=1000)
    payed_sum_scale: Literal[1, 100] = Field(
        default=1, description="Multiplier converting payedSum into minor units"
    )
    attachment_attribute: Optional[AttachmentAttribute] = None

    def require_attribute(self) -> AttachmentAttribute:
        if self.attachment_attribute is None:
            raise ConfigurationError("attachment_attribute is not configured in paylink.yml")
        return self.attachment_attribute


def load_settings(path: Path) -> PaylinkSettings:
    """Load settings from YAML. A missing file yields defaults."""
    if not path.exists():
        return PaylinkSettings()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: expected a mapping at top level")
    try:
        return PaylinkSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings in {path}: {e}") from e


__all__ = ["PaylinkSettings", "load_settings", "DEFAULT_API_URL", "DEFAULT_TOKEN_ENV"]
