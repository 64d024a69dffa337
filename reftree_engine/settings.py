"""Tree builder settings."""

import os
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field

ENV_PREFIX = "REFTREE_"

# 30 days
DEFAULT_CACHE_TTL = 30 * 24 * 60 * 60


class TreeSettings(BaseModel):
    """Settings shared by every tree build."""

    access_permission: str = Field(
        default="access content",
        description="Coarse permission gating the whole tree; entity visibility is checked per entity",
    )
    cache_prefix: str = Field(default="entity_reference_tree:", description="Prefix of every cache key")
    cache_ttl: int = Field(default=DEFAULT_CACHE_TTL, ge=0, description="Cache lifetime in seconds")
    parent_field: Optional[str] = Field(
        default=None, description="Explicit parent field name; unset means first reference field wins"
    )
    reattach_orphans: bool = Field(default=True, description="Attach nodes with a missing parent to the root")
    break_cycles: bool = Field(default=True, description="Attach nodes on a parent cycle to the root")

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        base: Optional[Mapping[str, Any]] = None,
        **overrides: Any,
    ) -> "TreeSettings":
        """Build settings from ``REFTREE_*`` variables.

        Precedence, lowest first: ``base`` (e.g. a config file), the
        environment, explicit ``overrides``. None overrides are ignored.
        """
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = {k: v for k, v in (base or {}).items() if k in cls.model_fields}
        for name in cls.model_fields:
            raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw != "":
                values[name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(values)
