"""Per-parser execution options served by ``GET /parsers/options``.

A missing or zero timeout falls back to ``DEFAULT_TIMEOUT``, or to the
``default_timeout`` passed in the validation context.
"""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, ValidationInfo, field_validator

DEFAULT_TIMEOUT = 60.0


def _fallback_timeout(v: object, info: ValidationInfo) -> object:
    if v:
        return v
    return (info.context or {}).get("default_timeout", DEFAULT_TIMEOUT)


class ParserOptions(BaseModel):
    """Execution options for one parser."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    parser_id: str
    timeout: PositiveFloat = DEFAULT_TIMEOUT
    enabled: bool = True
    proxy: str | None = None
    user_agent: str | None = None
    custom_params: dict[str, object] = Field(default_factory=dict)

    @field_validator("timeout", mode="before")
    @classmethod
    def _default_timeout(cls, v: object, info: ValidationInfo) -> object:
        return _fallback_timeout(v, info)


class DefaultOptions(BaseModel):
    """Process-wide fallback for parsers without an override."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    timeout: PositiveFloat = DEFAULT_TIMEOUT
    proxy: str | None = None
    user_agent: str | None = None

    @field_validator("timeout", mode="before")
    @classmethod
    def _default_timeout(cls, v: object, info: ValidationInfo) -> object:
        return _fallback_timeout(v, info)

    @field_validator("proxy", "user_agent", mode="before")
    @classmethod
    def _blank_to_none(cls, v: object) -> object:
        return v or None

    @classmethod
    def parse(cls, data: Mapping[str, object], default_timeout: float = DEFAULT_TIMEOUT) -> DefaultOptions:
        return cls.model_validate({"timeout": None, **data}, context={"default_timeout": default_timeout})

    def for_parser(self, parser_id: str) -> ParserOptions:
        return ParserOptions(
            parser_id=parser_id,
            timeout=self.timeout,
            enabled=True,
            proxy=self.proxy,
            user_agent=self.user_agent,
        )


def parse_overrides(
    overrides: Mapping[str, Mapping[str, object]],
    default_timeout: float = DEFAULT_TIMEOUT,
) -> dict[str, ParserOptions]:
    """Key overrides by lower-cased parser id. Overrides without a timeout get ``default_timeout``."""
    context = {"default_timeout": default_timeout}
    return {
        key.lower(): ParserOptions.model_validate({"parser_id": key, "timeout": None, **value}, context=context)
        for key, value in overrides.items()
    }
