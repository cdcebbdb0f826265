"""Pydantic base models shared by requests, outcomes and API payloads."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Model whose JSON keys are camel-cased.

    `trusted_height` is dumped as `trustedHeight` when `by_alias=True`. Both
    names are accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
    )


class StrictBaseModel(CamelModel):
    """Frozen camel-cased model that rejects unknown fields and coercion."""

    model_config = ConfigDict(
        **CamelModel.model_config,
        extra="forbid",
        frozen=True,
        strict=True,
    )
