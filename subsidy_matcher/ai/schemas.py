"""Pydantic schemas for the raw refinement output of the language model."""

from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

# Both the compact and the long key names are accepted
COMPACT_SCHEMA = '{"matches":[{"i":0,"adj":5,"score":85,"reasons":[],"ok":[],"missing":[]}]}'


class RefinementEntry(BaseModel):
    """One entry of the model's "matches" list, before validation against the batch."""

    model_config = ConfigDict(extra="ignore")

    index: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("i", "subsidy_index", "index")
    )
    subsidy_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("id", "subsidy_id")
    )
    adjustment: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("adj", "ai_adjustment")
    )
    score: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("score", "match_score")
    )
    success_probability: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("success_probability", "prob")
    )
    reasons: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("reasons", "match_reasons")
    )
    matching_criteria: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("ok", "matching_criteria")
    )
    missing_criteria: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("missing", "missing_criteria")
    )

    @field_validator("reasons", "matching_criteria", "missing_criteria", mode="before")
    @classmethod
    def _as_string_list(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if isinstance(value, (list, tuple)):
            return [str(v) for v in value if v is not None and str(v).strip()]
        return []

    @field_validator("subsidy_id", mode="before")
    @classmethod
    def _id_as_string(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value)
