"""
Job Models — Pydantic schema for a single mirror job definition.

Job files and the REPOS variable use the capitalised keys:

    [{"ID": "docs", "From": "https://src/docs.git", "To": "https://dst/docs.git"}]

Lowercase keys are accepted as well.
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class JobSpec(BaseModel):
    """A source → destination pair to mirror."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("ID", "id", "Id"))
    from_: str = Field(validation_alias=AliasChoices("From", "from", "from_"))
    to: str = Field(validation_alias=AliasChoices("To", "to"))

    @field_validator("id", "from_", "to")
    @classmethod
    def _not_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    def to_public_dict(self) -> dict:
        """Job description with endpoints hidden."""
        return {"ID": self.id, "From": "<REDACTED (FROM)>", "To": "<REDACTED (TO)>"}
