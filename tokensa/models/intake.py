"""Patient intake data submitted for report generation."""

from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator

from tokensa.models.tags import SymptomTag

MIN_AGE = 2
MAX_AGE = 120
MAX_TAGS = 20


class GenerationRequest(BaseModel):
    """Structured intake for one speech-therapy report."""

    age: float = Field(..., ge=MIN_AGE, le=MAX_AGE, strict=True, description="Patient age in years")
    niveau: Optional[str] = Field(None, description="Grade level, e.g. 'CE2'")
    prenom: Optional[str] = Field(None, description="First name, used only to personalize the report")
    nom: Optional[str] = Field(None, description="Last name, never sent to the model")
    homme: Optional[bool] = Field(
        None, strict=True, description="True for male, False for female, None when unspecified"
    )
    tags: list[SymptomTag] = Field(..., min_length=1, max_length=MAX_TAGS)

    @field_validator("niveau", "prenom", "nom")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, tags: list[SymptomTag]) -> list[SymptomTag]:
        return list(dict.fromkeys(tags))

    @property
    def display_age(self) -> Union[int, float]:
        """Age without a trailing '.0' for whole years."""
        return int(self.age) if float(self.age).is_integer() else self.age

    @property
    def full_name(self) -> Optional[str]:
        parts = [p for p in (self.prenom, self.nom) if p]
        return " ".join(parts) if parts else None
