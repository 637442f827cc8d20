from typing import Any

from pydantic import BaseModel, ConfigDict, Field

TRAINER_NAME_PATTERN = r"^[a-zA-Z0-9\s\-\.]+$"
TRAINER_CLASS_PATTERN = r"^[a-zA-Z0-9\s\-]+$"


class TrainerCreate(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str = Field(min_length=1, max_length=100, pattern=TRAINER_NAME_PATTERN)
    trainer_class: str = Field(alias="class", min_length=1, max_length=50, pattern=TRAINER_CLASS_PATTERN)


class TrainerUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str | None = Field(default=None, min_length=1, max_length=100, pattern=TRAINER_NAME_PATTERN)
    trainer_class: str | None = Field(
        default=None, alias="class", min_length=1, max_length=50, pattern=TRAINER_CLASS_PATTERN
    )


class TrainerRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    name: str
    trainer_class: str = Field(serialization_alias="class")
    badges: list[dict[str, Any]] | None = None
    pokemon: list[dict[str, Any]] | None = None
