from typing import Any

from sqlalchemy import JSON, Column, String
from sqlmodel import Field, SQLModel


class Trainer(SQLModel, table=True):
    __tablename__ = "trainers"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=100)
    # "class" is reserved in Python; the column keeps its original name
    trainer_class: str = Field(sa_column=Column("class", String(50), nullable=False))

    badges: list[dict[str, Any]] | None = Field(default=None, sa_column=Column(JSON, nullable=True))
    pokemon: list[dict[str, Any]] | None = Field(default=None, sa_column=Column(JSON, nullable=True))
