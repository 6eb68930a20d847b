"""
LLM Prompt Client
=================
Each enrichment call is a Braintrust prompt bound to a slug.  The prompt text
lives in Braintrust; this module only sends inputs and validates the output
shape with pydantic.  A response that does not match its schema raises
``pydantic.ValidationError`` and the caller skips that one record.
"""

from __future__ import annotations

import json
from typing import Any, TypeVar

import braintrust
from pydantic import BaseModel

from booklist import config
from booklist.normalize import filter_genres

T = TypeVar("T", bound=BaseModel)


# ─── Output schemas ─────────────────────────────────────────────────────────

class PersonType(BaseModel):
    type: str


class GenreAndDescription(BaseModel):
    genre: list[str]
    description: str


class SanitizedTitle(BaseModel):
    title: str


class PersonDescription(BaseModel):
    description: str


# ─── Client ─────────────────────────────────────────────────────────────────

class PromptClient:
    def __init__(
        self,
        project_name: str = config.BRAINTRUST_PROJECT,
        api_key: str | None = config.BRAINTRUST_API_KEY,
    ):
        self.project_name = project_name
        self.api_key = api_key
        if api_key:
            braintrust.init_logger(project=project_name, api_key=api_key)

    def invoke(self, slug: str, payload: dict[str, Any], schema: type[T]) -> T:
        result = braintrust.invoke(
            project_name=self.project_name,
            slug=slug,
            input=payload,
            api_key=self.api_key,
        )
        if isinstance(result, str):
            result = json.loads(result)
        return schema.model_validate(result)

    def categorize_person(self, full_name: str) -> str:
        return self.invoke(
            config.SLUG_CATEGORIZE_PERSON, {"person": full_name}, PersonType
        ).type

    def genre_and_description(self, title: str, author: str) -> GenreAndDescription:
        """Genre tags (filtered to the controlled vocabulary) and a blurb."""
        result = self.invoke(
            config.SLUG_GENRE_AND_DESCRIPTION,
            {"title": title, "author": author},
            GenreAndDescription,
        )
        return GenreAndDescription(
            genre=filter_genres(result.genre),
            description=result.description,
        )

    def sanitize_title(self, title: str) -> str:
        return self.invoke(
            config.SLUG_SANITIZE_TITLE, {"title": title}, SanitizedTitle
        ).title

    def describe_person(self, full_name: str, person_type: str | None) -> str:
        return self.invoke(
            config.SLUG_PERSON_DESCRIPTION,
            {"person": full_name, "type": person_type or ""},
            PersonDescription,
        ).description
