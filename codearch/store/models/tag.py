from __future__ import annotations

from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field

# Reserved document / object keys
TAGS_KEY = "$tags"
TAG_KEY = "$tag"
LABEL_KEY = "$label"
ID_KEY = "$id"

TAGS_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Tag registry",
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            TAG_KEY: {
                "anyOf": [
                    {"type": "string"},
                    {"type": "array", "items": {"type": "string"}},
                ]
            },
            LABEL_KEY: {"type": "string"},
            ID_KEY: {"type": "string", "minLength": 1},
        },
        "required": [TAG_KEY, LABEL_KEY, ID_KEY],
    },
}


def as_categories(value: str | Iterable[str] | None) -> set[str]:
    """ Normalise a `$tag` / `const` value (string or list) into a set of categories. """
    if value is None:
        return set()
    if isinstance(value, str):
        return {value}
    return {str(v) for v in value}


class TagEntry(BaseModel):
    """ One entry of a document's `$tags` registry.
    Stored on disk as {"$tag": ..., "$label": ..., "$id": ...}.
    """
    model_config = ConfigDict(populate_by_name=True)

    category: str | list[str] = Field(alias=TAG_KEY)
    label: str = Field(default="", alias=LABEL_KEY)
    id: str = Field(alias=ID_KEY)

    @property
    def categories(self) -> set[str]:
        return as_categories(self.category)

    def matches(self, categories: str | Iterable[str] | None) -> bool:
        """ True if this entry's categories intersect the requested ones. """
        return bool(self.categories & as_categories(categories))

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True)
