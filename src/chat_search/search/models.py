"""Search data models.

``Document`` is the boundary type for everything the chat layer hands over.
Records arrive loosely typed (numeric ids, ``senderName`` instead of
``author``, missing text), so coercion happens here once and the rest of the
stack works with validated values only.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class Document(BaseModel):
    """A single indexed chat message."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True, populate_by_name=True)

    id: str = Field(min_length=1, description="Caller-supplied unique identifier")
    scope: str = Field(
        default="",
        validation_alias=AliasChoices("scope", "dialog_id", "dialogId"),
        description="Grouping key such as a conversation id",
    )
    text: str = Field(default="", description="Raw message text")
    timestamp: int = Field(default=0, description="Message timestamp as sent by the chat layer")
    author: str | None = Field(
        default=None,
        validation_alias=AliasChoices("author", "sender_name", "senderName"),
        description="Display name of the sender, if known",
    )

    @field_validator("text", mode="before")
    @classmethod
    def _none_text_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @classmethod
    def from_record(cls, record: Document | Mapping[str, Any], scope: str) -> Document:
        """Coerce ``record`` into a ``Document`` stamped with ``scope``.

        Raises:
            pydantic.ValidationError: when the record cannot be coerced (no id,
                or not a mapping at all).
        """
        if isinstance(record, Document):
            return record.model_copy(update={"scope": scope})
        if not isinstance(record, Mapping):
            return cls.model_validate(record)
        data = dict(record)
        for alias in ("dialog_id", "dialogId"):
            data.pop(alias, None)
        data["scope"] = scope
        return cls.model_validate(data)


class SearchResult(BaseModel):
    """One ranked hit returned by the query engine."""

    document: Document
    score: float = Field(ge=0.0, le=1.0, description="Cosine similarity between query and document")
    matched_terms: list[str] = Field(
        default_factory=list,
        description="Query terms also present in the document, in query order",
    )


class IndexStats(BaseModel):
    """Snapshot of index statistics, computed on demand."""

    total_documents: int
    total_terms: int
    last_updated: datetime
    schema_version: str
    per_scope_counts: dict[str, int] = Field(default_factory=dict)
