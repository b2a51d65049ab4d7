"""
Shared plumbing for MongoDB document models.

Documents keep their primary key under ``_id``; models expose it as ``id``.
``to_mongo`` and ``from_mongo`` convert between a model and the raw dict that
PyMongo reads and writes.
"""

from __future__ import annotations

from typing import Any, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, GetCoreSchemaHandler
from pydantic_core import core_schema


class PyObjectId(ObjectId):
    """ObjectId field type: accepts an ObjectId or its 24-char hex form.

    Stays an ObjectId in Python dumps (what PyMongo expects) and becomes a
    string in JSON.
    """

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.to_string_ser_schema(when_used="json"),
        )

    @classmethod
    def _validate(cls, value: Any) -> ObjectId:
        if isinstance(value, str) and ObjectId.is_valid(value):
            value = ObjectId(value)
        if not isinstance(value, ObjectId):
            raise ValueError(f"Invalid ObjectId: {value!r}")
        return value


class MongoBaseModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: Optional[PyObjectId] = Field(default=None, alias="_id")

    def to_mongo(self, *, exclude: Optional[set[str]] = None) -> dict[str, Any]:
        """Dict for ``insert_one``; an unset ``_id`` is left out so MongoDB assigns one."""
        doc = self.model_dump(by_alias=True, exclude=exclude)
        if doc.get("_id") is None:
            doc.pop("_id", None)
        return doc

    @classmethod
    def from_mongo(cls, doc: Optional[dict[str, Any]]) -> Optional["MongoBaseModel"]:
        return None if doc is None else cls.model_validate(doc)
