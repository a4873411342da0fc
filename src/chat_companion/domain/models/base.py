from datetime import UTC, datetime
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, ValidationError

from chat_companion.core.base import DatabaseErrorDetails, ErrorCode
from chat_companion.core.errors import StoreError


class Document(BaseModel):
    """Base class for records persisted in the document store.

    Datetimes are stored as epoch seconds and come back as aware UTC datetimes.
    """

    model_config = ConfigDict(extra="ignore")

    collection: ClassVar[str]

    id: str

    def to_document(self, *, exclude_none: bool = True) -> dict[str, Any]:
        """Convert to a store-compatible property dict."""
        props = self.model_dump(exclude_none=exclude_none)
        for key, value in props.items():
            if isinstance(value, datetime):
                props[key] = value.timestamp()
        return props

    @classmethod
    def from_document(cls, record: dict[str, Any]) -> Self:
        """Create an instance from a stored record.

        Raises:
            StoreError: If the record does not match the schema
        """
        data = dict(record)
        for name, field in cls.model_fields.items():
            value = data.get(name)
            if isinstance(value, int | float) and not isinstance(value, bool) and _is_datetime(field.annotation):
                data[name] = datetime.fromtimestamp(value, UTC)

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise StoreError(
                f"Stored {cls.collection} record failed validation",
                details=DatabaseErrorDetails(
                    source=cls.__name__,
                    operation="from_document",
                    service_name="document_store",
                    collection=cls.collection,
                    document_id=str(data.get("id")) if data.get("id") is not None else None,
                    query_type=f"{e.error_count()} validation errors",
                ),
                code=ErrorCode.DB_VALIDATION,
            ) from e


def _is_datetime(annotation: Any) -> bool:
    if annotation is datetime:
        return True
    return datetime in getattr(annotation, "__args__", ())
