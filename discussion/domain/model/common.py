"""Base model for all domain entities."""

from typing import Iterable

from pydantic import BaseModel, ConfigDict


class DomainModel(BaseModel):
    """Base class for all domain models.

    Unlike value objects, entities are mutable: a server update changes the
    fields of the record already held in the store, so anything referencing
    it keeps pointing at the current data. Assignments are validated and
    unknown wire fields are dropped.
    """

    model_config = ConfigDict(
        validate_assignment=True,
        extra="ignore",
    )

    def overwrite(self, other: "DomainModel", fields: Iterable[str] | None = None) -> None:
        """Copy field values from another instance onto this one in place.

        Args:
            other: Source of the new values
            fields: Field names to copy (all model fields if omitted)
        """
        for name in fields if fields is not None else type(self).model_fields:
            setattr(self, name, getattr(other, name))
