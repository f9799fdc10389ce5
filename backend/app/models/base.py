"""
Shared pydantic base for in-memory entities.

Entities use snake_case attributes in Python and camelCase keys on the wire.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )

    def to_wire(self) -> dict:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)

    def wire_changes(self, changes: Union[Mapping[str, Any], BaseModel]) -> Dict[str, Any]:
        """
        camelCase map of the fields named in ``changes``, valued from this entity.

        Keys may be given in either case. ``updatedAt`` is always included
        when the entity has it.
        """
        if isinstance(changes, BaseModel):
            changes = {name: None for name in changes.model_fields_set}
        aliases = {name: field.alias or name for name, field in type(self).model_fields.items()}
        wire = self.to_wire()
        keys = [aliases.get(name, name) for name in changes] + ["updatedAt"]
        return {key: wire[key] for key in keys if key in wire}
