"""Base model for platform raw battery states.

Every platform raw state inherits from :class:`RawBatteryState` which
provides:

* One optional field per raw source attribute. The field's annotated
  type (``Int16``, ``UInt64``, ``YesNo`` ... from
  :mod:`pycello.ingestion.normalize`) is its coercion rule.
* ``validate_assignment=True`` so assigning raw text to a field runs that
  rule. Together with the class-level name table this is the
  field-name -> {rule, setter} dispatch used by :meth:`update`.
* A :meth:`details_text` dump of every field, set or not.

Unknown source names are ignored and a repeated name overwrites the
earlier value.
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict


@functools.cache
def _source_name_table(cls: type[BaseModel]) -> dict[str, str]:
    generator: Callable[[str], str] | None = cls.model_config.get("alias_generator")  # type: ignore[assignment]
    table: dict[str, str] = {}
    for name, info in cls.model_fields.items():
        source = info.alias or (generator(name) if callable(generator) else name)
        table[source] = name
    return table


class RawBatteryState(BaseModel):
    """Base for platform raw battery states."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        validate_assignment=True,
    )

    @classmethod
    def source_names(cls) -> dict[str, str]:
        """Map each source attribute name to its field name."""
        return _source_name_table(cls)

    def update(self, name: str, text: str) -> bool:
        """Coerce *text* into the field fed by source attribute *name*.

        Returns ``False`` when *name* does not map to a field.
        Raises :class:`~pycello.exceptions.CelloInvalidDataError` when the
        text does not satisfy the field's rule.
        """
        field_name = self.source_names().get(name)
        if field_name is None:
            return False
        setattr(self, field_name, text)
        return True

    def update_many(self, values: Mapping[str, str]) -> None:
        for name, text in values.items():
            self.update(name, text)

    @property
    def populated_fields(self) -> dict[str, Any]:
        """Source name -> value for every field that has been set."""
        return {
            source: getattr(self, field_name)
            for source, field_name in self.source_names().items()
            if getattr(self, field_name) is not None
        }

    def _format_value(self, source: str, value: Any) -> str:
        if value is None:
            return "null"
        return str(value)

    def details_text(self) -> str:
        """Multi-line dump of every raw field, ``null`` for unset ones."""
        lines = ["{"]
        for source, field_name in self.source_names().items():
            lines.append(f"    {source} = {self._format_value(source, getattr(self, field_name))},")
        lines.append("}")
        return "\n".join(lines)
