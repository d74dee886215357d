"""Node properties, property drawers and value restrictions."""

import re
from collections.abc import Collection, Iterator, Mapping
from dataclasses import dataclass

from org_outline.config import VALUE_RESTRICTION_SUFFIX
from org_outline.errors import InvalidPropertyValueError, NotValueRestrictionError

_RESTRICTION_VALUE_RE = re.compile(r'"([^"]*)"|(\S+)')


@dataclass(frozen=True)
class Property:
    """A ``:KEY: value`` pair.

    A key ending in ``_ALL`` (any case, e.g. ``Color_All``) lists the values
    allowed for the key without the suffix. Such restriction properties are
    always inherited, whatever the property inheritance setting.
    """

    key: str
    value: str = ""

    @property
    def is_value_restriction(self) -> bool:
        suffix = VALUE_RESTRICTION_SUFFIX
        return len(self.key) > len(suffix) and self.key.upper().endswith(suffix)

    @property
    def restriction_key(self) -> str:
        """The key this property restricts, or its own key otherwise."""
        if self.is_value_restriction:
            return self.key[: -len(VALUE_RESTRICTION_SUFFIX)]
        return self.key

    def restriction_values(self) -> list[str]:
        """Allowed values; double quotes group values containing spaces."""
        if not self.is_value_restriction:
            return []
        return [quoted or bare for quoted, bare in _RESTRICTION_VALUE_RE.findall(self.value)]

    def validate(self, prop: "Property") -> None:
        """Check ``prop`` against the values this restriction allows.

        Raises:
            NotValueRestrictionError: This property is not a restriction.
            InvalidPropertyValueError: ``prop.value`` is not an allowed value.
        """
        if not self.is_value_restriction:
            raise NotValueRestrictionError(self.key)

        allowed = self.restriction_values()
        if prop.value not in allowed:
            raise InvalidPropertyValueError(prop.key, prop.value, self.key, allowed)

    def render(self) -> str:
        return f":{self.key}: {self.value}".rstrip()


@dataclass(frozen=True)
class PropertyDrawer:
    """Ordered properties of one node, keyed case-insensitively.

    Updates return a new drawer; callers reassign, e.g.
    ``node.properties = node.properties.add(Property("Effort", "1:00"))``.
    """

    properties: tuple[Property, ...] = ()

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> "PropertyDrawer":
        drawer = cls()
        for key, value in mapping.items():
            drawer = drawer.add(Property(key, value))
        return drawer

    def __iter__(self) -> Iterator[Property]:
        return iter(self.properties)

    def __len__(self) -> int:
        return len(self.properties)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def get(self, key: str) -> Property | None:
        wanted = key.upper()
        for prop in self.properties:
            if prop.key.upper() == wanted:
                return prop
        return None

    def add(self, prop: Property) -> "PropertyDrawer":
        """Return a drawer with ``prop`` set, replacing a property with the same key."""
        wanted = prop.key.upper()
        if prop.key in self:
            return PropertyDrawer(
                tuple(prop if p.key.upper() == wanted else p for p in self.properties)
            )
        return PropertyDrawer((*self.properties, prop))

    def remove(self, key: str) -> "PropertyDrawer":
        wanted = key.upper()
        return PropertyDrawer(tuple(p for p in self.properties if p.key.upper() != wanted))

    def merged_over(self, base: "PropertyDrawer") -> "PropertyDrawer":
        """Return ``base`` with this drawer's properties taking precedence."""
        merged = base
        for prop in self.properties:
            merged = merged.add(prop)
        return merged

    def heritable(self, inherit: bool | Collection[str]) -> "PropertyDrawer":
        """Return the properties that pass down to child nodes.

        Args:
            inherit: True to inherit everything, False for nothing, or the
                collection of keys that are inherited. Value restrictions are
                inherited in every case.
        """
        if inherit is True:
            return self
        keys = set() if inherit is False else {k.upper() for k in inherit}
        return PropertyDrawer(
            tuple(p for p in self.properties if p.is_value_restriction or p.key.upper() in keys)
        )

    def value_restrictions(self) -> tuple[Property, ...]:
        return tuple(p for p in self.properties if p.is_value_restriction)

    def restriction_for(self, key: str) -> Property | None:
        """Return the restriction property governing ``key``, if any."""
        wanted = key.upper()
        for prop in self.value_restrictions():
            if prop.restriction_key.upper() == wanted:
                return prop
        return None

    def render_lines(self) -> list[str]:
        if not self.properties:
            return []
        return [":PROPERTIES:", *(p.render() for p in self.properties), ":END:"]
