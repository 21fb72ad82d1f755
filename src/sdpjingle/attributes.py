import copy
from typing import Iterable, Iterator, Optional, Union

from .exceptions import InvalidValueError
from .fields import Attribute

AttributeEntry = Union[Attribute, list[Attribute]]


class AttributeStore:
    """
    An ordered container of :class:`Attribute` keyed by name.

    A name maps either to a single attribute or, once a second attribute
    with the same name is added, to the list of all of them in insertion
    order. Iteration groups attributes by first-seen name.
    """

    def __init__(self, attributes: Iterable[Attribute] = ()) -> None:
        self._entries: dict[str, AttributeEntry] = {}
        for attribute in attributes:
            self.add(attribute)

    def add(self, attribute: Attribute) -> None:
        if not isinstance(attribute, Attribute):
            raise InvalidValueError("An attribute field cannot be %r" % attribute)

        entry = self._entries.get(attribute.name)
        if entry is None:
            self._entries[attribute.name] = attribute
        elif isinstance(entry, list):
            entry.append(attribute)
        else:
            self._entries[attribute.name] = [entry, attribute]

    def lookup(self, name: str) -> Optional[AttributeEntry]:
        """
        Return the raw entry for `name`: None, one attribute or a list.
        """
        entry = self._entries.get(name)
        if isinstance(entry, list):
            return list(entry)
        return entry

    def get(self, name: str) -> Optional[Attribute]:
        entry = self._entries.get(name)
        if isinstance(entry, list):
            return entry[0]
        return entry

    def get_all(self, name: str) -> list[Attribute]:
        entry = self._entries.get(name)
        if entry is None:
            return []
        elif isinstance(entry, list):
            return list(entry)
        else:
            return [entry]

    def count(self, name: str) -> int:
        entry = self._entries.get(name)
        if entry is None:
            return 0
        elif isinstance(entry, list):
            return len(entry)
        else:
            return 1

    def remove(self, name: str) -> Optional[Attribute]:
        """
        Remove and return the first attribute called `name`, if any.
        """
        entry = self._entries.get(name)
        if entry is None:
            return None
        elif isinstance(entry, list):
            removed = entry.pop(0)
            if len(entry) == 1:
                self._entries[name] = entry[0]
            return removed
        else:
            del self._entries[name]
            return entry

    def remove_all(self, name: str) -> list[Attribute]:
        removed = self.get_all(name)
        self._entries.pop(name, None)
        return removed

    def set_all(self, attributes: Iterable[Attribute]) -> None:
        """
        Replace the content of the store. If any attribute is rejected the
        previous content is restored.
        """
        backup = self._entries
        self._entries = {}
        try:
            for attribute in attributes:
                self.add(attribute)
        except InvalidValueError:
            self._entries = backup
            raise

    def clear(self) -> None:
        self._entries.clear()

    def names(self) -> list[str]:
        return list(self._entries.keys())

    def clone(self) -> "AttributeStore":
        return copy.deepcopy(self)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[Attribute]:
        for entry in self._entries.values():
            if isinstance(entry, list):
                yield from entry
            else:
                yield entry

    def __len__(self) -> int:
        return sum(self.count(name) for name in self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AttributeStore):
            return NotImplemented
        return list(self) == list(other)

    def __repr__(self) -> str:
        return "AttributeStore(%r)" % list(self)
