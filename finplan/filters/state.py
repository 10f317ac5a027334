"""
Person Filter State

Tracks which household members the read-side views are showing.

The selection is EITHER the "all" sentinel OR a non-empty ordered set of
person names. Selecting "all" clears the explicit set; toggling a person
while on "all" replaces it with just that person; the last remaining
person cannot be toggled off.
"""

from typing import Sequence, Union

from finplan.queries.aggregator import ALL_PERSONS, RecordT, filter_by_persons


class FilterState:
    """Selection-state machine feeding the aggregator's person filter."""

    def __init__(self) -> None:
        self._explicit: list[str] = []

    @property
    def is_all(self) -> bool:
        return not self._explicit

    @property
    def selected_persons(self) -> Union[str, tuple[str, ...]]:
        """ALL_PERSONS, or the explicit selection in the order it was made."""
        if self.is_all:
            return ALL_PERSONS
        return tuple(self._explicit)

    def is_selected(self, person: str) -> bool:
        return self.is_all or person in self._explicit

    def select_all(self) -> None:
        self._explicit = []

    def toggle(self, person: str) -> None:
        """
        Add or remove one person from the selection.

        Toggling the sentinel value itself selects everyone. Blank labels
        are ignored because such records never match an explicit filter.
        """
        if person == ALL_PERSONS:
            self.select_all()
            return
        if not person:
            return

        if self.is_all:
            self._explicit = [person]
        elif person in self._explicit:
            if len(self._explicit) > 1:
                self._explicit.remove(person)
        else:
            self._explicit.append(person)

    def filter(self, records: Sequence[RecordT]) -> list[RecordT]:
        return filter_by_persons(records, self.selected_persons)

    def __repr__(self) -> str:
        return f"FilterState(selected_persons={self.selected_persons!r})"
