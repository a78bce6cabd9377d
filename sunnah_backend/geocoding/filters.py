"""Address suffix filtering."""

from collections.abc import Iterable

from sunnah_backend.geocoding.models import GeocodingResponse, GeocodingResult

COMPONENT_SEPARATOR = ", "


class AddressFilterSet:
    """Immutable set of lowercase address suffixes to strip.

    Built once from the comma-separated ``FILTER_STRING`` setting and shared
    by every request handled by a resolver.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[str] = ()) -> None:
        self._entries = frozenset(
            entry.strip().lower() for entry in entries if entry.strip()
        )

    @classmethod
    def from_string(cls, value: str) -> "AddressFilterSet":
        return cls(value.split(","))

    @property
    def entries(self) -> frozenset[str]:
        return self._entries

    def __contains__(self, component: object) -> bool:
        return isinstance(component, str) and component.lower() in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"AddressFilterSet({sorted(self._entries)!r})"

    def trim(self, formatted_address: str) -> str:
        """Drop the trailing component when it is a filtered suffix.

        ``"123 Main St, Springfield, USA"`` becomes ``"123 Main St, Springfield"``
        when ``usa`` is filtered. An address without a comma is returned as is.
        """
        last_component = formatted_address.split(COMPONENT_SEPARATOR)[-1]
        if last_component not in self:
            return formatted_address

        cut = formatted_address.rfind(",")
        if cut == -1:
            return formatted_address
        return formatted_address[:cut]

    def apply(self, response: GeocodingResponse) -> GeocodingResponse:
        """Return a copy of ``response`` with every result trimmed."""
        if not self._entries or not response.results:
            return response

        results = [
            GeocodingResult(
                formatted_address=self.trim(result.formatted_address),
                location=result.location,
            )
            for result in response.results
        ]
        return GeocodingResponse(results=results, status=response.status)
