# canews/utils/misc_utils.py
from typing import Any, Mapping

UNKNOWN_DOCUMENT_ID = "unknown"


def document_id(document: Mapping[str, Any]) -> str:
    """Returns the storage identity of a raw document as a string."""
    for key in ("_id", "id"):
        value = document.get(key)
        # Mongo extended JSON exports wrap ids as {"$oid": "..."}
        if isinstance(value, Mapping):
            value = value.get("$oid")
        if value is not None and str(value) != "":
            return str(value)
    return UNKNOWN_DOCUMENT_ID


class IdSequence:
    """Hands out '{doc_id}_{n}' record IDs with one counter per response.

    The counter is shared across every document of a single normalization
    pass, so IDs are unique within one response. They are not stable across
    requests if the upstream order changes.
    """

    def __init__(self) -> None:
        self._next = 0

    def next_id(self, doc_id: str) -> str:
        record_id = f"{doc_id}_{self._next}"
        self._next += 1
        return record_id

    @property
    def issued(self) -> int:
        return self._next
