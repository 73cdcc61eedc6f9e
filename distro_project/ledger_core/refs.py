from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SourceRef:
    """What a posting or stock movement came from: ("invoice", 12, "INV-0012")"""

    type: str = ""
    id: Optional[int] = None
    number: str = ""


# number field per source document, for building refs from model instances
_NUMBER_FIELDS = ("invoice_number", "purchase_number", "expense_number", "entry_number")


def as_source_ref(ref, default_type=""):
    """
    Accept a SourceRef, a source document instance, a bare number
    string or None and return a SourceRef.
    """
    if isinstance(ref, SourceRef):
        if not ref.type and default_type:
            return SourceRef(default_type, ref.id, ref.number)
        return ref
    if ref is None:
        return SourceRef(default_type)
    if isinstance(ref, str):
        return SourceRef(default_type, None, ref)
    if isinstance(ref, dict):
        return SourceRef(
            ref.get("type") or default_type, ref.get("id"), ref.get("number") or ""
        )
    # model instance
    number = ""
    for field in _NUMBER_FIELDS:
        if getattr(ref, field, None):
            number = getattr(ref, field)
            break
    return SourceRef(default_type or ref._meta.model_name, ref.pk, number)
