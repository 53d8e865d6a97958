from uuid import UUID

from protean.exceptions import ValidationError


def normalize_product_ref(value, field: str = "product_id") -> str:
    """Return the canonical string form of a product reference.

    Accepts any spelling `uuid.UUID` accepts (upper case, braces, no hyphens,
    UUID instances) and rejects everything else.
    """
    if isinstance(value, UUID):
        return str(value)
    if value is None or not str(value).strip():
        raise ValidationError({field: ["is required"]})
    try:
        return str(UUID(str(value).strip()))
    except ValueError as exc:
        raise ValidationError({field: [f"'{value}' is not a valid product reference"]}) from exc
