"""Email address normalisation and shape checks."""

from protean.exceptions import ValidationError

_FORBIDDEN = (";", ",", "(", ")", '"', ":", "<", ">", "[", "]", "\\")


def normalize_email(address):
    return (address or "").strip().lower()


def is_valid_email(address) -> bool:
    """Structural validity: one @, non-empty local and dotted domain parts,
    no whitespace, no consecutive dots and no forbidden characters."""
    if not address or any(ch in address for ch in (" ", "\t", "\n")):
        return False
    if address.count("@") != 1:
        return False

    local_part, domain_part = address.split("@", 1)
    if not local_part or local_part.startswith(".") or local_part.endswith("."):
        return False
    if not domain_part or domain_part.startswith(".") or domain_part.endswith("."):
        return False
    if "." not in domain_part:
        return False
    if ".." in local_part or ".." in domain_part:
        return False
    for label in domain_part.split("."):
        if label.startswith("-") or label.endswith("-"):
            return False

    return not any(ch in address for ch in _FORBIDDEN)


def ensure_valid_email(address, field="email"):
    if not is_valid_email(address):
        raise ValidationError({field: [f"Invalid email address: {address!r}"]})
