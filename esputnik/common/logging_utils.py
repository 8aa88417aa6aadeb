import hashlib

ERROR_BODY_LIMIT = 800


def _digest(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:8]


def mask_phone(phone: str | None) -> str | None:
    """``+38 (050) 123-45-67`` -> ``...4567#<hash>``; hash is over the digits only."""
    if not phone:
        return phone
    digits = "".join(ch for ch in phone if ch.isdigit())
    if not digits:
        return "#" + _digest(phone)
    return f"...{digits[-4:]}#{_digest(digits)}"


def mask_email(email: str | None) -> str | None:
    """``ann@example.com`` -> ``a...#<hash>@example.com``."""
    if not email or "@" not in email:
        return email
    local, domain = email.rsplit("@", 1)
    if not local:
        return email
    return f"{local[0]}...#{_digest(email.lower())}@{domain}"


def mask_recipient(value: str | None) -> str | None:
    if value and "@" in value:
        return mask_email(value)
    return mask_phone(value)


def mask_recipients(values: list[str] | None) -> list[str | None]:
    """Masks a mixed list of e-mail addresses and phone numbers."""
    return [mask_recipient(v) for v in values or []]


def shorten_body(body: str | None, max_len: int = ERROR_BODY_LIMIT) -> str | None:
    if body is None or len(body) <= max_len:
        return body
    return f"{body[:max_len]}...(+{len(body) - max_len})"
