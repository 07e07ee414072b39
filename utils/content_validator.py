# =============================================================================
# ✅ Content Validator – QR Studio
# -----------------------------------------------------------------------------
# Reine Funktionen: Eingabe + Inhaltstyp → ValidationResult.
# Fehler blockieren, Warnungen sind nur Hinweise. Es wird nie geworfen.
# =============================================================================

from __future__ import annotations

import re
from typing import Any, Dict, List, Union
from urllib.parse import urlsplit

from pydantic import ValidationError

from utils.content_encoder import generate_vcard, has_contact_data, normalize_url
from utils.qr_schema import ContactInfo, ValidationResult

MAX_URL_LENGTH = 2000
MAX_TEXT_LENGTH = 4000
DENSE_TEXT_LENGTH = 2000
MAX_EMAIL_LENGTH = 254
MIN_PHONE_DIGITS = 7
MAX_PHONE_LENGTH = 15

COMMON_EMAIL_DOMAINS = ("gmail.com", "yahoo.com", "hotmail.com", "outlook.com")

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")
_PHONE_FORMATTING_RE = re.compile(r"[\s\-().]")
_PHONE_RE = re.compile(r"^\+?\d+$")
# Zeichen, die in einem Hostnamen nicht vorkommen dürfen
_FORBIDDEN_HOST_CHARS = set(" \t\r\n#<>\\^|%\"`{}")


# --------------------------------------------------------------------------- #
# 🌐 URL
# --------------------------------------------------------------------------- #

def _parse_url(normalized: str):
    """Wirft ValueError, wenn die URL nicht als absolute Adresse lesbar ist."""
    parts = urlsplit(normalized)
    if not parts.scheme or not parts.netloc:
        raise ValueError("missing scheme or host")
    host = parts.hostname or ""
    if not host or any(ch in _FORBIDDEN_HOST_CHARS for ch in host):
        raise ValueError("invalid host")
    # .port wirft ValueError bei ungültigen Ports
    parts.port
    return parts


def validate_url(url: str) -> ValidationResult:
    if not url or not url.strip():
        return ValidationResult(errors=["URL is required"])

    errors: List[str] = []
    warnings: List[str] = []
    normalized = normalize_url(url)

    try:
        parts = _parse_url(normalized)
    except ValueError:
        return ValidationResult(errors=["Invalid URL format"])

    if parts.scheme.lower() not in ("http", "https"):
        warnings.append("Only HTTP and HTTPS protocols are recommended")

    if ".." in (parts.hostname or ""):
        errors.append("Invalid hostname format")

    if len(normalized) > MAX_URL_LENGTH:
        warnings.append("URL is very long and may not scan well")

    return ValidationResult(errors=errors, warnings=warnings, sanitized=normalized)


# --------------------------------------------------------------------------- #
# 📝 Text
# --------------------------------------------------------------------------- #

def validate_text(text: str) -> ValidationResult:
    if not text or not text.strip():
        return ValidationResult(errors=["Text is required"])

    errors: List[str] = []
    warnings: List[str] = []
    trimmed = text.strip()

    if len(trimmed) > MAX_TEXT_LENGTH:
        errors.append(f"Text is too long (max {MAX_TEXT_LENGTH} characters)")
    elif len(trimmed) > DENSE_TEXT_LENGTH:
        warnings.append("Long text may result in dense QR code")

    if _CONTROL_CHARS_RE.search(trimmed):
        warnings.append("Text contains control characters")

    return ValidationResult(errors=errors, warnings=warnings, sanitized=trimmed)


# --------------------------------------------------------------------------- #
# ✉️ E-Mail
# --------------------------------------------------------------------------- #

def levenshtein_distance(a: str, b: str) -> int:
    """Editierdistanz mit Einheitskosten für Einfügen, Löschen und Ersetzen."""
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def validate_email(email: str) -> ValidationResult:
    if not email or not email.strip():
        return ValidationResult(errors=["Email is required"])

    errors: List[str] = []
    warnings: List[str] = []
    trimmed = email.strip()

    if not _EMAIL_RE.match(trimmed):
        errors.append("Invalid email format")

    if len(trimmed) > MAX_EMAIL_LENGTH:
        errors.append("Email is too long")

    local, _, domain = trimmed.partition("@")
    domain = domain.lower()
    if domain:
        suggestion = next(
            (d for d in COMMON_EMAIL_DOMAINS if d != domain and levenshtein_distance(d, domain) == 1),
            None,
        )
        if suggestion:
            warnings.append(f"Did you mean {local}@{suggestion}?")

    return ValidationResult(errors=errors, warnings=warnings, sanitized=trimmed.lower())


# --------------------------------------------------------------------------- #
# 📞 Telefon
# --------------------------------------------------------------------------- #

def validate_phone(phone: str) -> ValidationResult:
    # Telefonnummer ist optional
    if not phone or not phone.strip():
        return ValidationResult(sanitized="")

    errors: List[str] = []
    warnings: List[str] = []
    cleaned = _PHONE_FORMATTING_RE.sub("", phone.strip())

    if not _PHONE_RE.match(cleaned):
        errors.append("Phone number contains invalid characters")

    digits = cleaned[1:] if cleaned.startswith("+") else cleaned
    if len(digits) < MIN_PHONE_DIGITS:
        warnings.append("Phone number seems too short")
    elif len(cleaned) > MAX_PHONE_LENGTH:
        warnings.append("Phone number seems too long")

    return ValidationResult(errors=errors, warnings=warnings, sanitized=cleaned)


# --------------------------------------------------------------------------- #
# 👤 Kontakt (vCard)
# --------------------------------------------------------------------------- #

def _field_errors(error: ValidationError) -> List[str]:
    """Übersetzt pydantic-Fehler in lesbare Meldungen pro Feld."""
    return [
        f"Invalid contact field '{'.'.join(str(p) for p in err['loc'])}': {err['msg']}"
        for err in error.errors()
    ]


def validate_contact(contact: Union[ContactInfo, Dict[str, Any]], escape: bool = True) -> ValidationResult:
    if isinstance(contact, dict):
        try:
            contact = ContactInfo.model_validate(contact)
        except ValidationError as e:
            return ValidationResult(errors=_field_errors(e))

    if not has_contact_data(contact):
        return ValidationResult(errors=["At least one contact field is required"])

    errors: List[str] = []
    warnings: List[str] = []

    checks = (
        (contact.email, validate_email),
        (contact.phone, validate_phone),
        (contact.url, validate_url),
    )
    for value, validator in checks:
        if value and value.strip():
            result = validator(value)
            errors.extend(result.errors)
            warnings.extend(result.warnings)

    return ValidationResult(
        errors=errors,
        warnings=warnings,
        sanitized=generate_vcard(contact, escape=escape),
    )


# --------------------------------------------------------------------------- #
# 🧭 Dispatcher
# --------------------------------------------------------------------------- #

_VALIDATORS = {
    "url": validate_url,
    "text": validate_text,
    "email": validate_email,
    "phone": validate_phone,
}


def validate_qr_content(content: str, content_type: str) -> ValidationResult:
    """Wählt den Validator passend zum Inhaltstyp; Unbekanntes wird als Text geprüft."""
    validator = _VALIDATORS.get((content_type or "").lower(), validate_text)
    return validator(content)
