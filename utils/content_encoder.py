# =============================================================================
# 🧾 Content Encoder – QR Studio
# -----------------------------------------------------------------------------
# Baut den kanonischen Inhalt, der in den QR-Code kodiert wird:
# normalisierte URLs, vCards (3.0) und WIFI/SMS/E-Mail/Telefon-Payloads.
# =============================================================================

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Union
from urllib.parse import quote

from utils.qr_schema import ContactInfo, EmailInfo, SmsInfo, WifiInfo

_PROTOCOL_RE = re.compile(r"^https?://", re.IGNORECASE)
_PHONE_FORMATTING_RE = re.compile(r"[\s\-().]")


# --------------------------------------------------------------------------- #
# 🌐 URLs
# --------------------------------------------------------------------------- #

def normalize_url(url: Optional[str]) -> str:
    """Sorgt dafür, dass eine URL mit http:// oder https:// beginnt."""
    if not url:
        return ""
    url = url.strip()
    if not url:
        return ""
    if _PROTOCOL_RE.match(url):
        return url
    return "https://" + url


# --------------------------------------------------------------------------- #
# 👤 vCard
# --------------------------------------------------------------------------- #

def escape_vcard_value(value: str) -> str:
    """Maskiert Sonderzeichen nach RFC 2426 (\\ ; , Zeilenumbruch)."""
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def has_contact_data(contact: ContactInfo) -> bool:
    return any(
        _clean(v)
        for v in (
            contact.first_name,
            contact.last_name,
            contact.phone,
            contact.email,
            contact.organization,
            contact.url,
        )
    )


def generate_vcard(contact: Union[ContactInfo, Dict[str, Any]], escape: bool = True) -> str:
    """
    Erzeugt eine vCard 3.0 aus den Kontaktdaten.

    Leere Formulare ergeben einen leeren String. Mit ``escape=False``
    werden die Werte unverändert übernommen (Altverhalten).
    Falsch typisierte Felder führen wie bei den übrigen Payload-Buildern
    zu einem ValueError; ungeprüfte Eingaben laufen über validate_contact.
    """
    if isinstance(contact, dict):
        contact = ContactInfo.model_validate(contact)

    if not has_contact_data(contact):
        return ""

    esc = escape_vcard_value if escape else (lambda v: v)

    first = _clean(contact.first_name)
    last = _clean(contact.last_name)
    full_name = f"{first} {last}".strip()

    lines: List[str] = ["BEGIN:VCARD", "VERSION:3.0"]

    if full_name:
        lines.append(f"FN:{esc(full_name)}")
        lines.append(f"N:{esc(last)};{esc(first)};;;")

    organization = _clean(contact.organization)
    if organization:
        lines.append(f"ORG:{esc(organization)}")

    phone = _clean(contact.phone)
    if phone:
        lines.append(f"TEL:{esc(phone)}")

    email = _clean(contact.email)
    if email:
        lines.append(f"EMAIL:{esc(email)}")

    url = _clean(contact.url)
    if url:
        lines.append(f"URL:{esc(normalize_url(url))}")

    address = contact.address
    if address is not None:
        parts = [
            _clean(address.street),
            _clean(address.city),
            _clean(address.state),
            _clean(address.postal_code) or _clean(address.zip),
            _clean(address.country),
        ]
        if any(parts):
            lines.append("ADR:;;" + ";".join(esc(p) for p in parts))

    birthday = _clean(contact.birthday)
    if birthday:
        lines.append(f"BDAY:{esc(birthday)}")

    notes = _clean(contact.notes)
    if notes:
        lines.append(f"NOTE:{esc(notes)}")

    lines.append("END:VCARD")
    return "\n".join(lines)


# --------------------------------------------------------------------------- #
# 📶 WIFI / SMS / E-Mail / Telefon
# --------------------------------------------------------------------------- #

def _escape_wifi(value: str) -> str:
    return re.sub(r'([\\;,:"])', r"\\\1", value)


def build_wifi_payload(info: Union[WifiInfo, Dict[str, Any]]) -> str:
    if isinstance(info, dict):
        info = WifiInfo.model_validate(info)
    return (
        f"WIFI:T:{info.encryption};"
        f"S:{_escape_wifi(info.ssid)};"
        f"P:{_escape_wifi(info.password or '')};"
        f"H:{'true' if info.hidden else 'false'};;"
    )


def build_sms_payload(info: Union[SmsInfo, Dict[str, Any]]) -> str:
    if isinstance(info, dict):
        info = SmsInfo.model_validate(info)
    phone = _PHONE_FORMATTING_RE.sub("", info.phone.strip())
    return f"SMSTO:{phone}:{info.message or ''}"


def build_email_payload(info: Union[EmailInfo, Dict[str, Any]]) -> str:
    if isinstance(info, dict):
        info = EmailInfo.model_validate(info)
    query = []
    if info.subject:
        query.append(f"subject={quote(info.subject, safe='')}")
    if info.body:
        query.append(f"body={quote(info.body, safe='')}")
    payload = f"mailto:{info.email.strip()}"
    if query:
        payload += "?" + "&".join(query)
    return payload


def build_phone_payload(phone: str) -> str:
    return "tel:" + _PHONE_FORMATTING_RE.sub("", phone.strip())


def encode_content(content_type: str, value: Any) -> str:
    """
    Liefert den kanonischen Inhalt für einen Inhaltstyp.
    Strings werden für url normalisiert, ansonsten unverändert übernommen;
    strukturierte Daten (dict / Modell) werden in das Zielformat übersetzt.
    """
    content_type = content_type.lower()

    if content_type == "contact":
        return generate_vcard(value)
    if content_type == "url":
        return normalize_url(str(value or ""))
    if isinstance(value, str) or value is None:
        return (value or "").strip()
    if content_type == "wifi":
        return build_wifi_payload(value)
    if content_type == "sms":
        return build_sms_payload(value)
    if content_type == "email":
        return build_email_payload(value)
    if content_type == "phone":
        phone = value.get("phone", "") if isinstance(value, dict) else str(value)
        return build_phone_payload(phone)
    return str(value)
