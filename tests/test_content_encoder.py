import pytest

from utils.content_encoder import (
    build_email_payload,
    build_phone_payload,
    build_sms_payload,
    build_wifi_payload,
    encode_content,
    escape_vcard_value,
    generate_vcard,
    normalize_url,
)
from utils.qr_schema import ContactInfo


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("example.com", "https://example.com"),
        ("  example.com  ", "https://example.com"),
        ("http://example.com", "http://example.com"),
        ("HTTPS://example.com", "HTTPS://example.com"),
        ("ftp://example.com", "https://ftp://example.com"),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_url(raw, expected):
    assert normalize_url(raw) == expected


def test_escape_vcard_value():
    assert escape_vcard_value("a;b,c\\d\ne") == "a\\;b\\,c\\\\d\\ne"


def test_vcard_full_contact():
    vcard = generate_vcard(
        {
            "firstName": "Ada",
            "lastName": "Lovelace",
            "organization": "Analytical Engines",
            "phone": "+44 20 1234",
            "email": "ada@example.com",
            "url": "example.com",
            "address": {"street": "1 Main St", "city": "London", "zip": "N1", "country": "UK"},
            "birthday": "1815-12-10",
            "notes": "First programmer",
        }
    )
    assert vcard.split("\n") == [
        "BEGIN:VCARD",
        "VERSION:3.0",
        "FN:Ada Lovelace",
        "N:Lovelace;Ada;;;",
        "ORG:Analytical Engines",
        "TEL:+44 20 1234",
        "EMAIL:ada@example.com",
        "URL:https://example.com",
        "ADR:;;1 Main St;London;;N1;UK",
        "BDAY:1815-12-10",
        "NOTE:First programmer",
        "END:VCARD",
    ]


def test_vcard_without_name_has_no_fn_line():
    vcard = generate_vcard(ContactInfo(email="info@example.com"))
    lines = vcard.split("\n")
    assert not any(line.startswith(("FN:", "N:")) for line in lines)
    assert "EMAIL:info@example.com" in lines


def test_vcard_empty_contact_is_empty_string():
    assert generate_vcard({"firstName": "   "}) == ""
    assert generate_vcard(ContactInfo(notes="only notes")) == ""


def test_vcard_escapes_reserved_characters():
    vcard = generate_vcard({"firstName": "Smith, John", "organization": "A;B"})
    assert "FN:Smith\\, John" in vcard
    assert "ORG:A\\;B" in vcard


def test_vcard_unescaped_legacy_mode():
    vcard = generate_vcard({"firstName": "Smith, John"}, escape=False)
    assert "FN:Smith, John" in vcard


def test_vcard_postal_code_wins_over_zip():
    vcard = generate_vcard(
        {"firstName": "A", "address": {"city": "Berlin", "postalCode": "10115", "zip": "99999"}}
    )
    assert "ADR:;;;Berlin;;10115;" in vcard


def test_vcard_empty_address_is_skipped():
    vcard = generate_vcard({"firstName": "A", "address": {"street": "  "}})
    assert "ADR:" not in vcard


def test_wifi_payload_escapes():
    payload = build_wifi_payload({"ssid": 'My;Net', "password": "p:w,d", "encryption": "WPA"})
    assert payload == "WIFI:T:WPA;S:My\\;Net;P:p\\:w\\,d;H:false;;"


def test_wifi_payload_hidden_nopass():
    payload = build_wifi_payload({"ssid": "Guest", "encryption": "nopass", "hidden": True})
    assert payload == "WIFI:T:nopass;S:Guest;P:;H:true;;"


def test_sms_payload():
    assert build_sms_payload({"phone": "(555) 123-4567", "message": "Hi"}) == "SMSTO:5551234567:Hi"


def test_email_payload_quotes_query():
    payload = build_email_payload({"email": "a@b.co", "subject": "Hello World", "body": "x&y"})
    assert payload == "mailto:a@b.co?subject=Hello%20World&body=x%26y"
    assert build_email_payload({"email": "a@b.co"}) == "mailto:a@b.co"


def test_phone_payload():
    assert build_phone_payload(" +49 (30) 1234 ") == "tel:+49301234"


def test_encode_content_dispatch():
    assert encode_content("url", "example.com") == "https://example.com"
    assert encode_content("text", "  hi  ") == "hi"
    assert encode_content("wifi", {"ssid": "Net"}).startswith("WIFI:T:WPA;S:Net;")
    assert encode_content("phone", {"phone": "555 1234"}) == "tel:5551234"
    assert encode_content("contact", {"firstName": "Ada"}).startswith("BEGIN:VCARD")


def test_vcard_wrong_types_raise_value_error():
    with pytest.raises(ValueError):
        generate_vcard({"firstName": ["Ada"]})
