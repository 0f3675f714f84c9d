"""Parser and serializer for vCard 3.0 (RFC 2425 / RFC 2426)."""
from __future__ import annotations

from .errors import EndOfInput, ParseError, VCardError
from .model import (
    Adr,
    AdrType,
    Agent,
    Bday,
    Binary,
    Card,
    Categories,
    Classification,
    Email,
    EmailType,
    Fn,
    Geo,
    Key,
    Label,
    Logo,
    Mailer,
    N,
    Name,
    Nickname,
    Note,
    Org,
    Photo,
    Prodid,
    Profile,
    Property,
    Rev,
    Role,
    SortString,
    Sound,
    Source,
    Tel,
    TelType,
    Title,
    Tz,
    Uid,
    Url,
    Version,
    XProperty,
)
from .parser import parse_file, parse_stream, parse_text
from .serializer import serialize_card, serialize_cards

__all__ = [
    "Adr",
    "AdrType",
    "Agent",
    "Bday",
    "Binary",
    "Card",
    "Categories",
    "Classification",
    "Email",
    "EmailType",
    "EndOfInput",
    "Fn",
    "Geo",
    "Key",
    "Label",
    "Logo",
    "Mailer",
    "N",
    "Name",
    "Nickname",
    "Note",
    "Org",
    "ParseError",
    "Photo",
    "Prodid",
    "Profile",
    "Property",
    "Rev",
    "Role",
    "SortString",
    "Sound",
    "Source",
    "Tel",
    "TelType",
    "Title",
    "Tz",
    "Uid",
    "Url",
    "VCardError",
    "Version",
    "XProperty",
    "parse_file",
    "parse_stream",
    "parse_text",
    "serialize_card",
    "serialize_cards",
]
