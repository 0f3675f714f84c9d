"""Per-content-type grammar: how each property is read and written.

``parse_content`` is called with the parser positioned just after the ``:``
of a content line, once the group, name and parameters have been read.
``serialize_property`` is its inverse and renders one unfolded line.
"""
from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from .grammar import (
    Param,
    Parser,
    exists_with_value,
    get_multiple_values,
    get_single_value,
    get_x_params,
    is_x_name,
)
from .model import (
    Adr,
    Agent,
    Bday,
    Binary,
    Categories,
    Classification,
    Email,
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
    SimpleText,
    SortString,
    Sound,
    Source,
    Tel,
    Temporal,
    TextList,
    Title,
    Tz,
    Uid,
    Url,
    Version,
    XParam,
    XProperty,
)
from .text import (
    escape_newlines,
    escape_text,
    format_date,
    format_date_time,
    parse_date,
    parse_date_or_date_time,
    parse_date_time,
)

ContentParser = Callable[[Parser, str, str | None, list[Param]], Property]

CONTENT_PARSERS: dict[str, ContentParser] = {}

VALUE_URI = "uri"
VALUE_PTEXT = "ptext"
VALUE_TEXT = "text"
VALUE_DATE = "date"
VALUE_DATE_TIME = "date-time"

_SIMPLE_TEXT_TYPES: dict[str, type[SimpleText]] = {
    "FN": Fn,
    "NICKNAME": Nickname,
    "MAILER": Mailer,
    "TITLE": Title,
    "ROLE": Role,
    "PRODID": Prodid,
    "SORT-STRING": SortString,
}

_BINARY_TYPES: dict[str, type[Binary]] = {
    "PHOTO": Photo,
    "LOGO": Logo,
    "SOUND": Sound,
    "KEY": Key,
}


def content_parser(*names: str) -> Callable[[ContentParser], ContentParser]:
    def register(fn: ContentParser) -> ContentParser:
        for name in names:
            CONTENT_PARSERS[name] = fn
        return fn
    return register


def parse_content(p: Parser, name: str, group: str | None, params: list[Param]) -> Property:
    handler = CONTENT_PARSERS.get(name)
    if handler is None:
        if not is_x_name(name):
            p.error(f"unrecognized content type: '{name}'")
        handler = _parse_x_type
    return handler(p, name, group, params)


def _common(group: str | None, params: list[Param]) -> dict[str, Any]:
    return {
        "group": group,
        "language": get_single_value(params, "LANGUAGE"),
        "is_ptext": exists_with_value(params, "VALUE", VALUE_PTEXT),
        "x_params": get_x_params(params),
    }


def _text_list(values: list[str]) -> list[str]:
    # A lone empty component ("N:Public;John;;;") means "no values".
    return [] if values == [""] else values


# ── Parsing ────────────────────────────────────────────────────────────────────

@content_parser("NAME")
def _parse_name(p: Parser, name: str, group: str | None, params: list[Param]) -> Property:
    p.validate_no_parameters(params, name)
    return Name(p.read_value(), group=group)


@content_parser("PROFILE")
def _parse_profile(p: Parser, name: str, group: str | None, params: list[Param]) -> Property:
    p.validate_no_parameters(params, name)
    if p.read_value().upper() != "VCARD":
        p.error('the value of the PROFILE content type must be "VCARD"')
    return Profile(group=group)


@content_parser("SOURCE")
def _parse_source(p: Parser, name: str, group: str | None, params: list[Param]) -> Property:
    p.validate_required_parameters(params, [("CONTEXT", "word"), ("VALUE", VALUE_URI)])
    return Source(
        p.read_value(),
        value_type=get_single_value(params, "VALUE"),
        context=get_single_value(params, "CONTEXT"),
        x_params=get_x_params(params),
        group=group,
    )


@content_parser(*_SIMPLE_TEXT_TYPES)
def _parse_simple_text(p: Parser, name: str, group: str | None, params: list[Param]) -> Property:
    return _SIMPLE_TEXT_TYPES[name](p.read_value(), **_common(group, params))


@content_parser("NOTE")
def _parse_note(p: Parser, name: str, group: str | None, params: list[Param]) -> Property:
    return Note(p.read_text_value(), **_common(group, params))


@content_parser("LABEL")
def _parse_label(p: Parser, name: str, group: str | None, params: list[Param]) -> Property:
    return Label(
        p.read_value(),
        adr_type=get_multiple_values(params, "TYPE"),
        **_common(group, params),
    )


@content_parser("N")
def _parse_n(p: Parser, name: str, group: str | None, params: list[Param]) -> Property:
    return N(
        family=_text_list(p.read_text_value_list()),
        given=_text_list(p.read_text_value_list(only_if_prefix=";")),
        additional=_text_list(p.read_text_value_list(only_if_prefix=";")),
        prefixes=_text_list(p.read_text_value_list(only_if_prefix=";")),
        suffixes=_text_list(p.read_text_value_list(only_if_prefix=";")),
        **_common(group, params),
    )


@content_parser("ADR")
def _parse_adr(p: Parser, name: str, group: str | None, params: list[Param]) -> Property:
    fields = [p.read_text_value()]
    for _ in range(6):
        p.expect(";", case_sensitive=True)
        fields.append(p.read_text_value())
    po_box, extended, street, locality, region, postal_code, country = fields
    return Adr(
        po_box=po_box,
        extended_adr=extended,
        street_adr=street,
        locality=locality,
        region=region,
        postal_code=postal_code,
        country=country,
        adr_type=get_multiple_values(params, "TYPE"),
        **_common(group, params),
    )


@content_parser(*_BINARY_TYPES)
def _parse_binary(p: Parser, name: str, group: str | None, params: list[Param]) -> Property:
    return _BINARY_TYPES[name](
        p.read_value(),
        value_type=get_single_value(params, "VALUE"),
        binary_type=get_single_value(params, "TYPE"),
        is_inline=exists_with_value(params, "ENCODING", "b"),
        group=group,
    )


@content_parser("BDAY", "REV")
def _parse_temporal(p: Parser, name: str, group: str | None, params: list[Param]) -> Property:
    value_type = get_single_value(params, "VALUE")
    if value_type is not None and value_type.lower() not in (VALUE_DATE, VALUE_DATE_TIME):
        p.error(f"invalid VALUE for {name} content. Expected '{VALUE_DATE}' or '{VALUE_DATE_TIME}'")

    raw = p.read_value()

    try:
        if value_type is None:
            value = parse_date_or_date_time(raw)
        elif value_type.lower() == VALUE_DATE:
            value = parse_date(raw)
        else:
            value = parse_date_time(raw)
    except ValueError:
        p.error(f"invalid date or date-time value: {raw}")

    cls = Bday if name == "BDAY" else Rev
    return cls(value, value_type=value_type, group=group)


@content_parser("TEL")
def _parse_tel(p: Parser, name: str, group: str | None, params: list[Param]) -> Property:
    return Tel(p.read_value(), tel_type=get_multiple_values(params, "TYPE"), group=group)


@content_parser("EMAIL")
def _parse_email(p: Parser, name: str, group: str | None, params: list[Param]) -> Property:
    return Email(p.read_value(), email_type=get_multiple_values(params, "TYPE"), group=group)


@content_parser("TZ")
def _parse_tz(p: Parser, name: str, group: str | None, params: list[Param]) -> Property:
    return Tz(p.read_value(), is_text=exists_with_value(params, "VALUE", VALUE_TEXT), group=group)


@content_parser("GEO")
def _parse_geo(p: Parser, name: str, group: str | None, params: list[Param]) -> Property:
    raw = p.read_value()
    parts = raw.split(";")
    try:
        if len(parts) != 2:
            raise ValueError(raw)
        lat, long = float(parts[0]), float(parts[1])
    except ValueError:
        p.error(
            "expected two float values separated by ';' for the GEO content type "
            f"but received '{raw}'"
        )
    return Geo(lat, long, group=group)


@content_parser("AGENT")
def _parse_agent(p: Parser, name: str, group: str | None, params: list[Param]) -> Property:
    value_type = get_single_value(params, "VALUE")
    if value_type is not None and value_type != VALUE_URI:
        p.error(
            f"the VALUE parameter must be set to '{VALUE_URI}' if present on the "
            f"AGENT content type, but it was '{value_type}'"
        )
    return Agent(p.read_value(), is_inline=value_type is None, group=group)


@content_parser("ORG")
def _parse_org(p: Parser, name: str, group: str | None, params: list[Param]) -> Property:
    return Org(_text_list(p.read_text_value_list(separators=";")), **_common(group, params))


@content_parser("CATEGORIES")
def _parse_categories(p: Parser, name: str, group: str | None, params: list[Param]) -> Property:
    return Categories(_text_list(p.read_text_value_list()), **_common(group, params))


@content_parser("UID")
def _parse_uid(p: Parser, name: str, group: str | None, params: list[Param]) -> Property:
    return Uid(p.read_value(), group=group)


@content_parser("URL")
def _parse_url(p: Parser, name: str, group: str | None, params: list[Param]) -> Property:
    return Url(p.read_value(), group=group)


@content_parser("CLASS")
def _parse_class(p: Parser, name: str, group: str | None, params: list[Param]) -> Property:
    return Classification(p.read_value(), group=group)


@content_parser("VERSION")
def _parse_version(p: Parser, name: str, group: str | None, params: list[Param]) -> Property:
    p.validate_no_parameters(params, name)
    p.expect("3.0", case_sensitive=True)
    return Version(group=group)


def _parse_x_type(p: Parser, name: str, group: str | None, params: list[Param]) -> Property:
    return XProperty(
        name,
        p.read_value(),
        language=get_single_value(params, "LANGUAGE"),
        is_ptext=exists_with_value(params, "VALUE", VALUE_PTEXT),
        x_params=[
            (prm.name, ",".join(prm.values))
            for prm in params
            if prm.name not in ("VALUE", "LANGUAGE")
        ],
        group=group,
    )


# ── Serialization ──────────────────────────────────────────────────────────────

def _quote(value: str) -> str:
    if any(ch in value for ch in ':;"'):
        return '"' + value.replace('"', "") + '"'
    return value


def _param(name: str, value: str) -> str:
    return f";{name}={_quote(value)}"


def _x_params(x_params: list[XParam]) -> str:
    return "".join(_param(name, value) for name, value in x_params)


def _text_params(language: str | None, is_ptext: bool, x_params: list[XParam]) -> str:
    out = ""
    if is_ptext:
        out += _param("VALUE", VALUE_PTEXT)
    if language is not None:
        out += _param("LANGUAGE", language)
    return out + _x_params(x_params)


def _types(types: list[str]) -> str:
    return _param("TYPE", ",".join(types)) if types else ""


def _escaped_list(values: list[str], sep: str = ",") -> str:
    return sep.join(escape_text(v) for v in values)


def _temporal_value(prop: Temporal) -> str:
    declared = (prop.value_type or "").lower()
    if declared == VALUE_DATE:
        return format_date(prop.value)
    if declared == VALUE_DATE_TIME or isinstance(prop.value, datetime):
        return format_date_time(prop.value)
    return format_date(prop.value)


def name_with_group(prop: Property) -> str:
    return f"{prop.group}.{prop.name}" if prop.group else prop.name


def serialize_property(prop: Property) -> str:
    """Render one property as an unfolded content line without CRLF."""
    head = name_with_group(prop)

    match prop:
        case Name():
            return f"{head}:{prop.value}"
        case Profile():
            return f"{head}:VCARD"
        case Source():
            params = ""
            if prop.value_type is not None:
                params += _param("VALUE", prop.value_type)
            if prop.context is not None:
                params += _param("CONTEXT", prop.context)
            return f"{head}{params}{_x_params(prop.x_params)}:{prop.value}"
        case N():
            fields = (prop.family, prop.given, prop.additional, prop.prefixes, prop.suffixes)
            value = ";".join(_escaped_list(f) for f in fields)
            return f"{head}{_text_params(prop.language, prop.is_ptext, prop.x_params)}:{value}"
        case Adr():
            value = ";".join(escape_text(f) for f in (
                prop.po_box, prop.extended_adr, prop.street_adr, prop.locality,
                prop.region, prop.postal_code, prop.country,
            ))
            params = _types(prop.adr_type) + _text_params(prop.language, prop.is_ptext, prop.x_params)
            return f"{head}{params}:{value}"
        case Label():
            params = _types(prop.adr_type) + _text_params(prop.language, prop.is_ptext, prop.x_params)
            return f"{head}{params}:{escape_newlines(prop.value)}"
        case Note():
            params = _text_params(prop.language, prop.is_ptext, prop.x_params)
            return f"{head}{params}:{escape_text(prop.value)}"
        case SimpleText() | XProperty():
            params = _text_params(prop.language, prop.is_ptext, prop.x_params)
            return f"{head}{params}:{escape_newlines(prop.value)}"
        case Org():
            params = _text_params(prop.language, prop.is_ptext, prop.x_params)
            return f"{head}{params}:{_escaped_list(prop.value, ';')}"
        case TextList():
            params = _text_params(prop.language, prop.is_ptext, prop.x_params)
            return f"{head}{params}:{_escaped_list(prop.value)}"
        case Binary():
            params = ""
            if prop.value_type is not None:
                params += _param("VALUE", prop.value_type)
            if prop.is_inline:
                params += _param("ENCODING", "b")
            if prop.binary_type is not None:
                params += _param("TYPE", prop.binary_type)
            return f"{head}{params}:{prop.value}"
        case Temporal():
            params = _param("VALUE", prop.value_type) if prop.value_type is not None else ""
            return f"{head}{params}:{_temporal_value(prop)}"
        case Tel():
            return f"{head}{_types(prop.tel_type)}:{prop.value}"
        case Email():
            return f"{head}{_types(prop.email_type)}:{prop.value}"
        case Tz():
            params = _param("VALUE", VALUE_TEXT) if prop.is_text else ""
            return f"{head}{params}:{prop.value}"
        case Geo():
            return f"{head}:{prop.lat!r};{prop.long!r}"
        case Agent():
            params = "" if prop.is_inline else _param("VALUE", VALUE_URI)
            return f"{head}{params}:{escape_newlines(prop.value)}"
        case Uid() | Url() | Classification() | Version():
            return f"{head}:{prop.value}"
        case _:
            raise TypeError(f"cannot serialize {type(prop).__name__}")
