"""Per-content-type parsing and rendering."""
from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from vcard3 import parse_text
from vcard3.errors import ParseError
from vcard3.model import (
    Adr,
    Agent,
    Bday,
    Categories,
    Classification,
    Email,
    Fn,
    Geo,
    Key,
    Label,
    Mailer,
    N,
    Name,
    Nickname,
    Note,
    Org,
    Photo,
    Prodid,
    Profile,
    Rev,
    Role,
    SortString,
    Sound,
    Source,
    Tel,
    Title,
    Tz,
    Uid,
    Url,
    XProperty,
)
from vcard3.properties import CONTENT_PARSERS, serialize_property


# ── helpers ────────────────────────────────────────────────────────────────────

def _wrap(line: str) -> str:
    return f"BEGIN:VCARD\r\nVERSION:3.0\r\n{line}\r\nEND:VCARD\r\n"


def _one(line: str):
    """Parse a single content line inside a minimal card and return it."""
    card = parse_text(_wrap(line))[0]
    assert len(card.properties) == 2
    return card.properties[1]


def _fails(line: str) -> ParseError:
    with pytest.raises(ParseError) as exc:
        parse_text(_wrap(line))
    return exc.value


def test_every_standard_type_is_registered():
    expected = {
        "NAME", "PROFILE", "SOURCE", "FN", "N", "NICKNAME", "PHOTO", "BDAY",
        "ADR", "LABEL", "TEL", "EMAIL", "MAILER", "TZ", "GEO", "TITLE", "ROLE",
        "LOGO", "AGENT", "ORG", "CATEGORIES", "NOTE", "PRODID", "REV",
        "SORT-STRING", "SOUND", "UID", "URL", "CLASS", "KEY", "VERSION",
    }
    assert set(CONTENT_PARSERS) == expected


# ── Directory types ────────────────────────────────────────────────────────────

def test_name():
    prop = _one("NAME:Bjorn Jensen")
    assert prop == Name("Bjorn Jensen")
    assert serialize_property(prop) == "NAME:Bjorn Jensen"


def test_name_rejects_parameters():
    assert "NAME" in _fails("NAME;X-A=b:Bjorn").message


def test_profile():
    assert isinstance(_one("PROFILE:vcard"), Profile)
    assert serialize_property(Profile()) == "PROFILE:VCARD"


def test_profile_wrong_value():
    _fails("PROFILE:vcalendar")


def test_source():
    prop = _one("SOURCE;CONTEXT=word;VALUE=uri:ldap://ldap.host/cn=Babs%20Jensen")
    assert prop == Source(
        "ldap://ldap.host/cn=Babs%20Jensen",
        value_type="uri",
        context="word",
    )
    assert serialize_property(prop) == "SOURCE;VALUE=uri;CONTEXT=word:ldap://ldap.host/cn=Babs%20Jensen"


def test_source_wrong_value_type():
    assert "VALUE" in _fails("SOURCE;VALUE=text:ldap://x").message


# ── Simple text ────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "line, cls",
    [
        ("FN:Mr. John Q. Public\\, Esq.", Fn),
        ("NICKNAME:Robbie", Nickname),
        ("MAILER:PigeonMail 2.1", Mailer),
        ("TITLE:Director\\, Research and Development", Title),
        ("ROLE:Programmer", Role),
        ("PRODID:-//ONLINE DIRECTORY//NONSGML Version 1//EN", Prodid),
        ("SORT-STRING:Harten", SortString),
    ],
)
def test_simple_text_keeps_raw_value(line: str, cls):
    prop = _one(line)
    assert type(prop) is cls
    assert prop.value == line.split(":", 1)[1]
    assert serialize_property(prop) == line


def test_simple_text_language_and_ptext():
    prop = _one("TITLE;VALUE=ptext;LANGUAGE=en;X-SRC=hr:Boss")
    assert prop == Title("Boss", language="en", is_ptext=True, x_params=[("X-SRC", "hr")])
    assert serialize_property(prop) == "TITLE;VALUE=ptext;LANGUAGE=en;X-SRC=hr:Boss"


def test_note_decodes_escapes():
    prop = _one("NOTE:This fax number is operational 0800 to 1715\\nEST\\, Mon-Fri.")
    assert prop == Note("This fax number is operational 0800 to 1715\nEST, Mon-Fri.")
    assert serialize_property(prop) == "NOTE:This fax number is operational 0800 to 1715\\nEST\\, Mon-Fri."


def test_label():
    prop = _one("LABEL;TYPE=dom,home,postal,parcel:Mr.John Q. Public\\, Esq.\\nMail Drop: TNE QB")
    assert isinstance(prop, Label)
    assert prop.adr_type == ["dom", "home", "postal", "parcel"]
    assert prop.value == "Mr.John Q. Public\\, Esq.\\nMail Drop: TNE QB"
    assert serialize_property(prop).startswith("LABEL;TYPE=dom,home,postal,parcel:")


# ── Structured types ───────────────────────────────────────────────────────────

def test_n_full():
    prop = _one("N:Public;John;Quinlan,Adams;Mr.;Esq.")
    assert prop == N(
        family=["Public"],
        given=["John"],
        additional=["Quinlan", "Adams"],
        prefixes=["Mr."],
        suffixes=["Esq."],
    )
    assert serialize_property(prop) == "N:Public;John;Quinlan,Adams;Mr.;Esq."


def test_n_partial():
    prop = _one("N:Stevenson;John Philip")
    assert prop.family == ["Stevenson"]
    assert prop.given == ["John Philip"]
    assert prop.additional == []
    assert prop.suffixes == []


def test_n_empty_components():
    prop = _one("N:Doe;Jane;;;")
    assert prop == N(family=["Doe"], given=["Jane"])
    assert serialize_property(prop) == "N:Doe;Jane;;;"


def test_adr():
    prop = _one("ADR;TYPE=dom,home,postal,parcel:;;123 Main Street;Any Town;CA;91921-1234;")
    assert prop == Adr(
        street_adr="123 Main Street",
        locality="Any Town",
        region="CA",
        postal_code="91921-1234",
        adr_type=["dom", "home", "postal", "parcel"],
    )
    assert prop.po_box == ""
    assert prop.country == ""
    assert serialize_property(prop) == (
        "ADR;TYPE=dom,home,postal,parcel:;;123 Main Street;Any Town;CA;91921-1234;"
    )


def test_adr_escaped_separator():
    prop = _one("ADR:;;1\\; Main St;Town;;;")
    assert prop.street_adr == "1; Main St"
    assert serialize_property(prop) == "ADR:;;1\\; Main St;Town;;;"


def test_adr_missing_field():
    assert "';'" in _fails("ADR:;;123 Main Street;Any Town;CA").message


def test_org():
    prop = _one("ORG:ABC\\, Inc.;North American Division;Marketing")
    assert prop == Org(["ABC, Inc.", "North American Division", "Marketing"])
    assert serialize_property(prop) == "ORG:ABC\\, Inc.;North American Division;Marketing"


def test_categories():
    prop = _one("CATEGORIES:TRAVEL AGENT,INTERNET,IETF")
    assert prop == Categories(["TRAVEL AGENT", "INTERNET", "IETF"])
    assert serialize_property(prop) == "CATEGORIES:TRAVEL AGENT,INTERNET,IETF"


# ── Binary types ───────────────────────────────────────────────────────────────

def test_photo_uri():
    prop = _one("PHOTO;VALUE=uri:http://www.abc.com/pub/photos/jqpublic.gif")
    assert prop == Photo("http://www.abc.com/pub/photos/jqpublic.gif", value_type="uri")
    assert not prop.is_inline
    assert prop.data is None
    assert serialize_property(prop) == "PHOTO;VALUE=uri:http://www.abc.com/pub/photos/jqpublic.gif"


def test_photo_inline():
    prop = _one("PHOTO;ENCODING=b;TYPE=JPEG:aGVsbG8=")
    assert prop.is_inline
    assert prop.binary_type == "JPEG"
    assert prop.value_type is None
    assert prop.data == b"hello"
    assert serialize_property(prop) == "PHOTO;ENCODING=b;TYPE=JPEG:aGVsbG8="


def test_sound_and_key():
    sound = _one("SOUND;TYPE=BASIC;ENCODING=b:aGVsbG8=")
    assert isinstance(sound, Sound)
    key = _one("KEY;ENCODING=b;TYPE=X509:aGVsbG8=")
    assert isinstance(key, Key)
    assert key.key_type == "X509"


# ── Typed values ───────────────────────────────────────────────────────────────

def test_bday_date():
    prop = _one("BDAY:1996-04-15")
    assert prop == Bday(date(1996, 4, 15))
    assert serialize_property(prop) == "BDAY:1996-04-15"


def test_bday_basic_date():
    prop = _one("BDAY;VALUE=date:19960415")
    assert prop == Bday(date(1996, 4, 15), value_type="date")
    assert serialize_property(prop) == "BDAY;VALUE=date:1996-04-15"


def test_bday_date_time():
    prop = _one("BDAY:1953-10-15T23:10:00Z")
    assert prop.value == datetime(1953, 10, 15, 23, 10, tzinfo=timezone.utc)
    assert serialize_property(prop) == "BDAY:1953-10-15T23:10:00Z"


def test_rev():
    prop = _one("REV;VALUE=date-time:1995-10-31T22:27:10Z")
    assert isinstance(prop, Rev)
    assert prop.value == datetime(1995, 10, 31, 22, 27, 10, tzinfo=timezone.utc)
    assert serialize_property(prop) == "REV;VALUE=date-time:1995-10-31T22:27:10Z"


def test_bday_wrong_value_type():
    err = _fails("BDAY;VALUE=text:1996-04-15")
    assert "invalid VALUE" in err.message
    assert (err.line, err.column) == (3, 17)


def test_bday_unparseable():
    _fails("BDAY:fifteenth of april")


def test_tel_merges_type_forms():
    assert _one("TEL;TYPE=work,voice;TYPE=pref:+1-213-555-1234").tel_type == ["work", "voice", "pref"]
    prop = _one("TEL;TYPE=WORK;TYPE=CELL:+1")
    assert prop == Tel("+1", tel_type=["WORK", "CELL"])
    assert serialize_property(prop) == "TEL;TYPE=WORK,CELL:+1"


def test_tel_without_type_keeps_empty_list():
    prop = _one("TEL:+1-919-555-1234")
    assert prop.tel_type == []
    assert serialize_property(prop) == "TEL:+1-919-555-1234"


def test_email():
    prop = _one("EMAIL;TYPE=internet,pref:jane_doe@abc.com")
    assert prop == Email("jane_doe@abc.com", email_type=["internet", "pref"])


def test_tz():
    assert _one("TZ:-05:00") == Tz("-05:00")
    prop = _one("TZ;VALUE=text:-05:00; EST; Raleigh/North America")
    assert prop.is_text
    assert serialize_property(prop) == "TZ;VALUE=text:-05:00; EST; Raleigh/North America"


def test_geo():
    prop = _one("GEO:37.386013;-122.082932")
    assert prop == Geo(37.386013, -122.082932)
    assert serialize_property(prop) == "GEO:37.386013;-122.082932"


@pytest.mark.parametrize("value", ["37.386013", "north;south", "1;2;3"])
def test_geo_malformed(value: str):
    assert "GEO" in _fails(f"GEO:{value}").message


def test_agent_uri():
    prop = _one("AGENT;VALUE=uri:CID:JQPUBLIC.part3.960129T083020.xyzMail@host3.com")
    assert prop == Agent("CID:JQPUBLIC.part3.960129T083020.xyzMail@host3.com", is_inline=False)
    assert serialize_property(prop) == "AGENT;VALUE=uri:CID:JQPUBLIC.part3.960129T083020.xyzMail@host3.com"


def test_agent_inline():
    assert _one("AGENT:BEGIN:VCARD\\nFN:Susan Thomas\\nEND:VCARD\\n").is_inline


def test_agent_wrong_value_type():
    assert "AGENT" in _fails("AGENT;VALUE=text:Susan").message


@pytest.mark.parametrize(
    "line, cls",
    [
        ("UID:19950401-080045-40000F192713-0052", Uid),
        ("URL:http://www.swbyps.restaurant.french/~chezchic.html", Url),
        ("CLASS:CONFIDENTIAL", Classification),
    ],
)
def test_single_value_types(line: str, cls):
    prop = _one(line)
    assert type(prop) is cls
    assert serialize_property(prop) == line


# ── VERSION ────────────────────────────────────────────────────────────────────

def test_version_other_than_3_0():
    with pytest.raises(ParseError):
        parse_text("BEGIN:VCARD\r\nVERSION:4.0\r\nEND:VCARD\r\n")


def test_version_with_parameters():
    with pytest.raises(ParseError):
        parse_text("BEGIN:VCARD\r\nVERSION;X-A=b:3.0\r\nEND:VCARD\r\n")


# ── Extended and unknown types ─────────────────────────────────────────────────

def test_x_property():
    prop = _one("X-ABC-Foo;LANGUAGE=en;X-PARAM=1;TYPE=a,b:some value")
    assert prop == XProperty(
        "X-ABC-FOO",
        "some value",
        language="en",
        x_params=[("X-PARAM", "1"), ("TYPE", "a,b")],
    )
    assert serialize_property(prop) == "X-ABC-FOO;LANGUAGE=en;X-PARAM=1;TYPE=a,b:some value"


def test_lowercase_x_name():
    assert _one("x-phonetic-first-name:Jon").name == "X-PHONETIC-FIRST-NAME"


def test_unknown_type():
    err = _fails("FOO:bar")
    assert "unrecognized content type: 'FOO'" in err.message


# ── Groups and parameter quoting ───────────────────────────────────────────────

def test_group_is_kept():
    prop = _one("item1.TEL:+1")
    assert prop.group == "item1"
    assert serialize_property(prop) == "item1.TEL:+1"


def test_param_value_with_special_chars_is_quoted():
    prop = XProperty("X-ABLABEL", "v", x_params=[("X-LABEL", "a:b")])
    assert serialize_property(prop) == 'X-ABLABEL;X-LABEL="a:b":v'
    assert _one(serialize_property(prop)) == prop
