from __future__ import annotations

import base64
from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from typing import Any, ClassVar, TypeVar

XParam = tuple[str, str]


# ── Standard TYPE values ───────────────────────────────────────────────────────
#
# Used for constructor defaults only. The parser stores TYPE values exactly as
# written and never normalises their case.

class AdrType(StrEnum):
    DOM = "DOM"
    INTL = "INTL"
    POSTAL = "POSTAL"
    PARCEL = "PARCEL"
    HOME = "HOME"
    WORK = "WORK"
    PREF = "PREF"


class TelType(StrEnum):
    HOME = "HOME"
    WORK = "WORK"
    PREF = "PREF"
    VOICE = "VOICE"
    FAX = "FAX"
    MSG = "MSG"
    CELL = "CELL"
    PAGER = "PAGER"
    BBS = "BBS"
    MODEM = "MODEM"
    CAR = "CAR"
    ISDN = "ISDN"
    VIDEO = "VIDEO"
    PCS = "PCS"


class EmailType(StrEnum):
    INTERNET = "INTERNET"
    X400 = "X400"


DEFAULT_ADR_TYPES = (AdrType.INTL, AdrType.POSTAL, AdrType.PARCEL, AdrType.WORK)
DEFAULT_TEL_TYPES = (TelType.VOICE,)
DEFAULT_EMAIL_TYPES = (EmailType.INTERNET,)


def _defaults(values: tuple[str, ...]):
    return field(default_factory=lambda: [str(v) for v in values])


# ── Properties ─────────────────────────────────────────────────────────────────

@dataclass
class Property:
    """One content line. ``content_id`` is assigned by the owning Card."""

    name: ClassVar[str]
    group: str | None = field(default=None, kw_only=True)
    content_id: int = field(default=-1, kw_only=True, compare=False)


@dataclass
class Name(Property):
    name = "NAME"
    value: str


@dataclass
class Profile(Property):
    name = "PROFILE"


@dataclass
class Source(Property):
    name = "SOURCE"
    value: str
    value_type: str | None = None
    context: str | None = None
    x_params: list[XParam] = field(default_factory=list)


@dataclass
class SimpleText(Property):
    value: str
    language: str | None = None
    is_ptext: bool = False
    x_params: list[XParam] = field(default_factory=list)


@dataclass
class Fn(SimpleText):
    name = "FN"


@dataclass
class Nickname(SimpleText):
    name = "NICKNAME"


@dataclass
class Mailer(SimpleText):
    name = "MAILER"


@dataclass
class Title(SimpleText):
    name = "TITLE"


@dataclass
class Role(SimpleText):
    name = "ROLE"


@dataclass
class Note(SimpleText):
    name = "NOTE"


@dataclass
class Prodid(SimpleText):
    name = "PRODID"


@dataclass
class SortString(SimpleText):
    name = "SORT-STRING"


@dataclass
class Label(SimpleText):
    name = "LABEL"
    adr_type: list[str] = _defaults(DEFAULT_ADR_TYPES)


@dataclass
class XProperty(Property):
    """A non-standard ``X-`` content line."""

    name: str  # type: ignore[misc]
    value: str
    language: str | None = None
    is_ptext: bool = False
    x_params: list[XParam] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.name.upper().startswith("X-"):
            raise ValueError(f"extended types must begin with 'X-': {self.name!r}")
        self.name = self.name.upper()


@dataclass
class TextList(Property):
    value: list[str] = field(default_factory=list)
    language: str | None = None
    is_ptext: bool = False
    x_params: list[XParam] = field(default_factory=list)


@dataclass
class Org(TextList):
    name = "ORG"


@dataclass
class Categories(TextList):
    name = "CATEGORIES"


@dataclass
class N(Property):
    """Structured name; each component is a list of values."""

    name = "N"
    family: list[str] = field(default_factory=list)
    given: list[str] = field(default_factory=list)
    additional: list[str] = field(default_factory=list)
    prefixes: list[str] = field(default_factory=list)
    suffixes: list[str] = field(default_factory=list)
    language: str | None = None
    is_ptext: bool = False
    x_params: list[XParam] = field(default_factory=list)


@dataclass
class Adr(Property):
    name = "ADR"
    po_box: str = ""
    extended_adr: str = ""
    street_adr: str = ""
    locality: str = ""
    region: str = ""
    postal_code: str = ""
    country: str = ""
    adr_type: list[str] = _defaults(DEFAULT_ADR_TYPES)
    language: str | None = None
    is_ptext: bool = False
    x_params: list[XParam] = field(default_factory=list)


@dataclass
class Binary(Property):
    """PHOTO, LOGO, SOUND and KEY: a URI or inline base64 text.

    ``value`` always holds the text as it appears on the wire; ``is_inline``
    is set when ``ENCODING=b`` was given.
    """

    value: str
    value_type: str | None = "uri"
    binary_type: str | None = None
    is_inline: bool = False

    @classmethod
    def from_bytes(cls, data: bytes, binary_type: str | None = None, **kwargs: Any):
        return cls(
            base64.b64encode(data).decode("ascii"),
            value_type="binary",
            binary_type=binary_type,
            is_inline=True,
            **kwargs,
        )

    @property
    def data(self) -> bytes | None:
        """Decoded payload for inline values, ``None`` for references."""
        if not self.is_inline:
            return None
        return base64.b64decode(self.value)


@dataclass
class Photo(Binary):
    name = "PHOTO"


@dataclass
class Logo(Binary):
    name = "LOGO"


@dataclass
class Sound(Binary):
    name = "SOUND"


@dataclass
class Key(Binary):
    name = "KEY"

    @property
    def key_type(self) -> str | None:
        return self.binary_type

    @key_type.setter
    def key_type(self, value: str | None) -> None:
        self.binary_type = value


@dataclass
class Tel(Property):
    name = "TEL"
    value: str
    tel_type: list[str] = _defaults(DEFAULT_TEL_TYPES)


@dataclass
class Email(Property):
    name = "EMAIL"
    value: str
    email_type: list[str] = _defaults(DEFAULT_EMAIL_TYPES)


@dataclass
class Temporal(Property):
    """BDAY and REV. ``value_type`` keeps the declared ``VALUE`` for round trips."""

    value: date
    value_type: str | None = None


@dataclass
class Bday(Temporal):
    name = "BDAY"


@dataclass
class Rev(Temporal):
    name = "REV"


@dataclass
class Tz(Property):
    name = "TZ"
    value: str
    is_text: bool = False


@dataclass
class Geo(Property):
    name = "GEO"
    lat: float
    long: float


@dataclass
class Agent(Property):
    name = "AGENT"
    value: str
    is_inline: bool = True


@dataclass
class Uid(Property):
    name = "UID"
    value: str


@dataclass
class Url(Property):
    name = "URL"
    value: str


@dataclass
class Classification(Property):
    name = "CLASS"
    value: str


@dataclass
class Version(Property):
    name = "VERSION"
    value: str = "3.0"


# ── Card ───────────────────────────────────────────────────────────────────────

P = TypeVar("P", bound=Property)


def _first(cls: type[P]) -> property:
    return property(lambda self: self.find_first(cls))


def _all(cls: type[P]) -> property:
    return property(lambda self: self.find_all(cls))


@dataclass
class Card:
    """One BEGIN:VCARD .. END:VCARD block.

    ``add`` always appends with a fresh content id; ``set`` replaces the first
    property of the same type in place and keeps its id.
    """

    properties: list[Property] = field(default_factory=list)
    _next_content_id: int = field(default=0, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # Ids from another card are not kept; every property is renumbered.
        given, self.properties = self.properties, []
        for prop in given:
            self.add(prop)

    def _take_content_id(self) -> int:
        self._next_content_id += 1
        return self._next_content_id - 1

    # ── Mutation ───────────────────────────────────────────────────────────────

    def add(self, prop: P) -> P:
        prop.content_id = self._take_content_id()
        self.properties.append(prop)
        return prop

    def set(self, prop: P) -> P:
        for idx, existing in enumerate(self.properties):
            if type(existing) is type(prop):
                prop.content_id = existing.content_id
                self.properties[idx] = prop
                return prop
        return self.add(prop)

    def update_or_add(self, props: list[Property]) -> None:
        for prop in props:
            for idx, existing in enumerate(self.properties):
                if existing.content_id == prop.content_id:
                    self.properties[idx] = prop
                    break
            else:
                self.add(prop)

    def remove(self, prop: Property) -> None:
        self.properties = [p for p in self.properties if p.content_id != prop.content_id]

    # ── Lookup ─────────────────────────────────────────────────────────────────

    def find_all(self, cls: type[P]) -> list[P]:
        return [p for p in self.properties if isinstance(p, cls)]

    def find_first(self, cls: type[P]) -> P | None:
        for p in self.properties:
            if isinstance(p, cls):
                return p
        return None

    def for_group(self, group: str) -> list[Property]:
        return [p for p in self.properties if p.group == group]

    def groups(self) -> list[str]:
        seen: list[str] = []
        for p in self.properties:
            if p.group is not None and p.group not in seen:
                seen.append(p.group)
        return seen

    @property
    def version(self) -> Version:
        found = self.find_first(Version)
        if found is not None:
            return found
        return Version(content_id=len(self.properties) + 1)

    name = _first(Name)
    profile = _first(Profile)
    source = _all(Source)
    fn = _first(Fn)
    n = _first(N)
    nickname = _first(Nickname)
    photo = _all(Photo)
    bday = _first(Bday)
    adr = _all(Adr)
    label = _all(Label)
    tel = _all(Tel)
    email = _all(Email)
    mailer = _first(Mailer)
    tz = _first(Tz)
    geo = _first(Geo)
    title = _all(Title)
    role = _all(Role)
    logo = _all(Logo)
    agent = _first(Agent)
    org = _all(Org)
    categories = _first(Categories)
    note = _first(Note)
    prodid = _first(Prodid)
    rev = _first(Rev)
    sort_string = _first(SortString)
    sound = _all(Sound)
    uid = _first(Uid)
    url = _first(Url)
    classification = _first(Classification)
    key = _all(Key)
    x_types = _all(XProperty)
