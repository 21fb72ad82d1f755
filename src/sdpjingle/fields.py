import contextlib
import copy
import re
import urllib.parse
from dataclasses import dataclass, field
from typing import ClassVar, Iterator, Optional, Protocol

from .exceptions import InvalidValueError, SDPParseError
from .utils import (
    NET_TYPE_IN,
    EmailAddress,
    PhoneNumber,
    Resource,
    ZoneAdjustment,
    datetime_from_ntp,
    get_time,
    is_number,
    is_typed_time,
    ntp_from_datetime,
    resolve_address_type,
    typed_time_to_string,
)

TEXT_PATTERN = re.compile(r"[^\r\n\0]+")
TOKEN_PATTERN = re.compile(r"\S+")
WORD_PATTERN = re.compile(r"\w+")

ORIGIN_PATTERN = re.compile(r"(\S+) (\d+) (\d+) (\w+) (IP4|IP6) (\S+)")
CONNECTION_PATTERN = re.compile(r"(\w+) (IP4|IP6) (\S+)")
BANDWIDTH_PATTERN = re.compile(r"([\w\-]+):(\d+)")
BANDWIDTH_MODIFIER_PATTERN = re.compile(r"[\w\-]+")
TIME_PATTERN = re.compile(r"([1-9]\d{0,9}|0) ([1-9]\d{0,9}|0)")
KEY_PATTERN = re.compile(r"([^:]+)(:(.+))?")
KEY_BASE64_PATTERN = re.compile(r"([\w+/]{4})*([\w+/]{2}==|[\w+/]{3}=)?")
KEY_CLEAR_PATTERN = re.compile(r"[\w'\-./:?#$&*;=@\[\]^_`{}|+~ \t]+")
MEDIA_FORMAT_PATTERN = re.compile(r"[\w\-]+")
MEDIA_PROTOCOL_PATTERN = re.compile(r"[\w/]+")
ATTRIBUTE_NAME_PATTERN = re.compile(r"[\w\-.]+")
ATTRIBUTE_VALUE_PATTERN = re.compile(r"[^\r\n\0]*")

KEY_METHODS = ["base64", "clear", "prompt", "uri"]


class Field(Protocol):
    """
    Capability shared by every line type: a one-character type tag, a
    canonical text form (`str(field)`) and structural cloning.
    """

    type: ClassVar[str]

    def clone(self) -> "Field": ...


def field_value(line: str, type: str, name: str) -> str:
    """
    Check the `x=` prefix of `line` and return what follows it.
    """
    if not line.startswith(type + "="):
        raise SDPParseError(f'The string "{line}" isn\'t {name} field', line=line)
    return line[2:]


@contextlib.contextmanager
def parsing(line: str, name: str) -> Iterator[None]:
    try:
        yield
    except InvalidValueError as exc:
        raise SDPParseError(
            f'The string "{line}" isn\'t a valid {name} field', line=line
        ) from exc


def invalid_field(line: str, name: str) -> SDPParseError:
    return SDPParseError(f'The string "{line}" isn\'t a valid {name} field', line=line)


def check_text(value: str, what: str) -> None:
    if not isinstance(value, str) or not TEXT_PATTERN.fullmatch(value):
        raise InvalidValueError(f"Invalid {what}: {value!r}")


@dataclass
class Version:
    type: ClassVar[str] = "v"

    version: int = 0

    def __post_init__(self) -> None:
        if self.version < 0:
            raise InvalidValueError("The version cannot be negative")

    @classmethod
    def parse(cls, line: str) -> "Version":
        value = field_value(line, cls.type, "a version")
        if not is_number(value):
            raise invalid_field(line, "version")
        return cls(version=int(value))

    def clone(self) -> "Version":
        return copy.deepcopy(self)

    def __str__(self) -> str:
        return "v=%d" % self.version


@dataclass
class Origin:
    """
    The `o=` line. The session id correlates the text and stanza sides.
    """

    type: ClassVar[str] = "o"

    username: str
    session_id: int
    session_version: int
    address: str
    address_type: Optional[str] = None
    net_type: str = NET_TYPE_IN

    def __post_init__(self) -> None:
        if not TOKEN_PATTERN.fullmatch(self.username):
            raise InvalidValueError(f"Invalid username: {self.username!r}")
        if self.session_id < 0:
            raise InvalidValueError("The session id cannot be negative")
        if self.session_version < 0:
            raise InvalidValueError("The session version cannot be negative")
        if not WORD_PATTERN.fullmatch(self.net_type):
            raise InvalidValueError(f"Invalid network type: {self.net_type!r}")
        self.address_type = resolve_address_type(self.address, self.address_type)

    @classmethod
    def parse(cls, line: str) -> "Origin":
        value = field_value(line, cls.type, "an origin")
        m = ORIGIN_PATTERN.fullmatch(value)
        if not m:
            raise invalid_field(line, "origin")
        with parsing(line, "origin"):
            return cls(
                username=m.group(1),
                session_id=int(m.group(2)),
                session_version=int(m.group(3)),
                net_type=m.group(4),
                address_type=m.group(5),
                address=m.group(6),
            )

    def clone(self) -> "Origin":
        return copy.deepcopy(self)

    def __str__(self) -> str:
        return "o=%s %d %d %s %s %s" % (
            self.username,
            self.session_id,
            self.session_version,
            self.net_type,
            self.address_type,
            self.address,
        )


@dataclass
class SessionName:
    type: ClassVar[str] = "s"

    value: str = "-"

    def __post_init__(self) -> None:
        check_text(self.value, "session name")

    @classmethod
    def parse(cls, line: str) -> "SessionName":
        value = field_value(line, cls.type, "a session name")
        with parsing(line, "session name"):
            return cls(value)

    def clone(self) -> "SessionName":
        return copy.deepcopy(self)

    def __str__(self) -> str:
        return "s=" + self.value


@dataclass
class Information:
    type: ClassVar[str] = "i"

    value: str

    def __post_init__(self) -> None:
        check_text(self.value, "information")

    @classmethod
    def parse(cls, line: str) -> "Information":
        value = field_value(line, cls.type, "an information")
        with parsing(line, "information"):
            return cls(value)

    def clone(self) -> "Information":
        return copy.deepcopy(self)

    def __str__(self) -> str:
        return "i=" + self.value


@dataclass
class Uri:
    type: ClassVar[str] = "u"

    url: str

    def __post_init__(self) -> None:
        if not TOKEN_PATTERN.fullmatch(self.url):
            raise InvalidValueError(f"Invalid URL: {self.url!r}")
        parsed = urllib.parse.urlsplit(self.url)
        if not parsed.scheme or not (parsed.netloc or parsed.path):
            raise InvalidValueError(f"Invalid URL: {self.url!r}")

    @classmethod
    def parse(cls, line: str) -> "Uri":
        value = field_value(line, cls.type, "an uri")
        with parsing(line, "uri"):
            return cls(value)

    def clone(self) -> "Uri":
        return copy.deepcopy(self)

    def __str__(self) -> str:
        return "u=" + self.url


@dataclass
class Email:
    type: ClassVar[str] = "e"

    contact: EmailAddress

    @classmethod
    def parse(cls, line: str) -> "Email":
        value = field_value(line, cls.type, "an email")
        with parsing(line, "email"):
            return cls(EmailAddress.parse(value))

    @property
    def email(self) -> str:
        return self.contact.address

    @property
    def personal(self) -> Optional[str]:
        return self.contact.personal

    def clone(self) -> "Email":
        return copy.deepcopy(self)

    def __str__(self) -> str:
        return "e=%s" % self.contact


@dataclass
class Phone:
    type: ClassVar[str] = "p"

    contact: PhoneNumber

    @classmethod
    def parse(cls, line: str) -> "Phone":
        value = field_value(line, cls.type, "a phone")
        with parsing(line, "phone"):
            return cls(PhoneNumber.parse(value))

    @property
    def phone(self) -> str:
        return self.contact.address

    @property
    def personal(self) -> Optional[str]:
        return self.contact.personal

    def clone(self) -> "Phone":
        return copy.deepcopy(self)

    def __str__(self) -> str:
        return "p=%s" % self.contact


@dataclass
class Connection:
    """
    The `c=` line. The address type is inferred from the address unless
    the address is a host name.
    """

    type: ClassVar[str] = "c"

    address: str
    ttl: int = 0
    addresses: int = 1
    address_type: Optional[str] = None
    net_type: str = NET_TYPE_IN

    def __post_init__(self) -> None:
        if not WORD_PATTERN.fullmatch(self.net_type):
            raise InvalidValueError(f"Invalid network type: {self.net_type!r}")
        self.address_type = self.resource.address_type

    @classmethod
    def parse(cls, line: str) -> "Connection":
        value = field_value(line, cls.type, "a connection")
        m = CONNECTION_PATTERN.fullmatch(value)
        if not m:
            raise invalid_field(line, "connection")
        with parsing(line, "connection"):
            resource = Resource.parse(m.group(3), address_type=m.group(2))
            return cls(
                address=resource.address,
                ttl=resource.ttl,
                addresses=resource.addresses,
                address_type=resource.address_type,
                net_type=m.group(1),
            )

    @property
    def resource(self) -> Resource:
        return Resource(
            address=self.address,
            ttl=self.ttl,
            addresses=self.addresses,
            address_type=self.address_type,
        )

    def clone(self) -> "Connection":
        return copy.deepcopy(self)

    def __str__(self) -> str:
        return "c=%s %s %s" % (self.net_type, self.address_type, self.resource)


@dataclass
class Bandwidth:
    type: ClassVar[str] = "b"

    modifier: str
    value: int

    def __post_init__(self) -> None:
        if not BANDWIDTH_MODIFIER_PATTERN.fullmatch(self.modifier):
            raise InvalidValueError(f"Invalid bandwidth modifier: {self.modifier!r}")
        if self.value < 0:
            raise InvalidValueError("The bandwidth cannot be negative")

    @classmethod
    def parse(cls, line: str) -> "Bandwidth":
        value = field_value(line, cls.type, "a bandwidth")
        m = BANDWIDTH_PATTERN.fullmatch(value)
        if not m:
            raise invalid_field(line, "bandwidth")
        return cls(modifier=m.group(1), value=int(m.group(2)))

    def clone(self) -> "Bandwidth":
        return copy.deepcopy(self)

    def __str__(self) -> str:
        return "b=%s:%d" % (self.modifier, self.value)


@dataclass
class Time:
    """
    The `t=` line, start and stop expressed in NTP seconds. `0 0` denotes
    an unbounded session.
    """

    type: ClassVar[str] = "t"

    start: int = 0
    stop: int = 0

    def __post_init__(self) -> None:
        if self.start < 0:
            raise InvalidValueError("The session start time cannot be negative")
        if self.stop < 0:
            raise InvalidValueError("The session stop time cannot be negative")

    @classmethod
    def from_datetimes(cls, start, stop) -> "Time":
        return cls(start=ntp_from_datetime(start), stop=ntp_from_datetime(stop))

    @classmethod
    def parse(cls, line: str) -> "Time":
        value = field_value(line, cls.type, "a time")
        m = TIME_PATTERN.fullmatch(value)
        if not m:
            raise invalid_field(line, "time")
        return cls(start=int(m.group(1)), stop=int(m.group(2)))

    @property
    def start_datetime(self):
        return datetime_from_ntp(self.start)

    @property
    def stop_datetime(self):
        return datetime_from_ntp(self.stop)

    def is_zero(self) -> bool:
        return self.start == 0 and self.stop == 0

    def clone(self) -> "Time":
        return copy.deepcopy(self)

    def __str__(self) -> str:
        return "t=%d %d" % (self.start, self.stop)


@dataclass
class RepeatTime:
    type: ClassVar[str] = "r"

    repeat_interval: int
    active_duration: int
    offsets: list[int]
    typed: bool = True
    "Whether values are written with d/h/m/s units."

    def __post_init__(self) -> None:
        if self.repeat_interval < 0:
            raise InvalidValueError("The repeat interval cannot be negative")
        if self.active_duration < 0:
            raise InvalidValueError("The active duration cannot be negative")
        if not self.offsets:
            raise InvalidValueError("A repeat time needs at least one offset")
        for offset in self.offsets:
            if offset < 0:
                raise InvalidValueError("Offsets cannot be negative")

    @classmethod
    def parse(cls, line: str) -> "RepeatTime":
        value = field_value(line, cls.type, "a repeat time")
        bits = value.split(" ")
        if len(bits) < 3:
            raise invalid_field(line, "repeat time")
        with parsing(line, "repeat time"):
            values = [get_time(x) for x in bits]
            return cls(
                repeat_interval=values[0],
                active_duration=values[1],
                offsets=values[2:],
                typed=any(is_typed_time(x) for x in bits),
            )

    def clone(self) -> "RepeatTime":
        return copy.deepcopy(self)

    def __str__(self) -> str:
        values = [self.repeat_interval, self.active_duration] + self.offsets
        if self.typed:
            return "r=" + " ".join(typed_time_to_string(x) for x in values)
        return "r=" + " ".join(str(x) for x in values)


@dataclass
class TimeZone:
    type: ClassVar[str] = "z"

    adjustments: list[ZoneAdjustment]
    typed: bool = True

    def __post_init__(self) -> None:
        if not self.adjustments:
            raise InvalidValueError("A time zone needs at least one adjustment")

    @classmethod
    def parse(cls, line: str) -> "TimeZone":
        value = field_value(line, cls.type, "a time zone")
        bits = value.split(" ")
        if len(bits) % 2:
            raise invalid_field(line, "time zone")
        with parsing(line, "time zone"):
            adjustments = []
            for i in range(0, len(bits), 2):
                if not is_number(bits[i]):
                    raise InvalidValueError(f"Invalid adjustment time: {bits[i]}")
                adjustments.append(
                    ZoneAdjustment(time=int(bits[i]), offset=get_time(bits[i + 1]))
                )
            return cls(
                adjustments=adjustments,
                typed=any(is_typed_time(x) for x in bits[1::2]),
            )

    def clone(self) -> "TimeZone":
        return copy.deepcopy(self)

    def __str__(self) -> str:
        bits = []
        for adjustment in self.adjustments:
            bits.append(str(adjustment.time))
            if self.typed:
                bits.append(typed_time_to_string(adjustment.offset))
            else:
                bits.append(str(adjustment.offset))
        return "z=" + " ".join(bits)


@dataclass
class Key:
    """
    The `k=` line. Key material is opaque, only its syntax is checked
    against the method.
    """

    type: ClassVar[str] = "k"

    method: str
    key: Optional[str] = None

    def __post_init__(self) -> None:
        if self.method not in KEY_METHODS:
            raise InvalidValueError(f"The method {self.method} is not supported by SDP")

        if self.method == "prompt":
            if self.key:
                raise InvalidValueError("The prompt method does not carry a key")
            self.key = None
        elif self.key is None:
            raise InvalidValueError(f"Missing key for method {self.method}")
        elif self.method == "base64":
            valid = KEY_BASE64_PATTERN.fullmatch(self.key) is not None
        elif self.method == "clear":
            valid = KEY_CLEAR_PATTERN.fullmatch(self.key) is not None
        else:
            parsed = urllib.parse.urlsplit(self.key)
            valid = bool(parsed.scheme and (parsed.netloc or parsed.path))

        if self.key is not None and not valid:
            raise InvalidValueError(f"Invalid key for method {self.method}")

    @classmethod
    def parse(cls, line: str) -> "Key":
        value = field_value(line, cls.type, "a key")
        m = KEY_PATTERN.fullmatch(value)
        if not m:
            raise invalid_field(line, "key")
        with parsing(line, "key"):
            return cls(method=m.group(1), key=m.group(3))

    def clone(self) -> "Key":
        return copy.deepcopy(self)

    def __str__(self) -> str:
        if self.key is not None:
            return f"k={self.method}:{self.key}"
        return "k=" + self.method


@dataclass
class Media:
    """
    The `m=` line: media type, port (with optional port count), transport
    protocol and an ordered list of formats.
    """

    type: ClassVar[str] = "m"

    media: str
    port: int
    protocol: str
    formats: list[str] = field(default_factory=list)
    port_count: int = 1

    def __post_init__(self) -> None:
        if not WORD_PATTERN.fullmatch(self.media):
            raise InvalidValueError(f"Invalid media type: {self.media!r}")
        if self.port < 0:
            raise InvalidValueError("The transport port cannot be negative")
        if self.port_count < 1:
            raise InvalidValueError("The ports count must be greater than 0")
        if not MEDIA_PROTOCOL_PATTERN.fullmatch(self.protocol):
            raise InvalidValueError(f"Invalid protocol: {self.protocol!r}")
        if not self.formats:
            raise InvalidValueError("A media field needs at least one format")
        for fmt in self.formats:
            self._check_format(fmt)
        self.formats = list(self.formats)

    @staticmethod
    def _check_format(fmt: str) -> None:
        if not isinstance(fmt, str) or not MEDIA_FORMAT_PATTERN.fullmatch(fmt):
            raise InvalidValueError(f"Invalid media format: {fmt!r}")

    @classmethod
    def parse(cls, line: str) -> "Media":
        value = field_value(line, cls.type, "a media")
        bits = value.split(" ")
        if len(bits) < 4:
            raise invalid_field(line, "media")

        port_bits = bits[1].split("/")
        if len(port_bits) > 2 or not all(is_number(x) for x in port_bits):
            raise invalid_field(line, "media")

        with parsing(line, "media"):
            return cls(
                media=bits[0],
                port=int(port_bits[0]),
                port_count=int(port_bits[1]) if len(port_bits) == 2 else 1,
                protocol=bits[2],
                formats=bits[3:],
            )

    def add_format(self, fmt: str) -> None:
        self._check_format(fmt)
        self.formats.append(fmt)

    def set_formats(self, formats: list[str]) -> None:
        """
        Replace all formats. Nothing changes if any format is invalid.
        """
        if not formats:
            raise InvalidValueError("A media field needs at least one format")
        for fmt in formats:
            self._check_format(fmt)
        self.formats = list(formats)

    def clone(self) -> "Media":
        return copy.deepcopy(self)

    def __str__(self) -> str:
        s = "m=%s %d" % (self.media, self.port)
        if self.port_count > 1:
            s += "/%d" % self.port_count
        s += " " + self.protocol
        for fmt in self.formats:
            s += " " + fmt
        return s


@dataclass
class Attribute:
    """
    A generic `a=name[:value]` line.
    """

    type: ClassVar[str] = "a"

    name: str
    value: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not ATTRIBUTE_NAME_PATTERN.fullmatch(
            self.name
        ):
            raise InvalidValueError(f"Invalid attribute name: {self.name!r}")
        if self.value is not None and not ATTRIBUTE_VALUE_PATTERN.fullmatch(
            self.value
        ):
            raise InvalidValueError(f"Invalid attribute value: {self.value!r}")

    @classmethod
    def parse(cls, line: str) -> "Attribute":
        value = field_value(line, cls.type, "an attribute")
        with parsing(line, "attribute"):
            if ":" in value:
                name, attr_value = value.split(":", 1)
                return cls(name=name, value=attr_value)
            return cls(name=value)

    def has_value(self) -> bool:
        return self.value is not None

    def clone(self) -> "Attribute":
        return copy.deepcopy(self)

    def __str__(self) -> str:
        if self.value is not None:
            return f"a={self.name}:{self.value}"
        return "a=" + self.name


FIELD_TYPES = {
    cls.type: cls
    for cls in [
        Version,
        Origin,
        SessionName,
        Information,
        Uri,
        Email,
        Phone,
        Connection,
        Bandwidth,
        Time,
        RepeatTime,
        TimeZone,
        Key,
        Media,
        Attribute,
    ]
}


def parse_field(line: str):
    """
    Parse any single line into its field type.
    """
    if len(line) < 2 or line[1] != "=":
        raise SDPParseError(f'The string "{line}" isn\'t a field', line=line)
    try:
        cls = FIELD_TYPES[line[0]]
    except KeyError:
        raise SDPParseError(
            f'Unknown field type "{line[0]}" in "{line}"', line=line
        ) from None
    return cls.parse(line)
