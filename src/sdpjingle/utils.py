import calendar
import datetime
import ipaddress
import re
from dataclasses import dataclass
from typing import ClassVar, Optional

from .exceptions import InvalidValueError

# seconds between 1900-01-01 (NTP epoch) and 1970-01-01 (unix epoch)
NTP_CONSTANT = 2208988800
NTP_EPOCH = datetime.datetime(1900, 1, 1, tzinfo=datetime.timezone.utc)
DIGITS_PATTERN = re.compile(r"[0-9]+")
NTP_PATTERN = re.compile(r"[1-9]\d{0,9}")

TYPED_TIME_PATTERN = re.compile(r"(-?\d+)([dhms]?)")
TYPED_TIME_UNITS = [
    ("d", 86400),
    ("h", 3600),
    ("m", 60),
]

NET_TYPE_IN = "IN"
ADDRESS_TYPE_IP4 = "IP4"
ADDRESS_TYPE_IP6 = "IP6"
ADDRESS_TYPES = [ADDRESS_TYPE_IP4, ADDRESS_TYPE_IP6]

HOSTNAME_PATTERN = re.compile(
    r"[A-Za-z0-9]([A-Za-z0-9\-]*[A-Za-z0-9])?(\.[A-Za-z0-9]([A-Za-z0-9\-]*[A-Za-z0-9])?)*\.?"
)

EMAIL_PATTERN = re.compile(r"[\w.!#$%&'*+/=?^`{|}~-]+@[\w-]+(\.[\w-]+)*")
PHONE_PATTERN = re.compile(r"\+?\d([\d \-]*\d)?")
PERSONAL_PATTERN = re.compile(r"[^()<>\r\n]+")
ANGLE_CONTACT_PATTERN = re.compile(r"([^<>]+)<([^<>]+)>\s*")


def ntp_from_datetime(value: datetime.datetime) -> int:
    """
    Convert a datetime to NTP seconds. Naive datetimes are taken as UTC.
    """
    return calendar.timegm(value.utctimetuple()) + NTP_CONSTANT


def datetime_from_ntp(ntp: int) -> datetime.datetime:
    return NTP_EPOCH + datetime.timedelta(seconds=ntp)


def is_number(value: str) -> bool:
    """
    Whether `value` is a non-negative decimal integer in ASCII digits.
    """
    return DIGITS_PATTERN.fullmatch(value) is not None


def is_valid_ntp(value: str) -> bool:
    return NTP_PATTERN.fullmatch(value) is not None


def get_time(value: str) -> int:
    """
    Parse a typed time such as `'7d'`, `'-1h'` or `'3600'` into seconds.
    """
    m = TYPED_TIME_PATTERN.fullmatch(value)
    if not m:
        raise InvalidValueError(f"Invalid typed time: {value}")
    seconds = int(m.group(1))
    for unit, multiplier in TYPED_TIME_UNITS + [("s", 1)]:
        if m.group(2) == unit:
            seconds *= multiplier
    return seconds


def is_typed_time(value: str) -> bool:
    return bool(value) and value[-1] in "dhms"


def typed_time_to_string(seconds: int) -> str:
    """
    Return the most compact typed representation of `seconds`.
    """
    if seconds == 0:
        return "0"
    for unit, multiplier in TYPED_TIME_UNITS:
        if seconds % multiplier == 0:
            return "%d%s" % (seconds // multiplier, unit)
    return str(seconds)


def resolve_address_type(address: str, declared: Optional[str] = None) -> str:
    """
    Infer the address type (IP4 / IP6) of `address`, checking it against
    the `declared` type if one is given.

    Host names are accepted and take the declared type, or IP4.
    """
    if declared is not None and declared not in ADDRESS_TYPES:
        raise InvalidValueError(f"Unsupported address type: {declared}")

    try:
        version = ipaddress.ip_address(address).version
    except ValueError:
        if not HOSTNAME_PATTERN.fullmatch(address):
            raise InvalidValueError(f"Invalid address: {address}")
        return declared or ADDRESS_TYPE_IP4

    actual = "IP%d" % version
    if declared is not None and declared != actual:
        raise InvalidValueError(f"The address {address} isn't an {declared} address")
    return actual


@dataclass
class Resource:
    """
    A network resource: an address with an optional time-to-live and
    address count, written `address[/ttl[/count]]`.
    """

    address: str
    ttl: int = 0
    "Time to live, 0 when absent."
    addresses: int = 1
    "Number of contiguous addresses."
    address_type: Optional[str] = None

    def __post_init__(self) -> None:
        self.address_type = resolve_address_type(self.address, self.address_type)
        if self.ttl != 0 and not 1 <= self.ttl <= 255:
            raise InvalidValueError(f"Invalid TTL: {self.ttl}")
        if self.addresses < 1:
            raise InvalidValueError(f"Invalid address count: {self.addresses}")
        if self.addresses > 1 and not self.ttl:
            raise InvalidValueError("An address count requires a TTL")

    @classmethod
    def parse(cls, value: str, address_type: Optional[str] = None) -> "Resource":
        bits = value.split("/")
        if len(bits) > 3:
            raise InvalidValueError(f"Invalid network resource: {value}")

        try:
            numbers = [int(x) for x in bits[1:]]
        except ValueError as exc:
            raise InvalidValueError(f"Invalid network resource: {value}") from exc

        ttl = 0
        addresses = 1
        if len(numbers) >= 1:
            ttl = numbers[0]
            if not 1 <= ttl <= 255:
                raise InvalidValueError(f"Invalid TTL: {ttl}")
        if len(numbers) == 2:
            addresses = numbers[1]
        return cls(
            address=bits[0], ttl=ttl, addresses=addresses, address_type=address_type
        )

    @property
    def has_ttl(self) -> bool:
        return self.ttl > 0

    def __str__(self) -> str:
        s = self.address
        if self.has_ttl:
            s += "/%d" % self.ttl
            if self.addresses > 1:
                s += "/%d" % self.addresses
        return s


@dataclass
class Contact:
    """
    Contact information as found in `e=` and `p=` lines: an address with
    an optional personal name.
    """

    address_pattern: ClassVar["re.Pattern[str]"]

    address: str
    personal: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.address_pattern.fullmatch(self.address):
            raise InvalidValueError(f"Invalid contact address: {self.address}")
        if self.personal is not None:
            if not PERSONAL_PATTERN.fullmatch(self.personal):
                raise InvalidValueError(f"Invalid personal information: {self.personal}")
            self.personal = self.personal.strip()

    @classmethod
    def parse(cls, info: str) -> "Contact":
        """
        Parse `address`, `address (personal)` or `personal <address>`.
        """
        m = cls.address_pattern.match(info)
        if m:
            rest = info[m.end() :].strip()
            if not rest:
                return cls(address=m.group(0))
            if rest.startswith("(") and rest.endswith(")") and len(rest) > 2:
                return cls(address=m.group(0), personal=rest[1:-1])
            raise InvalidValueError(f"Invalid contact information: {info}")

        m = ANGLE_CONTACT_PATTERN.fullmatch(info)
        if m:
            return cls(address=m.group(2).strip(), personal=m.group(1))
        raise InvalidValueError(f"Invalid contact information: {info}")

    def __str__(self) -> str:
        if self.personal is not None:
            return f"{self.personal} <{self.address}>"
        return self.address


class EmailAddress(Contact):
    address_pattern = EMAIL_PATTERN


class PhoneNumber(Contact):
    address_pattern = PHONE_PATTERN


@dataclass
class ZoneAdjustment:
    """
    A time zone adjustment: from NTP `time` on, apply `offset` seconds.
    """

    time: int
    offset: int

    def __post_init__(self) -> None:
        if self.time < 0:
            raise InvalidValueError("Adjustment time cannot be negative")

    def __str__(self) -> str:
        return "%d %d" % (self.time, self.offset)
