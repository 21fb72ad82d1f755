import copy
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

from .attributes import AttributeStore
from .exceptions import InvalidValueError, SDPError, SDPParseError, SemanticError
from .fields import (
    Attribute,
    Bandwidth,
    Connection,
    Email,
    Information,
    Key,
    Media,
    Origin,
    Phone,
    RepeatTime,
    SessionName,
    Time,
    TimeZone,
    Uri,
    Version,
    parse_field,
)

END_OF_FIELD = "\r\n"

# field types in the order they must appear, "r" lines belong to "t"
SESSION_ORDER = "vosiuepcbtzka"
SESSION_REPEATABLE = "epbtra"
MEDIA_ORDER = "micbka"
MEDIA_REPEATABLE = "ba"


def grouplines(sdp: str) -> tuple[list[str], list[list[str]]]:
    session = []
    media: list[list[str]] = []
    for line in sdp.splitlines():
        if not line:
            continue
        if line.startswith("m="):
            media.append([line])
        elif len(media):
            media[-1].append(line)
        else:
            session.append(line)
    return session, media


def replace_collection(
    owner: Any, attr: str, items: Optional[Iterable[Any]], add: Callable[[Any], None]
) -> None:
    """
    Empty the collection `owner.attr` then `add` every item. If an item is
    rejected the previous collection is put back before re-raising.
    """
    if items is None:
        raise InvalidValueError(f"The {attr.strip('_')} cannot be None")

    backup = getattr(owner, attr)
    setattr(owner, attr, type(backup)())
    try:
        for item in items:
            add(item)
    except SDPError:
        setattr(owner, attr, backup)
        raise


def check_order(line: str, order: str, repeatable: str, seen: list[str]) -> None:
    kind = line[0]
    if kind not in order and not (kind == "r" and "t" in order):
        raise SDPParseError(f'Unexpected field "{line}"', line=line)
    position = order.index("t" if kind == "r" else kind)
    if seen:
        last = seen[-1]
        last_position = order.index("t" if last == "r" else last)
        if position < last_position:
            raise SDPParseError(f'Field "{line}" is out of order', line=line)
    if kind in seen and kind not in repeatable:
        raise SDPParseError(f'Duplicate field "{line}"', line=line)
    seen.append(kind)


def check_type(value: Any, cls: type, what: str) -> None:
    if not isinstance(value, cls):
        raise InvalidValueError(f"{what} cannot be {value!r}")


@dataclass
class TimeDescription:
    """
    A `t=` line followed by its `r=` lines.
    """

    time: Time = field(default_factory=Time)
    repeat_times: list[RepeatTime] = field(default_factory=list)

    def add_repeat_time(self, repeat_time: RepeatTime) -> None:
        check_type(repeat_time, RepeatTime, "A repeat time field")
        self.repeat_times.append(repeat_time)

    def clone(self) -> "TimeDescription":
        return copy.deepcopy(self)

    def __str__(self) -> str:
        lines = [str(self.time)] + [str(r) for r in self.repeat_times]
        return END_OF_FIELD.join(lines) + END_OF_FIELD


class MediaDescription:
    """
    One media block: the `m=` line and the fields scoped to it.
    """

    def __init__(
        self,
        media: Media,
        connection: Optional[Connection] = None,
        information: Optional[Information] = None,
        key: Optional[Key] = None,
    ) -> None:
        self.media = media
        self.connection = connection
        self.information = information
        self.key = key
        self._bandwidths: dict[str, Bandwidth] = {}
        self.attributes = AttributeStore()

    @property
    def media(self) -> Media:
        return self._media

    @media.setter
    def media(self, media: Media) -> None:
        check_type(media, Media, "The media field")
        self._media = media

    def has_connection(self) -> bool:
        return self.connection is not None

    # bandwidths

    def add_bandwidth(self, bandwidth: Bandwidth) -> None:
        check_type(bandwidth, Bandwidth, "A bandwidth field")
        self._bandwidths[bandwidth.modifier] = bandwidth

    def get_bandwidth(self, modifier: str) -> Optional[Bandwidth]:
        return self._bandwidths.get(modifier)

    def get_bandwidths(self) -> list[Bandwidth]:
        return list(self._bandwidths.values())

    def remove_bandwidth(self, modifier: str) -> Optional[Bandwidth]:
        return self._bandwidths.pop(modifier, None)

    def set_bandwidths(self, bandwidths: Iterable[Bandwidth]) -> None:
        replace_collection(self, "_bandwidths", bandwidths, self.add_bandwidth)

    def clear_bandwidths(self) -> None:
        self._bandwidths.clear()

    # attributes

    def add_attribute(self, attribute: Attribute) -> None:
        self.attributes.add(attribute)

    def get_attribute(self, name: str) -> Optional[Attribute]:
        return self.attributes.get(name)

    def get_attributes(self, name: Optional[str] = None) -> list[Attribute]:
        if name is None:
            return list(self.attributes)
        return self.attributes.get_all(name)

    def get_attributes_count(self, name: str) -> int:
        return self.attributes.count(name)

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    def remove_attribute(self, name: str) -> Optional[Attribute]:
        return self.attributes.remove(name)

    def remove_attributes(self, name: str) -> list[Attribute]:
        return self.attributes.remove_all(name)

    def set_attributes(self, attributes: Iterable[Attribute]) -> None:
        if attributes is None:
            raise InvalidValueError("The attributes cannot be None")
        self.attributes.set_all(attributes)

    def clear_attributes(self) -> None:
        self.attributes.clear()

    @classmethod
    def parse(cls, lines: list[str]) -> "MediaDescription":
        seen: list[str] = []
        description = None
        for line in lines:
            check_order(line, MEDIA_ORDER, MEDIA_REPEATABLE, seen)
            value = parse_field(line)
            if isinstance(value, Media):
                description = cls(value)
            elif isinstance(value, Information):
                description.information = value
            elif isinstance(value, Connection):
                description.connection = value
            elif isinstance(value, Bandwidth):
                description.add_bandwidth(value)
            elif isinstance(value, Key):
                description.key = value
            else:
                description.add_attribute(value)
        if description is None:
            raise SDPParseError("Missing media field")
        return description

    def clone(self) -> "MediaDescription":
        return copy.deepcopy(self)

    def _key(self) -> tuple:
        return (
            self.media,
            self.information,
            self.connection,
            self.get_bandwidths(),
            self.key,
            self.attributes,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MediaDescription):
            return NotImplemented
        return self._key() == other._key()

    def __repr__(self) -> str:
        return "MediaDescription(%r)" % str(self)

    def __str__(self) -> str:
        lines = [str(self.media)]
        if self.information is not None:
            lines.append(str(self.information))
        if self.connection is not None:
            lines.append(str(self.connection))
        for bandwidth in self._bandwidths.values():
            lines.append(str(bandwidth))
        if self.key is not None:
            lines.append(str(self.key))
        for attribute in self.attributes:
            lines.append(str(attribute))
        return END_OF_FIELD.join(lines) + END_OF_FIELD


class SessionDescription:
    """
    A complete session description.

    The version, origin, session name and at least one time description
    are always present. Media blocks can only be added when they, or the
    session, carry a connection.
    """

    def __init__(
        self,
        origin: Origin,
        session_name: Optional[SessionName] = None,
        time_description: Optional[TimeDescription] = None,
        version: Optional[Version] = None,
    ) -> None:
        self.version = version if version is not None else Version()
        self.origin = origin
        self.session_name = session_name if session_name is not None else SessionName()
        self.information: Optional[Information] = None
        self.uri: Optional[Uri] = None
        self._emails: list[Email] = []
        self._phones: list[Phone] = []
        self._connection: Optional[Connection] = None
        self._bandwidths: dict[str, Bandwidth] = {}
        self._time_descriptions: list[TimeDescription] = []
        self.time_zone: Optional[TimeZone] = None
        self.key: Optional[Key] = None
        self.attributes = AttributeStore()
        self._media_descriptions: list[MediaDescription] = []

        self.add_time_description(
            time_description if time_description is not None else TimeDescription()
        )

    @property
    def version(self) -> Version:
        return self._version

    @version.setter
    def version(self, version: Version) -> None:
        check_type(version, Version, "The version field")
        self._version = version

    @property
    def origin(self) -> Origin:
        return self._origin

    @origin.setter
    def origin(self, origin: Origin) -> None:
        check_type(origin, Origin, "The origin field")
        self._origin = origin

    @property
    def session_name(self) -> SessionName:
        return self._session_name

    @session_name.setter
    def session_name(self, session_name: SessionName) -> None:
        check_type(session_name, SessionName, "The session name field")
        self._session_name = session_name

    @property
    def connection(self) -> Optional[Connection]:
        return self._connection

    @connection.setter
    def connection(self, connection: Optional[Connection]) -> None:
        if connection is None:
            for description in self._media_descriptions:
                if not description.has_connection():
                    raise SemanticError(
                        "The connection field is required by a media description"
                    )
        else:
            check_type(connection, Connection, "The connection field")
        self._connection = connection

    def has_connection(self) -> bool:
        return self._connection is not None

    # emails and phones

    @property
    def emails(self) -> list[Email]:
        return list(self._emails)

    def add_email(self, email: Email) -> None:
        check_type(email, Email, "An email field")
        self._emails.append(email)

    def set_emails(self, emails: Iterable[Email]) -> None:
        replace_collection(self, "_emails", emails, self.add_email)

    def clear_emails(self) -> None:
        self._emails.clear()

    def has_emails(self) -> bool:
        return len(self._emails) > 0

    @property
    def phones(self) -> list[Phone]:
        return list(self._phones)

    def add_phone(self, phone: Phone) -> None:
        check_type(phone, Phone, "A phone field")
        self._phones.append(phone)

    def set_phones(self, phones: Iterable[Phone]) -> None:
        replace_collection(self, "_phones", phones, self.add_phone)

    def clear_phones(self) -> None:
        self._phones.clear()

    def has_phones(self) -> bool:
        return len(self._phones) > 0

    # bandwidths

    def add_bandwidth(self, bandwidth: Bandwidth) -> None:
        check_type(bandwidth, Bandwidth, "A bandwidth field")
        self._bandwidths[bandwidth.modifier] = bandwidth

    def get_bandwidth(self, modifier: str) -> Optional[Bandwidth]:
        return self._bandwidths.get(modifier)

    def get_bandwidths(self) -> list[Bandwidth]:
        return list(self._bandwidths.values())

    def remove_bandwidth(self, modifier: str) -> Optional[Bandwidth]:
        return self._bandwidths.pop(modifier, None)

    def set_bandwidths(self, bandwidths: Iterable[Bandwidth]) -> None:
        replace_collection(self, "_bandwidths", bandwidths, self.add_bandwidth)

    def clear_bandwidths(self) -> None:
        self._bandwidths.clear()

    # time descriptions

    @property
    def time_descriptions(self) -> list[TimeDescription]:
        return list(self._time_descriptions)

    def add_time_description(self, time_description: TimeDescription) -> None:
        check_type(time_description, TimeDescription, "A time description")
        self._time_descriptions.append(time_description)

    def set_time_descriptions(self, time_descriptions: Iterable[TimeDescription]) -> None:
        if time_descriptions is not None:
            time_descriptions = list(time_descriptions)
            if not time_descriptions:
                raise InvalidValueError("At least one time description is required")
        replace_collection(
            self, "_time_descriptions", time_descriptions, self.add_time_description
        )

    # attributes

    def add_attribute(self, attribute: Attribute) -> None:
        self.attributes.add(attribute)

    def get_attribute(self, name: str) -> Optional[Attribute]:
        return self.attributes.get(name)

    def get_attributes(self, name: Optional[str] = None) -> list[Attribute]:
        if name is None:
            return list(self.attributes)
        return self.attributes.get_all(name)

    def get_attributes_count(self, name: str) -> int:
        return self.attributes.count(name)

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    def remove_attribute(self, name: str) -> Optional[Attribute]:
        return self.attributes.remove(name)

    def remove_attributes(self, name: str) -> list[Attribute]:
        return self.attributes.remove_all(name)

    def set_attributes(self, attributes: Iterable[Attribute]) -> None:
        if attributes is None:
            raise InvalidValueError("The attributes cannot be None")
        self.attributes.set_all(attributes)

    def clear_attributes(self) -> None:
        self.attributes.clear()

    # media descriptions

    @property
    def media_descriptions(self) -> list[MediaDescription]:
        return list(self._media_descriptions)

    def add_media_description(self, description: MediaDescription) -> None:
        check_type(description, MediaDescription, "A media description")
        if not self.has_connection() and not description.has_connection():
            raise SemanticError("This media description must have a connection field")
        self._media_descriptions.append(description)

    def set_media_descriptions(self, descriptions: Iterable[MediaDescription]) -> None:
        replace_collection(
            self, "_media_descriptions", descriptions, self.add_media_description
        )

    def clear_media_descriptions(self) -> None:
        self._media_descriptions.clear()

    def get_connection_for(self, description: MediaDescription) -> Optional[Connection]:
        """
        Return the connection which applies to a media block: its own, or
        the session one.
        """
        if description.connection is not None:
            return description.connection
        return self._connection

    @classmethod
    def parse(cls, sdp: str) -> "SessionDescription":
        session_lines, media_groups = grouplines(sdp)

        seen: list[str] = []
        values = []
        for line in session_lines:
            check_order(line, SESSION_ORDER, SESSION_REPEATABLE, seen)
            values.append(parse_field(line))

        for kind, name in [("v", "version"), ("o", "origin"), ("s", "session name")]:
            if kind not in seen:
                raise SDPParseError(f"Missing {name} field")
        if "t" not in seen:
            raise SDPParseError("Missing time field")
        if seen[0] != "v":
            raise SDPParseError("The version field must come first", line=session_lines[0])

        session = cls(origin=next(v for v in values if isinstance(v, Origin)))
        session._time_descriptions = []
        for value in values:
            if isinstance(value, Version):
                session.version = value
            elif isinstance(value, SessionName):
                session.session_name = value
            elif isinstance(value, Information):
                session.information = value
            elif isinstance(value, Uri):
                session.uri = value
            elif isinstance(value, Email):
                session.add_email(value)
            elif isinstance(value, Phone):
                session.add_phone(value)
            elif isinstance(value, Connection):
                session.connection = value
            elif isinstance(value, Bandwidth):
                session.add_bandwidth(value)
            elif isinstance(value, Time):
                session.add_time_description(TimeDescription(time=value))
            elif isinstance(value, RepeatTime):
                if not session._time_descriptions:
                    raise SDPParseError(
                        "A repeat time field must follow a time field", line=str(value)
                    )
                session._time_descriptions[-1].add_repeat_time(value)
            elif isinstance(value, TimeZone):
                session.time_zone = value
            elif isinstance(value, Key):
                session.key = value
            elif isinstance(value, Attribute):
                session.add_attribute(value)

        for media_lines in media_groups:
            session.add_media_description(MediaDescription.parse(media_lines))

        return session

    def clone(self) -> "SessionDescription":
        return copy.deepcopy(self)

    def _key(self) -> tuple:
        return (
            self.version,
            self.origin,
            self.session_name,
            self.information,
            self.uri,
            self._emails,
            self._phones,
            self._connection,
            self.get_bandwidths(),
            self._time_descriptions,
            self.time_zone,
            self.key,
            self.attributes,
            self._media_descriptions,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SessionDescription):
            return NotImplemented
        return self._key() == other._key()

    def __repr__(self) -> str:
        return "SessionDescription(%r)" % str(self)

    def __str__(self) -> str:
        lines = [str(self.version), str(self.origin), str(self.session_name)]
        if self.information is not None:
            lines.append(str(self.information))
        if self.uri is not None:
            lines.append(str(self.uri))
        lines += [str(email) for email in self._emails]
        lines += [str(phone) for phone in self._phones]
        if self._connection is not None:
            lines.append(str(self._connection))
        lines += [str(bandwidth) for bandwidth in self._bandwidths.values()]
        s = END_OF_FIELD.join(lines) + END_OF_FIELD

        s += "".join(str(td) for td in self._time_descriptions)

        lines = []
        if self.time_zone is not None:
            lines.append(str(self.time_zone))
        if self.key is not None:
            lines.append(str(self.key))
        lines += [str(attribute) for attribute in self.attributes]
        if lines:
            s += END_OF_FIELD.join(lines) + END_OF_FIELD

        return s + "".join(str(m) for m in self._media_descriptions)
