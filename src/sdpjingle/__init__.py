# ruff: noqa: F401
import logging

from .attributes import AttributeStore
from .configuration import ConverterConfiguration
from .converter import (
    bundle_group,
    jingle_from_sdp,
    jingle_stanza_from_sdp,
    sdp_from_jingle,
    sdp_from_jingle_stanza,
    transport_info_from_sdp_stub,
)
from .exceptions import (
    InvalidValueError,
    SDPError,
    SDPParseError,
    SemanticError,
    StanzaError,
)
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
from .ice import candidate_from_sdp, candidate_to_sdp
from .jingle import (
    Candidate,
    CandidateType,
    Content,
    Creator,
    Crypto,
    Encryption,
    IceUdpTransport,
    JingleIQ,
    PayloadType,
    RawUdpTransport,
    RtpDescription,
    Stream,
    TransportKind,
)
from .sdp import MediaDescription, SessionDescription, TimeDescription

__version__ = "0.1.0"

# Set default logging handler to avoid "No handler found" warnings.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Attribute",
    "AttributeStore",
    "Bandwidth",
    "Candidate",
    "CandidateType",
    "Connection",
    "Content",
    "ConverterConfiguration",
    "Creator",
    "Crypto",
    "Email",
    "Encryption",
    "IceUdpTransport",
    "Information",
    "InvalidValueError",
    "JingleIQ",
    "Key",
    "Media",
    "MediaDescription",
    "Origin",
    "PayloadType",
    "Phone",
    "RawUdpTransport",
    "RepeatTime",
    "RtpDescription",
    "SDPError",
    "SDPParseError",
    "SemanticError",
    "SessionDescription",
    "SessionName",
    "StanzaError",
    "Stream",
    "Time",
    "TimeDescription",
    "TimeZone",
    "TransportKind",
    "Uri",
    "Version",
    "bundle_group",
    "candidate_from_sdp",
    "candidate_to_sdp",
    "jingle_from_sdp",
    "jingle_stanza_from_sdp",
    "parse_field",
    "sdp_from_jingle",
    "sdp_from_jingle_stanza",
    "transport_info_from_sdp_stub",
]
