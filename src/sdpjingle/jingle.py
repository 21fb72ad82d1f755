"""
Jingle stanza model.

This covers the parts of the protocol needed to carry a session
description:

    * XEP-0166 - Jingle
    * XEP-0167 - Jingle RTP Sessions
    * XEP-0176 - Jingle ICE-UDP Transport Method
    * XEP-0177 - Jingle Raw UDP Transport Method
"""

import enum
from dataclasses import dataclass, field
from typing import ClassVar, Optional, Union

from lxml import etree

from .exceptions import StanzaError

NS_CLIENT = "jabber:client"
NS_JINGLE = "urn:xmpp:jingle:1"
NS_JINGLE_APPS_RTP = "urn:xmpp:jingle:apps:rtp:1"
NS_JINGLE_ICE_UDP_TRANSPORT = "urn:xmpp:jingle:transports:ice-udp:1"
NS_JINGLE_RAW_UDP_TRANSPORT = "urn:xmpp:jingle:transports:raw-udp:1"

XML_PARSER = etree.XMLParser(resolve_entities=False, no_network=True)


def qname(namespace: str, tag: str) -> str:
    return "{%s}%s" % (namespace, tag)


def make_element(
    namespace: str, tag: str, /, **attributes: Optional[str]
) -> etree._Element:
    element = etree.Element(qname(namespace, tag), nsmap={None: namespace})
    for name, value in attributes.items():
        if value is not None:
            element.set(name.replace("_", "-"), value)
    return element


def get_attribute(element: etree._Element, name: str) -> str:
    value = element.get(name)
    if value is None:
        raise StanzaError(
            "Missing '%s' attribute on <%s/>" % (name, etree.QName(element).localname)
        )
    return value


def get_int(element: etree._Element, name: str, required: bool = True) -> Optional[int]:
    value = element.get(name)
    if value is None:
        if required:
            get_attribute(element, name)
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise StanzaError(f"Invalid '{name}' attribute: {value}") from exc


def optional_str(value: Optional[int]) -> Optional[str]:
    return None if value is None else str(value)


class CandidateType(enum.Enum):
    """
    The allowed types of ICE candidates, including the legacy names.
    """

    HOST = "host"
    PRFLX = "prflx"
    RELAY = "relay"
    SRFLX = "srflx"

    STUN = "stun"
    "Legacy name for a server reflexive candidate."
    LOCAL = "local"
    "Legacy name for a host candidate."

    @property
    def canonical(self) -> "CandidateType":
        if self is CandidateType.STUN:
            return CandidateType.SRFLX
        elif self is CandidateType.LOCAL:
            return CandidateType.HOST
        return self

    @property
    def has_related_address(self) -> bool:
        """
        Whether the candidate is described relative to another address.
        """
        return self.canonical is not CandidateType.HOST


class Creator(enum.Enum):
    INITIATOR = "initiator"
    RESPONDER = "responder"


class TransportKind(enum.Enum):
    RAW_UDP = NS_JINGLE_RAW_UDP_TRANSPORT
    ICE_UDP = NS_JINGLE_ICE_UDP_TRANSPORT


@dataclass
class Candidate:
    """
    A transport candidate. Raw UDP candidates only use `component`, `ip`,
    `port`, `generation` and `id`.
    """

    component: int
    ip: str
    port: int
    generation: int = 0
    foundation: Optional[str] = None
    priority: Optional[int] = None
    protocol: Optional[str] = None
    type: Optional[CandidateType] = None
    rel_addr: Optional[str] = None
    rel_port: Optional[int] = None
    network: Optional[int] = None
    id: Optional[str] = None

    @classmethod
    def from_element(cls, element: etree._Element) -> "Candidate":
        type = element.get("type")
        try:
            candidate_type = CandidateType(type) if type is not None else None
        except ValueError as exc:
            raise StanzaError(f"Invalid candidate type: {type}") from exc

        return cls(
            component=get_int(element, "component"),
            ip=get_attribute(element, "ip"),
            port=get_int(element, "port"),
            generation=get_int(element, "generation", required=False) or 0,
            foundation=element.get("foundation"),
            priority=get_int(element, "priority", required=False),
            protocol=element.get("protocol"),
            type=candidate_type,
            rel_addr=element.get("rel-addr"),
            rel_port=get_int(element, "rel-port", required=False),
            network=get_int(element, "network", required=False),
            id=element.get("id"),
        )

    def to_element(self, namespace: str) -> etree._Element:
        return make_element(
            namespace,
            "candidate",
            component=str(self.component),
            foundation=self.foundation,
            generation=str(self.generation),
            id=self.id,
            ip=self.ip,
            network=optional_str(self.network),
            port=str(self.port),
            priority=optional_str(self.priority),
            protocol=self.protocol,
            rel_addr=self.rel_addr,
            rel_port=optional_str(self.rel_port),
            type=self.type.value if self.type is not None else None,
        )


@dataclass
class RawUdpTransport:
    kind: ClassVar[TransportKind] = TransportKind.RAW_UDP

    candidates: list[Candidate] = field(default_factory=list)

    @classmethod
    def from_element(cls, element: etree._Element) -> "RawUdpTransport":
        return cls(
            candidates=[
                Candidate.from_element(child)
                for child in element.iterchildren(qname(cls.kind.value, "candidate"))
            ]
        )

    def to_element(self) -> etree._Element:
        element = make_element(self.kind.value, "transport")
        for candidate in self.candidates:
            element.append(candidate.to_element(self.kind.value))
        return element


@dataclass
class IceUdpTransport:
    kind: ClassVar[TransportKind] = TransportKind.ICE_UDP

    ufrag: Optional[str] = None
    pwd: Optional[str] = None
    candidates: list[Candidate] = field(default_factory=list)

    @classmethod
    def from_element(cls, element: etree._Element) -> "IceUdpTransport":
        return cls(
            ufrag=element.get("ufrag"),
            pwd=element.get("pwd"),
            candidates=[
                Candidate.from_element(child)
                for child in element.iterchildren(qname(cls.kind.value, "candidate"))
            ],
        )

    def to_element(self) -> etree._Element:
        element = make_element(self.kind.value, "transport", ufrag=self.ufrag, pwd=self.pwd)
        for candidate in self.candidates:
            element.append(candidate.to_element(self.kind.value))
        return element


Transport = Union[RawUdpTransport, IceUdpTransport]

TRANSPORT_CLASSES: dict[str, type] = {
    RawUdpTransport.kind.value: RawUdpTransport,
    IceUdpTransport.kind.value: IceUdpTransport,
}


@dataclass
class PayloadType:
    """
    A codec. `clockrate` may carry a channel count, as in `'48000/2'`.
    """

    id: int
    name: Optional[str] = None
    clockrate: Optional[str] = None

    @classmethod
    def from_element(cls, element: etree._Element) -> "PayloadType":
        clockrate = element.get("clockrate")
        channels = element.get("channels")
        if clockrate is not None and channels is not None:
            clockrate += "/" + channels
        return cls(id=get_int(element, "id"), name=element.get("name"), clockrate=clockrate)

    def to_element(self) -> etree._Element:
        clockrate, channels = self.clockrate, None
        if clockrate is not None and "/" in clockrate:
            clockrate, channels = clockrate.split("/", 1)
        return make_element(
            NS_JINGLE_APPS_RTP,
            "payload-type",
            id=str(self.id),
            name=self.name,
            clockrate=clockrate,
            channels=channels,
        )


@dataclass
class Crypto:
    tag: str
    crypto_suite: str
    key_params: str

    @classmethod
    def from_element(cls, element: etree._Element) -> "Crypto":
        return cls(
            tag=get_attribute(element, "tag"),
            crypto_suite=get_attribute(element, "crypto-suite"),
            key_params=get_attribute(element, "key-params"),
        )

    def to_element(self) -> etree._Element:
        return make_element(
            NS_JINGLE_APPS_RTP,
            "crypto",
            crypto_suite=self.crypto_suite,
            key_params=self.key_params,
            tag=self.tag,
        )


@dataclass
class Encryption:
    required: bool = False
    cryptos: list[Crypto] = field(default_factory=list)

    @classmethod
    def from_element(cls, element: etree._Element) -> "Encryption":
        required = element.get("required", "").lower() in ["true", "1"]
        return cls(
            required=required,
            cryptos=[
                Crypto.from_element(child)
                for child in element.iterchildren(qname(NS_JINGLE_APPS_RTP, "crypto"))
            ],
        )

    def to_element(self) -> etree._Element:
        element = make_element(
            NS_JINGLE_APPS_RTP, "encryption", required="1" if self.required else None
        )
        for crypto in self.cryptos:
            element.append(crypto.to_element())
        return element


@dataclass
class Stream:
    """
    A media stream identified by its synchronization source, with named
    attributes such as `cname`, `mslabel` or `label`.
    """

    ssrc: str
    attributes: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_element(cls, element: etree._Element) -> "Stream":
        ssrc = element.find(qname(NS_JINGLE_APPS_RTP, "ssrc"))
        if ssrc is None or not ssrc.text:
            raise StanzaError("Missing <ssrc/> in <stream/>")
        return cls(ssrc=ssrc.text.strip(), attributes=dict(element.attrib))

    def to_element(self) -> etree._Element:
        element = make_element(NS_JINGLE_APPS_RTP, "stream")
        for name, value in self.attributes.items():
            try:
                element.set(name, value)
            except ValueError as exc:
                raise StanzaError(f"Invalid stream attribute name: {name}") from exc
        ssrc = etree.SubElement(element, qname(NS_JINGLE_APPS_RTP, "ssrc"))
        ssrc.text = self.ssrc
        return element


@dataclass
class RtpDescription:
    media: str
    profile: Optional[str] = None
    payload_types: list[PayloadType] = field(default_factory=list)
    encryption: Optional[Encryption] = None
    rtcp_mux: bool = False
    streams: list[Stream] = field(default_factory=list)

    @classmethod
    def from_element(cls, element: etree._Element) -> "RtpDescription":
        description = cls(media=get_attribute(element, "media"), profile=element.get("profile"))
        for child in element:
            if child.tag == qname(NS_JINGLE_APPS_RTP, "payload-type"):
                description.payload_types.append(PayloadType.from_element(child))
            elif child.tag == qname(NS_JINGLE_APPS_RTP, "encryption"):
                description.encryption = Encryption.from_element(child)
            elif child.tag == qname(NS_JINGLE_APPS_RTP, "rtcp-mux"):
                description.rtcp_mux = True
            elif child.tag == qname(NS_JINGLE_APPS_RTP, "streams"):
                for stream in child.iterchildren(qname(NS_JINGLE_APPS_RTP, "stream")):
                    description.streams.append(Stream.from_element(stream))
        return description

    def to_element(self) -> etree._Element:
        element = make_element(
            NS_JINGLE_APPS_RTP, "description", media=self.media, profile=self.profile
        )
        for payload_type in self.payload_types:
            element.append(payload_type.to_element())
        if self.encryption is not None:
            element.append(self.encryption.to_element())
        if self.rtcp_mux:
            etree.SubElement(element, qname(NS_JINGLE_APPS_RTP, "rtcp-mux"))
        if self.streams:
            streams = etree.SubElement(element, qname(NS_JINGLE_APPS_RTP, "streams"))
            for stream in self.streams:
                streams.append(stream.to_element())
        return element


@dataclass
class Content:
    name: str
    creator: Creator = Creator.INITIATOR
    senders: Optional[str] = None
    description: Optional[RtpDescription] = None
    transports: list[Transport] = field(default_factory=list)

    @property
    def raw_transport(self) -> Optional[RawUdpTransport]:
        for transport in self.transports:
            if transport.kind is TransportKind.RAW_UDP:
                return transport
        return None

    @property
    def ice_transports(self) -> list[IceUdpTransport]:
        return [t for t in self.transports if t.kind is TransportKind.ICE_UDP]

    def get_transports(self, kind: TransportKind) -> list[Transport]:
        return [t for t in self.transports if t.kind is kind]

    @classmethod
    def from_element(cls, element: etree._Element) -> "Content":
        creator = get_attribute(element, "creator")
        try:
            content = cls(
                name=get_attribute(element, "name"),
                creator=Creator(creator),
                senders=element.get("senders"),
            )
        except ValueError as exc:
            raise StanzaError(f"Invalid content creator: {creator}") from exc

        for child in element:
            if not isinstance(child.tag, str):
                continue
            child_name = etree.QName(child)
            if child_name.localname == "description" and child_name.namespace == NS_JINGLE_APPS_RTP:
                content.description = RtpDescription.from_element(child)
            elif child_name.localname == "transport" and child_name.namespace in TRANSPORT_CLASSES:
                content.transports.append(
                    TRANSPORT_CLASSES[child_name.namespace].from_element(child)
                )
        return content

    def to_element(self) -> etree._Element:
        element = make_element(
            NS_JINGLE,
            "content",
            creator=self.creator.value,
            name=self.name,
            senders=self.senders,
        )
        if self.description is not None:
            element.append(self.description.to_element())
        for transport in self.transports:
            element.append(transport.to_element())
        return element


@dataclass
class JingleIQ:
    """
    A Jingle request carried in an `<iq/>` stanza.
    """

    sid: str
    action: str
    type: str = "set"
    initiator: Optional[str] = None
    responder: Optional[str] = None
    id: Optional[str] = None
    contents: list[Content] = field(default_factory=list)

    def get_content(self, name: str) -> Optional[Content]:
        for content in self.contents:
            if content.name == name:
                return content
        return None

    def get_content_for_transport(self, kind: TransportKind) -> Optional[Content]:
        """
        Return the first content carrying a transport of the given kind.
        """
        for content in self.contents:
            if content.get_transports(kind):
                return content
        return None

    @classmethod
    def from_element(cls, element: etree._Element) -> "JingleIQ":
        iq_type, iq_id = "set", None
        if element.tag == qname(NS_CLIENT, "iq") or element.tag == "iq":
            iq_type = element.get("type", iq_type)
            iq_id = element.get("id")
            jingle = element.find(qname(NS_JINGLE, "jingle"))
            if jingle is None:
                raise StanzaError("The stanza does not carry a Jingle payload")
            element = jingle
        elif element.tag != qname(NS_JINGLE, "jingle"):
            raise StanzaError("Unexpected element <%s/>" % etree.QName(element).localname)

        return cls(
            sid=get_attribute(element, "sid"),
            action=get_attribute(element, "action"),
            type=iq_type,
            initiator=element.get("initiator"),
            responder=element.get("responder"),
            id=iq_id,
            contents=[
                Content.from_element(child)
                for child in element.iterchildren(qname(NS_JINGLE, "content"))
            ],
        )

    @classmethod
    def from_xml(cls, data: Union[str, bytes]) -> "JingleIQ":
        if isinstance(data, str):
            data = data.encode("utf8")
        try:
            element = etree.fromstring(data, parser=XML_PARSER)
        except etree.XMLSyntaxError as exc:
            raise StanzaError(f"Malformed stanza: {exc}") from exc
        return cls.from_element(element)

    def to_element(self) -> etree._Element:
        iq = make_element(NS_CLIENT, "iq", type=self.type, id=self.id)
        jingle = make_element(
            NS_JINGLE,
            "jingle",
            action=self.action,
            initiator=self.initiator,
            responder=self.responder,
            sid=self.sid,
        )
        for content in self.contents:
            jingle.append(content.to_element())
        iq.append(jingle)
        return iq

    def to_xml(self) -> str:
        return etree.tostring(self.to_element(), encoding="unicode")
