"""
Translation between session descriptions and Jingle stanzas.
"""

import logging
from collections.abc import Iterable
from typing import Optional

from .configuration import ConverterConfiguration
from .exceptions import SemanticError
from .fields import Attribute, Connection, Media, Origin, SessionName
from .ice import candidate_from_sdp, candidate_to_sdp
from .jingle import (
    Candidate,
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
)
from .sdp import MediaDescription, SessionDescription
from .utils import NET_TYPE_IN, is_number

logger = logging.getLogger(__name__)

TRANSPORT_INFO = "transport-info"
CANDIDATE_PREFIXES = ["a=candidate:", "candidate:"]


def bundle_group(session: SessionDescription) -> Attribute:
    """
    Return the `group` attribute bundling every media block of `session`.
    """
    mids = [d.media.media for d in session.media_descriptions]
    return Attribute(name="group", value=" ".join(["BUNDLE"] + mids))


def get_session_attribute(
    session: SessionDescription, description: MediaDescription, name: str
) -> Optional[str]:
    """
    Return the value of an attribute from the media block, or the session.
    """
    attribute = description.get_attribute(name)
    if attribute is None:
        attribute = session.get_attribute(name)
    if attribute is None:
        return None
    return attribute.value


def payload_types_from_sdp(description: MediaDescription) -> list[PayloadType]:
    payload_types = []
    mapped = set()
    for attribute in description.get_attributes("rtpmap"):
        try:
            pt, encoding = attribute.value.split(" ", 1)
            name, _, clockrate = encoding.partition("/")
            payload_type = PayloadType(
                id=int(pt), name=name or None, clockrate=clockrate or None
            )
        except (AttributeError, ValueError):
            logger.warning("Skipping malformed rtpmap %r", attribute.value)
            continue
        payload_types.append(payload_type)
        mapped.add(payload_type.id)

    for fmt in description.media.formats:
        if not is_number(fmt):
            logger.warning("Skipping non-RTP media format %s", fmt)
        elif int(fmt) not in mapped:
            payload_types.append(PayloadType(id=int(fmt)))
            mapped.add(int(fmt))
    return payload_types


def encryption_from_sdp(description: MediaDescription) -> Optional[Encryption]:
    cryptos = []
    for attribute in description.get_attributes("crypto"):
        bits = attribute.value.split() if attribute.value else []
        if len(bits) < 3:
            logger.warning("Skipping malformed crypto %r", attribute.value)
            continue
        cryptos.append(Crypto(tag=bits[0], crypto_suite=bits[1], key_params=bits[2]))

    if not cryptos:
        return None
    return Encryption(required=True, cryptos=cryptos)


def streams_from_sdp(description: MediaDescription) -> list[Stream]:
    streams: dict[str, Stream] = {}
    for attribute in description.get_attributes("ssrc"):
        bits = attribute.value.split(" ", 1) if attribute.value else []
        if len(bits) != 2 or ":" not in bits[1]:
            logger.warning("Skipping ssrc without name:value %r", attribute.value)
            continue
        ssrc, info = bits
        name, value = info.split(":", 1)
        stream = streams.setdefault(ssrc, Stream(ssrc=ssrc))
        stream.attributes[name] = value
    return list(streams.values())


def content_from_sdp(
    session: SessionDescription, description: MediaDescription
) -> Content:
    media = description.media
    connection = session.get_connection_for(description)
    if connection is None:
        raise SemanticError(f"The {media.media} media has no connection")
    if connection.net_type != NET_TYPE_IN:
        raise SemanticError(f"Unsupported network type: {connection.net_type}")
    payload_types = payload_types_from_sdp(description)
    if not payload_types:
        raise SemanticError(f"The {media.media} media has no media format")

    rtp = RtpDescription(
        media=media.media,
        profile=media.protocol,
        payload_types=payload_types,
        encryption=encryption_from_sdp(description),
        rtcp_mux=description.has_attribute("rtcp-mux"),
        streams=streams_from_sdp(description),
    )
    content = Content(name=media.media, creator=Creator.INITIATOR, description=rtp)

    # legacy endpoints only understand raw UDP
    content.transports.append(
        RawUdpTransport(
            candidates=[
                Candidate(component=1, ip=connection.address, port=media.port, generation=0)
            ]
        )
    )

    candidates = []
    for attribute in description.get_attributes("candidate"):
        if not attribute.has_value():
            raise SemanticError("A candidate attribute needs a value")
        candidates.append(candidate_from_sdp(attribute.value))
    ufrag = get_session_attribute(session, description, "ice-ufrag")
    pwd = get_session_attribute(session, description, "ice-pwd")
    if candidates or ufrag is not None:
        content.transports.append(
            IceUdpTransport(ufrag=ufrag, pwd=pwd, candidates=candidates)
        )

    return content


def jingle_from_sdp(
    session: SessionDescription, configuration: Optional[ConverterConfiguration] = None
) -> JingleIQ:
    """
    Build a Jingle request describing the same session as `session`.

    One content is produced per media block, named after its media type.
    """
    if configuration is None:
        configuration = ConverterConfiguration()

    contents = [content_from_sdp(session, d) for d in session.media_descriptions]
    logger.debug("Converted session %d to %d contents", session.origin.session_id, len(contents))
    return JingleIQ(
        sid=str(session.origin.session_id),
        action=configuration.action,
        type=configuration.iq_type,
        contents=contents,
    )


def transport_address(content: Content) -> Candidate:
    """
    Return the candidate giving the address and port of a content.
    """
    raw = content.raw_transport
    if raw is not None and raw.candidates:
        return raw.candidates[0]
    for transport in content.ice_transports:
        for candidate in transport.candidates:
            if candidate.component == 1:
                return candidate
    raise SemanticError(f"The {content.name} content has no transport address")


def media_from_content(
    content: Content, configuration: ConverterConfiguration
) -> MediaDescription:
    rtp = content.description
    if rtp is None:
        raise SemanticError(f"The {content.name} content has no description")
    if not rtp.payload_types:
        raise SemanticError(f"The {content.name} content has no media format")

    address = transport_address(content)
    description = MediaDescription(
        Media(
            media=rtp.media,
            port=address.port,
            protocol=rtp.profile or configuration.default_profile,
            formats=[str(pt.id) for pt in rtp.payload_types],
        ),
        connection=Connection(address=address.ip),
    )

    ice_transports = content.ice_transports
    for transport in ice_transports:
        if transport.ufrag is not None:
            description.add_attribute(Attribute("ice-ufrag", transport.ufrag))
            if transport.pwd is not None:
                description.add_attribute(Attribute("ice-pwd", transport.pwd))
            break
    for transport in ice_transports:
        for candidate in transport.candidates:
            description.add_attribute(Attribute("candidate", candidate_to_sdp(candidate)))

    description.add_attribute(Attribute("sendrecv"))
    description.add_attribute(Attribute("mid", content.name))
    if rtp.rtcp_mux:
        description.add_attribute(Attribute("rtcp-mux"))

    if rtp.encryption is not None:
        for crypto in rtp.encryption.cryptos:
            description.add_attribute(
                Attribute(
                    "crypto",
                    f"{crypto.tag} {crypto.crypto_suite} {crypto.key_params}",
                )
            )

    for pt in rtp.payload_types:
        if pt.name is None:
            continue
        value = f"{pt.id} {pt.name}"
        if pt.clockrate is not None:
            value += "/" + pt.clockrate
        description.add_attribute(Attribute("rtpmap", value))

    for stream in rtp.streams:
        for name, value in stream.attributes.items():
            description.add_attribute(Attribute("ssrc", f"{stream.ssrc} {name}:{value}"))

    return description


def sdp_from_jingle(
    iq: JingleIQ, configuration: Optional[ConverterConfiguration] = None
) -> SessionDescription:
    """
    Build a session description from a Jingle request.

    The Jingle session identifier must be numeric as it becomes the
    session id of the `o=` line.
    """
    if configuration is None:
        configuration = ConverterConfiguration()

    if not is_number(iq.sid):
        raise SemanticError(f"The session identifier {iq.sid} is not numeric")

    descriptions = [media_from_content(c, configuration) for c in iq.contents]

    session = SessionDescription(
        origin=Origin(
            username=configuration.origin_username,
            session_id=int(iq.sid),
            session_version=configuration.origin_session_version,
            address=configuration.origin_address,
        ),
        session_name=SessionName(configuration.session_name),
    )
    session.set_media_descriptions(descriptions)
    if descriptions:
        session.add_attribute(bundle_group(session))
    return session


def transport_info_from_sdp_stub(
    candidates: Iterable[str],
    sid: str,
    content_name: str,
    configuration: Optional[ConverterConfiguration] = None,
) -> JingleIQ:
    """
    Build a `transport-info` request carrying ICE candidates.

    :param candidates: The candidate lines, with or without their
                       `a=candidate:` prefix. Blank lines are ignored.
    :param sid: The Jingle session identifier.
    :param content_name: The name of the content the candidates belong to.
    """
    if configuration is None:
        configuration = ConverterConfiguration()

    transport = IceUdpTransport()
    for fragment in candidates:
        fragment = fragment.strip()
        if not fragment:
            continue
        for prefix in CANDIDATE_PREFIXES:
            if fragment.startswith(prefix):
                fragment = fragment[len(prefix) :]
                break
        transport.candidates.append(candidate_from_sdp(fragment))

    return JingleIQ(
        sid=sid,
        action=TRANSPORT_INFO,
        type=configuration.iq_type,
        contents=[Content(name=content_name, transports=[transport])],
    )


def jingle_stanza_from_sdp(
    sdp: str, configuration: Optional[ConverterConfiguration] = None
) -> str:
    """
    Convert the text of a session description to a Jingle `<iq/>` stanza.
    """
    return jingle_from_sdp(SessionDescription.parse(sdp), configuration).to_xml()


def sdp_from_jingle_stanza(
    stanza: str, configuration: Optional[ConverterConfiguration] = None
) -> str:
    """
    Convert a Jingle `<iq/>` stanza to the text of a session description.
    """
    return str(sdp_from_jingle(JingleIQ.from_xml(stanza), configuration))
