import logging

from aioice import Candidate as IceCandidate

from .exceptions import SemanticError
from .jingle import Candidate, CandidateType

logger = logging.getLogger(__name__)

# tokens before the optional extensions: foundation component protocol
# priority ip port "typ" type
CANDIDATE_MIN_TOKENS = 8


def candidate_from_aioice(x: IceCandidate) -> Candidate:
    return Candidate(
        component=x.component,
        foundation=x.foundation,
        generation=x.generation if x.generation is not None else 0,
        ip=x.host,
        port=x.port,
        priority=x.priority,
        protocol=x.transport,
        rel_addr=x.related_address,
        rel_port=x.related_port,
        type=CandidateType(x.type),
    )


def candidate_to_aioice(x: Candidate) -> IceCandidate:
    if x.foundation is None or x.priority is None or x.protocol is None or x.type is None:
        raise SemanticError(
            "ICE candidate %s:%d lacks foundation, priority, protocol or type"
            % (x.ip, x.port)
        )

    candidate_type = x.type.canonical
    related_address, related_port = None, None
    if candidate_type.has_related_address:
        if x.rel_addr is None or x.rel_port is None:
            raise SemanticError(
                "A %s candidate needs a related address and port" % candidate_type.value
            )
        related_address, related_port = x.rel_addr, x.rel_port

    return IceCandidate(
        component=x.component,
        foundation=x.foundation,
        generation=x.generation,
        host=x.ip,
        port=x.port,
        priority=x.priority,
        related_address=related_address,
        related_port=related_port,
        transport=x.protocol,
        type=candidate_type.value,
    )


def candidate_from_sdp(sdp: str) -> Candidate:
    """
    Parse the value of a `candidate` attribute.

    The layout depends on the candidate type: host candidates are followed
    by `generation N`, other types by `raddr R rport P generation N`.
    """
    bits = sdp.split()
    if len(bits) < CANDIDATE_MIN_TOKENS or bits[6] != "typ":
        raise SemanticError(f"Malformed ICE candidate: {sdp}")

    try:
        candidate_type = CandidateType(bits[7])
    except ValueError as exc:
        raise SemanticError(f"Unknown ICE candidate type: {bits[7]}") from exc

    extensions = bits[CANDIDATE_MIN_TOKENS:]
    if candidate_type.has_related_address:
        if len(extensions) < 4 or extensions[0] != "raddr" or extensions[2] != "rport":
            raise SemanticError(
                f"A {candidate_type.value} candidate needs raddr and rport: {sdp}"
            )
        extensions = extensions[4:]
    if len(extensions) % 2:
        raise SemanticError(f"Malformed ICE candidate extensions: {sdp}")

    for i in range(0, len(extensions), 2):
        if extensions[i] not in ["generation", "tcptype"]:
            logger.debug("Ignoring ICE candidate extension %s", extensions[i])

    try:
        candidate = IceCandidate.from_sdp(sdp)
    except ValueError as exc:
        raise SemanticError(f"Malformed ICE candidate: {sdp}") from exc

    if not candidate_type.has_related_address:
        # raddr / rport are not part of the host layout
        candidate.related_address = None
        candidate.related_port = None
    return candidate_from_aioice(candidate)


def candidate_to_sdp(candidate: Candidate) -> str:
    return candidate_to_aioice(candidate).to_sdp()
