from dataclasses import dataclass


@dataclass
class ConverterConfiguration:
    """
    The :class:`ConverterConfiguration` dictionary provides the values
    which have no equivalent on the other side of a conversion.
    """

    origin_username: str = "-"
    "The username of the `o=` line when building a session description."
    origin_address: str = "127.0.0.1"
    "The unicast address of the `o=` line."
    origin_session_version: int = 1
    "The session version of the `o=` line."
    session_name: str = "-"
    "The value of the `s=` line."

    default_profile: str = "RTP/AVPF"
    "The transport protocol of `m=` lines whose description has no profile."

    iq_type: str = "set"
    "The type of the produced `<iq/>` stanzas."
    action: str = "session-initiate"
    """
    The Jingle action of stanzas built from a session description. Stanzas
    built from candidate fragments always use `transport-info`.
    """
