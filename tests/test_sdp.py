# ruff: noqa: E501

from unittest import TestCase

from sdpjingle.exceptions import InvalidValueError, SDPParseError, SemanticError
from sdpjingle.fields import (
    Attribute,
    Bandwidth,
    Connection,
    Email,
    Information,
    Media,
    Origin,
    RepeatTime,
    SessionName,
    Time,
    Uri,
)
from sdpjingle.sdp import MediaDescription, SessionDescription, TimeDescription
from sdpjingle.utils import EmailAddress

from .utils import lf2crlf, sample_sdp

SEMINAR_SDP = lf2crlf(
    """v=0
o=jdoe 2890844526 2890842807 IN IP4 10.47.16.5
s=SDP Seminar
i=A Seminar on the session description protocol
u=http://www.example.com/seminars/sdp.pdf
e=Jane Doe <j.doe@example.com>
c=IN IP4 224.2.17.12/127
t=2873397496 2873404696
a=recvonly
m=audio 49170 RTP/AVP 0
m=video 51372 RTP/AVP 99
a=rtpmap:99 h263-1998/90000
"""
)


def seminar_session() -> SessionDescription:
    session = SessionDescription(
        origin=Origin(
            username="jdoe",
            session_id=2890844526,
            session_version=2890842807,
            address="10.47.16.5",
        ),
        session_name=SessionName("SDP Seminar"),
    )
    session.information = Information("A Seminar on the session description protocol")
    session.uri = Uri("http://www.example.com/seminars/sdp.pdf")
    session.add_email(Email(EmailAddress("j.doe@example.com", "Jane Doe")))
    session.connection = Connection("224.2.17.12", ttl=127)
    session.set_time_descriptions([TimeDescription(Time(2873397496, 2873404696))])
    session.add_attribute(Attribute("recvonly"))

    session.add_media_description(
        MediaDescription(Media("audio", 49170, "RTP/AVP", ["0"]))
    )
    video = MediaDescription(Media("video", 51372, "RTP/AVP", ["99"]))
    video.add_attribute(Attribute("rtpmap", "99 h263-1998/90000"))
    session.add_media_description(video)
    return session


def media_with_connection(media: str = "audio") -> MediaDescription:
    return MediaDescription(
        Media(media, 9, "RTP/AVP", ["0"]), connection=Connection("10.0.0.1")
    )


class SessionDescriptionTest(TestCase):
    maxDiff = None

    def test_serialize(self):
        self.assertEqual(str(seminar_session()), SEMINAR_SDP)

    def test_parse(self):
        session = SessionDescription.parse(SEMINAR_SDP)
        self.assertEqual(session, seminar_session())
        self.assertEqual(session.emails[0].personal, "Jane Doe")
        self.assertEqual(session.connection.ttl, 127)
        self.assertIsNone(session.media_descriptions[0].connection)

    def test_parse_sample(self):
        session = SessionDescription.parse(sample_sdp())
        self.assertEqual(session.version.version, 0)
        self.assertEqual(session.origin.session_id, 123)
        self.assertEqual(session.session_name.value, "session")
        self.assertTrue(session.time_descriptions[0].time.is_zero())
        self.assertEqual(session.get_attribute("group").value, "BUNDLE audio video")
        self.assertFalse(session.has_connection())

        audio, video = session.media_descriptions
        self.assertEqual(audio.media.formats[0], "103")
        self.assertEqual(audio.connection.address, "172.22.76.221")
        self.assertEqual(audio.get_attributes_count("candidate"), 4)
        self.assertEqual(audio.get_attributes_count("rtpmap"), 15)
        self.assertEqual(audio.get_attributes_count("ssrc"), 3)
        self.assertEqual(
            audio.get_attribute("crypto").value,
            "0 AES_CM_128_HMAC_SHA1_32 inline:keNcG3HezSNID7LmfDa9J4lfdUL8W1F7TNJKcbuy ",
        )
        self.assertEqual(video.media.formats, ["100", "101", "102"])
        self.assertEqual(video.get_attribute("mid").value, "video")

    def test_round_trip(self):
        for sdp in [SEMINAR_SDP, sample_sdp(), sample_sdp(rtcp_mux=False)]:
            session = SessionDescription.parse(sdp)
            self.assertEqual(SessionDescription.parse(str(session)), session)

    def test_round_trip_all_fields(self):
        sdp = lf2crlf(
            """v=0
o=jdoe 2890844526 2890842807 IN IP4 10.47.16.5
s=SDP Seminar
i=A Seminar on the session description protocol
u=http://www.example.com/seminars/sdp.pdf
e=j.doe@example.com (Jane Doe)
e=john@example.com
p=+1 617 555-6011
c=IN IP4 224.2.17.12/127
b=CT:1024
t=3034423619 3042462419
r=7d 1h 0 25h
t=0 0
z=2882844526 -1h 2898848070 0
k=prompt
a=recvonly
m=audio 49170 RTP/AVP 0
i=Audio
b=AS:64
k=clear:secret
a=rtpmap:0 PCMU/8000
"""
        )
        session = SessionDescription.parse(sdp)
        self.assertEqual(len(session.emails), 2)
        self.assertEqual(session.phones[0].phone, "+1 617 555-6011")
        self.assertEqual(session.get_bandwidth("CT").value, 1024)
        self.assertEqual(len(session.time_descriptions), 2)
        self.assertEqual(
            session.time_descriptions[0].repeat_times,
            [RepeatTime(604800, 3600, [0, 90000])],
        )
        self.assertEqual(session.time_zone.adjustments[0].offset, -3600)
        self.assertEqual(session.key.method, "prompt")

        audio = session.media_descriptions[0]
        self.assertEqual(audio.information.value, "Audio")
        self.assertEqual(audio.get_bandwidth("AS").value, 64)
        self.assertEqual(audio.key.key, "secret")

        self.assertEqual(
            str(session), sdp.replace("j.doe@example.com (Jane Doe)", "Jane Doe <j.doe@example.com>")
        )
        self.assertEqual(SessionDescription.parse(str(session)), session)

    def test_parse_missing_field(self):
        for sdp, message in [
            ("v=0\no=- 1 1 IN IP4 127.0.0.1\nt=0 0\n", "Missing session name field"),
            ("v=0\no=- 1 1 IN IP4 127.0.0.1\ns=-\n", "Missing time field"),
            ("o=- 1 1 IN IP4 127.0.0.1\ns=-\nt=0 0\n", "Missing version field"),
        ]:
            with self.assertRaises(SDPParseError) as cm:
                SessionDescription.parse(lf2crlf(sdp))
            self.assertEqual(str(cm.exception), message)

    def test_parse_out_of_order(self):
        with self.assertRaises(SDPParseError) as cm:
            SessionDescription.parse(
                lf2crlf("v=0\ns=-\no=- 1 1 IN IP4 127.0.0.1\nt=0 0\n")
            )
        self.assertEqual(cm.exception.line, "o=- 1 1 IN IP4 127.0.0.1")

    def test_parse_duplicate(self):
        with self.assertRaises(SDPParseError):
            SessionDescription.parse(
                lf2crlf("v=0\no=- 1 1 IN IP4 127.0.0.1\ns=-\ns=-\nt=0 0\n")
            )

    def test_parse_repeat_without_time(self):
        with self.assertRaises(SDPParseError):
            SessionDescription.parse(
                lf2crlf("v=0\no=- 1 1 IN IP4 127.0.0.1\ns=-\nr=7d 1h 0\nt=0 0\n")
            )

    def test_parse_media_out_of_order(self):
        with self.assertRaises(SDPParseError):
            SessionDescription.parse(
                lf2crlf(
                    "v=0\no=- 1 1 IN IP4 127.0.0.1\ns=-\nt=0 0\n"
                    "m=audio 9 RTP/AVP 0\na=sendrecv\nc=IN IP4 10.0.0.1\n"
                )
            )

    def test_parse_invalid_line(self):
        with self.assertRaises(SDPParseError) as cm:
            SessionDescription.parse(
                lf2crlf("v=0\no=- 1 1 IN IP4 127.0.0.1\ns=-\nt=0 0\nx=unknown\n")
            )
        self.assertEqual(cm.exception.line, "x=unknown")

    def test_parse_media_without_connection(self):
        with self.assertRaises(SemanticError):
            SessionDescription.parse(
                lf2crlf("v=0\no=- 1 1 IN IP4 127.0.0.1\ns=-\nt=0 0\nm=audio 9 RTP/AVP 0\n")
            )

    def test_connection_inherited(self):
        session = SessionDescription.parse(
            lf2crlf(
                "v=0\no=- 1 1 IN IP4 127.0.0.1\ns=-\nc=IN IP4 10.0.0.1\nt=0 0\n"
                "m=audio 9 RTP/AVP 0\n"
            )
        )
        audio = session.media_descriptions[0]
        self.assertFalse(audio.has_connection())
        self.assertEqual(session.get_connection_for(audio).address, "10.0.0.1")

    def test_remove_session_connection(self):
        session = seminar_session()
        with self.assertRaises(SemanticError):
            session.connection = None
        self.assertEqual(session.connection.address, "224.2.17.12")

        session.set_media_descriptions([media_with_connection()])
        session.connection = None
        self.assertFalse(session.has_connection())

    def test_add_media_without_connection(self):
        session = SessionDescription(Origin("-", 1, 1, "127.0.0.1"))
        with self.assertRaises(SemanticError):
            session.add_media_description(
                MediaDescription(Media("audio", 9, "RTP/AVP", ["0"]))
            )
        self.assertEqual(session.media_descriptions, [])

    def test_set_media_descriptions_rollback(self):
        session = SessionDescription(Origin("-", 1, 1, "127.0.0.1"))
        original = media_with_connection()
        session.add_media_description(original)

        with self.assertRaises(SemanticError):
            session.set_media_descriptions(
                [
                    media_with_connection("video"),
                    MediaDescription(Media("audio", 9, "RTP/AVP", ["0"])),
                ]
            )
        self.assertEqual(session.media_descriptions, [original])

    def test_set_emails_rollback(self):
        session = seminar_session()
        emails = session.emails
        with self.assertRaises(InvalidValueError):
            session.set_emails([Email(EmailAddress("john@example.com")), "nobody"])
        self.assertEqual(session.emails, emails)

        with self.assertRaises(InvalidValueError):
            session.set_emails(None)
        self.assertEqual(session.emails, emails)

    def test_set_time_descriptions(self):
        session = seminar_session()
        with self.assertRaises(InvalidValueError):
            session.set_time_descriptions([])
        self.assertEqual(len(session.time_descriptions), 1)

        with self.assertRaises(InvalidValueError):
            session.set_time_descriptions([TimeDescription(), Time()])
        self.assertEqual(session.time_descriptions[0].time.start, 2873397496)

    def test_set_attributes_rollback(self):
        session = seminar_session()
        with self.assertRaises(InvalidValueError):
            session.set_attributes([Attribute("sendonly"), "a=inactive"])
        self.assertEqual(session.get_attributes(), [Attribute("recvonly")])

    def test_bandwidths_keyed_by_modifier(self):
        session = seminar_session()
        session.add_bandwidth(Bandwidth("AS", 128))
        session.add_bandwidth(Bandwidth("CT", 512))
        session.add_bandwidth(Bandwidth("AS", 256))
        self.assertEqual(session.get_bandwidths(), [Bandwidth("AS", 256), Bandwidth("CT", 512)])
        self.assertEqual(session.remove_bandwidth("AS"), Bandwidth("AS", 256))
        self.assertIsNone(session.get_bandwidth("AS"))

        with self.assertRaises(InvalidValueError):
            session.set_bandwidths([Bandwidth("AS", 1), None])
        self.assertEqual(session.get_bandwidths(), [Bandwidth("CT", 512)])

    def test_attribute_pass_throughs(self):
        session = SessionDescription.parse(sample_sdp())
        audio = session.media_descriptions[0]
        self.assertTrue(audio.has_attribute("rtcp-mux"))
        self.assertEqual(len(audio.get_attributes("candidate")), 4)

        removed = audio.remove_attribute("candidate")
        self.assertEqual(removed.value, "1 2 udp 1 172.22.76.221 47216 typ host generation 0")
        self.assertEqual(audio.get_attributes_count("candidate"), 3)
        self.assertEqual(len(audio.remove_attributes("candidate")), 3)
        self.assertFalse(audio.has_attribute("candidate"))

        audio.clear_attributes()
        self.assertEqual(audio.get_attributes(), [])
        self.assertEqual(str(audio), "m=audio 36798 RTP/AVPF 103 104 110 107 9 102 108 0 8 106 105 13 127 126\r\nc=IN IP4 172.22.76.221\r\n")

    def test_media_setter(self):
        description = media_with_connection()
        with self.assertRaises(InvalidValueError):
            description.media = "m=audio 9 RTP/AVP 0"
        self.assertEqual(description.media.media, "audio")

    def test_clone(self):
        session = SessionDescription.parse(sample_sdp())
        clone = session.clone()
        self.assertEqual(clone, session)

        clone.media_descriptions[0].add_attribute(Attribute("inactive"))
        self.assertNotEqual(clone, session)
        self.assertFalse(session.media_descriptions[0].has_attribute("inactive"))
