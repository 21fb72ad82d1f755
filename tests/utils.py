# ruff: noqa: E501


def lf2crlf(x: str) -> str:
    return x.replace("\n", "\r\n")


# the crypto lines end with a space, as sent by some browsers
SAMPLE_SDP = (
    "v=0\r\n"
    "o=- 123 1 IN IP4 127.0.0.1\r\n"
    "s=session\r\n"
    "t=0 0\r\n"
    "a=group:BUNDLE audio video\r\n"
    "m=audio 36798 RTP/AVPF 103 104 110 107 9 102 108 0 8 106 105 13 127 126\r\n"
    "c=IN IP4 172.22.76.221\r\n"
    "a=rtcp:36798 IN IP4 172.22.76.221\r\n"
    "a=ice-ufrag:YuWMyUbmK/CX6awo\r\n"
    "a=ice-pwd:DpueNNn6/r6TTRFMqNWw0v/c\r\n"
    "a=candidate:1 2 udp 1 172.22.76.221 47216 typ host generation 0\r\n"
    "a=candidate:1 1 udp 1 172.22.76.221 48235 typ host generation 0\r\n"
    "a=candidate:1 2 udp 2 172.22.76.221 36798 typ srflx raddr 10.0.34.44 rport 48296 generation 0\r\n"
    "a=candidate:1 1 udp 2 172.22.76.221 50102 typ relay raddr 213.99.45.11 rport 4313 generation 0\r\n"
    "a=sendrecv\r\n"
    "a=mid:audio\r\n"
    "{rtcp_mux}"
    "a=crypto:0 AES_CM_128_HMAC_SHA1_32 inline:keNcG3HezSNID7LmfDa9J4lfdUL8W1F7TNJKcbuy \r\n"
    "a=rtpmap:111 opus/48000/2\r\n"
    "a=rtpmap:103 ISAC/16000\r\n"
    "a=rtpmap:104 ISAC/32000\r\n"
    "a=rtpmap:110 CELT/32000\r\n"
    "a=rtpmap:107 speex/16000\r\n"
    "a=rtpmap:9 G722/16000\r\n"
    "a=rtpmap:102 ILBC/8000\r\n"
    "a=rtpmap:108 speex/8000\r\n"
    "a=rtpmap:0 PCMU/8000\r\n"
    "a=rtpmap:8 PCMA/8000\r\n"
    "a=rtpmap:106 CN/32000\r\n"
    "a=rtpmap:105 CN/16000\r\n"
    "a=rtpmap:13 CN/8000\r\n"
    "a=rtpmap:127 red/8000\r\n"
    "a=rtpmap:126 telephone-event/8000\r\n"
    "a=ssrc:2570980487 cname:hsWuSQJxx7przmb8\r\n"
    "a=ssrc:2570980487 mslabel:stream_label\r\n"
    "a=ssrc:2570980487 label:audio_label\r\n"
    "m=video 39456 RTP/AVPF 100 101 102\r\n"
    "c=IN IP4 172.22.76.221\r\n"
    "a=rtcp:39456 IN IP4 172.22.76.221\r\n"
    "a=candidate:1 2 udp 1 172.22.76.221 40550 typ host generation 0\r\n"
    "a=candidate:1 1 udp 1 172.22.76.221 53441 typ host generation 0\r\n"
    "a=candidate:1 2 udp 2 172.22.76.221 46128 typ srflx raddr 10.0.34.43 rport 48295 generation 0\r\n"
    "a=candidate:1 1 udp 2 172.22.76.221 39456 typ relay raddr 213.99.45.10 rport 4312 generation 0\r\n"
    "a=sendrecv\r\n"
    "a=mid:video\r\n"
    "{rtcp_mux}"
    "a=crypto:0 AES_CM_128_HMAC_SHA1_80 inline:5ydJsA+FZVpAyqJMT/nW/UW+tcOmDvXJh/pPhNRe \r\n"
    "a=rtpmap:100 VP8/90000\r\n"
    "a=rtpmap:101 red/90000\r\n"
    "a=rtpmap:102 ulpfec/90000\r\n"
    "a=ssrc:43633328 cname:hsWuSQJxx7przmb8\r\n"
    "a=ssrc:43633328 mslabel:stream_label\r\n"
    "a=ssrc:43633328 label:video_label\r\n"
)

SAMPLE_CANDIDATES = (
    "a=candidate:1 2 udp 1 172.22.76.221 47216 typ host generation 0\r\n"
    "a=candidate:1 1 udp 1 172.22.76.221 48235 typ host generation 0\r\n"
    "a=candidate:1 2 udp 2 172.22.76.221 36798 typ srflx raddr 10.0.34.44 rport 48296 generation 0\r\n"
    "a=candidate:1 1 udp 2 172.22.76.221 50102 typ relay raddr 213.99.45.11 rport 4313 generation 0\r\n"
    "a=candidate:1 2 udp 1 172.22.76.221 40550 typ host generation 0\r\n"
    "a=candidate:1 1 udp 1 172.22.76.221 53441 typ host generation 0\r\n"
    "a=candidate:1 2 udp 2 172.22.76.221 46128 typ srflx raddr 10.0.34.43 rport 48295 generation 0\r\n"
    "a=candidate:1 1 udp 2 172.22.76.221 39456 typ relay raddr 213.99.45.10 rport 4312 generation 0\r\n"
)


def sample_sdp(rtcp_mux: bool = True) -> str:
    return SAMPLE_SDP.replace("{rtcp_mux}", "a=rtcp-mux\r\n" if rtcp_mux else "")
