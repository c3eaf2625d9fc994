import struct

from pte_api.services.media.wav import WavOptions, convert_to_wav, create_wav_header, parse_mime_type


def test_parse_mime_type_reads_rate_and_width():
    assert parse_mime_type("audio/L16;rate=24000") == WavOptions(1, 24000, 16)
    assert parse_mime_type("audio/L24; rate=48000; channels=2") == WavOptions(2, 48000, 24)


def test_parse_mime_type_defaults():
    assert parse_mime_type("audio/pcm") == WavOptions()
    assert parse_mime_type("") == WavOptions()


def test_header_layout():
    header = create_wav_header(1000, WavOptions(1, 24000, 16))
    assert len(header) == 44
    assert header[:4] == b"RIFF"
    assert header[8:16] == b"WAVEfmt "
    riff_size, = struct.unpack("<I", header[4:8])
    sample_rate, byte_rate = struct.unpack("<II", header[24:32])
    data_size, = struct.unpack("<I", header[40:44])
    assert riff_size == 1036
    assert sample_rate == 24000
    assert byte_rate == 48000
    assert data_size == 1000


def test_convert_to_wav_prepends_header():
    pcm = b"\x00\x01" * 10
    wav = convert_to_wav(pcm, "audio/L16;rate=24000")
    assert wav.endswith(pcm)
    assert len(wav) == 44 + len(pcm)
