"""
Tests for the signature table: every format, short buffers, RIFF sub-types,
determinism, thread safety and rule-order independence.
"""
import random
from concurrent.futures import ThreadPoolExecutor

from extrecover.signatures import (
    HEADER_SIZE, SIGNATURE_RULES, UNKNOWN,
    classify, classify_rule, get_rule, get_all_extensions,
    get_all_categories, get_extensions_for_category,
)

# Smallest buffer each format is recognised from.
MAGIC_SAMPLES = [
    ("jpg", b"\xFF\xD8"),
    ("png", b"\x89PNG\r\n\x1A\n"),
    ("pdf", b"%PDF"),
    ("gif", b"GIF89a"),
    ("gif", b"GIF87a"),
    ("mp3", b"ID3"),
    ("mp3", b"\xFF\xFB"),
    ("mp3", b"\xFF\xF3"),
    ("mp3", b"\xFF\xF2"),
    ("exe", b"MZ"),
    ("zip", b"PK\x03\x04"),
    ("rar", b"Rar!\x1A\x07\x01\x00"),
    ("wav", b"RIFF\x24\x08\x00\x00WAVE"),
    ("ico", b"\x00\x00\x01\x00"),
    ("bmp", b"BM"),
    ("tif", b"MM\x00\x2A"),
    ("tif", b"II\x2A\x00"),
    ("elf", b"\x7FELF"),
    ("class", b"\xCA\xFE\xBA\xBE"),
    ("psd", b"8BPS"),
    ("iso", b"CD001"),
    ("midi", b"MThd"),
    ("7z", b"7z\xBC\xAF\x27\x1C"),
    ("mkv", b"\x1A\x45\xDF\xA3"),
    ("xml", b"<?xml "),
    ("webp", b"RIFF\x00\x10\x00\x00WEBP"),
    ("rtf", b"{\\rtf1"),
    ("tar", b"ustar\x0000"),
    ("tar", b"ustar  \x00"),
    ("avi", b"RIFF\x00\x00\x00\x00AVI "),
]


def _padded(magic: bytes, size: int = 64) -> bytes:
    return magic + bytes(range(size - len(magic)))


def test_rule_table_order():
    assert get_all_extensions() == [
        "jpg", "png", "pdf", "gif", "mp3", "exe", "zip", "rar", "wav",
        "ico", "bmp", "tif", "elf", "class", "psd", "iso", "midi", "7z",
        "mkv", "xml", "webp", "rtf", "tar", "avi",
    ]
    assert HEADER_SIZE == 12
    for rule in SIGNATURE_RULES:
        assert rule.extension == rule.extension.lower()
        assert not rule.extension.startswith(".")


def test_each_format_detected():
    for ext, magic in MAGIC_SAMPLES:
        assert classify(magic) == ext, f"{magic!r} → {classify(magic)!r}, expected {ext}"
        assert classify(_padded(magic)) == ext


def test_common_headers():
    assert classify(b"\xFF\xD8\xFF\xE0\x00\x10JFIF\x00") == "jpg"
    assert classify(b"\x89PNG\r\n\x1A\n\x00\x00\x00\rIHDR") == "png"
    assert classify(b"%PDF-1.7\n%\xE2\xE3\xCF\xD3") == "pdf"
    assert classify(b'<?xml version="1.0"?>') == "xml"
    assert classify(b"{\\rtf1\\ansi\\deff0") == "rtf"


def test_riff_subtypes():
    assert classify(bytes.fromhex("524946460000000057415645")) == "wav"
    assert classify(bytes.fromhex("524946460000000057454250")) == "webp"
    assert classify(bytes.fromhex("524946460000000041564920")) == "avi"
    # Unlisted RIFF sub-type
    assert classify(b"RIFF\x00\x00\x00\x00RMID") is UNKNOWN
    # RIFF prefix alone is not enough
    assert classify(b"RIFF\x00\x00\x00\x00") is UNKNOWN


def test_empty_and_tiny_buffers():
    assert classify(b"") is UNKNOWN
    for b in range(256):
        assert classify(bytes([b])) is UNKNOWN


def test_truncated_magic_is_unknown():
    for ext, magic in MAGIC_SAMPLES:
        for n in range(len(magic)):
            assert classify(magic[:n]) is UNKNOWN, f"{ext}: {magic[:n]!r}"


def test_negative_controls():
    assert classify(b"\x00" * 16) is UNKNOWN
    assert classify(b"hello, world\n") is UNKNOWN
    assert classify(b"GIF88a") is UNKNOWN          # bad version byte
    assert classify(b"GIF89b") is UNKNOWN
    assert classify(b"\xFF\xFA\x90\x00") is UNKNOWN  # not one of the listed syncs
    assert classify(b"Rar!\x1A\x07\x00") is UNKNOWN  # RAR4 marker
    assert classify(b"<?xml") is UNKNOWN
    assert classify(b"<?xmlx") is UNKNOWN
    assert classify(b"ustar\x00  ") is UNKNOWN


def test_gif_version_byte():
    assert classify(b"GIF8" + bytes([0x39, 0x61])) == "gif"
    assert classify(b"GIF8" + bytes([0x37, 0x61])) == "gif"
    assert classify(b"GIF8" + bytes([0x38, 0x61])) is UNKNOWN


def test_bytes_like_inputs():
    png = b"\x89PNG\r\n\x1A\n"
    assert classify(bytearray(png)) == "png"
    assert classify(memoryview(png)) == "png"
    assert classify(memoryview(b"GIF87a")) == "gif"
    assert classify(bytearray(bytes.fromhex("524946460000000041564920"))) == "avi"


def test_classify_rule():
    rule = classify_rule(b"7z\xBC\xAF\x27\x1C\x00\x04")
    assert rule is not None
    assert rule.extension == "7z"
    assert rule.category == "Archive"
    assert classify_rule(b"") is None


def test_lookup_helpers():
    assert get_rule("png").description == "PNG Image"
    assert get_rule(".PNG").extension == "png"
    assert get_rule("docx") is None
    assert get_rule("jpeg") is get_rule("jpg")
    assert get_rule(".TIFF").extension == "tif"
    assert get_rule("mid").extension == "midi"
    assert "jpeg" not in get_all_extensions()
    cats = get_all_categories()
    assert cats == sorted(cats)
    assert {"Image", "Audio", "Video", "Document", "Archive", "Executable"} == set(cats)
    assert get_extensions_for_category("Video") == ["avi", "mkv"]
    assert "wav" in get_extensions_for_category("Audio")


def test_determinism():
    rng = random.Random(1234)
    buffers = [bytes(rng.randrange(256) for _ in range(rng.randrange(0, 40)))
               for _ in range(500)]
    buffers += [_padded(m) for _, m in MAGIC_SAMPLES]
    first = [classify(b) for b in buffers]
    second = [classify(b) for b in buffers]
    assert first == second


def test_concurrent_classification():
    buffers = [_padded(m, 16 + i % 8) for i, (_, m) in enumerate(MAGIC_SAMPLES * 40)]
    expected = [classify(b) for b in buffers]
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(classify, buffers))
    assert results == expected


def test_rule_order_independence():
    """All magic prefixes in the table are disjoint, so order must not matter."""
    rng = random.Random(42)
    buffers = [_padded(m) for _, m in MAGIC_SAMPLES]
    buffers += [bytes(rng.randrange(256) for _ in range(16)) for _ in range(300)]
    expected = [classify(b) for b in buffers]

    orders = [tuple(reversed(SIGNATURE_RULES))]
    for _ in range(20):
        rules = list(SIGNATURE_RULES)
        rng.shuffle(rules)
        orders.append(tuple(rules))

    for rules in orders:
        assert [classify(b, rules) for b in buffers] == expected


def test_samples_match_only_their_rule():
    for ext, magic in MAGIC_SAMPLES:
        hits = [r.extension for r in SIGNATURE_RULES if r.matches(_padded(magic))]
        assert hits == [ext], f"{magic!r} matched {hits}"


def main():
    print("=" * 60)
    print("  Signature Table — Test Suite")
    print("=" * 60)
    print()

    tests = [
        test_rule_table_order,
        test_each_format_detected,
        test_common_headers,
        test_riff_subtypes,
        test_empty_and_tiny_buffers,
        test_truncated_magic_is_unknown,
        test_negative_controls,
        test_gif_version_byte,
        test_bytes_like_inputs,
        test_classify_rule,
        test_lookup_helpers,
        test_determinism,
        test_concurrent_classification,
        test_rule_order_independence,
        test_samples_match_only_their_rule,
    ]
    for t in tests:
        t()
        print(f"  ✅ {t.__name__}: PASS")

    print()
    print("=" * 60)
    print("  ALL TESTS PASSED ✅")
    print("=" * 60)


if __name__ == "__main__":
    main()
