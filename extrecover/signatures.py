"""
File Signature Table — content-based extension detection.

DESIGN RATIONALE
────────────────
Each supported format is one SignatureRule: an extension plus a predicate
over the leading bytes of a file.  Rules live in a single ordered tuple and
classify() walks it once, returning the first hit.  Adding, dropping or
reordering a format is an edit to SIGNATURE_RULES, nothing else.

Coverage:
  • Fixed-header formats  (JPEG, PNG, PDF, GIF, EXE, ZIP, RAR, ICO, BMP,
                           TIFF, ELF, CLASS, PSD, ISO, MIDI, 7z, MKV, XML,
                           RTF, TAR)
  • MPEG audio            (ID3v2 tag or a bare Layer III frame sync)
  • RIFF-based formats    (WAV, WebP, AVI) — "RIFF" + sub-type at offset 8

Every predicate checks the buffer length before looking at any byte, so a
short buffer is simply "no match".  Nothing here reads files or keeps state:
the table is built once at import and classify() is safe to call from any
number of threads.

Exported:
  • SignatureRule      — one (extension, predicate) entry
  • SIGNATURE_RULES    — the rules in priority order
  • UNKNOWN            — classify() result when nothing matches
  • HEADER_SIZE        — leading bytes needed for a complete classification
  • classify / classify_rule / get_rule and category helpers
"""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence

# Result for content no rule recognises.  Callers must append no extension.
UNKNOWN = None


@dataclass(frozen=True)
class SignatureRule:
    """One detectable file type."""
    extension: str              # lowercase, no leading dot
    description: str
    category: str               # "Image", "Audio", "Video", ...
    min_length: int             # bytes the predicate needs to decide
    matcher: Callable[[bytes], bool]
    aliases: tuple[str, ...] = ()   # other common spellings of the extension

    @property
    def all_extensions(self) -> tuple[str, ...]:
        return (self.extension,) + self.aliases

    def matches(self, data: bytes) -> bool:
        return self.matcher(data)


# ══════════════════════════════════════════════════════════════
#  P R E D I C A T E   B U I L D E R S
# ══════════════════════════════════════════════════════════════

def _prefix(*magics: bytes) -> Callable[[bytes], bool]:
    """Match if the buffer starts with any of `magics`."""
    def match(data: bytes) -> bool:
        for magic in magics:
            n = len(magic)
            if len(data) >= n and bytes(data[:n]) == magic:
                return True
        return False
    return match


def _riff(sub_type: bytes) -> Callable[[bytes], bool]:
    """RIFF container with the given 4-byte sub-type at offset 8."""
    def match(data: bytes) -> bool:
        return (len(data) >= 12
                and bytes(data[:4]) == b"RIFF"
                and bytes(data[8:12]) == sub_type)
    return match


def _is_gif(data: bytes) -> bool:
    # GIF87a / GIF89a
    return (len(data) >= 6
            and bytes(data[:4]) == b"GIF8"
            and data[4] in (0x39, 0x37)
            and data[5] == 0x61)


# ID3v2 tag, or MPEG-1/2 Layer III frame sync (with and without CRC)
_is_mp3 = _prefix(b"ID3", b"\xFF\xFB", b"\xFF\xF3", b"\xFF\xF2")


# ══════════════════════════════════════════════════════════════
#  S I G N A T U R E   R U L E S
# ══════════════════════════════════════════════════════════════

SIG_JPEG = SignatureRule(
    extension="jpg", description="JPEG Image", category="Image",
    min_length=2, matcher=_prefix(b"\xFF\xD8"),
    aliases=("jpeg", "jpe", "jfif"),
)

SIG_PNG = SignatureRule(
    extension="png", description="PNG Image", category="Image",
    min_length=8, matcher=_prefix(b"\x89PNG\r\n\x1A\n"),
)

SIG_PDF = SignatureRule(
    extension="pdf", description="PDF Document", category="Document",
    min_length=4, matcher=_prefix(b"%PDF"),
)

SIG_GIF = SignatureRule(
    extension="gif", description="GIF Image", category="Image",
    min_length=6, matcher=_is_gif,
)

# ── MP3 ──  (the bare frame-sync forms decide on 2 bytes, ID3 needs 3)
SIG_MP3 = SignatureRule(
    extension="mp3", description="MP3 Audio", category="Audio",
    min_length=2, matcher=_is_mp3,
)

SIG_EXE = SignatureRule(
    extension="exe", description="Windows Executable (MZ)", category="Executable",
    min_length=2, matcher=_prefix(b"MZ"),
)

SIG_ZIP = SignatureRule(
    extension="zip", description="ZIP Archive", category="Archive",
    min_length=4, matcher=_prefix(b"PK\x03\x04"),
)

# ── RAR ──  (RAR5 marker only)
SIG_RAR = SignatureRule(
    extension="rar", description="RAR Archive", category="Archive",
    min_length=8, matcher=_prefix(b"Rar!\x1A\x07\x01\x00"),
)

SIG_WAV = SignatureRule(
    extension="wav", description="WAV Audio", category="Audio",
    min_length=12, matcher=_riff(b"WAVE"),
)

SIG_ICO = SignatureRule(
    extension="ico", description="Windows Icon", category="Image",
    min_length=4, matcher=_prefix(b"\x00\x00\x01\x00"),
)

SIG_BMP = SignatureRule(
    extension="bmp", description="BMP Image", category="Image",
    min_length=2, matcher=_prefix(b"BM"),
)

# ── TIFF ──  (big-endian "MM", little-endian "II")
SIG_TIFF = SignatureRule(
    extension="tif", description="TIFF Image", category="Image",
    min_length=4, matcher=_prefix(b"MM\x00\x2A", b"II\x2A\x00"),
    aliases=("tiff",),
)

SIG_ELF = SignatureRule(
    extension="elf", description="ELF Binary", category="Executable",
    min_length=4, matcher=_prefix(b"\x7FELF"),
)

SIG_CLASS = SignatureRule(
    extension="class", description="Java Class File", category="Executable",
    min_length=4, matcher=_prefix(b"\xCA\xFE\xBA\xBE"),
)

SIG_PSD = SignatureRule(
    extension="psd", description="Adobe Photoshop Document", category="Image",
    min_length=4, matcher=_prefix(b"8BPS"),
)

# ── ISO 9660 ──  (volume descriptor id at the very start of the buffer)
SIG_ISO = SignatureRule(
    extension="iso", description="ISO 9660 Disc Image", category="Archive",
    min_length=5, matcher=_prefix(b"CD001"),
)

SIG_MIDI = SignatureRule(
    extension="midi", description="MIDI Sequence", category="Audio",
    min_length=4, matcher=_prefix(b"MThd"),
    aliases=("mid",),
)

SIG_7Z = SignatureRule(
    extension="7z", description="7-Zip Archive", category="Archive",
    min_length=6, matcher=_prefix(b"7z\xBC\xAF\x27\x1C"),
)

# ── MKV ──  (EBML header; WebM shares it and lands here too)
SIG_MKV = SignatureRule(
    extension="mkv", description="MKV Video (Matroska)", category="Video",
    min_length=4, matcher=_prefix(b"\x1A\x45\xDF\xA3"),
)

SIG_XML = SignatureRule(
    extension="xml", description="XML Document", category="Document",
    min_length=6, matcher=_prefix(b"<?xml "),
)

SIG_WEBP = SignatureRule(
    extension="webp", description="WebP Image", category="Image",
    min_length=12, matcher=_riff(b"WEBP"),
)

SIG_RTF = SignatureRule(
    extension="rtf", description="Rich Text Format", category="Document",
    min_length=6, matcher=_prefix(b"{\\rtf1"),
)

# ── TAR ──  (POSIX "ustar\x0000" and GNU "ustar  \x00" magic)
SIG_TAR = SignatureRule(
    extension="tar", description="TAR Archive", category="Archive",
    min_length=8, matcher=_prefix(b"ustar\x0000", b"ustar  \x00"),
)

SIG_AVI = SignatureRule(
    extension="avi", description="AVI Video", category="Video",
    min_length=12, matcher=_riff(b"AVI "),
)


# ═════════════════════════════════════════════════════════════
#  SIGNATURE_RULES — priority order
# ═════════════════════════════════════════════════════════════
# classify() returns the first hit, so this order is the contract.

SIGNATURE_RULES: tuple[SignatureRule, ...] = (
    SIG_JPEG,
    SIG_PNG,
    SIG_PDF,
    SIG_GIF,
    SIG_MP3,
    SIG_EXE,
    SIG_ZIP,
    SIG_RAR,
    SIG_WAV,
    SIG_ICO,
    SIG_BMP,
    SIG_TIFF,
    SIG_ELF,
    SIG_CLASS,
    SIG_PSD,
    SIG_ISO,
    SIG_MIDI,
    SIG_7Z,
    SIG_MKV,
    SIG_XML,
    SIG_WEBP,
    SIG_RTF,
    SIG_TAR,
    SIG_AVI,
)

HEADER_SIZE = max(rule.min_length for rule in SIGNATURE_RULES)


# ═════════════════════════════════════════════════════════════
#  Classification
# ═════════════════════════════════════════════════════════════

def classify_rule(data: bytes,
                  rules: Sequence[SignatureRule] = SIGNATURE_RULES
                  ) -> Optional[SignatureRule]:
    """Return the first rule matching `data`, or None."""
    for rule in rules:
        if rule.matches(data):
            return rule
    return None


def classify(data: bytes,
             rules: Sequence[SignatureRule] = SIGNATURE_RULES) -> Optional[str]:
    """Map leading file bytes to an extension (no dot), or UNKNOWN.

    Only the first HEADER_SIZE bytes are ever inspected, so callers may pass
    either a whole file or just its header.  Never raises for any bytes-like
    input, including an empty one.
    """
    rule = classify_rule(data, rules)
    if rule is None:
        return UNKNOWN
    return rule.extension


# ═════════════════════════════════════════════════════════════
#  Convenience helpers
# ═════════════════════════════════════════════════════════════

_RULES_BY_EXTENSION: dict[str, SignatureRule] = {
    ext: rule for rule in SIGNATURE_RULES for ext in rule.all_extensions
}


def get_rule(extension: str) -> Optional[SignatureRule]:
    return _RULES_BY_EXTENSION.get(extension.lower().lstrip("."))


def get_all_extensions() -> list[str]:
    """Extensions in priority order."""
    return [rule.extension for rule in SIGNATURE_RULES]


def get_all_categories() -> list[str]:
    """Return sorted unique categories."""
    return sorted(set(rule.category for rule in SIGNATURE_RULES))


def get_extensions_for_category(category: str) -> list[str]:
    return sorted(rule.extension for rule in SIGNATURE_RULES
                  if rule.category == category)
