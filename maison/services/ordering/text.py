"""Text normalization helpers for transcripts."""
import unicodedata

# Arabic-Indic (U+0660..) and Eastern Arabic / Persian (U+06F0..) digits
_DIGIT_TABLE = {
    **{0x0660 + i: str(i) for i in range(10)},
    **{0x06F0 + i: str(i) for i in range(10)},
}


def ascii_digits(text: str) -> str:
    """Map Arabic-script digits to ASCII digits."""
    return text.translate(_DIGIT_TABLE)


def strip_accents(text: str) -> str:
    """Remove combining accents: 'février' -> 'fevrier'."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def fold(text: str) -> str:
    """Lower-case, accent-free, ASCII-digit form of a transcript."""
    return strip_accents(ascii_digits(text)).lower()
