"""Split raw OCR text into reading-order lines."""

MIN_LINE_LENGTH = 2  # Shorter fragments are stray OCR marks


def normalize_lines(raw_text: str, min_length: int = MIN_LINE_LENGTH) -> tuple[str, ...]:
    """Return trimmed, non-trivial lines in the order the OCR engine produced them."""
    if not raw_text:
        return ()
    stripped = (line.strip() for line in raw_text.splitlines())
    return tuple(line for line in stripped if len(line) >= min_length)
