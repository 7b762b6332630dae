"""Line tokenizer and record assembler for delimited-text extracts."""

from dataclasses import dataclass, field
from typing import Iterable

from .errors import StructuralError
from .models import RawRecord


def tokenize(line: str) -> list[str]:
    """
    Split one extract line into trimmed field strings.

    A double quote toggles quoted mode and is dropped; commas inside quotes
    are literal. Doubled quotes ("") are not an escape sequence: each quote
    simply toggles the mode, so the pair contributes nothing to the field.

    Returns an empty list for a blank line.
    """
    if not line.strip():
        return []

    fields = []
    current = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    fields.append("".join(current).strip())
    return fields


def assemble_records(
    header: list[str], rows: Iterable[list[str]]
) -> tuple[list[RawRecord], int]:
    """
    Zip tokenized rows with the header.

    Rows whose token count differs from the header's are dropped.

    Returns:
        Tuple of (records in source order, number of dropped rows)
    """
    records = []
    malformed = 0
    width = len(header)

    for tokens in rows:
        if len(tokens) != width:
            malformed += 1
            continue
        records.append(dict(zip(header, tokens)))

    return records, malformed


@dataclass
class ParsedExtract:
    """Header and assembled rows of one extract."""

    header: list[str]
    records: list[RawRecord] = field(default_factory=list)
    malformed_count: int = 0


def _lines(text: str) -> list[str]:
    """Non-blank lines, with a BOM and trailing carriage returns removed."""
    text = text.lstrip("\ufeff")
    lines = (line.rstrip("\r") for line in text.split("\n"))
    return [line for line in lines if line.strip()]


def parse_extract(text: str) -> ParsedExtract:
    """
    Parse the full text of an extract.

    Raises:
        StructuralError: if the text has no header line
    """
    lines = _lines(text)
    if not lines:
        raise StructuralError("Extract is empty (no header line)")

    header = tokenize(lines[0])
    records, malformed = assemble_records(header, (tokenize(line) for line in lines[1:]))
    return ParsedExtract(header=header, records=records, malformed_count=malformed)
