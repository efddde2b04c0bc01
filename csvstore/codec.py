"""
CSV parsing and serialization.

Responsibilities:
- split raw text into rows, rejoining quoted values that span delimiters or newlines
- pick up field names from the header row when none are configured
- discard rows with malformed quoting and report them without stopping
- write records back out, quoting values only where needed unless told otherwise

Both directions are pure functions of their input and a CsvConfig.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .models import CsvConfig, SerializeOptions
from .rules import AUTO_ID_PROPERTY, ESCAPED_QUOTE, QUOTE


logger = logging.getLogger(__name__)

# A whole field that is exactly one quoted string, optionally padded with whitespace
_QUOTED_RE = re.compile(r'\s*"(.*)"\s*', re.DOTALL)

Record = Dict[str, Any]


@dataclass
class _ScanState:
    """Accumulators carried across parts and lines during a single parse."""

    field_names: Optional[List[str]]
    value: str = ""
    # delimiter or newline eaten by a split inside a quoted value
    prefix: str = ""
    quote_count: int = 0
    values: List[str] = field(default_factory=list)
    output: List[Record] = field(default_factory=list)
    row_line: int = 0

    def reset_row(self) -> None:
        self.values = []
        self.value = ""
        self.prefix = ""
        self.quote_count = 0

    def pending_column(self) -> Optional[str]:
        if self.field_names and len(self.values) < len(self.field_names):
            return self.field_names[len(self.values)]
        return None


def unquote_value(value: str) -> Optional[str]:
    """
    Unwrap a quoted field and collapse doubled quotes.

    The wrapper is matched first and escapes are collapsed afterwards, so
    `""""""` yields the two-character string `""`.
    Returns None when the quotes do not form a single wrapper around the field.
    """
    match = _QUOTED_RE.fullmatch(value)
    if match is None:
        return None
    return match.group(1).replace(ESCAPED_QUOTE, QUOTE)


def _discard_row(state: _ScanState, issue: str, warnings: List[dict]) -> None:
    logger.warning("Csv: discarding row at line %d with invalid value: %r", state.row_line, state.value)
    warnings.append({
        "row": state.row_line,
        "column": state.pending_column(),
        "issue": issue,
        "value": state.value,
        "action": "row_discarded",
    })
    state.reset_row()


def _finish_row(state: _ScanState, config: CsvConfig) -> None:
    if state.field_names is None:
        # No field names yet: this row is the header
        state.field_names = state.values
    else:
        values = state.values
        record: Record = {
            name: values[i] if i < len(values) else None
            for i, name in enumerate(state.field_names)
        }
        state.output.append(record)
        if not config.id_property:
            record[AUTO_ID_PROPERTY] = len(state.output)
    state.values = []


def _scan_line(state: _ScanState, line: str, config: CsvConfig, warnings: List[dict]) -> bool:
    """
    Feed one physical line into the scan state.

    Returns False when the row was discarded; the caller moves on to the next line.
    """
    for part in line.split(config.delimiter):
        state.value += state.prefix + part
        state.prefix = ""
        state.quote_count += part.count(QUOTE)

        if state.quote_count % 2:
            # Odd count: the delimiter we split on sits inside a quoted value
            state.prefix = config.delimiter
            continue

        if state.quote_count:
            unquoted = unquote_value(state.value)
            if unquoted is None:
                _discard_row(state, "invalid_quoting", warnings)
                return False
            state.values.append(unquoted)
        elif config.trim or state.field_names is None:
            # Header values are trimmed regardless of the setting
            state.values.append(state.value.strip())
        else:
            state.values.append(state.value)

        state.value = ""
        state.quote_count = 0

    if state.quote_count:
        # Quoted value continues on the next line
        state.prefix = config.newline
    else:
        _finish_row(state, config)
    return True


def parse_with_report(
    text: str, config: Optional[CsvConfig] = None
) -> Tuple[List[Record], List[str], List[dict]]:
    """
    Parse CSV text into records.

    Returns (records, field_names, warnings). Records map every resolved field
    name to its string value, or None when the row ran out of columns. When
    config.id_property is empty each record also carries a 1-based sequential
    identity under AUTO_ID_PROPERTY.
    """
    config = config or CsvConfig()
    field_names = list(config.field_names) if config.field_names is not None else None
    state = _ScanState(field_names=field_names)
    warnings: List[dict] = []
    discarded = 0

    for line_no, line in enumerate(text.split(config.newline), start=1):
        if not state.quote_count:
            if not line.strip():
                continue
            state.row_line = line_no
        if not _scan_line(state, line, config, warnings):
            discarded += 1

    if state.quote_count:
        # Input ended inside a quoted value
        _discard_row(state, "unterminated_quote", warnings)
        discarded += 1

    logger.debug(
        "Csv: parsed %d records, %d fields, %d rows discarded",
        len(state.output), len(state.field_names or []), discarded,
    )
    return state.output, state.field_names or [], warnings


def parse(text: str, config: Optional[CsvConfig] = None) -> Tuple[List[Record], List[str]]:
    records, field_names, _ = parse_with_report(text, config)
    return records, field_names


def quote_value(value: str) -> str:
    return QUOTE + value.replace(QUOTE, ESCAPED_QUOTE) + QUOTE


def needs_quotes(value: str, delimiter: str, always_quote: bool = True) -> bool:
    return always_quote or QUOTE in value or delimiter in value


def _format_value(value: Any, delimiter: str, always_quote: bool) -> str:
    if value is None:
        value = ""
    elif not isinstance(value, str):
        raise TypeError(f"CSV values must be str or None, got {type(value).__name__}")
    return quote_value(value) if needs_quotes(value, delimiter, always_quote) else value


def serialize(
    field_names: Sequence[str],
    records: Sequence[Mapping[str, Any]],
    options: Optional[SerializeOptions] = None,
    config: Optional[CsvConfig] = None,
) -> str:
    """
    Write a header row from field_names, then one row per record in that column order.

    Values are quoted when options.always_quote is set (default) or when they
    contain the delimiter or a quote character.
    """
    options = options or SerializeOptions()
    config = config or CsvConfig()
    delimiter = config.delimiter

    rows = [list(field_names)]
    rows.extend([record.get(name) for name in field_names] for record in records)

    output = config.newline.join(
        delimiter.join(_format_value(v, delimiter, options.always_quote) for v in row)
        for row in rows
    )
    if options.trailing_newline:
        output += config.newline

    logger.debug("Csv: serialized %d records, %d fields", len(records), len(field_names))
    return output
