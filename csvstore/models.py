from __future__ import annotations

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .rules import DEFAULT_DELIMITER, DEFAULT_ID_PROPERTY, DEFAULT_NEWLINE, QUOTE


class CsvConfig(BaseModel):
    """Dialect and identity settings shared by parse and serialize."""

    model_config = ConfigDict(frozen=True)

    delimiter: str = DEFAULT_DELIMITER
    newline: str = DEFAULT_NEWLINE
    trim: bool = False
    field_names: Optional[List[str]] = None
    id_property: str = DEFAULT_ID_PROPERTY

    @field_validator("delimiter")
    @classmethod
    def _single_char_delimiter(cls, v: str) -> str:
        if len(v) != 1:
            raise ValueError("delimiter must be a single character")
        if v == QUOTE:
            raise ValueError("delimiter cannot be the quote character")
        return v

    @field_validator("newline")
    @classmethod
    def _usable_newline(cls, v: str) -> str:
        if not v:
            raise ValueError("newline must not be empty")
        if QUOTE in v:
            raise ValueError("newline cannot contain the quote character")
        return v


class SerializeOptions(BaseModel):
    always_quote: bool = True
    trailing_newline: bool = False


class ReportItem(BaseModel):
    row: Optional[int] = None
    column: Optional[str] = None
    issue: str
    value: Optional[str] = None
    action: str


class ReportSummary(BaseModel):
    rows: int = 0
    columns: int = 0
    warnings: int = 0


class ParseReport(BaseModel):
    summary: ReportSummary
    encoding: Dict[str, Any] = Field(default_factory=dict)
    warnings: List[ReportItem] = Field(default_factory=list)


class ParseResponse(BaseModel):
    field_names: List[str]
    records: List[Dict[str, Any]]
    report: ParseReport


class SerializeRequest(BaseModel):
    field_names: List[str]
    records: List[Dict[str, Optional[str]]] = Field(default_factory=list)
    delimiter: str = DEFAULT_DELIMITER
    newline: str = DEFAULT_NEWLINE
    always_quote: bool = True
    trailing_newline: bool = False


class HealthResponse(BaseModel):
    ok: bool = True
