from typing import List, Optional

from fastapi import FastAPI, UploadFile, File, HTTPException, Query
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from .codec import parse_with_report, serialize
from .decoding import decode_csv_bytes
from .logging_setup import setup_logging
from .models import CsvConfig, HealthResponse, ParseResponse, SerializeOptions, SerializeRequest
from .rules import DEFAULT_DELIMITER, DEFAULT_ID_PROPERTY, DEFAULT_NEWLINE

setup_logging()

app = FastAPI(
    title="csv-store",
    description="CSV parsing into records and serialization back to CSV",
    version="0.1.0",
)


def _config_or_422(**kwargs) -> CsvConfig:
    try:
        return CsvConfig(**kwargs)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.post("/parse", response_model=ParseResponse)
async def parse_csv(
    file: UploadFile = File(...),
    delimiter: str = Query(DEFAULT_DELIMITER),
    newline: str = Query(DEFAULT_NEWLINE),
    trim: bool = Query(False),
    id_property: str = Query(DEFAULT_ID_PROPERTY),
    field_names: Optional[List[str]] = Query(None),
):
    if not file.filename or not file.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=422, detail="Only CSV files are supported")

    config = _config_or_422(
        delimiter=delimiter,
        newline=newline,
        trim=trim,
        id_property=id_property,
        field_names=field_names,
    )

    raw = await file.read()
    text, encoding_report = decode_csv_bytes(raw)
    records, names, warnings = parse_with_report(text, config)

    return {
        "field_names": names,
        "records": records,
        "report": {
            "summary": {
                "rows": len(records),
                "columns": len(names),
                "warnings": len(warnings),
            },
            "encoding": encoding_report,
            "warnings": warnings,
        },
    }


@app.post("/serialize", response_class=PlainTextResponse)
def serialize_csv(body: SerializeRequest):
    config = _config_or_422(delimiter=body.delimiter, newline=body.newline)
    options = SerializeOptions(always_quote=body.always_quote, trailing_newline=body.trailing_newline)
    return PlainTextResponse(
        serialize(body.field_names, body.records, options, config),
        media_type="text/csv",
    )
