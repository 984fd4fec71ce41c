"""Dataset parsing: uploaded file -> ordered rows plus the raw text sent to the model"""

import asyncio
import io
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pandas as pd

from core.errors import ParseError
from .security import sanitize_filename


@dataclass(frozen=True)
class DataFile:
    """Reference to an uploaded dataset"""
    name: str
    content: bytes
    size: int

    @classmethod
    def from_upload(cls, uploaded_file) -> "DataFile":
        """Build from a Streamlit UploadedFile (or anything with name/getvalue)"""
        content = uploaded_file.getvalue()
        return cls(
            name=sanitize_filename(uploaded_file.name),
            content=content,
            size=getattr(uploaded_file, "size", len(content)),
        )

    @property
    def extension(self) -> str:
        return Path(self.name).suffix.lower()


@dataclass(frozen=True)
class ParsedFile:
    rows: Tuple[Dict[str, Any], ...]
    raw: str


TEXT_FORMATS = {'.csv', '.tsv', '.json'}
SPREADSHEET_FORMATS = {'.xlsx'}


class DataFileParser:
    """Parse CSV, TSV, JSON and Excel uploads with pandas"""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    async def parse(self, data_file: DataFile) -> ParsedFile:
        """
        Parse the file in a worker thread.

        Raises:
            ParseError: if the format is unsupported or the content is unreadable
        """
        return await asyncio.to_thread(self.parse_sync, data_file)

    def parse_sync(self, data_file: DataFile) -> ParsedFile:
        ext = data_file.extension
        if ext not in TEXT_FORMATS | SPREADSHEET_FORMATS:
            raise ParseError(
                f"Unsupported file type '{ext or data_file.name}'. Please upload a CSV, TSV, JSON or Excel file."
            )

        try:
            if ext in SPREADSHEET_FORMATS:
                df = pd.read_excel(io.BytesIO(data_file.content), engine="openpyxl")
                raw = df.to_csv(index=False)
            else:
                raw = data_file.content.decode(self.encoding)
                df = self._read_text(raw, ext)
        except UnicodeDecodeError as e:
            raise ParseError(f"Could not decode {data_file.name} as {self.encoding} text.") from e
        except Exception as e:
            raise ParseError(f"Failed to parse {data_file.name}: {e}") from e

        if df.empty:
            raise ParseError(f"{data_file.name} contains no data rows.")

        return ParsedFile(rows=tuple(self._to_rows(df)), raw=raw)

    def _read_text(self, raw: str, ext: str) -> pd.DataFrame:
        if ext == '.json':
            return pd.read_json(io.StringIO(raw))
        sep = '\t' if ext == '.tsv' else ','
        return pd.read_csv(io.StringIO(raw), sep=sep)

    def _to_rows(self, df: pd.DataFrame) -> List[Dict[str, Any]]:
        """Records of plain scalars; missing cells become empty strings"""
        df = df.astype(object).where(pd.notna(df), "")
        rows = []
        for record in df.to_dict(orient="records"):
            rows.append({str(key): _scalar(value) for key, value in record.items()})
        return rows


def _scalar(value: Any) -> Any:
    # numpy / pandas scalars expose item()
    if hasattr(value, "item"):
        try:
            return value.item()
        except (ValueError, TypeError):
            pass
    if isinstance(value, (str, int, float)):
        return value
    return str(value)
