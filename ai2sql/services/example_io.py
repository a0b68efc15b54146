# ai2sql/services/example_io.py
# SQL example library import/export as CSV or Excel spreadsheets
import csv
import logging
from io import BytesIO
from typing import Dict, Iterable, List, Tuple, Union

import pandas as pd

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ["natural_language_query", "sql_query"]
CSV_EXTENSIONS = (".csv",)
EXCEL_EXTENSIONS = (".xlsx", ".xls")


def examples_frame(examples: Iterable) -> pd.DataFrame:
    rows = [(ex.natural_language_query, ex.sql_query) for ex in examples]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def export_examples_csv(examples: Iterable) -> str:
    """CSV with a header row; every cell is quoted."""
    return examples_frame(examples).to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")


def export_examples_xlsx(examples: Iterable) -> bytes:
    buffer = BytesIO()
    examples_frame(examples).to_excel(buffer, index=False, sheet_name="SQL examples", engine="openpyxl")
    return buffer.getvalue()


def _read_table(content: bytes, filename: str) -> pd.DataFrame:
    # header=None: the header row is optional and detected afterwards
    if filename.endswith(CSV_EXTENSIONS):
        return pd.read_csv(BytesIO(content), header=None, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    return pd.read_excel(BytesIO(content), header=None, dtype=str, keep_default_na=False)


def parse_examples_file(content: bytes, filename: str) -> Dict[str, Union[List[Tuple[str, str]], int, str]]:
    """
    Read (question, sql) pairs from an uploaded CSV or Excel file.
    The first two columns are used. The first row is skipped when it matches
    the export header. Rows with an empty cell are counted as skipped.
    :return: {"pairs": [...], "skipped": n} or {"error": message}
    """
    if not content:
        return {"error": "Empty file content"}
    filename = (filename or "").lower()
    if not filename.endswith(CSV_EXTENSIONS + EXCEL_EXTENSIONS):
        return {"error": "Unsupported file format. Please upload a CSV or Excel file"}

    try:
        df = _read_table(content, filename)
    except pd.errors.EmptyDataError:
        return {"error": "Empty file content"}
    except UnicodeDecodeError:
        return {"error": "CSV files must be UTF-8 encoded"}
    except Exception as e:
        logger.error(f"Error reading {filename}: {e}")
        return {"error": f"Could not read file: {e}"}

    df = df.fillna("").astype(str)
    while df.shape[1] < 2:
        df[df.shape[1]] = ""
    rows = [(q.strip(), s.strip()) for q, s in zip(df.iloc[:, 0], df.iloc[:, 1])]
    if rows and [cell.lower() for cell in rows[0]] == EXPORT_COLUMNS:
        rows = rows[1:]

    pairs = [(q, s) for q, s in rows if q and s]
    skipped = len(rows) - len(pairs)
    logger.info(f"Parsed {len(pairs)} examples from {filename} ({skipped} skipped)")
    return {"pairs": pairs, "skipped": skipped}
