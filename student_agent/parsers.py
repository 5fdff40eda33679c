"""Spreadsheet and CSV parsing for subjects and deadlines."""

import re
from io import BytesIO
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
from openpyxl import load_workbook
from pydantic import ValidationError

from student_agent.models import Deadline, InvalidInput, Subject


SUBJECT_COLUMNS = {
    "name": ["name", "subject", "subject name", "course", "course name", "module"],
    "marks": ["marks", "mark", "score", "marks obtained", "obtained", "grade"],
    "max_marks": ["max marks", "maxmarks", "maximum marks", "out of", "total", "total marks"],
    "hours_studied": ["hours studied", "hoursstudied", "hours", "study hours", "hours/week"],
}

DEADLINE_COLUMNS = {
    "name": ["name", "deadline", "assignment", "task", "title"],
    "subject": ["subject", "course", "module", "subject name"],
    "days_left": ["days left", "daysleft", "due in", "due in days", "days"],
}

SUBJECT_SHEET_NAMES = ["subjects", "marks", "grades"]
DEADLINE_SHEET_NAMES = ["deadlines", "assignments", "upcoming deadlines"]


def normalize_col_name(col_name) -> str:
    """Lowercase, drop dots/%/#/parentheses and collapse whitespace."""
    if pd.isna(col_name):
        return ""
    normalized = str(col_name).strip().lower()
    normalized = re.sub(r'[.,%#()]', '', normalized)
    normalized = re.sub(r'[_\s]+', ' ', normalized)
    return normalized.strip()


def normalize_and_rename_columns(df: pd.DataFrame, table_type: str) -> pd.DataFrame:
    """
    Rename known column name variations to canonical names.

    Args:
        df: DataFrame to normalize
        table_type: "subjects" or "deadlines"

    Returns:
        Copy of df with canonical column names
    """
    df = df.copy()

    if table_type == "subjects":
        target_mappings = SUBJECT_COLUMNS
    elif table_type == "deadlines":
        target_mappings = DEADLINE_COLUMNS
    else:
        raise ValueError(f"Unknown table type: {table_type}")

    actual_rename = {}
    for orig_col in df.columns:
        normalized = normalize_col_name(orig_col)
        for target_name, variations in target_mappings.items():
            if normalized in variations and target_name not in actual_rename.values():
                actual_rename[orig_col] = target_name
                break

    if actual_rename:
        df = df.rename(columns=actual_rename)
        print(f"DEBUG: Renamed columns in {table_type} table: {actual_rename}")
    else:
        print(f"WARNING: No columns were renamed in {table_type} table. Original columns: {list(df.columns)}")

    if df.columns.duplicated().any():
        print(f"WARNING: Found duplicate columns in {table_type} table: {df.columns[df.columns.duplicated()].tolist()}")
        df = df.loc[:, ~df.columns.duplicated(keep='first')]

    return df


def parse_marks(value, fractions_as_percent: bool = False) -> Tuple[Optional[float], Optional[float]]:
    """
    Parse a marks cell into (marks, max_marks).

    Handles plain numbers (72), percentages ("72%") and fractions ("72/100").
    max_marks is None unless the cell carries it. With fractions_as_percent,
    a numeric cell in the 0-1 range (a percent-formatted Excel cell such as
    0.72) is read as 72 out of 100.
    """
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None, None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None, None
        if '/' in text:
            obtained, _, total = text.partition('/')
            try:
                return float(obtained.strip()), float(total.strip())
            except ValueError:
                return None, None
        if text.endswith('%'):
            try:
                return float(text[:-1].strip()), 100.0
            except ValueError:
                return None, None
        try:
            return float(text), None
        except ValueError:
            return None, None

    val = float(value)
    if np.isnan(val) or np.isinf(val):
        return None, None
    if fractions_as_percent and 0 < val <= 1.0:
        return val * 100.0, 100.0
    return val, None


def to_number(value, default: Optional[float] = 0.0) -> Optional[float]:
    """Convert a cell to float, falling back to default for blanks and junk."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return default
    try:
        val = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (ValueError, TypeError):
        return default
    if np.isnan(val) or np.isinf(val):
        return default
    return val


def parse_subjects(df: pd.DataFrame) -> List[Subject]:
    """
    Build Subject records from a raw subjects table.

    Rows without a name are skipped. Missing max marks default to 100 and
    missing hours to 0.
    """
    df = normalize_and_rename_columns(df, "subjects")
    missing = [col for col in ("name", "marks") if col not in df.columns]
    if missing:
        raise InvalidInput(f"Subjects table is missing required columns: {missing}. Found: {list(df.columns)}")

    has_max_column = "max_marks" in df.columns

    subjects = []
    for row_num, row in enumerate(df.to_dict(orient="records"), start=2):
        name = row.get("name")
        if name is None or pd.isna(name) or not str(name).strip():
            continue

        marks, max_from_cell = parse_marks(row.get("marks"), fractions_as_percent=not has_max_column)
        if marks is None:
            raise InvalidInput(f"Row {row_num}: could not read marks for '{name}'")

        max_marks = max_from_cell if max_from_cell is not None else to_number(row.get("max_marks"), 100.0)
        try:
            subjects.append(Subject(
                name=str(name).strip(),
                marks=marks,
                max_marks=max_marks,
                hours_studied=to_number(row.get("hours_studied"), 0.0)
            ))
        except ValidationError as e:
            raise InvalidInput(f"Row {row_num}: {e.errors()[0]['msg']}") from e

    if not subjects:
        raise InvalidInput("No subjects found in the uploaded file.")
    return subjects


def parse_deadlines(df: pd.DataFrame) -> List[Deadline]:
    """Build Deadline records; rows missing a name, subject or days left are skipped."""
    df = normalize_and_rename_columns(df, "deadlines")
    missing = [col for col in ("name", "subject", "days_left") if col not in df.columns]
    if missing:
        print(f"WARNING: Deadlines table is missing columns {missing}, ignoring it")
        return []

    deadlines = []
    for row in df.to_dict(orient="records"):
        name, subject = row.get("name"), row.get("subject")
        if any(v is None or pd.isna(v) or not str(v).strip() for v in (name, subject)):
            continue
        days_left = to_number(row.get("days_left"), None)
        if days_left is None:
            print(f"WARNING: Skipping deadline '{name}' without days left")
            continue
        deadlines.append(Deadline(
            name=str(name).strip(),
            subject=str(subject).strip(),
            days_left=int(days_left)
        ))
    return deadlines


def _find_sheet(sheet_names: List[str], candidates: List[str]) -> Optional[str]:
    for sheet in sheet_names:
        if normalize_col_name(sheet) in candidates:
            return sheet
    return None


def load_excel(file_bytes: bytes) -> Tuple[List[Subject], List[Deadline]]:
    """
    Load subjects and deadlines from an Excel workbook.

    Expected structure:
    - A "Subjects" sheet (or the first sheet): Name, Marks, Max Marks, Hours Studied
    - An optional "Deadlines" sheet: Name, Subject, Days Left

    Args:
        file_bytes: Raw bytes of the .xlsx file

    Returns:
        Tuple of (subjects, deadlines)
    """
    workbook = load_workbook(filename=BytesIO(file_bytes), read_only=True, data_only=True)
    sheet_names = workbook.sheetnames
    workbook.close()

    subjects_sheet = _find_sheet(sheet_names, SUBJECT_SHEET_NAMES) or sheet_names[0]
    deadlines_sheet = _find_sheet(sheet_names, DEADLINE_SHEET_NAMES)
    print(f"DEBUG: Workbook sheets: {sheet_names}, subjects='{subjects_sheet}', deadlines='{deadlines_sheet}'")

    sheets: Dict[str, pd.DataFrame] = pd.read_excel(
        BytesIO(file_bytes), sheet_name=None, engine='openpyxl'
    )
    subjects = parse_subjects(sheets[subjects_sheet])
    deadlines = parse_deadlines(sheets[deadlines_sheet]) if deadlines_sheet else []

    print(f"DEBUG: Loaded {len(subjects)} subjects and {len(deadlines)} deadlines")
    return subjects, deadlines


def load_csv(file_bytes: bytes) -> Tuple[List[Subject], List[Deadline]]:
    """Load subjects from a CSV file. CSV uploads carry no deadlines."""
    df = pd.read_csv(BytesIO(file_bytes))
    subjects = parse_subjects(df)
    print(f"DEBUG: Loaded {len(subjects)} subjects from CSV")
    return subjects, []


def load_upload(filename: str, file_bytes: bytes) -> Tuple[List[Subject], List[Deadline]]:
    """Dispatch on the file extension."""
    lower = (filename or '').lower()
    if lower.endswith('.xlsx'):
        return load_excel(file_bytes)
    if lower.endswith('.csv'):
        return load_csv(file_bytes)
    raise InvalidInput("Invalid file type. Please upload an Excel (.xlsx) or CSV (.csv) file")
