#!/usr/bin/env python3

import os, csv
import pandas as pd
from gapviz.errors import DatasetParseError


#########################################
##                PARAMS               ##
#########################################

GAPMINDER_FIELDS = ("country", "continent", "year", "lifeExp", "gdpPercap")


#########################################
##            SANITY CHECK             ##
#########################################

def check_dsfile_exists(path: str) -> str:
    path = os.fspath(path)
    if not os.path.isfile(path):
        raise FileNotFoundError(f"[ERROR] FileNotFound: {path}")
    return path

def check_field_counts(path: str, sep: str = ",", encoding: str = "utf-8") -> int:
    """
    Verifies every row has as many fields as the header.
    Returns the number of fields. pandas pads short rows with NaN, so the
    count is checked on the raw records first.
    """
    with open(path, newline="", encoding=encoding) as f:
        reader = csv.reader(f, delimiter=sep)
        try:
            header = next(reader, None)
            if not header:
                raise DatasetParseError(f"[ERROR] ParseError: {path} has no header row")
            n_fields = len(header)
            for record in reader:
                if not record:
                    continue
                if len(record) != n_fields:
                    raise DatasetParseError(
                        f"[ERROR] ParseError: line {reader.line_num} of {path} has {len(record)} fields, expected {n_fields}"
                    )
        except UnicodeDecodeError as e:
            raise DatasetParseError(
                f"[ERROR] ParseError: {path} is not valid {encoding} text ({e.reason} at byte {e.start}); pass encoding=..."
            ) from e
    return n_fields

def check_dataset_schema(df: pd.DataFrame, required: tuple = GAPMINDER_FIELDS) -> pd.DataFrame:
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise DatasetParseError(f"[ERROR] Dataset lacks required fields: {', '.join(missing)}")
    return df


#########################################
##               LOADING               ##
#########################################

def load_dataset(path: str, sep: str = ",", encoding: str = "utf-8") -> pd.DataFrame:
    """
    Reads delimited text with a header row into a DataFrame.
    Numeric columns are inferred by pandas, everything else stays text.
    """
    path = check_dsfile_exists(path)
    check_field_counts(path, sep, encoding)
    try:
        df = pd.read_csv(path, sep=sep, encoding=encoding, on_bad_lines="error")
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise DatasetParseError(f"[ERROR] ParseError: {path}: {e}") from e

    return df

def summarize_dataset(df: pd.DataFrame, n: int = 6) -> str:
    """Structure overview followed by the first n rows (R's str() and head())."""
    lines = [f"'data.frame':\t{len(df)} obs. of  {df.shape[1]} variables:"]
    for col in df.columns:
        series = df[col]
        if pd.api.types.is_integer_dtype(series):
            kind = "int"
        elif pd.api.types.is_numeric_dtype(series):
            kind = "num"
        else:
            kind = "chr"
        preview = " ".join(str(v) for v in series.head(10).tolist())
        lines.append(f" $ {col:<10}: {kind:<4}{preview} ...")
    lines.append("")
    lines.append(df.head(n).to_string())

    return "\n".join(lines)
