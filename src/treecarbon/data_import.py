"""
Input feed adapters: convert tabular data into tree and stem rows.

Any source that pandas can read (a spreadsheet export, a database query)
can feed the pipelines. Columns are looked up by name through a column map,
so the order of columns in the source does not matter.
"""
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import pandas as pd

from .exceptions import InvalidDataError
from .measurement import StemRow, TreeRow

__all__ = [
    'DEFAULT_TREE_COLUMNS',
    'DEFAULT_STEM_COLUMNS',
    'read_table',
    'tree_rows_from_frame',
    'stem_rows_from_frame',
]

# Row attribute -> source column name
DEFAULT_TREE_COLUMNS = {
    'team': 'team',
    'species': 'species',
    'diameter_1': 'dbh_1',
    'diameter_2': 'dbh_2',
    'year': 'year',
    'tree_id': 'tree_id',
}

DEFAULT_STEM_COLUMNS = {
    'team': 'team',
    'species': 'species',
    'diameter_1': 'dbh_1',
    'diameter_2': 'dbh_2',
    'year': 'year',
    'stem_id': 'stem_id',
}

_REQUIRED = ('team', 'species', 'diameter_1')


def read_table(path: Union[str, Path], **kwargs: Any) -> pd.DataFrame:
    """Read a CSV or tab-separated file into a DataFrame.

    Args:
        path: File path (.csv, .tsv or .txt)
        **kwargs: Passed to pandas.read_csv

    Raises:
        InvalidDataError: If the file type is not supported
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == '.csv':
        return pd.read_csv(path, **kwargs)
    if suffix in ('.tsv', '.txt'):
        return pd.read_csv(path, sep='\t', **kwargs)
    raise InvalidDataError("input table", f"unsupported file type '{suffix}' for {path}")


def _resolve_columns(df: pd.DataFrame, defaults: Dict[str, str],
                     columns: Optional[Mapping[str, str]]) -> Dict[str, str]:
    mapping = dict(defaults)
    if columns:
        unknown = sorted(set(columns) - set(defaults))
        if unknown:
            raise InvalidDataError("column map", f"unknown row attributes {unknown}")
        mapping.update(columns)

    missing = [mapping[attr] for attr in _REQUIRED if mapping[attr] not in df.columns]
    if missing:
        raise InvalidDataError("input table", f"missing required columns {missing}")

    # Optional columns absent from the source are simply not read
    return {attr: col for attr, col in mapping.items() if col in df.columns}


def _clean(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if pd.isna(value):
        return None
    return value


def _row_kwargs(record: Dict[str, Any], mapping: Dict[str, str]) -> Dict[str, Any]:
    # Years are validated per row by the pipelines
    kwargs = {attr: _clean(record[col]) for attr, col in mapping.items()}
    for id_attr in ('tree_id', 'stem_id'):
        if kwargs.get(id_attr) is not None:
            kwargs[id_attr] = str(kwargs[id_attr])
    return kwargs


def tree_rows_from_frame(df: pd.DataFrame, columns: Optional[Mapping[str, str]] = None) -> List[TreeRow]:
    """Convert a single-tree table into TreeRows.

    Blank or NaN second diameters become None. Values are not validated
    here; the pipeline validates and reports bad rows.

    Args:
        df: Source table
        columns: Overrides of DEFAULT_TREE_COLUMNS (row attribute -> column)

    Raises:
        InvalidDataError: If a required column is missing
    """
    mapping = _resolve_columns(df, DEFAULT_TREE_COLUMNS, columns)
    return [TreeRow(**_row_kwargs(rec, mapping)) for rec in df.to_dict(orient='records')]


def stem_rows_from_frame(df: pd.DataFrame, columns: Optional[Mapping[str, str]] = None) -> List[StemRow]:
    """Convert a woodland plot table into StemRows.

    Args:
        df: Source table
        columns: Overrides of DEFAULT_STEM_COLUMNS (row attribute -> column)

    Raises:
        InvalidDataError: If a required column is missing
    """
    mapping = _resolve_columns(df, DEFAULT_STEM_COLUMNS, columns)
    return [StemRow(**_row_kwargs(rec, mapping)) for rec in df.to_dict(orient='records')]
