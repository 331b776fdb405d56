"""Column projection of an authenticated row."""

from typing import Any, Dict, Iterable, List, Optional, Union

ColumnNames = Optional[Union[str, Iterable[str]]]


def _as_names(columns: ColumnNames) -> List[str]:
    if columns is None:
        return []
    if isinstance(columns, str):
        return [columns]
    return list(columns)


def project_row(
    row: Dict[str, Any],
    return_columns: ColumnNames = None,
    omit_columns: ColumnNames = None,
) -> Dict[str, Any]:
    """
    Project a result row.

    Args:
        row: Column name -> value, in table order
        return_columns: If given and non-empty, keep only these columns.
            Output follows the row's column order; names not in the row
            are dropped.
        omit_columns: Used when return_columns is empty; drop these columns.

    Returns:
        A new dict. With neither argument, a copy of the whole row.
    """
    wanted = _as_names(return_columns)
    if wanted:
        return {key: value for key, value in row.items() if key in wanted}

    omitted = _as_names(omit_columns)
    return {key: value for key, value in row.items() if key not in omitted}
