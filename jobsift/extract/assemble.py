"""
Record assembly: column-oriented fragments -> row-oriented records.
"""

from __future__ import annotations

from typing import List, Mapping, Sequence

from jobsift.errors import EmptyInputError, UnbalancedFieldsError
from jobsift.models import Record


def check_balance(fragments: Mapping[str, Sequence[str]]) -> int:
    """
    Verify every field holds the same number of fragments.

    Fields are compared against the first one in iteration order, so the
    reported mismatch is deterministic for an ordered mapping.

    Returns:
        The common fragment count.

    Raises:
        EmptyInputError: no fields at all
        UnbalancedFieldsError: the first mismatching pair
    """
    if len(fragments) == 0:
        raise EmptyInputError()

    first_key = None
    first_len = 0
    for key in fragments:
        length = len(fragments[key])
        if first_key is None:
            first_key, first_len = key, length
        elif length != first_len:
            raise UnbalancedFieldsError(first_key, first_len, key, length)
    return first_len


def assemble_records(fragments: Mapping[str, Sequence[str]]) -> List[Record]:
    """
    Zip fragments positionally across fields.

    Record i's value for field f is fragments[f][i]. Does not mutate the
    input.
    """
    columns = {key: list(fragments[key]) for key in fragments}
    length = check_balance(columns)
    return [Record({key: values[i] for key, values in columns.items()}) for i in range(length)]
