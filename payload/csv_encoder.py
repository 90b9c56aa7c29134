from typing import Mapping, Sequence

import pandas as pd

from errors import ValidationFailure

# With a CRLF terminator the csv writer quotes any field holding '\r' or '\n'.
_RECORD_END = "\r\n"


def _record(frame: pd.DataFrame, header: bool) -> str:
    return frame.to_csv(index=False, header=header, lineterminator=_RECORD_END).removesuffix(_RECORD_END)


def encode_row(features: Sequence[str], values: Mapping[str, str]) -> str:
    """
    Builds a two-line CSV document: the feature names as header, then one data row.

    Columns keep the order of `features`. Values containing a comma, a double
    quote, a carriage return or a newline are quoted, with inner quotes doubled.

    Raises:
        ValidationFailure: if `features` is empty or a feature has no value.
    """
    if not features:
        raise ValidationFailure("Cannot build a CSV row without any input features.")

    missing = [f for f in features if f not in values]
    if missing:
        raise ValidationFailure(f"No value provided for feature(s): {', '.join(missing)}")

    columns = list(features)
    header = _record(pd.DataFrame(columns=columns), header=True)
    row = _record(pd.DataFrame([[str(values[f]) for f in features]], columns=columns, dtype=object), header=False)
    return f"{header}\n{row}"
