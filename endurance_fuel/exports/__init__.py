"""Share-link and tabular exports of the calculator state."""

from .share_link import DecodedState, FieldIssue, decode_state, encode_state
from .tabular import HEADER, export_row, to_csv_text, write_csv

__all__ = [
    "DecodedState",
    "FieldIssue",
    "decode_state",
    "encode_state",
    "HEADER",
    "export_row",
    "to_csv_text",
    "write_csv",
]
