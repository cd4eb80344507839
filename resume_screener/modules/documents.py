import base64
import binascii
import re
from typing import Tuple

# data:<mimetype>[;param=value]*;base64,<payload>
DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)(?P<params>(?:;[\w.+-]+=[\w.+-]+)*);base64,(?P<data>.*)$", re.DOTALL)


class DocumentError(ValueError):
    """Raised when a document payload is not a usable base64 data URI."""


def parse_data_uri(uri: str) -> Tuple[str, bytes]:
    """
    Splits a data URI into (mime_type, raw bytes).
    Parameters such as ``charset`` are dropped from the returned MIME type.
    """
    match = DATA_URI_PATTERN.match(uri or "")
    if not match:
        raise DocumentError("Document must be a data URI of the form 'data:<mimetype>;base64,<encoded_data>'")

    try:
        payload = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DocumentError(f"Document payload is not valid base64: {e}") from e

    return match.group("mime"), payload


def text_to_data_uri(text: str) -> str:
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return f"data:text/plain;charset=utf-8;base64,{encoded}"
