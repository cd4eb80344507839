import base64

import pytest

from resume_screener.modules.documents import DocumentError, parse_data_uri, text_to_data_uri


def test_parse_pdf_data_uri():
    uri = "data:application/pdf;base64," + base64.b64encode(b"%PDF-1.4 body").decode()

    mime, payload = parse_data_uri(uri)

    assert mime == "application/pdf"
    assert payload == b"%PDF-1.4 body"


def test_text_round_trip_drops_charset_param():
    mime, payload = parse_data_uri(text_to_data_uri("Senior Engineer – Zürich"))

    assert mime == "text/plain"
    assert payload.decode("utf-8") == "Senior Engineer – Zürich"


@pytest.mark.parametrize("uri", [
    "",
    "plain text resume",
    "data:application/pdf,not-base64-flagged",
    "data:application/pdf;base64,@@@not base64@@@",
])
def test_malformed_uris_rejected(uri):
    with pytest.raises(DocumentError):
        parse_data_uri(uri)
