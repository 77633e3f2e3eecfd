from pathlib import Path
from unittest.mock import Mock, call

import pytest

from urlform import responses
from urlform.exceptions import FileError, InvalidHeaderError, ResponseError, UnknownStatusError


def test_status_table() -> None:
    assert len(responses.STATUS_MESSAGES) == 61
    assert responses.lookup_status(200) == "OK"
    assert responses.lookup_status(306) == "Switch Proxy"
    assert responses.lookup_status(418) == "I'm a teapot"
    assert responses.lookup_status(511) == "Network Authentication Required"


def test_status_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        responses.STATUS_MESSAGES[299] = "Nope"  # type: ignore[index]


def test_unknown_status() -> None:
    with pytest.raises(UnknownStatusError):
        responses.lookup_status(299)
    assert issubclass(UnknownStatusError, ResponseError)


def test_send_string() -> None:
    res = Mock()
    responses.send_string(res, b"hello")
    assert res.mock_calls == [
        call.status(200, "OK"),
        call.add_length(5),
        call.done_headers(),
        call.write_body(b"hello"),
        call.done(),
    ]


def test_send_string_raw() -> None:
    res = Mock()
    responses.send_string_raw(res, b"hi")
    assert res.mock_calls == [
        call.status(200, "OK"),
        call.add_header("Content-Type", b"text/plain; charset=utf-8"),
        call.add_length(2),
        call.done_headers(),
        call.write_body(b"hi"),
        call.done(),
    ]


def test_redirect() -> None:
    res = Mock()
    responses.redirect(res, b"moved", b"/new", 301)
    assert res.mock_calls == [
        call.status(301, "Moved Permanently"),
        call.add_header("Location", b"/new"),
        call.add_length(5),
        call.done_headers(),
        call.write_body(b"moved"),
        call.done(),
    ]


def test_redirect_unknown_code_sends_nothing() -> None:
    res = Mock()
    with pytest.raises(UnknownStatusError):
        responses.redirect(res, b"", b"/new", 399)
    assert res.mock_calls == []


def test_redirect_with_message() -> None:
    res = Mock()
    responses.redirect_with_message(res, b"", b"/x", 399, "Custom")
    assert res.mock_calls[0] == call.status(399, "Custom")
    assert res.mock_calls[1] == call.add_header("Location", b"/x")


def test_error() -> None:
    res = Mock()
    responses.error(res, b"not here", 404)
    assert res.mock_calls[0] == call.status(404, "Not Found")
    assert res.mock_calls[-2:] == [call.write_body(b"not here"), call.done()]


def test_error_unknown_code() -> None:
    res = Mock()
    with pytest.raises(UnknownStatusError):
        responses.error(res, b"", 999)
    assert not res.status.called


@pytest.mark.parametrize("location", [b"/a\r\nSet-Cookie: x=1", b"/a\nb", b"/a\x00"])
def test_header_injection_is_rejected(location: bytes) -> None:
    res = Mock()
    with pytest.raises(InvalidHeaderError):
        responses.redirect(res, b"", location, 302)
    assert res.mock_calls == []


@pytest.mark.parametrize("name", ["", "Bad Name", "Bad:Name", "Caf\xe9"])
def test_bad_header_name(name: str) -> None:
    res = Mock()
    with pytest.raises(InvalidHeaderError):
        responses.send(res, 200, "OK", b"", [(name, b"x")])
    assert res.mock_calls == []


def test_response_errors_propagate() -> None:
    res = Mock()
    res.add_length.side_effect = RuntimeError("connection gone")
    with pytest.raises(RuntimeError):
        responses.send_string(res, b"x")
    assert not res.done.called


def test_send_file(tmp_path: Path) -> None:
    path = tmp_path / "page.html"
    path.write_bytes(b"<p>hi</p>")

    res = Mock()
    responses.send_file(res, str(path))
    assert call.write_body(b"<p>hi</p>") in res.mock_calls
    assert call.add_length(9) in res.mock_calls


def test_send_file_text(tmp_path: Path) -> None:
    path = tmp_path / "notes.txt"
    path.write_bytes(b"abc")

    res = Mock()
    responses.send_file_text(res, str(path))
    assert call.add_header("Content-Type", b"text/plain; charset=utf-8") in res.mock_calls


def test_send_file_raw(tmp_path: Path) -> None:
    path = tmp_path / "blob.bin"
    path.write_bytes(b"\x00\x01")

    res = Mock()
    responses.send_file_raw(res, str(path))
    assert call.add_header("Content-Type", b"application/octet-stream; charset=utf-8") in res.mock_calls
    assert call.write_body(b"\x00\x01") in res.mock_calls


def test_send_missing_file(tmp_path: Path) -> None:
    res = Mock()
    with pytest.raises(FileError):
        responses.send_file(res, str(tmp_path / "missing.txt"))
    assert res.mock_calls == []


def test_read_write_file(tmp_path: Path) -> None:
    path = str(tmp_path / "out.bin")
    responses.write_file(path, b"data")
    assert responses.read_file(path) == b"data"


def test_write_file_error(tmp_path: Path) -> None:
    with pytest.raises(FileError) as excinfo:
        responses.write_file(str(tmp_path / "no" / "such" / "dir.bin"), b"x")
    assert isinstance(excinfo.value, OSError)
    assert isinstance(excinfo.value.__cause__, OSError)
