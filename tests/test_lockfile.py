from dataclasses import replace
from pathlib import Path

import pytest

from dockpin.errors import FileAccessError, LockfileError
from dockpin.lockfile import (
    LOCKFILE_HEADER,
    AcquisitionRecord,
    LockDocument,
    parse_lockfile,
    read_lockfile,
    serialize_lockfile,
    write_lockfile,
)

HELLO = AcquisitionRecord(
    url="http://deb.debian.org/debian/pool/main/h/hello/hello_2.10-3_amd64.deb",
    filename="hello_2.10-3_amd64.deb",
    size=56132,
    md5="4fb3e1e2a24a9e6e3c6f0f4c1d0b6a4e",
)
CURL = AcquisitionRecord(
    url="http://deb.debian.org/debian/pool/main/c/curl/curl_7.88.1-10_amd64.deb",
    filename="curl_7.88.1-10_amd64.deb",
    size=315168,
    md5="0123456789abcdef0123456789abcdef",
)


def test_lockfile_roundtrip_parser_serializer() -> None:
    document = LockDocument(records=(HELLO, CURL), base_image="debian:bookworm")

    decoded = parse_lockfile(serialize_lockfile(document))

    assert decoded == document
    assert decoded.records == (HELLO, CURL)


def test_serialize_matches_apt_print_uris_shape() -> None:
    encoded = serialize_lockfile(LockDocument(records=(HELLO,), base_image="debian:bookworm"))

    assert encoded.split("\n") == [
        LOCKFILE_HEADER,
        "base-image=debian:bookworm",
        "",
        "'http://deb.debian.org/debian/pool/main/h/hello/hello_2.10-3_amd64.deb' "
        "hello_2.10-3_amd64.deb 56132 MD5Sum:4fb3e1e2a24a9e6e3c6f0f4c1d0b6a4e",
        "",
    ]


def test_serialize_without_base_image_omits_metadata_line() -> None:
    encoded = serialize_lockfile(LockDocument())

    assert encoded == f"{LOCKFILE_HEADER}\n\n"
    assert parse_lockfile(encoded) == LockDocument()


def test_parse_skips_comments_and_blank_lines() -> None:
    raw = "\n".join(
        [
            "# dockpin apt lock file v1",
            "base-image=ubuntu:22.04@sha256:abc",
            "",
            "# comment",
            "'http://x/hello.deb' hello.deb 10 MD5Sum:" + "a" * 32,
            "",
        ]
    )

    document = parse_lockfile(raw)

    assert document.base_image == "ubuntu:22.04@sha256:abc"
    assert document.records == (
        AcquisitionRecord(url="http://x/hello.deb", filename="hello.deb", size=10, md5="a" * 32),
    )


def test_parse_rejects_malformed_line_and_quotes_it() -> None:
    line = "'http://x' f.deb not-a-number MD5Sum:abc"

    with pytest.raises(LockfileError) as excinfo:
        parse_lockfile(f"{LOCKFILE_HEADER}\n\n{line}\n")

    assert line in str(excinfo.value)
    assert excinfo.value.context["line"] == line
    assert excinfo.value.code == "E_LOCKFILE"


def test_parse_rejects_whole_document_on_single_bad_line() -> None:
    good = "'http://x/a.deb' a.deb 1 MD5Sum:" + "b" * 32

    with pytest.raises(LockfileError):
        parse_lockfile(f"{good}\nunexpected=metadata\n{good}\n")


def test_parse_rejects_uppercase_digest() -> None:
    with pytest.raises(LockfileError):
        parse_lockfile("'http://x/a.deb' a.deb 1 MD5Sum:" + "B" * 32)


def test_parse_rejects_path_separator_in_filename() -> None:
    line = "'http://x/a.deb' ../../etc/a.deb 1 MD5Sum:" + "c" * 32

    with pytest.raises(LockfileError) as excinfo:
        parse_lockfile(line)

    assert excinfo.value.context["filename"] == "../../etc/a.deb"


def test_read_lockfile_reports_missing_file(tmp_path: Path) -> None:
    with pytest.raises(LockfileError) as excinfo:
        read_lockfile(tmp_path / "missing.lock")

    assert excinfo.value.hint is not None
    assert "missing.lock" in excinfo.value.context["path"]


def test_read_lockfile_adds_path_to_parse_errors(tmp_path: Path) -> None:
    lock_path = tmp_path / "dockpin-apt.lock"
    lock_path.write_text("garbage\n", encoding="utf-8")

    with pytest.raises(LockfileError) as excinfo:
        read_lockfile(lock_path)

    assert excinfo.value.context["path"] == str(lock_path)
    assert excinfo.value.context["line"] == "garbage"


def test_write_then_read_lockfile(tmp_path: Path) -> None:
    document = LockDocument(records=(CURL,), base_image="debian:bookworm")

    path = write_lockfile(document, tmp_path / "nested" / "dockpin-apt.lock")

    assert read_lockfile(path) == document


def test_read_lockfile_on_directory_is_io_error(tmp_path: Path) -> None:
    with pytest.raises(FileAccessError):
        read_lockfile(tmp_path)


def test_read_lockfile_rejects_non_utf8_bytes(tmp_path: Path) -> None:
    lock_path = tmp_path / "dockpin-apt.lock"
    lock_path.write_bytes(b"# dockpin apt lock file v1\n\xff\xfe\n")

    with pytest.raises(LockfileError) as excinfo:
        read_lockfile(lock_path)

    assert excinfo.value.context["path"] == str(lock_path)
    assert excinfo.value.hint is not None


@pytest.mark.parametrize(
    "record",
    [
        replace(HELLO, url="http://x/it's.deb"),
        replace(HELLO, url="http://x/a\nb.deb"),
        replace(HELLO, filename="hello 2.deb"),
        replace(HELLO, md5=HELLO.md5.upper()),
        replace(HELLO, md5=HELLO.md5[:31]),
        replace(HELLO, md5=HELLO.md5 + "0"),
        replace(HELLO, size=-1),
    ],
    ids=["quote-in-url", "newline-in-url", "space-in-filename", "uppercase-md5",
         "short-md5", "long-md5", "negative-size"],
)
def test_serialize_rejects_records_that_cannot_parse_back(record: AcquisitionRecord) -> None:
    with pytest.raises(LockfileError) as excinfo:
        serialize_lockfile(LockDocument(records=(record,)))

    assert "line" in excinfo.value.context


def test_write_lockfile_leaves_no_file_for_invalid_record(tmp_path: Path) -> None:
    lock_path = tmp_path / "dockpin-apt.lock"

    with pytest.raises(LockfileError):
        write_lockfile(LockDocument(records=(replace(CURL, size=-5),)), lock_path)

    assert not lock_path.exists()


def test_serialize_rejects_multiline_base_image() -> None:
    with pytest.raises(LockfileError):
        serialize_lockfile(LockDocument(base_image="debian\n'http://evil' x 1 MD5Sum:" + "a" * 32))
