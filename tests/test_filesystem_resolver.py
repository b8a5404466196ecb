import asyncio

import pytest

from cairn.exceptions import ErrorCode, FetchError, ResolutionError
from cairn.loader.pipeline import load_config_sync
from cairn.resolver.filesystem import FileSystemResolver

# --- Fixture to set up file structures ---


@pytest.fixture
def create_files(tmp_path):
    """A factory fixture to create a temporary file structure for import tests."""

    def _create_files(file_dict):
        for file_path, content in file_dict.items():
            path = tmp_path / file_path
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content, encoding="utf-8")
        return tmp_path

    return _create_files


def test_import_from_subdirectory(create_files):
    """Relative imports are resolved against the importing document's directory."""
    files = create_files(
        {
            "config/main.cairn": '{ db = import "parts/db.cairn", flags = import "../flags.json" }',
            "config/parts/db.cairn": '{ host = "localhost", port = 5432 }',
            "flags.json": '{"beta": false}',
        }
    )
    resolver = FileSystemResolver(root=str(files))

    value = load_config_sync(resolver, str(files / "config" / "main.cairn"))

    assert value == {"db": {"host": "localhost", "port": 5432}, "flags": {"beta": False}}
    assert {link.target_path for link in resolver.links} == {
        str(files / "config" / "parts" / "db.cairn"),
        str(files / "flags.json"),
    }


def test_links_record_import_ranges(create_files):
    files = create_files({"main.cairn": '\n  import "other.cairn"', "other.cairn": "1"})
    resolver = FileSystemResolver(root=str(files))

    load_config_sync(resolver, str(files / "main.cairn"))

    assert len(resolver.links) == 1
    assert resolver.links[0].source_path == str(files / "main.cairn")
    assert resolver.links[0].range.as_tuple() == (1, 2, 1, 22)


def test_file_uri_import(create_files):
    files = create_files({"main.cairn": "", "shared.cairn": "{ ok = true }"})
    uri = (files / "shared.cairn").as_uri()
    (files / "main.cairn").write_text(f'import "{uri}"', encoding="utf-8")

    value = load_config_sync(FileSystemResolver(), str(files / "main.cairn"))

    assert value == {"ok": True}


def test_missing_file_raises_resolution_error(create_files):
    files = create_files({"main.cairn": 'import "missing.cairn"'})

    with pytest.raises(ResolutionError) as exc_info:
        load_config_sync(FileSystemResolver(), str(files / "main.cairn"))

    error = exc_info.value
    assert error.code == ErrorCode.IMPORT_FILE_NOT_FOUND
    assert error.path == str(files / "main.cairn")
    assert error.range.as_tuple() == (0, 0, 0, 22)


def test_non_file_scheme_is_rejected(create_files):
    files = create_files({"main.cairn": 'import "https://example.com/base.cairn"'})

    with pytest.raises(ResolutionError) as exc_info:
        load_config_sync(FileSystemResolver(), str(files / "main.cairn"))

    assert exc_info.value.code == ErrorCode.INVALID_FILE_URI


def test_non_utf8_file_raises_fetch_error(create_files):
    files = create_files({"main.cairn": 'import "latin1.cairn"', "latin1.cairn": b'"caf\xe9"'})

    with pytest.raises(FetchError) as exc_info:
        load_config_sync(FileSystemResolver(), str(files / "main.cairn"))

    assert exc_info.value.code == ErrorCode.FILE_NOT_UTF8


def test_unreadable_entry_raises_fetch_error(tmp_path):
    with pytest.raises(FetchError) as exc_info:
        load_config_sync(FileSystemResolver(), str(tmp_path / "absent.cairn"))

    assert exc_info.value.code == ErrorCode.CANNOT_READ_FILE


def test_byte_order_mark_is_tolerated(create_files):
    files = create_files({"main.cairn": b"\xef\xbb\xbf{ a = 1 }"})

    text = asyncio.run(FileSystemResolver().fetch_text(str(files / "main.cairn")))

    assert text == "{ a = 1 }"


def test_report_diagnostic_is_collected(caplog):
    resolver = FileSystemResolver()

    resolver.report_diagnostic("deprecated import", "/x.cairn", 3, 4, 3, 10)

    assert resolver.diagnostics[0].message == "deprecated import"
    assert resolver.diagnostics[0].range.as_tuple() == (3, 4, 3, 10)
    assert "deprecated import" in caplog.text
