import asyncio

import pytest

pytest.importorskip("pygls")

from lsprotocol.types import DiagnosticSeverity

from cairn.server import _links, validate_document


def test_missing_import_is_published_at_its_range(tmp_path):
    # --- ARRANGE ---
    main_path = tmp_path / "main.cairn"
    source = '{\n  db = import "db.cairn",\n}'
    main_path.write_text("{}", encoding="utf-8")

    # --- ACT ---
    # The editor buffer wins over the (stale) file on disk.
    diagnostics = asyncio.run(validate_document(main_path.as_uri(), source))

    # --- ASSERT ---
    [diagnostic] = diagnostics[str(main_path)]
    assert diagnostic.severity == DiagnosticSeverity.Error
    assert (diagnostic.range.start.line, diagnostic.range.start.character) == (1, 7)
    assert (diagnostic.range.end.line, diagnostic.range.end.character) == (1, 24)
    assert "db.cairn" in diagnostic.message


def test_clean_document_publishes_empty_list_and_links(tmp_path):
    (tmp_path / "db.cairn").write_text("{ port = 1 }", encoding="utf-8")
    main_path = tmp_path / "main.cairn"
    source = 'import "db.cairn"'
    main_path.write_text(source, encoding="utf-8")

    diagnostics = asyncio.run(validate_document(main_path.as_uri(), source))

    assert diagnostics == {str(main_path): []}
    [link] = _links[main_path.as_uri()]
    assert link.target_path == str(tmp_path / "db.cairn")


def test_error_in_imported_document_is_published_there(tmp_path):
    (tmp_path / "broken.cairn").write_text("{ a = }", encoding="utf-8")
    main_path = tmp_path / "main.cairn"
    source = 'import "broken.cairn"'

    diagnostics = asyncio.run(validate_document(main_path.as_uri(), source))

    assert diagnostics[str(main_path)] == []
    [diagnostic] = diagnostics[str(tmp_path / "broken.cairn")]
    assert diagnostic.range.start.character == 6


def test_fixed_import_has_its_old_diagnostics_cleared(tmp_path):
    # --- ARRANGE ---
    broken_path = tmp_path / "broken.cairn"
    broken_path.write_text("{ a = }", encoding="utf-8")
    main_uri = (tmp_path / "main.cairn").as_uri()
    source = 'import "broken.cairn"'
    asyncio.run(validate_document(main_uri, source))

    # --- ACT ---
    broken_path.write_text("{ a = 1 }", encoding="utf-8")
    diagnostics = asyncio.run(validate_document(main_uri, source))

    # --- ASSERT ---
    assert diagnostics == {str(tmp_path / "main.cairn"): [], str(broken_path): []}


def test_uri_with_escaped_characters_maps_to_path(tmp_path):
    folder = tmp_path / "my configs"
    folder.mkdir()
    main_path = folder / "main.cairn"

    diagnostics = asyncio.run(validate_document(main_path.as_uri(), "{ ok = true }"))

    assert diagnostics == {str(main_path): []}
