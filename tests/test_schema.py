"""Tests for schema document assembly."""

import pytest

from nlsql_mcp.core.exceptions import SchemaUnavailableError
from nlsql_mcp.core.schema import get_schema, list_model_files
from tests.conftest import AUTHORS_CS, TITLES_CS


@pytest.mark.unit
def test_files_sorted_by_name(models_dir):
    names = [p.name for p in list_model_files(models_dir)]
    assert names == ["Authors.cs", "Titles.cs"]


@pytest.mark.unit
def test_context_file_excluded_case_insensitive(models_dir):
    (models_dir / "AuditCONTEXT.CS").write_text("// context")
    names = [p.name for p in list_model_files(models_dir, pattern="*.[cC]*")]
    assert "AuditCONTEXT.CS" not in names
    assert "PubsContext.cs" not in names


@pytest.mark.unit
def test_non_matching_files_ignored(models_dir):
    (models_dir / "notes.txt").write_text("not a model")
    (models_dir / "Nested.cs").mkdir()
    names = [p.name for p in list_model_files(models_dir)]
    assert names == ["Authors.cs", "Titles.cs"]


@pytest.mark.unit
def test_ordinal_sort(temp_dir):
    for name in ["b.cs", "B.cs", "a.cs", "_x.cs"]:
        (temp_dir / name).write_text(name)
    names = [p.name for p in list_model_files(temp_dir)]
    assert names == ["B.cs", "_x.cs", "a.cs", "b.cs"]


@pytest.mark.unit
def test_schema_document_layout(models_dir):
    schema = get_schema(models_dir)
    expected = (
        "// === Authors.cs ===\n"
        f"{AUTHORS_CS}\n"
        "\n"
        "// === Titles.cs ===\n"
        f"{TITLES_CS}\n"
        "\n"
    )
    assert schema == expected


@pytest.mark.unit
def test_schema_is_deterministic(models_dir):
    assert get_schema(models_dir) == get_schema(models_dir)


@pytest.mark.unit
def test_schema_reflects_directory_changes(models_dir):
    before = get_schema(models_dir)
    (models_dir / "Publishers.cs").write_text("public class Publisher {}")
    after = get_schema(models_dir)
    assert before != after
    assert after.index("Authors.cs") < after.index("Publishers.cs")
    assert after.index("Publishers.cs") < after.index("Titles.cs")


@pytest.mark.unit
def test_empty_directory_gives_empty_schema(temp_dir):
    assert get_schema(temp_dir) == ""


@pytest.mark.unit
def test_missing_directory_raises(temp_dir):
    missing = temp_dir / "Models"
    with pytest.raises(SchemaUnavailableError, match="Models directory not found at"):
        get_schema(missing)


@pytest.mark.unit
def test_custom_pattern_and_suffix(temp_dir):
    (temp_dir / "author.py").write_text("class Author: ...")
    (temp_dir / "db_context.py").write_text("engine = None")
    schema = get_schema(temp_dir, pattern="*.py", exclude_suffix="_context.py")
    assert "// === author.py ===" in schema
    assert "db_context.py" not in schema


@pytest.mark.unit
def test_undecodable_bytes_are_replaced(temp_dir):
    (temp_dir / "Legacy.cs").write_bytes(b"public class Legacy { } // caf\xe9\n")
    schema = get_schema(temp_dir)
    assert schema.startswith("// === Legacy.cs ===\n")
    assert "public class Legacy { } // caf\ufffd\n" in schema
