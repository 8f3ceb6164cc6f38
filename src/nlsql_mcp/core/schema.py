"""Schema document assembly from entity model files.

The model is given the database structure as the concatenated text of
the entity class files found in the models directory. The directory is
re-read on every call.
"""

from __future__ import annotations

from pathlib import Path

from nlsql_mcp.core.exceptions import SchemaUnavailableError


def list_model_files(
    models_dir: Path,
    pattern: str = "*.cs",
    exclude_suffix: str = "Context.cs",
) -> list[Path]:
    """Return entity model files sorted by file name.

    Files whose name ends with ``exclude_suffix`` (case-insensitive) are
    the database context definition, not an entity, and are skipped.
    """
    if not models_dir.is_dir():
        msg = f"Models directory not found at {models_dir}"
        raise SchemaUnavailableError(msg)

    suffix = exclude_suffix.lower()
    files = [
        p
        for p in models_dir.glob(pattern)
        if p.is_file() and not (suffix and p.name.lower().endswith(suffix))
    ]
    return sorted(files, key=lambda p: p.name)


def get_schema(
    models_dir: Path,
    pattern: str = "*.cs",
    exclude_suffix: str = "Context.cs",
) -> str:
    """Build the schema document for the model prompt.

    Each file contributes a ``// === <name> ===`` delimiter line, its raw
    text and a blank line. Undecodable bytes become U+FFFD.
    Raises SchemaUnavailableError when the directory does not exist.
    """
    parts: list[str] = []
    for path in list_model_files(models_dir, pattern, exclude_suffix):
        parts.append(f"// === {path.name} ===\n")
        parts.append(path.read_text(encoding="utf-8", errors="replace") + "\n")
        parts.append("\n")
    return "".join(parts)
