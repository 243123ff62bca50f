# scripts/gen_schemas.py
"""
Generate JSON Schemas for the sheetcheck boundary models.

This script exports JSON Schema files for:
    - ValidationIssue
    - FixSuggestion
    - RowFix
    - ValidationReport
    - Config

Output directory: schemas/
"""

import json
from pathlib import Path

from sheetcheck.schemas.models import (
    Config,
    FixSuggestion,
    RowFix,
    ValidationIssue,
    ValidationReport,
)


def export_schema(model_cls, name: str, out_dir: Path) -> Path:
    """
    @brief
    Exports the JSON schema of a given Pydantic model.

    @params
        model_cls : Type[BaseModel]
            The Pydantic model class whose schema will be generated.
        name : str
            Base name of the output file (without extension).
        out_dir : Path
            Target directory where the schema file will be written.

    @returns
        Path of the written "<name>.schema.json" file.
    """
    # (1) Ensure output directory exists
    out_dir.mkdir(parents=True, exist_ok=True)

    # (2) Serialize JSON Schema to file with indentation and final newline
    schema_path = (out_dir / f"{name}.schema.json").resolve()
    with schema_path.open("w", encoding="utf-8") as f:
        json.dump(model_cls.model_json_schema(), f, indent=2, ensure_ascii=False)
        f.write("\n")

    print(f"Generated {schema_path}")
    return schema_path


def main(out_dir: Path | None = None) -> None:
    target = out_dir or Path("schemas").resolve()
    export_schema(ValidationIssue, "validation_issue", target)
    export_schema(FixSuggestion, "fix_suggestion", target)
    export_schema(RowFix, "row_fix", target)
    export_schema(ValidationReport, "validation_report", target)
    export_schema(Config, "config", target)


if __name__ == "__main__":
    main()
