"""
Utility script to generate and write the OpenAPI schema for the FastAPI app.

The schema is built from a freshly created application using the in-memory
store, so generating it never touches a real database.

Usage:
    python -m task_tracker.generate_openapi [output_path]

Notes:
- The default output is interfaces/openapi.json under the project root.
- Every tag declared in main.openapi_tags is present in the written schema.
"""
from __future__ import annotations

import json
import os
import sys
from typing import Any, Dict, List, Optional

from .application import create_app, openapi_tags
from .settings import Settings


def _default_output_path() -> str:
    package_dir = os.path.dirname(os.path.abspath(__file__))  # .../src/task_tracker
    project_root = os.path.dirname(os.path.dirname(package_dir))
    return os.path.join(project_root, "interfaces", "openapi.json")


def _ensure_tags(schema: Dict[str, Any]) -> None:
    """
    Ensure the OpenAPI schema contains the declared tags metadata without
    overriding tag definitions that are already present.
    """
    existing_tags: List[Dict[str, Any]] = schema.get("tags", []) or []
    existing_names = {t.get("name") for t in existing_tags if isinstance(t, dict)}
    for tag in openapi_tags:
        if tag.get("name") not in existing_names:
            existing_tags.append(tag)
    if existing_tags:
        schema["tags"] = existing_tags


# PUBLIC_INTERFACE
def generate_openapi(output_path: Optional[str] = None) -> str:
    """Generate the OpenAPI schema file and return the written file path."""
    out_path = output_path or _default_output_path()
    app = create_app(Settings(database_url="memory://", persistence_backend="memory"))
    schema = app.openapi()
    _ensure_tags(schema)

    os.makedirs(os.path.dirname(os.path.abspath(out_path)), exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
    return out_path


def main() -> None:
    out_path = generate_openapi(sys.argv[1] if len(sys.argv) > 1 else None)
    print(f"Wrote OpenAPI schema to: {out_path}")


if __name__ == "__main__":
    main()
