"""File extension to language mapping used for per-component language counts."""

from __future__ import annotations

import posixpath
from typing import Optional

EXTENSION_MAP = {
    ".py": "python",
    ".pyw": "python",
    ".pyi": "python",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".kt": "kotlin",
    ".kts": "kotlin",
    ".scala": "scala",
    ".rb": "ruby",
    ".php": "php",
    ".cs": "csharp",
    ".swift": "swift",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".hpp": "cpp",
    ".tf": "hcl",
    ".sh": "shell",
    ".sql": "sql",
    ".vue": "vue",
}

FILENAME_MAP = {
    "Dockerfile": "dockerfile",
    "Makefile": "makefile",
    "Jenkinsfile": "groovy",
}


def detect_language(file_name: str) -> Optional[str]:
    """Language for ``file_name`` by exact name first, then extension."""
    if file_name in FILENAME_MAP:
        return FILENAME_MAP[file_name]
    _, ext = posixpath.splitext(file_name)
    return EXTENSION_MAP.get(ext.lower()) if ext else None
