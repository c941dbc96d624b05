"""Display language labels and sizes for generated files."""

DEFAULT_LANGUAGE = "text"

EXTENSION_LANGUAGES = {
    "ts": "typescript",
    "tsx": "typescript",
    "js": "javascript",
    "jsx": "javascript",
    "mjs": "javascript",
    "cjs": "javascript",
    "json": "json",
    "html": "html",
    "htm": "html",
    "css": "css",
    "scss": "scss",
    "sass": "sass",
    "md": "markdown",
    "py": "python",
    "vue": "vue",
    "java": "java",
    "cpp": "cpp",
    "cc": "cpp",
    "yml": "yaml",
    "yaml": "yaml",
    "toml": "toml",
    "sql": "sql",
    "sh": "shell",
    "svg": "svg",
    "txt": "text",
}

SPECIAL_FILENAMES = {
    "dockerfile": "dockerfile",
    "makefile": "makefile",
    ".gitignore": "text",
    ".env": "text",
}


def detect_language(path: str) -> str:
    """Derive a language label from the file name or extension."""
    name = path.rsplit("/", 1)[-1].lower()
    if name in SPECIAL_FILENAMES:
        return SPECIAL_FILENAMES[name]
    if "." not in name.lstrip("."):
        return DEFAULT_LANGUAGE
    extension = name.rsplit(".", 1)[-1]
    return EXTENSION_LANGUAGES.get(extension, DEFAULT_LANGUAGE)


def format_file_size(size: int) -> str:
    """Human readable size: ``512 B``, ``1.5 KB``, ``2.0 MB``."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"
