"""Extension -> language registry.

Only languages flagged ``analyzable`` get dependency extraction and a
complexity score.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Dict, Tuple


@dataclass(frozen=True)
class Language:
    name: str
    display_name: str
    extensions: Tuple[str, ...]
    color: int
    analyzable: bool


UNKNOWN_LANGUAGE = "other"
DEFAULT_COLOR = 0xAAAAAA

LANGUAGES: Dict[str, Language] = {
    lang.name: lang
    for lang in (
        Language("typescript", "TypeScript", (".ts", ".tsx", ".mts", ".cts"), 0x3178C6, True),
        Language("javascript", "JavaScript", (".js", ".jsx", ".mjs", ".cjs"), 0xF7DF1E, True),
        Language("python", "Python", (".py", ".pyi"), 0x3776AB, True),
        Language("java", "Java", (".java",), 0xED8B00, True),
        Language("go", "Go", (".go",), 0x00ADD8, True),
        Language("csharp", "C#", (".cs",), 0x239120, True),
        Language("cpp", "C++", (".cpp", ".hpp", ".cc", ".cxx", ".hh"), 0x00599C, True),
        Language("c", "C", (".c", ".h"), 0x555555, True),
        Language("rust", "Rust", (".rs",), 0xDEA584, False),
        Language("ruby", "Ruby", (".rb",), 0xCC342D, False),
        Language("php", "PHP", (".php",), 0x777BB4, False),
        Language("swift", "Swift", (".swift",), 0xF05138, False),
        Language("kotlin", "Kotlin", (".kt", ".kts"), 0x7F52FF, False),
        Language("scala", "Scala", (".scala",), 0xDC322F, False),
        Language("markdown", "Markdown", (".md",), 0xFFD700, False),
        Language("json", "JSON", (".json",), 0xFF8C00, False),
        Language("yaml", "YAML", (".yml", ".yaml"), 0x20B2AA, False),
        Language("toml", "TOML", (".toml",), 0x8A2BE2, False),
    )
}

_EXTENSION_MAP: Dict[str, str] = {
    ext: lang.name for lang in LANGUAGES.values() for ext in lang.extensions
}


def language_for_extension(ext: str) -> str:
    return _EXTENSION_MAP.get(ext.lower(), UNKNOWN_LANGUAGE)


def language_for_path(path: str) -> str:
    return language_for_extension(PurePosixPath(path.replace("\\", "/")).suffix)


def is_code_language(language: str) -> bool:
    lang = LANGUAGES.get(language.lower())
    return bool(lang and lang.analyzable)


def language_color(language: str) -> int:
    lang = LANGUAGES.get(language.lower())
    return lang.color if lang else DEFAULT_COLOR


def language_display_name(language: str) -> str:
    lang = LANGUAGES.get(language.lower())
    return lang.display_name if lang else "Unknown"
