from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Knowledge base settings
    kb_root: Path = Path("knowledge")
    excluded_dirs: list[str] = [".git", "node_modules"]

    # Link checking settings
    exclusion_list: list[str] = []
    errors_path: str | None = None
    strict: bool = False
    external_link_timeout: float = 2.0

    # Lint rule settings
    known_languages: list[str] = [
        "bash",
        "c",
        "console",
        "cpp",
        "csharp",
        "css",
        "diff",
        "dockerfile",
        "env",
        "go",
        "graphql",
        "hcl",
        "html",
        "ini",
        "java",
        "javascript",
        "js",
        "json",
        "jsonc",
        "jsx",
        "kotlin",
        "make",
        "markdown",
        "md",
        "mermaid",
        "plaintext",
        "powershell",
        "prisma",
        "py",
        "python",
        "ruby",
        "rust",
        "scss",
        "sh",
        "shell",
        "sql",
        "swift",
        "terraform",
        "text",
        "toml",
        "ts",
        "tsx",
        "txt",
        "typescript",
        "xml",
        "yaml",
        "yml",
        "zsh",
    ]
    required_paths: list[str] = []
    skill_file_name: str = "SKILL.md"
    adoption_dirs: list[str] = ["adoption"]

    # Output settings
    site_dir: Path = Path("site")
    site_title: str = "Knowledge Base"
    index_path: str = "data/index.json"

    log_level: str = "INFO"  # Can be DEBUG, INFO, WARNING, ERROR, CRITICAL


settings = Settings()
