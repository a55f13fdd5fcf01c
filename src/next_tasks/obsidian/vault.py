"""Document source backed by an Obsidian vault directory."""

import logging
from pathlib import Path

from next_tasks.obsidian.write_guard import CompletionToken

logger = logging.getLogger(__name__)


class ObsidianVault:
    """Markdown documents of an Obsidian vault."""

    def __init__(self, vault_path: str, name: str) -> None:
        """Initialize vault with its root directory and name."""
        self._root = Path(vault_path).expanduser()
        self.name = name

    @property
    def root(self) -> Path:
        return self._root

    def list_documents(self) -> list[str]:
        """List all markdown documents, skipping hidden folders like .obsidian."""
        if not self._root.exists():
            logger.warning(f"[Vault] Vault not found: {self._root}")
            return []

        names: list[str] = []
        for file_path in sorted(self._root.rglob("*.md")):
            relative = file_path.relative_to(self._root)
            if any(part.startswith(".") for part in relative.parts):
                continue
            names.append(relative.with_suffix("").as_posix())
        return names

    def read_text(self, name: str) -> str:
        """Read a document by name."""
        content, _ = self._read(self._resolve(name))
        return content

    def write_text(self, name: str, text: str, token: CompletionToken) -> None:
        """Write a document back in the encoding it was read with.

        Raises:
            ValueError: If the token does not belong to this document
        """
        if token.vault != self.name or token.document != name:
            raise ValueError(f"Token for {token.vault}/{token.document} cannot write {name}")

        file_path = self._resolve(name)
        _, encoding = self._read(file_path)
        with file_path.open("w", encoding=encoding, newline="") as handle:
            handle.write(text)
        logger.info(f"[Vault] Rewrote {name} in {self.name}")

    def document_name(self, file_path: str | Path) -> str | None:
        """Map an absolute markdown path to a document name, or None if outside."""
        path = Path(file_path)
        if path.suffix != ".md":
            return None
        try:
            relative = path.relative_to(self._root)
        except ValueError:
            return None
        return relative.with_suffix("").as_posix()

    def _resolve(self, name: str) -> Path:
        """Resolve a document name to its file, refusing paths outside the vault."""
        file_path = (self._root / f"{name}.md").resolve()
        if not file_path.is_relative_to(self._root.resolve()):
            raise ValueError(f"Document outside vault: {name}")
        if not file_path.exists():
            raise FileNotFoundError(f"Document not found: {name}")
        return file_path

    def _read(self, file_path: Path) -> tuple[str, str]:
        # Try UTF-8 first, fallback to latin-1 for non-UTF-8 files.
        # newline="" keeps CRLF endings intact across a rewrite.
        try:
            with file_path.open(encoding="utf-8", newline="") as handle:
                return handle.read(), "utf-8"
        except UnicodeDecodeError:
            with file_path.open(encoding="latin-1", newline="") as handle:
                return handle.read(), "latin-1"
