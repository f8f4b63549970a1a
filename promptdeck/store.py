"""Filesystem-backed prompt store.

All prompt files live directly under ``<base_path>/prompts``. Paths handed
to the store are relative to that directory; anything that would resolve
outside of it is rejected with ``InvalidPathError``.

Writes go to a hidden temporary file in the same directory which is then
renamed over the target, so readers never observe a partially written
prompt and an interrupted write leaves the original intact.
"""

import logging
import os
import stat
from pathlib import Path, PurePosixPath
from typing import List, Optional, Tuple, Union

from . import frontmatter
from .constants import DEFAULT_SUFFIX, PROMPT_SUFFIXES, PROMPTS_DIR
from .errors import (
    InvalidFormatError,
    InvalidPathError,
    PromptAlreadyExistsError,
    PromptNotFoundError,
    StorageIOError,
)
from .models import PromptMetadata, SearchType, normalize_name

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class PromptStore:
    """Reads, writes, renames and deletes prompt files."""

    def __init__(self, base_path: PathLike):
        self.base_path = Path(base_path).expanduser()
        self.prompts_dir = self.base_path / PROMPTS_DIR

    def ensure_dir(self) -> Path:
        """Create the prompts directory if it does not exist yet."""
        try:
            self.prompts_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError(f"cannot create {self.prompts_dir}: {e}", e) from e
        return self.prompts_dir

    # ------------------------------------------------------------------
    # Path handling
    # ------------------------------------------------------------------

    def resolve(self, path: PathLike) -> Path:
        """Resolve a store-relative path to an absolute one.

        Raises:
            InvalidPathError: For absolute paths, ``..`` segments, or paths
                that otherwise land outside the prompts directory.
        """
        rel = PurePosixPath(str(path).replace("\\", "/"))
        if not str(path) or rel.is_absolute() or ".." in rel.parts or str(rel) == ".":
            raise InvalidPathError(str(path))
        resolved = (self.prompts_dir / Path(*rel.parts)).resolve()
        root = self.prompts_dir.resolve()
        if resolved != root and root not in resolved.parents:
            raise InvalidPathError(str(path))
        return resolved

    def absolute_path(self, metadata: PromptMetadata) -> Path:
        """Absolute path of a prompt's file, as handed to the editor."""
        return self.resolve(metadata.file_path)

    @staticmethod
    def _is_prompt_file(path: Path) -> bool:
        return (
            path.is_file()
            and not path.name.startswith(".")
            and path.suffix.lower() in PROMPT_SUFFIXES
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list(self) -> List[PromptMetadata]:
        """Metadata for every parseable prompt, ordered by normalized name.

        Files whose header fails to parse are skipped with a warning.
        """
        if not self.prompts_dir.is_dir():
            return []

        prompts: List[PromptMetadata] = []
        try:
            entries = sorted(self.prompts_dir.iterdir())
        except OSError as e:
            raise StorageIOError(f"cannot list {self.prompts_dir}: {e}", e) from e

        for entry in entries:
            if not self._is_prompt_file(entry):
                continue
            try:
                header, _ = frontmatter.parse(entry.read_text(encoding="utf-8"))
            except InvalidFormatError as e:
                logger.warning(f"Skipping {entry.name}: {e}")
                continue
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Skipping {entry.name}: cannot read ({e})")
                continue
            prompts.append(PromptMetadata.from_header(header, entry.name))

        prompts.sort(key=lambda p: p.name.lower())
        return prompts

    def find_by_name(self, name: str) -> Optional[PromptMetadata]:
        """Return the prompt whose normalized name equals ``normalize_name(name)``."""
        wanted = normalize_name(name)
        for prompt in self.list():
            if prompt.name == wanted:
                return prompt
        return None

    def exists(self, normalized_name: str) -> bool:
        """Check whether any prompt file with this stem exists."""
        return any(
            self.resolve(f"{normalized_name}{suffix}").exists()
            for suffix in PROMPT_SUFFIXES
        )

    def read(self, path: PathLike) -> str:
        """Full text of a prompt file.

        Raises:
            PromptNotFoundError: If the file is absent.
        """
        target = self.resolve(path)
        try:
            return target.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise PromptNotFoundError(PurePosixPath(str(path)).stem)
        except OSError as e:
            raise StorageIOError(f"cannot read {target}: {e}", e) from e

    def read_prompt(self, metadata: PromptMetadata) -> Tuple[dict, str]:
        """Parsed (header, body) of a prompt."""
        return frontmatter.parse(self.read(metadata.file_path))

    def search(self, query: str, kind: SearchType = SearchType.ALL) -> List[PromptMetadata]:
        """Prompts matching ``query`` (case-insensitive substring).

        ``NAME`` matches display names, ``TAG`` any tag, ``CONTENT`` the
        body, and ``ALL`` the union of the three in index order.
        """
        needle = query.lower()
        results = []
        for prompt in self.list():
            if kind in (SearchType.NAME, SearchType.ALL) and prompt.matches_name(query):
                results.append(prompt)
            elif kind in (SearchType.TAG, SearchType.ALL) and prompt.matches_tag(query):
                results.append(prompt)
            elif kind in (SearchType.CONTENT, SearchType.ALL):
                try:
                    _, body = self.read_prompt(prompt)
                except InvalidFormatError:
                    continue
                if needle in body.lower():
                    results.append(prompt)
        return results

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def write(self, path: PathLike, text: str) -> None:
        """Atomically replace a prompt file with ``text``.

        An existing file keeps its permission bits.
        """
        target = self.resolve(path)
        self.ensure_dir()
        tmp_path = target.with_name(f".{target.name}.tmp")
        try:
            try:
                mode: Optional[int] = stat.S_IMODE(os.stat(target).st_mode)
            except FileNotFoundError:
                mode = None
            with open(tmp_path, "w", encoding="utf-8", newline="") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            if mode is not None:
                os.chmod(tmp_path, mode)
            os.replace(tmp_path, target)
        except OSError as e:
            try:
                tmp_path.unlink()
            except OSError:
                pass
            raise StorageIOError(f"cannot write {target}: {e}", e) from e
        logger.debug(f"Wrote {target}")

    def create(self, normalized_name: str, text: str) -> PromptMetadata:
        """Write a new prompt file ``<normalized_name>.md``.

        Raises:
            PromptAlreadyExistsError: If a prompt with that name exists.
            InvalidPathError: If the name is not a plain file stem.
        """
        if not normalized_name or "/" in normalized_name or "\\" in normalized_name:
            raise InvalidPathError(normalized_name)
        if self.exists(normalized_name):
            raise PromptAlreadyExistsError(normalized_name)
        file_path = f"{normalized_name}{DEFAULT_SUFFIX}"
        self.write(file_path, text)
        header, _ = frontmatter.parse(text)
        logger.info(f"Created prompt {file_path}")
        return PromptMetadata.from_header(header, file_path)

    def rename(self, path: PathLike, new_normalized_name: str) -> str:
        """Move a prompt file to a new stem, keeping its suffix.

        Returns:
            The new store-relative path.
        """
        source = self.resolve(path)
        if not source.exists():
            raise PromptNotFoundError(PurePosixPath(str(path)).stem)
        if not new_normalized_name or "/" in new_normalized_name:
            raise InvalidPathError(new_normalized_name)
        if self.exists(new_normalized_name):
            raise PromptAlreadyExistsError(new_normalized_name)
        new_path = f"{new_normalized_name}{source.suffix}"
        target = self.resolve(new_path)
        try:
            os.replace(source, target)
        except OSError as e:
            raise StorageIOError(f"cannot rename {source}: {e}", e) from e
        logger.info(f"Renamed {source.name} -> {target.name}")
        return new_path

    def delete(self, path: PathLike) -> None:
        """Remove a prompt file.

        Raises:
            PromptNotFoundError: If the file is absent.
        """
        target = self.resolve(path)
        try:
            target.unlink()
        except FileNotFoundError:
            raise PromptNotFoundError(PurePosixPath(str(path)).stem)
        except OSError as e:
            raise StorageIOError(f"cannot delete {target}: {e}", e) from e
        logger.info(f"Deleted prompt {target.name}")
