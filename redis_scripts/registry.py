"""
Script discovery and lookup
Maps logical script names to .lua files found under an ordered search path
"""
import enum
import hashlib
import os
import threading
from pathlib import PurePath
from typing import Any, Dict, Iterable, Iterator, List, Optional

from core.exceptions import ScriptNotFoundError
from core.logging import get_logger

SCRIPT_EXTENSION = ".lua"

# Process-wide default search path, copied by each new registry at
# construction. Shared mutable state: set it before building adapters and
# reset it between tests.
DEFAULT_SEARCH_PATH: Optional[List[str]] = None

logger = get_logger(__name__, domain="registry")


def set_default_search_path(paths: Optional[Iterable[Any]]) -> None:
    """Set the search path used by registries created without one."""
    global DEFAULT_SEARCH_PATH
    DEFAULT_SEARCH_PATH = None if paths is None else [os.fspath(path) for path in paths]


def get_default_search_path() -> Optional[List[str]]:
    """Return a copy of the process-wide default search path, or None if unset."""
    return None if DEFAULT_SEARCH_PATH is None else list(DEFAULT_SEARCH_PATH)


def normalize_name(name: Any) -> str:
    """Turn a str, path or enum member into a logical script name."""
    if isinstance(name, enum.Enum):
        name = name.value
    if isinstance(name, PurePath):
        return name.as_posix()
    return str(name)


class Script:
    """
    A script in a .lua file under the search path.

    ``name`` and ``path`` are fixed at creation. ``sha`` and ``content`` are
    read from disk on first access and then kept for the lifetime of the
    object, so later edits to the file are not picked up.
    """

    def __init__(self, name: str, path: str):
        self._name = name
        self._path = path
        self._sha: Optional[str] = None
        self._content: Optional[bytes] = None
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> str:
        return self._path

    @property
    def sha(self) -> str:
        """The SHA1 of the content of the script, as lowercase hex."""
        if self._sha is None:
            self._read()
        return self._sha

    @property
    def content(self) -> bytes:
        """The raw bytes of the script, exactly as hashed into ``sha``."""
        if self._content is None:
            self._read()
        return self._content

    def _read(self) -> None:
        # sha is always the digest of exactly these bytes
        with self._lock:
            if self._content is None:
                with open(self._path, "rb") as f:
                    data = f.read()
                self._sha = hashlib.sha1(data).hexdigest()
                self._content = data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Script):
            return NotImplemented
        return (self._name, self._path) == (other._name, other._path)

    def __hash__(self) -> int:
        return hash((self._name, self._path))

    def __repr__(self) -> str:
        return f"Script(name={self._name!r}, path={self._path!r})"


class ScriptRegistry:
    """
    Name -> Script mapping over an ordered list of search roots.

    Every root is searched recursively for .lua files. A script's name is its
    path relative to the root, minus the extension, so ``scripts/foo/bar.lua``
    under root ``scripts`` is ``foo/bar``. Like a module search path, earlier
    roots shadow later ones when both hold the same name.

    Discovery runs once per search path and is memoized. Assigning
    ``search_path`` (or calling ``refresh``) forces rediscovery.
    """

    def __init__(self, search_path: Optional[Iterable[Any]] = None):
        if search_path is None:
            search_path = DEFAULT_SEARCH_PATH or []
        self._search_path = [os.fspath(path) for path in search_path]
        self._scripts: Optional[Dict[str, Script]] = None
        self._lock = threading.Lock()

    @property
    def search_path(self) -> List[str]:
        return list(self._search_path)

    @search_path.setter
    def search_path(self, paths: Iterable[Any]) -> None:
        with self._lock:
            self._search_path = [os.fspath(path) for path in paths]
            self._scripts = None

    def refresh(self) -> None:
        """Forget discovered scripts; the next lookup searches again."""
        with self._lock:
            self._scripts = None

    def resolve(self, name: Any) -> Script:
        """
        Return the named script.

        Raises ScriptNotFoundError if no such script exists.
        """
        script = self._discovered().get(normalize_name(name))
        if script is None:
            raise ScriptNotFoundError(name)
        return script

    def scripts(self) -> Dict[str, Script]:
        """Return every discovered script, keyed by name."""
        return dict(self._discovered())

    def names(self) -> List[str]:
        return sorted(self._discovered())

    def __contains__(self, name: Any) -> bool:
        return normalize_name(name) in self._discovered()

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._discovered())

    def _discovered(self) -> Dict[str, Script]:
        scripts = self._scripts
        if scripts is None:
            with self._lock:
                if self._scripts is None:
                    self._scripts = self._find_scripts(self._search_path)
                scripts = self._scripts
        return scripts

    @staticmethod
    def _find_scripts(search_path: List[str]) -> Dict[str, Script]:
        scripts: Dict[str, Script] = {}
        for root in search_path:
            found = 0
            for path in _walk_scripts(root):
                relative = os.path.relpath(path, root)
                name = PurePath(relative[: -len(SCRIPT_EXTENSION)]).as_posix()
                if name not in scripts:
                    scripts[name] = Script(name, os.path.abspath(path))
                    found += 1
            logger.debug(f"Found {found} script(s) under {root}", extra={"root": root, "count": found})
        return scripts


def _walk_scripts(root: str) -> Iterator[str]:
    def on_error(error: OSError) -> None:
        logger.debug(f"Skipping unreadable path {error.filename}: {error.strerror}")

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        dirnames.sort()
        for filename in sorted(filenames):
            if filename.endswith(SCRIPT_EXTENSION) and filename != SCRIPT_EXTENSION:
                yield os.path.join(dirpath, filename)
