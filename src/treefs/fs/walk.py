"""
Generic helpers over any tree filesystem view.

These only use open() and read_dir(), so they work the same on a
sub-view as on the root view.
"""

from fnmatch import fnmatchcase
from typing import Iterator, List, Tuple

from .errors import InvalidPathError, NotFoundError
from .path import ROOT, valid_path


def join(dirpath: str, name: str) -> str:
    return name if dirpath == ROOT else f"{dirpath}/{name}"


def exists(fsys, name: str) -> bool:
    """Return True if name resolves to a file or directory."""
    try:
        fsys.open(name).close()
    except (NotFoundError, InvalidPathError):
        return False
    return True


def is_dir(fsys, name: str) -> bool:
    try:
        with fsys.open(name) as f:
            return f.is_dir()
    except (NotFoundError, InvalidPathError):
        return False


def walk(fsys, top: str = ROOT) -> Iterator[Tuple[str, List[str], List[str]]]:
    """
    Walk a view top-down, like os.walk.

    Yields (dirpath, dirnames, filenames) with names sorted. Removing
    names from dirnames prunes the walk. A top that names a file yields
    nothing; a missing top raises NotFoundError.
    """
    with fsys.open(top) as f:
        if not f.is_dir():
            return

    dirnames = []
    filenames = []
    for entry in fsys.read_dir(top):
        if entry.is_dir():
            dirnames.append(entry.name)
        else:
            filenames.append(entry.name)

    yield top, dirnames, filenames

    for name in dirnames:
        yield from walk(fsys, join(top, name))


def has_magic(segment: str) -> bool:
    return any(c in segment for c in '*?[')


def glob(fsys, pattern: str) -> List[str]:
    """
    Return the sorted paths matching a shell pattern.

    The pattern is matched segment by segment with fnmatch rules; '/'
    is never matched by a wildcard. Missing directories match nothing.

    Raises InvalidPathError if the pattern is not a valid path.
    """
    if not valid_path(pattern):
        raise InvalidPathError('glob', pattern)
    if pattern == ROOT:
        return [ROOT]
    return sorted(_glob_segments(fsys, ROOT, pattern.split('/')))


def _glob_segments(fsys, dirpath: str, segments: List[str]) -> Iterator[str]:
    segment, rest = segments[0], segments[1:]

    if not has_magic(segment):
        candidate = join(dirpath, segment)
        if not rest:
            if exists(fsys, candidate):
                yield candidate
        elif is_dir(fsys, candidate):
            yield from _glob_segments(fsys, candidate, rest)
        return

    try:
        entries = fsys.read_dir(dirpath)
    except NotFoundError:
        return

    for entry in entries:
        if not fnmatchcase(entry.name, segment):
            continue
        candidate = join(dirpath, entry.name)
        if not rest:
            yield candidate
        elif entry.is_dir():
            yield from _glob_segments(fsys, candidate, rest)
