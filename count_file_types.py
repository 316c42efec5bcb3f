#!/usr/bin/env python3
import os
import sys
import stat
import logging
from enum import IntEnum
from pathlib import Path
from collections import defaultdict

logger = logging.getLogger(__name__)

# --------------------------
# Categories
# --------------------------
DIRECTORY_CATEGORY = "directory"
NO_EXTENSION_CATEGORY = "no-extension"
OTHER_CATEGORY = "other"

# Lowercased extension (without the dot) -> category
EXTENSION_CATEGORIES = {
    "java": "java",
    "class": "java",
    "txt": "text",
    "md": "text",
    "png": "image",
    "jpg": "image",
    "jpeg": "image",
    "gif": "image",
    "": NO_EXTENSION_CATEGORY,
}

SUMMARY_WIDTH = 12


class Verbosity(IntEnum):
    QUIET = 0
    NORMAL = 1
    VERBOSE = 2


VERBOSITY_WORDS = {
    "quiet": Verbosity.QUIET,
    "verbose": Verbosity.VERBOSE,
}


# --------------------------
# Classification
# --------------------------


def get_extension(filename: str) -> str:
    """
    Returns the lowercased text after the last '.' in `filename`.
    Hidden files such as ".gitignore" and names ending in a dot have no extension.
    """
    idx = filename.rfind(".")
    if idx <= 0 or idx == len(filename) - 1:
        return ""
    return filename[idx + 1:].lower()


def classify(filename: str) -> str:
    return EXTENSION_CATEGORIES.get(get_extension(filename), OTHER_CATEGORY)


# --------------------------
# Tree Walking
# --------------------------


def walk_file_tree(start: Path, visitor):
    """
    Depth-first walk of the tree rooted at `start`, reporting every entry to `visitor`:
      - pre_visit_directory(dir, st) before a directory's children,
      - visit_file(path, st) for anything that is not descended into,
      - visit_file_failed(path, exc) when an entry can't be stat'ed or a directory can't be listed,
      - post_visit_directory(dir, exc) after the children, with the listing error if there was one.
    Symlinks to directories are visited as files, never followed.
    The walk keeps its own stack of pending directories, so tree depth is not bounded by recursion.
    """
    try:
        st = os.stat(start)
    except OSError as e:
        visitor.visit_file_failed(start, e)
        return

    if not stat.S_ISDIR(st.st_mode):
        visitor.visit_file(start, st)
        return

    stack = []
    _enter_directory(start, st, visitor, stack)
    while stack:
        directory, children, error = stack[-1]
        entry = next(children, None)
        if entry is None:
            stack.pop()
            visitor.post_visit_directory(directory, error)
            continue

        child = directory / entry.name
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
            child_st = entry.stat(follow_symlinks=not is_dir)
        except OSError as e:
            visitor.visit_file_failed(child, e)
            continue

        if is_dir:
            _enter_directory(child, child_st, visitor, stack)
        else:
            visitor.visit_file(child, child_st)


def _enter_directory(directory: Path, st, visitor, stack):
    """
    Lists `directory` and pushes (directory, children, listing error) onto `stack`.
    The listing is read up front so only one directory handle is open at a time.
    """
    try:
        listing = os.scandir(directory)
    except OSError as e:
        visitor.visit_file_failed(directory, e)
        return

    visitor.pre_visit_directory(directory, st)
    entries = []
    error = None
    with listing:
        while True:
            try:
                entries.append(next(listing))
            except StopIteration:
                break
            except OSError as e:
                # The rest of the listing is lost; report it when leaving.
                error = e
                break
    stack.append((directory, iter(entries), error))


# --------------------------
# Counting
# --------------------------


class ExtensionCountingVisitor:
    """
    Counts visited entries by category and traces each event when verbose.
    Errors always go to the log, whatever the verbosity.
    """

    def __init__(self, verbosity: Verbosity = Verbosity.NORMAL):
        self.verbosity = verbosity
        self.counts = defaultdict(int)

    def pre_visit_directory(self, directory: Path, st):
        if self.verbosity >= Verbosity.VERBOSE:
            print(f"Entering directory: {directory}", flush=True)
        self.counts[DIRECTORY_CATEGORY] += 1

    def visit_file(self, file_path: Path, st):
        self.counts[classify(file_path.name)] += 1
        if self.verbosity >= Verbosity.VERBOSE:
            print(f"Visited: {file_path} (ext='{get_extension(file_path.name)}')", flush=True)

    def visit_file_failed(self, path: Path, exc: OSError):
        logger.error(f"Failed to visit file: {path} -> {exc}")

    def post_visit_directory(self, directory: Path, exc):
        if exc is not None:
            logger.error(f"Error after visiting directory: {directory} -> {exc}")
        if self.verbosity >= Verbosity.VERBOSE:
            print(f"Leaving directory: {directory}", flush=True)


def count_tree(start: Path, verbosity: Verbosity = Verbosity.NORMAL) -> dict:
    """
    Walks `start` once and returns the category -> count table.
    """
    visitor = ExtensionCountingVisitor(verbosity)
    walk_file_tree(Path(start), visitor)
    return dict(visitor.counts)


def print_summary(counts: dict):
    for category, count in sorted(counts.items()):
        print(f"{category:<{SUMMARY_WIDTH}} : {count}")


# --------------------------
# Main Entry Point
# --------------------------


def parse_args(argv=None):
    """
    Reads [start_path] [quiet|verbose] by position.
    Anything after the second argument is ignored and an unknown verbosity word means normal.
    """
    if argv is None:
        argv = sys.argv[1:]

    start = Path(argv[0]) if len(argv) > 0 else Path(".")
    word = argv[1] if len(argv) > 1 else ""
    return start, VERBOSITY_WORDS.get(word.lower(), Verbosity.NORMAL)


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    start, verbosity = parse_args(argv)

    if verbosity > Verbosity.QUIET:
        print(f"Starting traversal at: {start.absolute()}")

    counts = count_tree(start, verbosity)

    if verbosity > Verbosity.QUIET:
        print("\nSummary:")
    print_summary(counts)
    return 0


if __name__ == "__main__":
    sys.exit(main())
