"""Discovery of source roots.

Functions to find where Go sources live:
- Roots from the environment and the nearest go.mod
- Remote roots guessed from the files named in a dump
"""

from stackfold.application.discovery.roots import discover_roots, find_go_mod, guess_roots, read_module_path

__all__ = [
    "discover_roots",
    "find_go_mod",
    "guess_roots",
    "read_module_path",
]
