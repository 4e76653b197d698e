"""
File name classification.

A file's category is its extension: the text after the last '.',
lowercased. Names without an extension (including dotfiles such as
``.bashrc`` and names ending in '.') fall into ``no_extension``.

Multi-part extensions are NOT recognised: ``archive.tar.gz`` is
classified as ``gz``. This is a deliberate simplification.
"""

NO_EXTENSION = "no_extension"
UNREADABLE = "unreadable"


def extension_of(name: str) -> str:
    """Return the normalized extension of a file name, or '' if it has none."""
    idx = name.rfind(".")
    if idx <= 0 or idx == len(name) - 1:
        return ""
    return name[idx + 1:].lower()


def classify_name(name: str) -> str:
    """Map a file name to its category key."""
    return extension_of(name) or NO_EXTENSION


def split_name(name: str) -> tuple[str, str]:
    """
    Split a file name into (stem, suffix) the same way the classifier sees it.

    The suffix keeps its dot and original case; it is '' when the name
    has no extension.

    >>> split_name("archive.tar.gz")
    ('archive.tar', '.gz')
    >>> split_name(".bashrc")
    ('.bashrc', '')
    """
    if not extension_of(name):
        return name, ""
    idx = name.rfind(".")
    return name[:idx], name[idx:]


def is_category_name(name: str) -> bool:
    """Check if a folder name could have been produced by classify_name."""
    if name == NO_EXTENSION:
        return True
    if not name or name != name.lower():
        return False
    if any(ch in name for ch in "./\\") or any(ch.isspace() for ch in name):
        return False
    return True
