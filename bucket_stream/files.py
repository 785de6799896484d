"""
Helpers for uploading virtual file objects.
"""


from typing import Optional, Protocol, runtime_checkable


class InvalidKeyDerivation(ValueError):
    """
    Raised when the storage key for a file cannot be calculated from its
    base and path.
    """


@runtime_checkable
class FileLike(Protocol):
    """
    A virtual file, with a path relative to some base directory.

    Attributes:
        base: The base that the path is relative to.
        path: The full path of the file.
        contents: The file contents.

    """

    base: str
    path: str
    contents: bytes


def derive_key(file: FileLike, key: Optional[str] = None) -> str:
    """
    Calculates the storage key for a file.

    Args:
        file: The file to calculate the key for.
        key: An explicit key. If provided, it will be used as-is.

    Raises:
        `InvalidKeyDerivation` if no key was provided and the file's path
        does not extend its base.

    Returns:
        The key. This is the explicit key if there was one (either passed
        in or as a `key` attribute on the file), otherwise the file's path
        with the base removed.

    """
    if key is None:
        key = getattr(file, "key", None)
    if key:
        return key

    if not file.path.startswith(file.base) or len(file.path) == len(
        file.base
    ):
        raise InvalidKeyDerivation(
            f"Cannot calculate key from base '{file.base}' and "
            f"path '{file.path}'."
        )
    return file.path[len(file.base) :]
