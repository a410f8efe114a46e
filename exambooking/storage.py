import os

from flask import current_app

from .exceptions import StorageError


class LocalFileStore:
    """Blob store for evidence files kept on local disk.

    Keys are slash-separated relative paths such as
    ``payment-slip/jane.doe.example.com-1700000000000.png``. Stored objects are
    served publicly under ``public_base_url``.
    """

    def __init__(self, root, public_base_url="/files"):
        self.root = os.path.abspath(root)
        self.public_base_url = (public_base_url or "").rstrip("/")

    def _path_for(self, key):
        path = os.path.abspath(os.path.join(self.root, *key.split("/")))
        if os.path.commonpath([self.root, path]) != self.root or path == self.root:
            raise StorageError(f"Invalid storage key: {key!r}")
        return path

    def upload(self, key, file):
        """Save a werkzeug ``FileStorage`` under ``key``. Never overwrites."""
        path = self._path_for(key)
        if os.path.exists(path):
            raise StorageError(f"Object already exists: {key}")
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            file.save(path)
        except OSError as e:
            raise StorageError(f"Could not store {key}: {e}") from e
        return key

    def public_url(self, key):
        return f"{self.public_base_url}/{key}"

    def delete(self, key):
        path = self._path_for(key)
        try:
            os.remove(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Could not delete {key}: {e}") from e
        return True

    def exists(self, key):
        return os.path.isfile(self._path_for(key))


def get_file_store():
    return current_app.extensions['file_store']
