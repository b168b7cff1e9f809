"""Local filesystem storage for profile avatars."""
from pathlib import Path
from uuid import UUID, uuid4

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}


class LocalAvatarStorage:
    """Writes avatars under ``<root>/avatars/<user_id>/`` and returns their public URL."""

    def __init__(self, root: Path, url_prefix: str = "/media") -> None:
        self._root = root
        self._url_prefix = url_prefix.rstrip("/")

    def save(self, user_id: UUID, content_type: str, data: bytes) -> str:
        ext = _EXTENSIONS.get(content_type, "bin")
        relative = Path("avatars") / str(user_id) / f"{uuid4().hex}.{ext}"
        target = self._root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        return f"{self._url_prefix}/{relative.as_posix()}"

    def delete_all(self, user_id: UUID) -> None:
        user_dir = self._root / "avatars" / str(user_id)
        if not user_dir.is_dir():
            return
        for path in user_dir.iterdir():
            if path.is_file():
                path.unlink()
        user_dir.rmdir()
