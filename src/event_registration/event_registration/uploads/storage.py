from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Optional, Protocol

from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)


class UploadedFile(Protocol):
    """What we need from an upload (werkzeug's FileStorage fits)."""

    filename: Optional[str]

    def save(self, dst) -> None:
        ...


def file_extension(filename: Optional[str]) -> str:
    name = (filename or "").strip().lower()
    if "." not in name:
        return ""
    return "." + name.rsplit(".", 1)[1]


class LocalFileStorage:
    """Stores uploads on local disk and hands back their public URL path.

    Files land in `<root>/<subdir>/<prefix>-<random>-<safe name>` and are
    served by the app at `<url_prefix>/<subdir>/<file>`.
    """

    def __init__(self, root: str | Path, *, url_prefix: str = "/uploads"):
        self._root = Path(root)
        self._url_prefix = "/" + url_prefix.strip("/")

    @property
    def root(self) -> Path:
        return self._root

    def save(self, file: UploadedFile, *, subdir: str, prefix: str = "") -> str:
        safe_name = secure_filename(file.filename or "") or "upload"
        parts = [p for p in (prefix, uuid.uuid4().hex[:12], safe_name) if p]
        name = "-".join(parts)

        target_dir = self._root / subdir
        target_dir.mkdir(parents=True, exist_ok=True)
        file.save(str(target_dir / name))
        logger.info("Stored upload %s/%s", subdir, name)
        return f"{self._url_prefix}/{subdir}/{name}"

    def path_for(self, url: str) -> Optional[Path]:
        if not url or not url.startswith(self._url_prefix + "/"):
            return None
        relative = url[len(self._url_prefix) + 1 :]
        candidate = (self._root / relative).resolve()
        if self._root.resolve() not in candidate.parents:
            return None
        return candidate

    def delete(self, url: Optional[str]) -> bool:
        path = self.path_for(url or "")
        if not path or not path.exists():
            return False
        try:
            path.unlink()
        except OSError:
            logger.warning("Could not remove upload %s", path, exc_info=True)
            return False
        return True
