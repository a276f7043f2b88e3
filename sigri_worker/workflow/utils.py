import os
from datetime import datetime
from pathlib import Path
from typing import Union

from sigri_worker.core.config import ARTIFACT_EXTENSION, ARTIFACT_SUBDIR

PathLike = Union[str, Path]


def as_backend_path(worker_path: PathLike, working_root: PathLike, mount_root: PathLike) -> str:
    """Translate a path under the working root into the service-visible mount root.

    Paths outside the working root are returned unchanged.
    """
    abs_path = os.path.abspath(worker_path)
    root = os.path.abspath(working_root)
    if not abs_path.startswith(root + os.sep):
        return str(worker_path)
    return str(mount_root).rstrip(os.sep) + abs_path[len(root):]


def artifact_filename(project_id: int, when: datetime) -> str:
    return f"onr_{project_id}_{int(when.timestamp() * 1000)}{ARTIFACT_EXTENSION}"


def artifact_dir(data_dir: PathLike) -> Path:
    out_dir = Path(data_dir) / ARTIFACT_SUBDIR
    out_dir.mkdir(parents=True, exist_ok=True)
    return out_dir
