"""
Image upload bookkeeping for products, categories and user avatars
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from app.services import messages
from app.services.error_handler import BadRequestError, ServerError
from app.services.slugs import random_token

logger = logging.getLogger(__name__)

MAX_FILE_NAME_ATTEMPTS = 3


@dataclass
class PendingImage:
    """An image whose name is reserved but not yet written to disk"""
    file_name: str
    file_path: Path
    raw_data: bytes

    def save(self):
        self.file_path.write_bytes(self.raw_data)
        logger.info(f'Image saved: {self.file_path}', extra={'event_type': 'image_saved'})


def is_image(image: Optional[FileStorage]) -> bool:
    return bool(image and image.mimetype and image.mimetype.startswith('image'))


def ensure_image(image: Optional[FileStorage]):
    if image is not None and not is_image(image):
        raise BadRequestError(messages.INVALID_IMAGE_FILE_TYPE)


def upload_dir(kind: str) -> Path:
    directory = Path(current_app.config['UPLOAD_FOLDER']) / kind
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def prepare_image(kind: str, image: Optional[FileStorage]) -> Optional[PendingImage]:
    """
    Pick a free file name under ``<UPLOAD_FOLDER>/<kind>/`` for ``image``.

    Nothing is written yet; callers save the returned image only once their
    database work has gone through.
    """
    if image is None:
        return None

    directory = upload_dir(kind)
    original = secure_filename(''.join((image.filename or 'image').split())) or 'image'
    stem, ext = os.path.splitext(original)

    candidate = directory / original
    for _ in range(MAX_FILE_NAME_ATTEMPTS):
        if not candidate.exists():
            return PendingImage(candidate.name, candidate, image.read())
        candidate = directory / f'{stem}-{random_token()}{ext}'

    raise ServerError(messages.FILE_NAME_GENERATE_ERROR)


def delete_image(kind: str, file_name: Optional[str]):
    if not file_name:
        return
    path = Path(current_app.config['UPLOAD_FOLDER']) / kind / file_name
    if path.exists():
        path.unlink()
        logger.info(f'Image removed: {path}', extra={'event_type': 'image_removed'})
