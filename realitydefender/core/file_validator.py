"""
Pre-upload validation: supported media types, per-type size limits and
social-media link checks. Runs locally so obviously bad submissions fail
before any network round trip.
"""

import os
import logging
from dataclasses import dataclass
from typing import Tuple
from urllib.parse import urlparse

from realitydefender.config import Settings, settings as default_settings
from realitydefender.core.errors import FetchFailedError

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = ('.mp4', '.mov')
IMAGE_EXTENSIONS = ('.jpg', '.png', '.jpeg', '.gif', '.webp')
AUDIO_EXTENSIONS = ('.flac', '.wav', '.mp3', '.m4a', '.aac', '.alac', '.ogg')
TEXT_EXTENSIONS = ('.txt',)


@dataclass(frozen=True)
class FileTypeInfo:
    extensions: Tuple[str, ...]
    size_limit: int


def supported_file_types(config: Settings = default_settings) -> Tuple[FileTypeInfo, ...]:
    return (
        FileTypeInfo(VIDEO_EXTENSIONS, config.max_video_upload_bytes),
        FileTypeInfo(IMAGE_EXTENSIONS, config.max_image_upload_bytes),
        FileTypeInfo(AUDIO_EXTENSIONS, config.max_audio_upload_bytes),
        FileTypeInfo(TEXT_EXTENSIONS, config.max_text_upload_bytes),
    )


def get_file_type_info(filename: str, config: Settings = default_settings) -> FileTypeInfo:
    """Look up the type entry for a filename. Extension matching is case-sensitive."""
    ext = os.path.splitext(filename)[1]
    if not ext:
        raise FetchFailedError(f"Unsupported file with no extension {filename}!", "INVALID_FILE")

    for info in supported_file_types(config):
        if ext in info.extensions:
            return info
    raise FetchFailedError(f"Unsupported file {filename}!", "INVALID_FILE")


def validate_file(file_path: str, config: Settings = default_settings) -> int:
    """Check existence, readability, type and size. Returns the size in bytes."""
    filename = os.path.basename(file_path)

    if not os.path.isfile(file_path):
        raise FetchFailedError(f"File not found: {os.path.abspath(file_path)}", "INVALID_FILE")
    if not os.access(file_path, os.R_OK):
        raise FetchFailedError(f"Cannot read file: {os.path.abspath(file_path)}", "INVALID_FILE")

    try:
        filesize = os.path.getsize(file_path)
    except OSError as e:
        raise FetchFailedError(f"Unable to read file size: {filename}", "INVALID_FILE") from e

    info = get_file_type_info(filename, config)
    if filesize > info.size_limit:
        logger.warning(f"[UPLOAD] {filename} is {filesize} bytes, limit {info.size_limit}")
        raise FetchFailedError(f"File too large to upload: {filename}", "FILE_TOO_LARGE")

    return filesize


def is_valid_http_url(url: str) -> bool:
    """True for http/https URLs that carry a host."""
    if not url or not url.strip():
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme.lower() in ("http", "https") and bool(parsed.hostname)
