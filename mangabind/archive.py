"""Packaging of an exported directory tree into an EPUB container."""

import os
import logging
import zipfile
from pathlib import Path
from typing import Union

from .error import ArchiveError
from .epub.layout import MIMETYPE_NAME

# Set up logging
logger = logging.getLogger(__name__)


def pack_directory(source_dir: Union[str, Path], dest_file: Union[str, Path]) -> str:
    """Zip a directory tree as an OCF container.

    The mimetype marker is written first and stored uncompressed, as
    readers sniff it at a fixed offset. Everything else is deflated under
    its path relative to ``source_dir``. An existing destination is
    replaced.

    Args:
        source_dir: Root of the package tree.
        dest_file: Path of the container file to write.

    Returns:
        str: Path to the written file.

    Raises:
        ArchiveError: If the tree has no mimetype marker or the file
            cannot be written.
    """
    source_dir = Path(source_dir)
    dest_file = Path(dest_file)
    mimetype_path = source_dir / MIMETYPE_NAME

    if not mimetype_path.is_file():
        raise ArchiveError(
            f"No {MIMETYPE_NAME} file in {source_dir}",
            details={"source": str(source_dir), "destination": str(dest_file)}
        )

    try:
        with zipfile.ZipFile(dest_file, 'w') as zip_file:
            zip_file.write(mimetype_path, MIMETYPE_NAME, compress_type=zipfile.ZIP_STORED)

            for root, dirs, files in os.walk(source_dir):
                dirs.sort()
                for file in sorted(files):
                    file_path = Path(root) / file
                    arcname = file_path.relative_to(source_dir).as_posix()
                    if arcname == MIMETYPE_NAME:
                        continue
                    zip_file.write(file_path, arcname, compress_type=zipfile.ZIP_DEFLATED)
    except OSError as e:
        logger.error(f"Error writing package {dest_file}: {e}")
        raise ArchiveError(
            f"Could not write package {dest_file}: {e}",
            original_error=e,
            details={"source": str(source_dir), "destination": str(dest_file)}
        ) from e

    logger.debug(f"Packed {source_dir} into {dest_file}")
    return str(dest_file)
