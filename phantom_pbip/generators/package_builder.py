"""
In-memory builder for the PBIP archive.
"""
import io
import logging
import zipfile
from typing import Dict, List, Optional, Union

from ..exceptions import PackageSerializationError

# Fixed entry timestamp so identical inputs give identical archives
ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)
FILE_MODE = 0o644 << 16
DIR_MODE = (0o40755 << 16) | 0x10


class PackageBuilder:
    """Accumulates (path, content) pairs and serializes them to a zip archive"""

    def __init__(self, project_name: Optional[str] = None):
        self.project_name = project_name
        self._entries: Dict[str, Optional[bytes]] = {}
        self.logger = logging.getLogger(__name__)

    def add(self, path: str, content: Union[str, bytes]) -> None:
        """Add a file; a repeated path replaces the earlier content in place"""
        if isinstance(content, str):
            content = content.encode('utf-8')
        self._entries[path.lstrip('/')] = content

    def add_files(self, prefix: str, files: Dict[str, Union[str, bytes]]) -> None:
        for path, content in files.items():
            self.add(f"{prefix.rstrip('/')}/{path}" if prefix else path, content)

    def add_directory(self, path: str) -> None:
        """Add an explicit (possibly empty) directory entry"""
        path = path.strip('/') + '/'
        self._entries.setdefault(path, None)

    @property
    def paths(self) -> List[str]:
        """File paths in insertion order (directories excluded)"""
        return [path for path, content in self._entries.items() if content is not None]

    def to_zip(self, compression_level: int = 6) -> bytes:
        """
        Serialize the entries in insertion order

        Returns:
            Zip archive bytes

        Raises:
            PackageSerializationError: If any entry cannot be written
        """
        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(buffer, 'w', compression=zipfile.ZIP_DEFLATED,
                                 compresslevel=compression_level) as archive:
                for path, content in self._entries.items():
                    info = zipfile.ZipInfo(path, date_time=ZIP_DATE_TIME)
                    if content is None:
                        info.external_attr = DIR_MODE
                        archive.writestr(info, b'')
                    else:
                        info.compress_type = zipfile.ZIP_DEFLATED
                        info.external_attr = FILE_MODE
                        archive.writestr(info, content, compresslevel=compression_level)
        except (OSError, ValueError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
            self.logger.error(f"Failed to serialize package {self.project_name}: {e}")
            raise PackageSerializationError(f"Failed to serialize package: {e}",
                                            project_name=self.project_name) from e

        blob = buffer.getvalue()
        self.logger.debug(f"Serialized {len(self.paths)} files ({len(blob)} bytes)")
        return blob
