"""
Upload payload for activity files.

The multipart encoding itself is done by requests; this module only decides
which parts are sent: one binary file part plus one part per string-valued
parameter.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, BinaryIO, Dict, Optional, Tuple, Union

logger = logging.getLogger(__name__)

FILE_PART_NAME = "file"
DEFAULT_FILE_NAME = "default"


class DataType(str, Enum):
    """File formats accepted by the upload endpoint."""

    FIT = "fit"
    FIT_GZ = "fit.gz"
    TCX = "tcx"
    TCX_GZ = "tcx.gz"
    GPX = "gpx"
    GPX_GZ = "gpx.gz"


@dataclass
class UploadData:
    """
    An activity file to upload.

    Attributes:
        file: File contents or an open binary file
        data_type: File format
        name: Logical file name (without extension)
        params: Extra form fields; only string values are sent
    """

    file: Union[bytes, BinaryIO]
    data_type: DataType = DataType.FIT
    name: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def file_name(self) -> str:
        """File name sent with the file part, e.g. "morning_ride.gpx"."""
        return f"{self.name or DEFAULT_FILE_NAME}.{DataType(self.data_type).value}"

    def multipart_fields(self) -> Tuple[Dict[str, Tuple[str, Any, str]], Dict[str, str]]:
        """
        Split the upload into requests' files and data arguments.

        Returns:
            (files, data) where files holds the single binary part
        """
        files = {
            FILE_PART_NAME: (self.file_name, self.file, "application/octet-stream")
        }

        data = {}
        for key, value in self.params.items():
            if isinstance(value, str):
                data[key] = value
            else:
                logger.debug(f"Skipping non-string upload parameter: {key}")

        return files, data
