"""
Multipart upload checks shared by the document/material/attachment routes.

Files are read into memory here, before any service call, so a request that
breaks a limit never reaches storage.
"""
import os
from typing import List, Optional, Sequence

from fastapi import UploadFile

from unirecords.core.exceptions import InvalidFileError
from unirecords.services.storage_service import CONTENT_TYPES, UploadedFile

MB = 1024 * 1024

DOCUMENT_EXTENSIONS = frozenset({".pdf", ".doc", ".docx", ".jpg", ".jpeg", ".png", ".txt"})
THESIS_EXTENSIONS = frozenset({".pdf", ".doc", ".docx"})


class UploadPolicy:
    """Per-route ceiling on file count and size, plus allowed extensions"""

    def __init__(self, max_files: int, max_size_mb: int, extensions=DOCUMENT_EXTENSIONS):
        self.max_files = max_files
        self.max_size = max_size_mb * MB
        self.extensions = frozenset(extensions)

    def check_file(self, filename: str, size: int) -> None:
        ext = os.path.splitext(filename or "")[1].lower()
        if ext not in self.extensions:
            raise InvalidFileError(
                f"File type '{ext or 'unknown'}' not allowed. Allowed: {', '.join(sorted(self.extensions))}",
                filename=filename,
            )
        if size == 0:
            raise InvalidFileError("Uploaded file is empty", filename=filename)
        if size > self.max_size:
            raise InvalidFileError(
                f"File exceeds the {self.max_size // MB}MB limit",
                filename=filename,
            )

    async def read(self, files: Optional[Sequence[UploadFile]]) -> List[UploadedFile]:
        files = [f for f in files or [] if f is not None]
        if not files:
            raise InvalidFileError("No files uploaded")
        if len(files) > self.max_files:
            raise InvalidFileError(f"At most {self.max_files} file(s) may be uploaded at once")

        uploads = []
        for upload in files:
            content = await upload.read()
            self.check_file(upload.filename, len(content))
            ext = os.path.splitext(upload.filename)[1].lower()
            uploads.append(UploadedFile(
                filename=upload.filename,
                content=content,
                content_type=CONTENT_TYPES.get(ext, upload.content_type or "application/octet-stream"),
            ))
        return uploads


EXAM_MATERIALS = UploadPolicy(max_files=5, max_size_mb=10)
ADMISSION_DOCUMENTS = UploadPolicy(max_files=5, max_size_mb=5)
GRIEVANCE_ATTACHMENTS = UploadPolicy(max_files=5, max_size_mb=5)
LEAVE_DOCUMENTS = UploadPolicy(max_files=3, max_size_mb=5)
FEE_RECEIPT = UploadPolicy(max_files=1, max_size_mb=5)
THESIS_DOCUMENT = UploadPolicy(max_files=1, max_size_mb=10, extensions=THESIS_EXTENSIONS)
