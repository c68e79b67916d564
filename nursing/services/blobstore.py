"""
Chunked binary object store on top of the ORM.

Payloads are split into fixed size chunks (one ``BlobChunk`` row each)
under a ``StoredBlob`` file entry, the same layout GridFS uses. Callers
only ever see the opaque handle returned by :meth:`BlobStore.store`.

A ``BlobStore`` is a plain object: build one where it is needed (see
:func:`blob_store_from_settings`) and pass it down to the services.
"""
from __future__ import annotations

import io
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Dict, Iterator, Optional, Union

from django.conf import settings
from django.db import DatabaseError, transaction

from nursing.exceptions import BlobNotFound, InvalidHandle, StorageReadError, StorageWriteError
from nursing.models import BlobChunk, StoredBlob

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 255 * 1024


def parse_handle(handle: Any) -> uuid.UUID:
    """Return the UUID behind ``handle`` or raise :class:`InvalidHandle`."""
    if isinstance(handle, uuid.UUID):
        return handle
    if not isinstance(handle, str) or not handle.strip():
        raise InvalidHandle()
    try:
        return uuid.UUID(handle.strip())
    except ValueError:
        raise InvalidHandle()


@dataclass
class BlobReader:
    """Lazy, ordered view over the chunks of one stored blob.

    Iterating yields the raw chunk bytes; :meth:`read` joins them.
    """
    handle: str
    filename: str
    content_type: str
    length: int
    metadata: Dict[str, Any] = field(default_factory=dict)
    _blob_id: Optional[uuid.UUID] = field(default=None, repr=False)

    def __iter__(self) -> Iterator[bytes]:
        try:
            chunks = BlobChunk.objects.filter(blob_id=self._blob_id).order_by('n').values_list('data', flat=True)
            for data in chunks.iterator():
                yield bytes(data)
        except DatabaseError as exc:
            logger.error('read of blob %s failed: %s', self.handle, exc)
            raise StorageReadError() from exc

    def read(self) -> bytes:
        return b''.join(self)


class BlobStore:
    def __init__(self, bucket: str = 'uploads', chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError('chunk_size must be positive')
        self.bucket = bucket
        self.chunk_size = chunk_size

    def _get(self, handle) -> StoredBlob:
        blob_id = parse_handle(handle)
        try:
            blob = StoredBlob.objects.filter(id=blob_id, bucket=self.bucket).first()
        except DatabaseError as exc:
            raise StorageReadError() from exc
        if blob is None:
            raise BlobNotFound()
        return blob

    def store(
        self,
        data: Union[bytes, bytearray, BinaryIO],
        *,
        name: str,
        content_type: str = '',
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Write ``data`` as a new blob and return its handle.

        ``data`` may be bytes or any object with a binary ``read(size)``.
        The whole write is one transaction: either every chunk is stored
        and the handle is returned, or :class:`StorageWriteError` is raised
        and nothing is left behind.
        """
        stream = io.BytesIO(bytes(data)) if isinstance(data, (bytes, bytearray)) else data
        try:
            with transaction.atomic():
                blob = StoredBlob.objects.create(
                    bucket=self.bucket,
                    filename=name,
                    content_type=content_type or '',
                    chunk_size=self.chunk_size,
                    metadata=metadata or {},
                )
                length = 0
                n = 0
                while True:
                    piece = stream.read(self.chunk_size)
                    if not piece:
                        break
                    BlobChunk.objects.create(blob=blob, n=n, data=piece)
                    length += len(piece)
                    n += 1
                blob.length = length
                blob.save(update_fields=['length'])
        except (DatabaseError, OSError) as exc:
            logger.error('write of %r to bucket %s failed: %s', name, self.bucket, exc)
            raise StorageWriteError() from exc
        logger.debug('stored %r as %s (%d bytes, %d chunks)', name, blob.id.hex, length, n)
        return blob.id.hex

    def retrieve(self, handle) -> BlobReader:
        blob = self._get(handle)
        return BlobReader(
            handle=blob.id.hex,
            filename=blob.filename,
            content_type=blob.content_type,
            length=blob.length,
            metadata=dict(blob.metadata or {}),
            _blob_id=blob.id,
        )

    def exists(self, handle) -> bool:
        blob_id = parse_handle(handle)
        try:
            return StoredBlob.objects.filter(id=blob_id, bucket=self.bucket).exists()
        except DatabaseError as exc:
            raise StorageReadError() from exc

    def delete(self, handle) -> None:
        """Remove a blob and its chunks.

        Deleting a handle that does not exist raises :class:`BlobNotFound`;
        a second delete of the same handle is an error, not a no-op.
        """
        blob_id = parse_handle(handle)
        try:
            with transaction.atomic():
                deleted, _ = StoredBlob.objects.filter(id=blob_id, bucket=self.bucket).delete()
        except DatabaseError as exc:
            logger.error('delete of blob %s failed: %s', blob_id.hex, exc)
            raise StorageWriteError() from exc
        if not deleted:
            raise BlobNotFound()
        logger.debug('deleted blob %s', blob_id.hex)


def blob_store_from_settings() -> BlobStore:
    return BlobStore(
        bucket=getattr(settings, 'BLOB_BUCKET', 'uploads'),
        chunk_size=getattr(settings, 'BLOB_CHUNK_SIZE', DEFAULT_CHUNK_SIZE),
    )
