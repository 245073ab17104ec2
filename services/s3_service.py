"""
S3 service for object storage operations.
"""
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, BinaryIO, Dict, Iterator, List, Optional, Union

import boto3
from logger_config import get_logger
from utils.decorators import aws_operation
from utils.exceptions import ErrorCode, ServiceOperationError

logger = get_logger(__name__)

# Region whose buckets are created without a LocationConstraint
DEFAULT_REGION = 'us-east-1'


@dataclass(frozen=True)
class BucketRef:
    """A bucket as returned by create/list calls."""

    name: str
    creation_date: Optional[datetime] = None


@dataclass(frozen=True)
class ObjectRef:
    """Identity of a stored object."""

    bucket: str
    key: str
    etag: Optional[str] = None
    version_id: Optional[str] = None


@dataclass(frozen=True)
class ObjectSummary:
    """Key and size of an object from a listing."""

    key: str
    size: int


@dataclass(frozen=True)
class ObjectMetadata:
    """Metadata returned alongside a downloaded object."""

    content_type: Optional[str] = None
    content_length: Optional[int] = None
    etag: Optional[str] = None
    last_modified: Optional[datetime] = None
    user_metadata: Dict[str, str] = field(default_factory=dict)


@dataclass
class DownloadedObject:
    """An object download: metadata plus the still-open body stream."""

    metadata: ObjectMetadata
    body: Any

    @aws_operation('GetObject')
    def read(self) -> bytes:
        """Read the rest of the body; a dropped stream raises ``ServiceOperationError``."""
        return self.body.read()


class S3Service:
    """Service for S3 operations."""

    def __init__(
        self,
        session: Optional[boto3.Session] = None,
        client: Any = None
    ):
        """
        Initialize S3 service.

        Args:
            session: Pre-configured boto3 session (region and profile)
            client: Ready-made S3 client; takes precedence over ``session``
        """
        self._session = session
        self._s3_client = client

    @property
    def s3_client(self):
        """Lazy initialization of S3 client."""
        if self._s3_client is None:
            session = self._session or boto3.Session()
            self._s3_client = session.client('s3')
        return self._s3_client

    @aws_operation('CreateBucket')
    def create_bucket(self, name: str) -> BucketRef:
        """
        Create a bucket in the client's region.

        Bucket names are globally unique, so a name taken by any account
        fails with ``ALREADY_EXISTS``.

        Args:
            name: Bucket name

        Returns:
            Reference to the new bucket

        Raises:
            ServiceOperationError: If the bucket cannot be created
        """
        create_kwargs: Dict[str, Any] = {'Bucket': name}
        region = self.s3_client.meta.region_name
        if region and region != DEFAULT_REGION:
            create_kwargs['CreateBucketConfiguration'] = {
                'LocationConstraint': region
            }

        self.s3_client.create_bucket(**create_kwargs)
        logger.info(f'Created bucket {name}')
        return BucketRef(name=name)

    @aws_operation('ListBuckets')
    def list_buckets(self) -> List[BucketRef]:
        """List the buckets owned by the caller."""
        response = self.s3_client.list_buckets()
        return [
            BucketRef(name=b['Name'], creation_date=b.get('CreationDate'))
            for b in response.get('Buckets', [])
        ]

    @aws_operation('PutObject')
    def put_object(
        self,
        bucket: str,
        key: str,
        body: Union[bytes, str, BinaryIO],
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None
    ) -> ObjectRef:
        """
        Put an object into a bucket, overwriting any object with the same key.

        Args:
            bucket: Bucket name
            key: Object key
            body: Object body (bytes, string or binary file object)
            content_type: Optional Content-Type header
            metadata: Optional user metadata dictionary

        Returns:
            Reference to the stored object

        Raises:
            ServiceOperationError: If the S3 operation fails
        """
        put_kwargs: Dict[str, Any] = {'Bucket': bucket, 'Key': key}
        if isinstance(body, str):
            put_kwargs['Body'] = body.encode('UTF-8')
        else:
            put_kwargs['Body'] = body

        if content_type:
            put_kwargs['ContentType'] = content_type
        if metadata:
            put_kwargs['Metadata'] = metadata

        response = self.s3_client.put_object(**put_kwargs)
        logger.info(f'Successfully put object to s3://{bucket}/{key}')
        return ObjectRef(
            bucket=bucket,
            key=key,
            etag=response.get('ETag'),
            version_id=response.get('VersionId'),
        )

    def put_file(
        self,
        bucket: str,
        key: str,
        path: str,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None
    ) -> ObjectRef:
        """
        Upload a local file as an object.

        The file is opened for the duration of the upload only.
        """
        with open(path, 'rb') as fh:
            return self.put_object(bucket, key, fh, content_type, metadata)

    @contextmanager
    def get_object(self, bucket: str, key: str) -> Iterator[DownloadedObject]:
        """
        Download an object.

        The body is streamed directly from S3 and keeps the connection open
        until it is read or closed. It is closed when the ``with`` block
        exits, whether or not it was fully read.

        Args:
            bucket: Bucket name
            key: Object key

        Yields:
            DownloadedObject with metadata and the body stream

        Raises:
            ServiceOperationError: If the object cannot be fetched
        """
        downloaded = self._fetch_object(bucket, key)
        try:
            yield downloaded
        finally:
            downloaded.body.close()

    @aws_operation('GetObject')
    def _fetch_object(self, bucket: str, key: str) -> DownloadedObject:
        response = self.s3_client.get_object(Bucket=bucket, Key=key)
        metadata = ObjectMetadata(
            content_type=response.get('ContentType'),
            content_length=response.get('ContentLength'),
            etag=response.get('ETag'),
            last_modified=response.get('LastModified'),
            user_metadata=dict(response.get('Metadata') or {}),
        )
        return DownloadedObject(metadata=metadata, body=response['Body'])

    def read_object(self, bucket: str, key: str) -> bytes:
        """Download an object and return its full contents."""
        with self.get_object(bucket, key) as downloaded:
            return downloaded.read()

    @aws_operation('ListObjectsV2')
    def list_objects(self, bucket: str, prefix: str = '') -> List[ObjectSummary]:
        """
        List objects whose key starts with ``prefix``.

        Only the first page of results is returned. Buckets with many
        objects produce a truncated listing, which is logged.

        Args:
            bucket: Bucket name
            prefix: Key prefix filter applied by S3

        Returns:
            Object summaries (key and size), empty when nothing matches
        """
        response = self.s3_client.list_objects_v2(Bucket=bucket, Prefix=prefix)
        if response.get('IsTruncated'):
            logger.warning(
                f'Listing of s3://{bucket}/{prefix} is truncated, '
                f'only the first {response.get("KeyCount", 0)} keys are returned'
            )
        return [
            ObjectSummary(key=obj['Key'], size=obj.get('Size', 0))
            for obj in response.get('Contents', [])
        ]

    def delete_object(self, bucket: str, key: str) -> None:
        """
        Delete an object. Deleting a missing key is not an error.

        Raises:
            ServiceOperationError: If the S3 operation fails for another reason
        """
        try:
            self._delete_object(bucket, key)
        except ServiceOperationError as e:
            if e.code is ErrorCode.NOT_FOUND and e.detail.aws_error_code != 'NoSuchBucket':
                logger.info(f'Object s3://{bucket}/{key} already absent')
                return
            raise

    @aws_operation('DeleteObject')
    def _delete_object(self, bucket: str, key: str) -> None:
        self.s3_client.delete_object(Bucket=bucket, Key=key)
        logger.info(f'Deleted object s3://{bucket}/{key}')

    @aws_operation('DeleteBucket')
    def delete_bucket(self, name: str) -> None:
        """
        Delete a bucket. The bucket must already be empty.

        Raises:
            ServiceOperationError: ``NOT_EMPTY`` while objects remain,
                ``NOT_FOUND`` for an unknown bucket
        """
        self.s3_client.delete_bucket(Bucket=name)
        logger.info(f'Deleted bucket {name}')
