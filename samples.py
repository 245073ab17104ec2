"""
The S3 and SQS getting-started samples.

Each sample is a fixed sequence of steps: create a container, list
containers, write and read an item, list contents, delete the item and
delete the container. The steps are handed to ``DemoOrchestrator``, which
runs them and reports the outcome.
"""
import os
import tempfile
import uuid
from contextlib import contextmanager
from typing import Iterator, List, Optional

from config import Config
from logger_config import get_logger
from orchestrator import DemoOrchestrator, RunResult, RunState, Step
from services.s3_service import S3Service
from services.sqs_service import QueueRef, ReceivedMessage, SQSService

logger = get_logger(__name__)

SAMPLE_FILE_LINES = (
    "abcdefghijklmnopqrstuvwxyz\n",
    "01234567890112345678901234\n",
    "!@#$%^&*()-=[]{};':',.<>/?\n",
    "01234567890112345678901234\n",
    "abcdefghijklmnopqrstuvwxyz\n",
)


@contextmanager
def sample_file() -> Iterator[str]:
    """
    Create a temporary text file to upload, removed on exit.

    Yields:
        Path of the temporary file
    """
    fd, path = tempfile.mkstemp(prefix='aws-python-sdk-', suffix='.txt')
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as fh:
            fh.writelines(SAMPLE_FILE_LINES)
        yield path
    finally:
        os.remove(path)


class S3Sample:
    """Getting started with Amazon S3."""

    title = 'Getting Started with Amazon S3'

    def __init__(self, service: S3Service, config: Config) -> None:
        self.service = service
        self.config = config
        self.bucket_name = f'{config.bucket_prefix}{uuid.uuid4()}'
        self.key = config.object_key
        self.downloaded: Optional[bytes] = None

    def create_bucket(self) -> None:
        logger.info(f'Creating bucket {self.bucket_name}')
        self.service.create_bucket(self.bucket_name)

    def list_buckets(self) -> None:
        for bucket in self.service.list_buckets():
            logger.info(f' - {bucket.name}')

    def upload_object(self) -> None:
        with sample_file() as path:
            self.service.put_file(
                self.bucket_name, self.key, path, content_type='text/plain'
            )

    def download_object(self) -> None:
        with self.service.get_object(self.bucket_name, self.key) as downloaded:
            logger.info(f'Content-Type: {downloaded.metadata.content_type}')
            self.downloaded = downloaded.read()
        for line in self.downloaded.decode('utf-8').splitlines():
            logger.info(f'    {line}')

    def list_objects(self) -> None:
        for summary in self.service.list_objects(self.bucket_name, self.config.list_prefix):
            logger.info(f' - {summary.key}  (size = {summary.size})')

    def delete_object(self) -> None:
        self.service.delete_object(self.bucket_name, self.key)

    def delete_bucket(self) -> None:
        self.service.delete_bucket(self.bucket_name)

    def steps(self) -> List[Step]:
        return [
            Step('Creating a new bucket', self.create_bucket, RunState.CONTAINER_CREATED),
            Step('Listing buckets', self.list_buckets),
            Step('Uploading a new object to S3 from a file',
                 self.upload_object, RunState.CONTENT_WRITTEN),
            Step('Downloading an object', self.download_object, RunState.CONTENT_READ),
            Step(f'Listing objects with prefix "{self.config.list_prefix}"',
                 self.list_objects, RunState.CONTENT_LISTED),
            Step('Deleting an object', self.delete_object, RunState.CONTENT_DELETED),
            Step(f'Deleting bucket {self.bucket_name}',
                 self.delete_bucket, RunState.CONTAINER_DELETED),
        ]

    def run(self) -> RunResult:
        return DemoOrchestrator(self.title, self.steps(), self.config).run()


class SQSSample:
    """Getting started with Amazon SQS."""

    title = 'Getting Started with Amazon SQS'

    def __init__(self, service: SQSService, config: Config) -> None:
        self.service = service
        self.config = config
        if config.unique_queue_name:
            self.queue_name = f'{config.queue_name}-{uuid.uuid4().hex[:8]}'
        else:
            self.queue_name = config.queue_name
        self.queue: Optional[QueueRef] = None
        self.received: List[ReceivedMessage] = []

    def create_queue(self) -> None:
        self.queue = self.service.create_queue(self.queue_name)

    def list_queues(self) -> None:
        for queue in self.service.list_queues():
            logger.info(f'  QueueUrl: {queue.url}')

    def send_message(self) -> None:
        self.service.send_message(self.queue.url, self.config.message_body)

    def receive_messages(self) -> None:
        self.received = self.service.receive_messages(
            self.queue.url,
            max_count=self.config.max_messages,
            wait_seconds=self.config.wait_seconds,
        )
        for message in self.received:
            logger.info('  Message')
            logger.info(f'    MessageId:     {message.message_id}')
            logger.info(f'    ReceiptHandle: {message.receipt_handle}')
            logger.info(f'    MD5OfBody:     {message.md5_of_body}')
            logger.info(f'    Body:          {message.body}')
            for name, value in message.attributes.items():
                logger.info('  Attribute')
                logger.info(f'    Name:  {name}')
                logger.info(f'    Value: {value}')
            if not message.checksum_matches():
                logger.warning(f'MD5 of body does not match for message {message.message_id}')

    def delete_message(self) -> None:
        # Only the first received message is deleted, whether or not it is
        # the one sent above
        if not self.received:
            logger.warning('No message was received, nothing to delete')
            return
        self.service.delete_message(self.queue.url, self.received[0].receipt_handle)

    def delete_queue(self) -> None:
        self.service.delete_queue(self.queue.url)

    def steps(self) -> List[Step]:
        return [
            Step(f'Creating a new SQS queue called {self.queue_name}',
                 self.create_queue, RunState.CONTAINER_CREATED),
            Step('Listing all queues in your account', self.list_queues),
            Step(f'Sending a message to {self.queue_name}',
                 self.send_message, RunState.CONTENT_WRITTEN),
            Step(f'Receiving messages from {self.queue_name}',
                 self.receive_messages, RunState.CONTENT_READ),
            Step('Deleting a message', self.delete_message, RunState.CONTENT_DELETED),
            Step('Deleting the test queue', self.delete_queue, RunState.CONTAINER_DELETED),
        ]

    def run(self) -> RunResult:
        return DemoOrchestrator(self.title, self.steps(), self.config).run()
