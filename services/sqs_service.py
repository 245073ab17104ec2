"""
SQS service for queue and message operations.
"""
import hashlib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import boto3
from logger_config import get_logger
from utils.decorators import aws_operation

logger = get_logger(__name__)

MAX_RECEIVE_COUNT = 10
MAX_WAIT_SECONDS = 20


def queue_name_from_url(queue_url: str) -> str:
    """Return the queue name, the last path segment of its URL."""
    return queue_url.rstrip('/').rsplit('/', 1)[-1]


@dataclass(frozen=True)
class QueueRef:
    """A queue, identified by its account-scoped URL."""

    name: str
    url: str

    @classmethod
    def from_url(cls, queue_url: str) -> "QueueRef":
        return cls(name=queue_name_from_url(queue_url), url=queue_url)


@dataclass(frozen=True)
class SentMessage:
    """Server-assigned identity of a sent message."""

    message_id: str
    md5_of_body: Optional[str] = None


@dataclass(frozen=True)
class ReceivedMessage:
    """
    A message handed out by ReceiveMessage.

    The message stays in the queue until ``receipt_handle`` is used to
    delete it. If that does not happen within the visibility window the
    message becomes receivable again.
    """

    message_id: str
    receipt_handle: str
    body: str
    md5_of_body: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)

    def checksum_matches(self) -> bool:
        """Check the body against the MD5 digest computed by SQS."""
        if not self.md5_of_body:
            return False
        digest = hashlib.md5(self.body.encode('utf-8')).hexdigest()
        return digest == self.md5_of_body


class SQSService:
    """Service for SQS operations."""

    def __init__(
        self,
        session: Optional[boto3.Session] = None,
        client: Any = None
    ) -> None:
        """
        Initialize SQS service.

        Args:
            session: Pre-configured boto3 session (region and profile)
            client: Ready-made SQS client; takes precedence over ``session``
        """
        self._session = session
        self._client = client

    @property
    def client(self):
        """Lazy initialization of SQS client."""
        if self._client is None:
            session = self._session or boto3.Session()
            self._client = session.client('sqs')
        return self._client

    @aws_operation('CreateQueue')
    def create_queue(
        self,
        name: str,
        attributes: Optional[Dict[str, str]] = None
    ) -> QueueRef:
        """
        Create a queue.

        Args:
            name: Queue name, unique within the account and region
            attributes: Optional queue attributes (e.g. VisibilityTimeout)

        Returns:
            Reference carrying the queue URL

        Raises:
            ServiceOperationError: If the queue cannot be created
        """
        create_kwargs: Dict[str, Any] = {'QueueName': name}
        if attributes:
            create_kwargs['Attributes'] = attributes
        response = self.client.create_queue(**create_kwargs)
        logger.info(f'Created queue {name}')
        return QueueRef(name=name, url=response['QueueUrl'])

    @aws_operation('ListQueues')
    def list_queues(self, prefix: Optional[str] = None) -> List[QueueRef]:
        """
        List the queues in the account and region.

        Args:
            prefix: Optional queue name prefix filter

        Returns:
            Queue references, empty when the account has none
        """
        list_kwargs: Dict[str, Any] = {}
        if prefix:
            list_kwargs['QueueNamePrefix'] = prefix
        response = self.client.list_queues(**list_kwargs)
        return [QueueRef.from_url(url) for url in response.get('QueueUrls', [])]

    @aws_operation('SendMessage')
    def send_message(
        self,
        queue_url: str,
        body: str,
        attributes: Optional[Dict[str, str]] = None
    ) -> SentMessage:
        """
        Send a text message.

        Args:
            queue_url: Target queue URL
            body: Message body
            attributes: Optional string message attributes

        Returns:
            The server-assigned message id and body checksum

        Raises:
            ServiceOperationError: ``BODY_TOO_LARGE`` for oversized bodies
        """
        send_kwargs: Dict[str, Any] = {'QueueUrl': queue_url, 'MessageBody': body}
        if attributes:
            send_kwargs['MessageAttributes'] = {
                name: {'DataType': 'String', 'StringValue': value}
                for name, value in attributes.items()
            }
        response = self.client.send_message(**send_kwargs)
        logger.info(f'Sent message {response["MessageId"]} to {queue_name_from_url(queue_url)}')
        return SentMessage(
            message_id=response['MessageId'],
            md5_of_body=response.get('MD5OfMessageBody'),
        )

    def receive_messages(
        self,
        queue_url: str,
        max_count: int = 1,
        wait_seconds: int = 0
    ) -> List[ReceivedMessage]:
        """
        Receive up to ``max_count`` messages in a single call.

        An empty list is a normal result: a message that was just sent is
        not guaranteed to be receivable yet. No retry is made here.

        Args:
            queue_url: Source queue URL
            max_count: Maximum messages to return (1-10)
            wait_seconds: Long-poll duration for this one call (0-20)

        Returns:
            Received messages with their receipt handles

        Raises:
            ValueError: If ``max_count`` or ``wait_seconds`` is out of range
            ServiceOperationError: If the SQS operation fails
        """
        if not 1 <= max_count <= MAX_RECEIVE_COUNT:
            raise ValueError(
                f'max_count must be between 1 and {MAX_RECEIVE_COUNT}, got: {max_count}'
            )
        if not 0 <= wait_seconds <= MAX_WAIT_SECONDS:
            raise ValueError(
                f'wait_seconds must be between 0 and {MAX_WAIT_SECONDS}, got: {wait_seconds}'
            )
        return self._receive(queue_url, max_count, wait_seconds)

    @aws_operation('ReceiveMessage')
    def _receive(
        self,
        queue_url: str,
        max_count: int,
        wait_seconds: int
    ) -> List[ReceivedMessage]:
        response = self.client.receive_message(
            QueueUrl=queue_url,
            MaxNumberOfMessages=max_count,
            WaitTimeSeconds=wait_seconds,
            AttributeNames=['All'],
            MessageAttributeNames=['All'],
        )
        messages = [
            ReceivedMessage(
                message_id=m['MessageId'],
                receipt_handle=m['ReceiptHandle'],
                body=m['Body'],
                md5_of_body=m.get('MD5OfBody'),
                attributes=dict(m.get('Attributes') or {}),
            )
            for m in response.get('Messages', [])
        ]
        logger.info(
            f'Received {len(messages)} message(s) from {queue_name_from_url(queue_url)}'
        )
        return messages

    @aws_operation('DeleteMessage')
    def delete_message(self, queue_url: str, receipt_handle: str) -> None:
        """
        Delete a received message.

        Raises:
            ServiceOperationError: ``RECEIPT_HANDLE_EXPIRED`` when the handle
                is no longer valid
        """
        self.client.delete_message(QueueUrl=queue_url, ReceiptHandle=receipt_handle)
        logger.info(f'Deleted message from {queue_name_from_url(queue_url)}')

    @aws_operation('DeleteQueue')
    def delete_queue(self, queue_url: str) -> None:
        """Delete a queue, including any messages still in it."""
        self.client.delete_queue(QueueUrl=queue_url)
        logger.info(f'Deleted queue {queue_name_from_url(queue_url)}')
