"""
Unit tests for service layer.

This module provides tests for the S3 and SQS services against mocked
boto3 clients.
"""
import hashlib
import pytest
from unittest.mock import MagicMock, Mock, patch
from botocore.exceptions import ClientError, EndpointConnectionError, ResponseStreamingError
from services.s3_service import S3Service
from services.sqs_service import QueueRef, ReceivedMessage, SQSService, queue_name_from_url
from utils.exceptions import ErrorCode, ErrorKind, ServiceOperationError


def client_error(code, status=400, operation='Operation'):
    return ClientError(
        {
            'Error': {'Code': code, 'Message': f'{code} message'},
            'ResponseMetadata': {'HTTPStatusCode': status, 'RequestId': 'req-1'},
        },
        operation,
    )


class TestS3Service:
    """Tests for S3Service."""

    def test_init(self):
        """Test S3Service initialization."""
        service = S3Service()
        assert service._session is None
        assert service._s3_client is None

    @patch('services.s3_service.boto3')
    def test_s3_client_lazy_init(self, mock_boto3):
        """Test lazy initialization of S3 client from a default session."""
        mock_client = Mock()
        mock_boto3.Session.return_value.client.return_value = mock_client

        service = S3Service()
        client = service.s3_client

        assert client == mock_client
        assert service.s3_client is client
        mock_boto3.Session.return_value.client.assert_called_once_with('s3')

    def test_s3_client_from_session(self):
        """Test that a supplied session builds the client."""
        session = Mock()
        service = S3Service(session=session)

        assert service.s3_client == session.client.return_value
        session.client.assert_called_once_with('s3')

    def test_create_bucket_us_east_1(self):
        mock_client = Mock()
        mock_client.meta.region_name = 'us-east-1'
        service = S3Service(client=mock_client)

        bucket = service.create_bucket('my-bucket')

        assert bucket.name == 'my-bucket'
        mock_client.create_bucket.assert_called_once_with(Bucket='my-bucket')

    def test_create_bucket_other_region_sets_location(self):
        mock_client = Mock()
        mock_client.meta.region_name = 'eu-west-1'
        service = S3Service(client=mock_client)

        service.create_bucket('my-bucket')

        mock_client.create_bucket.assert_called_once_with(
            Bucket='my-bucket',
            CreateBucketConfiguration={'LocationConstraint': 'eu-west-1'}
        )

    def test_create_bucket_already_exists(self):
        mock_client = Mock()
        mock_client.meta.region_name = 'us-east-1'
        mock_client.create_bucket.side_effect = client_error('BucketAlreadyExists', 409)
        service = S3Service(client=mock_client)

        with pytest.raises(ServiceOperationError) as exc_info:
            service.create_bucket('taken')

        assert exc_info.value.code is ErrorCode.ALREADY_EXISTS
        assert exc_info.value.detail.operation == 'CreateBucket'

    def test_list_buckets(self):
        mock_client = Mock()
        mock_client.list_buckets.return_value = {
            'Buckets': [{'Name': 'a'}, {'Name': 'b'}]
        }
        service = S3Service(client=mock_client)

        assert [b.name for b in service.list_buckets()] == ['a', 'b']

    def test_put_object_encodes_strings(self):
        """Test that string bodies are UTF-8 encoded."""
        mock_client = Mock()
        mock_client.put_object.return_value = {'ETag': '"abc"'}
        service = S3Service(client=mock_client)

        ref = service.put_object(
            'bucket', 'key', 'héllo',
            content_type='text/plain', metadata={'source': 'test'}
        )

        assert ref.etag == '"abc"'
        mock_client.put_object.assert_called_once_with(
            Bucket='bucket',
            Key='key',
            Body='héllo'.encode('UTF-8'),
            ContentType='text/plain',
            Metadata={'source': 'test'},
        )

    def test_put_object_unavailable(self):
        mock_client = Mock()
        mock_client.put_object.side_effect = EndpointConnectionError(
            endpoint_url='https://s3.amazonaws.com'
        )
        service = S3Service(client=mock_client)

        with pytest.raises(ServiceOperationError) as exc_info:
            service.put_object('bucket', 'key', b'data')

        assert exc_info.value.kind is ErrorKind.CLIENT_UNAVAILABLE

    def test_get_object_closes_body(self):
        """Test the body stream is closed when the block exits."""
        body = MagicMock()
        body.read.return_value = b'payload'
        mock_client = Mock()
        mock_client.get_object.return_value = {
            'Body': body, 'ContentType': 'text/plain', 'ContentLength': 7
        }
        service = S3Service(client=mock_client)

        with service.get_object('bucket', 'key') as downloaded:
            assert downloaded.metadata.content_type == 'text/plain'
            assert downloaded.metadata.content_length == 7
            body.close.assert_not_called()

        body.close.assert_called_once()

    def test_get_object_closes_body_on_error(self):
        """Test the body stream is closed even when the caller raises."""
        body = MagicMock()
        mock_client = Mock()
        mock_client.get_object.return_value = {'Body': body}
        service = S3Service(client=mock_client)

        with pytest.raises(RuntimeError):
            with service.get_object('bucket', 'key'):
                raise RuntimeError('reader failed')

        body.close.assert_called_once()

    def test_read_stream_error_is_translated(self):
        """Test a connection dropped mid-body surfaces as a service error."""
        body = MagicMock()
        body.read.side_effect = ResponseStreamingError(error='connection reset by peer')
        mock_client = Mock()
        mock_client.get_object.return_value = {'Body': body}
        service = S3Service(client=mock_client)

        with pytest.raises(ServiceOperationError) as exc_info:
            service.read_object('bucket', 'key')

        assert exc_info.value.kind is ErrorKind.CLIENT_UNAVAILABLE
        assert exc_info.value.code is ErrorCode.UNAVAILABLE
        assert exc_info.value.detail.operation == 'GetObject'
        body.close.assert_called_once()

    def test_list_objects_empty(self):
        mock_client = Mock()
        mock_client.list_objects_v2.return_value = {'KeyCount': 0}
        service = S3Service(client=mock_client)

        assert service.list_objects('bucket', 'My') == []
        mock_client.list_objects_v2.assert_called_once_with(Bucket='bucket', Prefix='My')

    def test_delete_object_missing_key_is_ignored(self):
        mock_client = Mock()
        mock_client.delete_object.side_effect = client_error('NoSuchKey', 404)
        service = S3Service(client=mock_client)

        service.delete_object('bucket', 'gone')

    def test_delete_object_missing_bucket_is_reported(self):
        mock_client = Mock()
        mock_client.delete_object.side_effect = client_error('NoSuchBucket', 404)
        service = S3Service(client=mock_client)

        with pytest.raises(ServiceOperationError) as exc_info:
            service.delete_object('gone', 'key')

        assert exc_info.value.code is ErrorCode.NOT_FOUND

    def test_delete_bucket_not_empty(self):
        mock_client = Mock()
        mock_client.delete_bucket.side_effect = client_error('BucketNotEmpty', 409)
        service = S3Service(client=mock_client)

        with pytest.raises(ServiceOperationError) as exc_info:
            service.delete_bucket('bucket')

        assert exc_info.value.code is ErrorCode.NOT_EMPTY


class TestSQSService:
    """Tests for SQSService."""

    def test_init(self):
        """Test SQSService initialization."""
        service = SQSService()
        assert service._client is None

    @patch('services.sqs_service.boto3')
    def test_client_lazy_init(self, mock_boto3):
        """Test lazy initialization of SQS client."""
        mock_client = Mock()
        mock_boto3.Session.return_value.client.return_value = mock_client

        service = SQSService()

        assert service.client == mock_client
        mock_boto3.Session.return_value.client.assert_called_once_with('sqs')

    def test_queue_name_from_url(self):
        url = 'https://sqs.us-east-1.amazonaws.com/123456789012/MyQueue'
        assert queue_name_from_url(url) == 'MyQueue'
        assert QueueRef.from_url(url) == QueueRef(name='MyQueue', url=url)

    def test_list_queues_without_queue_urls(self):
        """ListQueues omits QueueUrls entirely when there are no queues."""
        mock_client = Mock()
        mock_client.list_queues.return_value = {}
        service = SQSService(client=mock_client)

        assert service.list_queues() == []

    def test_send_message_with_attributes(self):
        mock_client = Mock()
        mock_client.send_message.return_value = {
            'MessageId': 'm-1', 'MD5OfMessageBody': 'abc'
        }
        service = SQSService(client=mock_client)

        sent = service.send_message('https://q/MyQueue', 'hello', {'origin': 'test'})

        assert sent.message_id == 'm-1'
        assert sent.md5_of_body == 'abc'
        mock_client.send_message.assert_called_once_with(
            QueueUrl='https://q/MyQueue',
            MessageBody='hello',
            MessageAttributes={'origin': {'DataType': 'String', 'StringValue': 'test'}},
        )

    def test_receive_messages_empty(self):
        """An empty receive is a normal result, not an error."""
        mock_client = Mock()
        mock_client.receive_message.return_value = {}
        service = SQSService(client=mock_client)

        assert service.receive_messages('https://q/MyQueue') == []
        mock_client.receive_message.assert_called_once()

    @pytest.mark.parametrize('max_count, wait_seconds', [(0, 0), (11, 0), (1, -1), (1, 21)])
    def test_receive_messages_validates_arguments(self, max_count, wait_seconds):
        service = SQSService(client=Mock())

        with pytest.raises(ValueError):
            service.receive_messages('https://q/MyQueue', max_count, wait_seconds)

    def test_delete_message_expired_handle(self):
        mock_client = Mock()
        mock_client.delete_message.side_effect = client_error('ReceiptHandleIsInvalid')
        service = SQSService(client=mock_client)

        with pytest.raises(ServiceOperationError) as exc_info:
            service.delete_message('https://q/MyQueue', 'stale-handle')

        assert exc_info.value.code is ErrorCode.RECEIPT_HANDLE_EXPIRED


class TestReceivedMessage:
    """Tests for ReceivedMessage.checksum_matches."""

    def test_checksum_matches(self):
        body = 'This is my message text.'
        message = ReceivedMessage(
            message_id='m', receipt_handle='r', body=body,
            md5_of_body=hashlib.md5(body.encode('utf-8')).hexdigest()
        )
        assert message.checksum_matches() is True

    def test_checksum_mismatch(self):
        message = ReceivedMessage(
            message_id='m', receipt_handle='r', body='tampered', md5_of_body='0' * 32
        )
        assert message.checksum_matches() is False

    def test_checksum_missing(self):
        message = ReceivedMessage(message_id='m', receipt_handle='r', body='x')
        assert message.checksum_matches() is False
