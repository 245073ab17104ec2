"""
Error taxonomy for AWS service calls.

Every failure raised by the service layer is a ``ServiceOperationError``
carrying a single ``ErrorDetail`` value. The detail is tagged with one of two
kinds: the service was reached and rejected the request, or the client could
not talk to the service at all.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    NoCredentialsError,
    ParamValidationError,
    PartialCredentialsError,
    ProfileNotFound,
)


class ErrorKind(str, Enum):
    """Top-level error kinds reported by the samples."""

    SERVICE_REJECTED = "ServiceRejected"
    CLIENT_UNAVAILABLE = "ClientUnavailable"


class ErrorCode(str, Enum):
    """Vendor-neutral error codes."""

    NOT_FOUND = "NotFound"
    ACCESS_DENIED = "AccessDenied"
    ALREADY_EXISTS = "AlreadyExists"
    NOT_EMPTY = "NotEmpty"
    PAYLOAD_TOO_LARGE = "PayloadTooLarge"
    BODY_TOO_LARGE = "BodyTooLarge"
    RECEIPT_HANDLE_EXPIRED = "ReceiptHandleExpired"
    UNAVAILABLE = "Unavailable"
    REJECTED = "Rejected"


class ErrorCategory(str, Enum):
    """Which side caused a rejected request."""

    CLIENT = "Client"
    SERVER = "Service"
    UNKNOWN = "Unknown"


# AWS error codes (S3 and SQS) mapped onto the neutral taxonomy
AWS_ERROR_CODES: Dict[str, ErrorCode] = {
    'BucketAlreadyExists': ErrorCode.ALREADY_EXISTS,
    'BucketAlreadyOwnedByYou': ErrorCode.ALREADY_EXISTS,
    'QueueAlreadyExists': ErrorCode.ALREADY_EXISTS,
    'QueueNameExists': ErrorCode.ALREADY_EXISTS,
    'NoSuchBucket': ErrorCode.NOT_FOUND,
    'NoSuchKey': ErrorCode.NOT_FOUND,
    'NotFound': ErrorCode.NOT_FOUND,
    '404': ErrorCode.NOT_FOUND,
    'QueueDoesNotExist': ErrorCode.NOT_FOUND,
    'AWS.SimpleQueueService.NonExistentQueue': ErrorCode.NOT_FOUND,
    'AccessDenied': ErrorCode.ACCESS_DENIED,
    'AccessDeniedException': ErrorCode.ACCESS_DENIED,
    'AllAccessDisabled': ErrorCode.ACCESS_DENIED,
    'InvalidAccessKeyId': ErrorCode.ACCESS_DENIED,
    'SignatureDoesNotMatch': ErrorCode.ACCESS_DENIED,
    '403': ErrorCode.ACCESS_DENIED,
    'BucketNotEmpty': ErrorCode.NOT_EMPTY,
    'EntityTooLarge': ErrorCode.PAYLOAD_TOO_LARGE,
    'MessageTooLong': ErrorCode.BODY_TOO_LARGE,
    'ReceiptHandleIsInvalid': ErrorCode.RECEIPT_HANDLE_EXPIRED,
    'AWS.SimpleQueueService.ReceiptHandleIsInvalid': ErrorCode.RECEIPT_HANDLE_EXPIRED,
    'ServiceUnavailable': ErrorCode.UNAVAILABLE,
    'SlowDown': ErrorCode.UNAVAILABLE,
    'InternalError': ErrorCode.UNAVAILABLE,
    '503': ErrorCode.UNAVAILABLE,
}


@dataclass(frozen=True)
class ErrorDetail:
    """
    Flattened description of a failed AWS call.

    Only ``kind``, ``code`` and ``message`` are always set. The remaining
    fields are filled for ``SERVICE_REJECTED`` errors when the service
    returned them.
    """

    kind: ErrorKind
    code: ErrorCode
    message: str
    operation: Optional[str] = None
    status_code: Optional[int] = None
    aws_error_code: Optional[str] = None
    category: ErrorCategory = ErrorCategory.UNKNOWN
    request_id: Optional[str] = None

    def describe(self) -> List[str]:
        """Return labelled lines suitable for logging one by one."""
        if self.kind is ErrorKind.CLIENT_UNAVAILABLE:
            return [
                f"Error Kind:       {self.kind.value}",
                f"Error Code:       {self.code.value}",
                f"Error Message:    {self.message}",
            ]
        return [
            f"Error Kind:       {self.kind.value}",
            f"Error Code:       {self.code.value}",
            f"Error Message:    {self.message}",
            f"HTTP Status Code: {self.status_code}",
            f"AWS Error Code:   {self.aws_error_code}",
            f"Error Type:       {self.category.value}",
            f"Request ID:       {self.request_id}",
        ]


class ServiceOperationError(Exception):
    """Exception raised by the service layer for any failed AWS call."""

    def __init__(self, detail: ErrorDetail):
        """
        Initialize service operation error.

        Args:
            detail: Flattened error description
        """
        super().__init__(detail.message)
        self.detail = detail
        self.message = detail.message

    @property
    def code(self) -> ErrorCode:
        return self.detail.code

    @property
    def kind(self) -> ErrorKind:
        return self.detail.kind


def _classify(aws_code: str, message: str) -> ErrorCode:
    if aws_code in AWS_ERROR_CODES:
        return AWS_ERROR_CODES[aws_code]
    # SQS reports oversized bodies and stale receipt handles as a generic
    # InvalidParameterValue; only the message tells them apart
    if aws_code == 'InvalidParameterValue':
        lowered = message.lower()
        if 'shorter than' in lowered or 'too long' in lowered:
            return ErrorCode.BODY_TOO_LARGE
        if 'receipt handle' in lowered or 'receipthandle' in lowered:
            return ErrorCode.RECEIPT_HANDLE_EXPIRED
    return ErrorCode.REJECTED


def _category(error_type: Optional[str], status_code: Optional[int]) -> ErrorCategory:
    if error_type == 'Sender':
        return ErrorCategory.CLIENT
    if error_type == 'Receiver':
        return ErrorCategory.SERVER
    if status_code is None:
        return ErrorCategory.UNKNOWN
    return ErrorCategory.SERVER if status_code >= 500 else ErrorCategory.CLIENT


# Raised before any request is sent
CREDENTIAL_ERRORS = (NoCredentialsError, PartialCredentialsError, ProfileNotFound)


def _classify_local(exc: BotoCoreError) -> ErrorCode:
    if isinstance(exc, ParamValidationError):
        return ErrorCode.REJECTED
    if isinstance(exc, CREDENTIAL_ERRORS):
        return ErrorCode.ACCESS_DENIED
    return ErrorCode.UNAVAILABLE


def translate_error(
    exc: Exception,
    operation: Optional[str] = None
) -> ServiceOperationError:
    """
    Translate a botocore exception into a ``ServiceOperationError``.

    Args:
        exc: ``ClientError`` or ``BotoCoreError`` raised by boto3
        operation: Name of the AWS operation that failed

    Returns:
        ServiceOperationError wrapping the flattened detail

    Raises:
        TypeError: If ``exc`` is not a botocore exception
    """
    if isinstance(exc, ClientError):
        error = exc.response.get('Error', {})
        metadata = exc.response.get('ResponseMetadata', {})
        aws_code = str(error.get('Code', ''))
        message = error.get('Message') or str(exc)
        status_code = metadata.get('HTTPStatusCode')
        detail = ErrorDetail(
            kind=ErrorKind.SERVICE_REJECTED,
            code=_classify(aws_code, message),
            message=message,
            operation=operation or exc.operation_name,
            status_code=status_code,
            aws_error_code=aws_code or None,
            category=_category(error.get('Type'), status_code),
            request_id=metadata.get('RequestId'),
        )
        return ServiceOperationError(detail)

    if isinstance(exc, BotoCoreError):
        detail = ErrorDetail(
            kind=ErrorKind.CLIENT_UNAVAILABLE,
            code=_classify_local(exc),
            message=str(exc),
            operation=operation,
        )
        return ServiceOperationError(detail)

    raise TypeError(f"Cannot translate {type(exc).__name__} into a service error")
