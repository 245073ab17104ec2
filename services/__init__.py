"""
Service layer for AWS operations.

This module provides thin, stateless façades over the S3 and SQS clients,
separating the sample scripts from boto3 request and response shapes.
"""
