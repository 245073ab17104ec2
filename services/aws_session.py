"""
boto3 session construction from explicit configuration.
"""
from typing import List

import boto3
from config import Config
from logger_config import get_logger

logger = get_logger(__name__)


def build_session(config: Config) -> boto3.Session:
    """
    Build a boto3 session for the configured region and credential profile.

    Credentials themselves are resolved by boto3's usual chain (shared
    credentials file, environment, instance metadata) for the profile.

    Args:
        config: Sample configuration

    Returns:
        A boto3 Session pinned to ``config.aws_region``
    """
    session = boto3.Session(
        profile_name=config.aws_profile,
        region_name=config.aws_region,
    )
    logger.debug(
        f'Built AWS session (region={config.aws_region}, '
        f'profile={config.aws_profile or "default"})'
    )
    return session


def available_regions(session: boto3.Session, service_name: str = 's3') -> List[str]:
    """
    List the regions of the standard ``aws`` partition that offer a service.

    China and GovCloud regions live in separate partitions and need their
    own credentials, so they are never returned.
    """
    return sorted(session.get_available_regions(service_name, partition_name='aws'))
