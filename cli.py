"""
Command-line entry point for the AWS samples.

    aws-samples              # run the S3 and SQS samples
    aws-samples s3 --region eu-west-1 --profile dev
    aws-samples s3 --all-regions
"""
import argparse
import sys
from typing import List, Optional

from botocore.exceptions import BotoCoreError

from config import VALID_LOG_LEVELS, Config, get_config
from logger_config import get_logger, set_log_level
from orchestrator import RunResult, RunState
from samples import S3Sample, SQSSample
from services.aws_session import available_regions, build_session
from services.s3_service import S3Service
from services.sqs_service import SQSService
from utils.exceptions import translate_error

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='aws-samples',
        description='Run the Amazon S3 and Amazon SQS getting-started samples.',
    )
    parser.add_argument(
        'sample',
        nargs='?',
        choices=('s3', 'sqs', 'all'),
        default='all',
        help='Which sample to run (default: all)',
    )
    parser.add_argument('--region', help='AWS region (overrides AWS_REGION)')
    parser.add_argument('--profile', help='Named credential profile (overrides AWS_PROFILE)')
    parser.add_argument(
        '--log-level',
        type=str.upper,
        choices=sorted(VALID_LOG_LEVELS),
        help='Log level (overrides LOG_LEVEL)',
    )
    parser.add_argument(
        '--all-regions',
        action='store_true',
        help='Run the S3 sample once in every standard AWS region',
    )
    return parser


SESSION_STEP = 'Creating the AWS session'


def _session_failure(title: str, exc: BotoCoreError) -> RunResult:
    """Record a run that could not start because no session was available."""
    detail = translate_error(exc, 'CreateSession').detail
    logger.error(f'{title} could not start: {detail.message}')
    for line in detail.describe():
        logger.error(line)
    return RunResult(
        title=title,
        state=RunState.FAILED,
        duration_ns=0,
        history=[RunState.INIT, RunState.FAILED],
        failed_step=SESSION_STEP,
        error=detail,
    )


def run_s3(config: Config) -> RunResult:
    try:
        session = build_session(config)
    except BotoCoreError as e:
        return _session_failure(S3Sample.title, e)
    return S3Sample(S3Service(session=session), config).run()


def run_sqs(config: Config) -> RunResult:
    try:
        session = build_session(config)
    except BotoCoreError as e:
        return _session_failure(SQSSample.title, e)
    return SQSSample(SQSService(session=session), config).run()


def run_s3_all_regions(config: Config) -> List[RunResult]:
    try:
        regions = available_regions(build_session(config), 's3')
    except BotoCoreError as e:
        return [_session_failure(S3Sample.title, e)]

    results = []
    for region in regions:
        logger.warning(f'Running S3 sample in {region}')
        results.append(run_s3(config.with_overrides(aws_region=region)))
    return results


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the selected samples.

    Returns:
        0 when every run finished in state Done, 1 otherwise
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = get_config().with_overrides(
            aws_region=args.region,
            aws_profile=args.profile,
            log_level=args.log_level,
        )
    except ValueError as e:
        parser.error(str(e))
    set_log_level(config.log_level)

    results: List[RunResult] = []
    if args.sample in ('s3', 'all'):
        if args.all_regions:
            results.extend(run_s3_all_regions(config))
        else:
            results.append(run_s3(config))
    if args.sample in ('sqs', 'all'):
        results.append(run_sqs(config))

    failed = [r for r in results if not r.succeeded]
    for result in failed:
        logger.error(
            f'{result.title} failed at step "{result.failed_step}" '
            f'({result.error.code.value if result.error else "unknown"})'
        )
    return 1 if failed else 0


if __name__ == '__main__':
    sys.exit(main())
