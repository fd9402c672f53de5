"""CLI interface for CyteType annotation jobs."""
import sys
import json
import argparse
from pathlib import Path
from typing import Optional, List, Sequence, Mapping, Any

from dotenv import load_dotenv

from cytetype.domain.models import AnnotationRecord
from cytetype.domain.exceptions import (
    ErrorKind,
    DomainException,
    CyteTypeAPIError,
    ConfigurationError,
    PayloadValidationError,
    PollCancelledError,
)
from cytetype.domain.query import build_query
from cytetype.infrastructure.config import ConfigLoader, ClientConfig
from cytetype.application.client import AnnotationClient
from cytetype.presentation.progress import ClusterProgressRenderer
from cytetype.shared.logging import configure_logging, get_logger

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2
EXIT_TIMEOUT = 3
EXIT_AUTH = 4
EXIT_INTERRUPTED = 130

QUERY_FILENAME = "query.json"


def create_client_from_config(config: ClientConfig) -> AnnotationClient:
    """Create a client with all dependencies from config."""
    return AnnotationClient(config)


def exit_code_for(error: CyteTypeAPIError) -> int:
    if error.kind is ErrorKind.AUTH:
        return EXIT_AUTH
    if error.kind is ErrorKind.TIMEOUT:
        return EXIT_TIMEOUT
    return EXIT_FAILURE


def load_payload(path: Path) -> dict:
    """Read a JSON payload file and validate it against the request schema."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw = json.load(f)
    except (OSError, ValueError) as e:
        raise PayloadValidationError(f"Cannot read payload {path}: {e}")

    if not isinstance(raw, dict) or 'input_data' not in raw:
        raise PayloadValidationError(f"Payload {path} must be an object with 'input_data'")

    return build_query(raw['input_data'], raw.get('llm_configs'))


def write_records(records: List[AnnotationRecord], output: Optional[Path]) -> None:
    logger = get_logger(__name__)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, 'w', encoding='utf-8') as f:
            json.dump([r.to_dict() for r in records], f, indent=2)
        logger.info(f"Wrote {len(records)} annotations to {output}")
        return

    for record in records:
        logger.info(f"  {record.cluster_id}: {record.annotation} ({record.ontology_term})")


def save_job_details(
    directory: Path,
    job_id: str,
    report_url: str,
    api_url: str,
    payload: Mapping[str, Any]
) -> Path:
    """
    Write the submitted query and ``job_details_<job_id>.json``.

    The details file lets ``poll``/``results`` pick the job up again with
    ``--job-file`` after the original session is gone. The auth token is
    not written.

    Returns:
        Path of the job details file
    """
    directory.mkdir(parents=True, exist_ok=True)
    with open(directory / QUERY_FILENAME, 'w', encoding='utf-8') as f:
        json.dump(payload, f, indent=2)

    details_path = directory / f"job_details_{job_id}.json"
    with open(details_path, 'w', encoding='utf-8') as f:
        json.dump({'job_id': job_id, 'report_url': report_url, 'api_url': api_url}, f, indent=2)
    return details_path


def resolve_job_id(args: argparse.Namespace) -> str:
    """Job id from ``--job-id`` or from a saved job details file."""
    if args.job_id:
        return args.job_id
    try:
        with open(args.job_file, 'r', encoding='utf-8') as f:
            details = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Cannot read job file {args.job_file}: {e}")

    job_id = details.get('job_id') if isinstance(details, dict) else None
    if not isinstance(job_id, str) or not job_id:
        raise ConfigurationError(f"Job file {args.job_file} has no 'job_id'")
    return job_id


def _add_job_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument('--job-id', help='Job identifier')
    group.add_argument('--job-file', type=Path, help='job_details_<id>.json written by submit --save-job')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cytetype", description="CyteType annotation job client")
    parser.add_argument('--config', type=Path, help='Config YAML file')
    parser.add_argument('--api-url', help='API base URL')
    parser.add_argument('--auth-token', help='Bearer token')
    parser.add_argument('--poll-interval', type=float, help='Seconds between polls')
    parser.add_argument('--timeout', type=float, help='Overall polling budget in seconds')
    parser.add_argument('--no-progress', action='store_true', help='Disable the progress line')
    parser.add_argument('--log-file', type=Path, help='Also write logs to this file')
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose')

    sub = parser.add_subparsers(dest='command', required=True)

    submit = sub.add_parser('submit', help='Submit a payload and wait for results')
    submit.add_argument('--payload', type=Path, required=True, help='JSON request body')
    submit.add_argument('--no-wait', action='store_true', help='Print the job id and exit')
    submit.add_argument('--save-job', type=Path, metavar='DIR',
                        help='Save query.json and job_details_<id>.json to DIR')
    submit.add_argument('--output', '-o', type=Path, help='Write annotations as JSON')

    poll = sub.add_parser('poll', help='Wait for an existing job')
    _add_job_arguments(poll)
    poll.add_argument('--output', '-o', type=Path, help='Write annotations as JSON')

    status = sub.add_parser('status', help='Show the current job status')
    _add_job_arguments(status)

    results = sub.add_parser('results', help='Fetch results of a finished job')
    _add_job_arguments(results)
    results.add_argument('--output', '-o', type=Path, help='Write annotations as JSON')

    return parser


def run_command(args: argparse.Namespace, client: AnnotationClient) -> int:
    logger = get_logger(__name__)
    progress = ClusterProgressRenderer() if client.config.show_progress else None

    if args.command == 'submit':
        payload = load_payload(args.payload)
        job_id = client.submit(payload)
        if args.save_job:
            details_path = save_job_details(
                args.save_job, job_id, client.report_url(job_id), client.config.api_url, payload
            )
            logger.info(f"Job details saved to {details_path}")
        if args.no_wait:
            print(job_id)
            return EXIT_OK
        records = client.poll(
            job_id,
            cluster_label_map=payload['input_data'].get('clusterLabels') or None,
            progress=progress
        )
        write_records(records, args.output)
        return EXIT_OK

    job_id = resolve_job_id(args)

    if args.command == 'poll':
        logger.info(f"Report: {client.report_url(job_id)}")
        records = client.poll(job_id, progress=progress)
        write_records(records, args.output)
        return EXIT_OK

    if args.command == 'status':
        snapshot = client.status(job_id)
        logger.info(f"Job {job_id}: {snapshot.status.value} ({snapshot.message})")
        if progress is not None and snapshot.cluster_status:
            progress.finish(snapshot.cluster_status)
        return EXIT_OK

    if args.command == 'results':
        records = client.fetch_results(job_id)
        write_records(records, args.output)
        return EXIT_OK

    logger.error(f"Unknown command: {args.command}")
    return EXIT_CONFIG


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    configure_logging(verbose=args.verbose, log_file=args.log_file)
    logger = get_logger(__name__)

    # .env in the working directory; never overrides variables already set
    load_dotenv(dotenv_path=Path.cwd() / ".env")

    try:
        overrides = {
            'api_url': args.api_url,
            'auth_token': args.auth_token,
            'poll_interval': args.poll_interval,
            'timeout': args.timeout,
        }
        if args.no_progress:
            overrides['show_progress'] = False
        config = ConfigLoader(config_path=args.config).load(overrides=overrides)

        client = create_client_from_config(config)
        return run_command(args, client)

    except (ConfigurationError, PayloadValidationError) as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG
    except CyteTypeAPIError as e:
        logger.error(str(e))
        return exit_code_for(e)
    except PollCancelledError as e:
        logger.warning(str(e))
        return EXIT_INTERRUPTED
    except DomainException as e:
        logger.error(f"Error: {e}")
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return EXIT_INTERRUPTED
    except Exception as e:
        logger.exception(f"Error: {e}")
        return EXIT_FAILURE


if __name__ == '__main__':
    sys.exit(main())
