"""Main module entrypoint for local runtime execution.

This module validates startup configuration and runs one readiness or operation
command, or launches the domain API simulator.
"""

import argparse

import uvicorn

from titanwatch.adapters import BucketFixtureError, EnvironmentCommandError, TitanApiError
from titanwatch.bootstrap import (
    bootstrap_create_api_client,
    bootstrap_create_bucket_fixture,
    bootstrap_create_operation_tracker,
    bootstrap_create_readiness_service,
    bootstrap_create_simulator_application,
    bootstrap_load_settings,
)
from titanwatch.jobs import OperationCompletion, WaitError, WaitResult


def main_build_argument_parser() -> argparse.ArgumentParser:
    """Build the command-line parser.

    Returns:
        argparse.ArgumentParser: Parser with one subcommand per runtime command.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    argument_parser = argparse.ArgumentParser(description="Titan readiness and operation tracking entrypoint")
    subparsers = argument_parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("wait-server", help="Wait until the server answers ListRepositories")
    subparsers.add_parser("wait-ssh", help="Wait until the SSH endpoint accepts a session")

    volume_parser = subparsers.add_parser("wait-volume", help="Wait until a volume reports ready")
    volume_parser.add_argument("repository", type=str)
    volume_parser.add_argument("volume", type=str)

    commit_parser = subparsers.add_parser("wait-commit", help="Wait until a commit reports ready")
    commit_parser.add_argument("repository", type=str)
    commit_parser.add_argument("commit", type=str)

    operation_parser = subparsers.add_parser("wait-operation", help="Follow an operation to its terminal outcome")
    operation_parser.add_argument("operation_id", type=str)
    operation_parser.add_argument(
        "--abort-is-error",
        dest="abort_is_error",
        action="store_true",
        help="Exit with status 1 when the operation was aborted",
    )

    abort_parser = subparsers.add_parser("abort-operation", help="Request cancellation of a running operation")
    abort_parser.add_argument("operation_id", type=str)

    bucket_parser = subparsers.add_parser("clear-bucket", help="Delete every object under the bucket fixture location")
    bucket_parser.add_argument("location", type=str, nargs="?", default=None, help="`bucket` or `bucket/path`")

    subparsers.add_parser("simulator", help="Serve the in-memory domain API simulator")
    return argument_parser


def main(argv: list[str] | None = None) -> None:
    """Run selected runtime command with validated startup configuration.

    Args:
        argv: Optional argument list, `sys.argv[1:]` when omitted.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
        SystemExit: Raised with status 1 when the command does not succeed.
    """

    parsed_arguments = main_build_argument_parser().parse_args(argv)
    settings = bootstrap_load_settings()

    if parsed_arguments.command == "simulator":
        uvicorn.run(
            bootstrap_create_simulator_application(),
            host=settings.simulator_host,
            port=settings.simulator_port,
        )
        return

    if parsed_arguments.command == "clear-bucket":
        try:
            bucket_fixture = bootstrap_create_bucket_fixture(settings, parsed_arguments.location)
            deleted_count = bucket_fixture.adapter_clear_bucket()
        except (BucketFixtureError, ValueError) as error:
            print(f"FAILED: {error}")
            raise SystemExit(1) from error
        print(f"CLEARED: {bucket_fixture.adapter_location()} ({deleted_count} object(s))")
        return

    api_client = bootstrap_create_api_client(settings)
    try:
        if parsed_arguments.command == "wait-operation":
            tracker = bootstrap_create_operation_tracker(settings, api_client)
            completion = tracker.tracker_await_completion(
                parsed_arguments.operation_id,
                abort_is_error=parsed_arguments.abort_is_error,
            )
            main_print_operation_completion(completion)
            return

        if parsed_arguments.command == "abort-operation":
            tracker = bootstrap_create_operation_tracker(settings, api_client)
            tracker.tracker_abort(parsed_arguments.operation_id)
            print(f"ABORT_REQUESTED: {parsed_arguments.operation_id}")
            return

        readiness_service = bootstrap_create_readiness_service(settings, api_client)
        if parsed_arguments.command == "wait-server":
            wait_result = readiness_service.job_wait_for_server()
        elif parsed_arguments.command == "wait-ssh":
            wait_result = readiness_service.job_wait_for_endpoint()
        elif parsed_arguments.command == "wait-volume":
            wait_result = readiness_service.job_wait_for_volume(parsed_arguments.repository, parsed_arguments.volume)
        else:
            wait_result = readiness_service.job_wait_for_commit(parsed_arguments.repository, parsed_arguments.commit)
        main_print_wait_result(wait_result)
    except (WaitError, TitanApiError, EnvironmentCommandError) as error:
        print(f"FAILED: {error}")
        raise SystemExit(1) from error
    finally:
        api_client.close()


def main_print_wait_result(wait_result: WaitResult) -> None:
    print(f"READY: {wait_result.label} after {wait_result.attempts} attempt(s)")


def main_print_operation_completion(completion: OperationCompletion) -> None:
    """Print the progress log and terminal outcome of a finished operation.

    Args:
        completion: Classified operation outcome.

    Returns:
        None: Prints to stdout as side effect.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    for entry in completion.entries:
        percent_suffix = f" ({entry.percent}%)" if entry.percent is not None else ""
        print(f"{entry.entry_id} {entry.entry_type.value}: {entry.message}{percent_suffix}")
    print(f"{completion.outcome.value}: {completion.operation.operation_id}")


if __name__ == "__main__":
    main()
