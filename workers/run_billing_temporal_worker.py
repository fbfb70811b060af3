import argparse

from common.core.config import settings
from common.workers.launcher import WorkerLauncher
from packages.billing.workers.temporal_worker import BillingTemporalWorker


def setup_cli():
    """Setup CLI arguments and return parsed args with factory parameters."""
    parser = argparse.ArgumentParser(description="Temporal Billing Trigger Worker")
    parser.add_argument(
        "--task-queue",
        type=str,
        default=settings.temporal_task_queue,
        help=f"Task queue to process (default: {settings.temporal_task_queue})",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Log level (default: INFO)",
    )

    args = parser.parse_args()
    return args, (args.task_queue,), {}


def main():
    WorkerLauncher().run_with_cli(
        worker_factory=BillingTemporalWorker,
        worker_name="Billing Temporal Worker",
        setup_logging=False,  # Temporal worker doesn't use the basic logging setup
        cli_setup_func=setup_cli,
    )


if __name__ == "__main__":
    main()
