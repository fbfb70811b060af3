"""
Process entry point shared by the scripts under workers/.

A worker is anything with async start() and stop(). SIGINT and SIGTERM cancel
the task running start(); stop() always runs afterwards and the process exits
with 1 if start() failed.
"""

import asyncio
import logging
import signal
import sys
from typing import Any, Callable, Dict, Optional, Tuple

from common.core.otel_axiom_exporter import _initialize_telemetry, get_logger

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(log_level: str, reset_handlers: bool = True) -> None:
    level = getattr(logging, log_level)
    if reset_handlers:
        # force replaces the basicConfig done when the exporter module was imported
        logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
    else:
        logging.getLogger().setLevel(level)


class WorkerLauncher:
    def __init__(self):
        self.logger = get_logger(__name__)
        self.worker_instance: Optional[Any] = None
        self.exit_code = 0

    def _on_signal(self, signum: int, task: asyncio.Task) -> None:
        self.logger.info(
            f"Received {signal.Signals(signum).name}, shutting down",
            extra={"signal": signum},
        )
        if self.worker_instance is not None:
            self.worker_instance.running = False
        task.cancel()

    async def _serve(self, worker_instance: Any, worker_name: str):
        self.worker_instance = worker_instance

        loop = asyncio.get_running_loop()
        task = asyncio.current_task()
        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(signum, self._on_signal, signum, task)

        self.logger.info(f"Starting {worker_name}", extra={"worker": worker_name})
        try:
            await worker_instance.start()
        except asyncio.CancelledError:
            self.logger.info(f"{worker_name} cancelled")
        except Exception as e:
            self.logger.error(f"{worker_name} failed: {e}", exc_info=True)
            self.exit_code = 1
        finally:
            try:
                await worker_instance.stop()
            except Exception as e:
                self.logger.error(f"Error stopping {worker_name}: {e}")
            else:
                self.logger.info(f"{worker_name} stopped")

    def run(
        self,
        worker_factory: Callable,
        worker_name: str,
        setup_logging: bool = True,
        log_level: str = "INFO",
        factory_args: Tuple = (),
        factory_kwargs: Optional[Dict[str, Any]] = None,
    ):
        """
        Build the worker and run it until it stops or a signal arrives.

        Args:
            worker_factory: Callable returning the worker instance
            worker_name: Name used in log lines
            setup_logging: Replace the root handlers with the launcher format
            log_level: Root log level name
            factory_args: Positional args for worker_factory
            factory_kwargs: Keyword args for worker_factory
        """
        _initialize_telemetry()
        configure_logging(log_level, reset_handlers=setup_logging)

        worker_instance = worker_factory(*factory_args, **(factory_kwargs or {}))
        asyncio.run(self._serve(worker_instance, worker_name))
        sys.exit(self.exit_code)

    def run_with_cli(
        self,
        worker_factory: Callable,
        worker_name: str,
        setup_logging: bool = True,
        cli_setup_func: Optional[Callable] = None,
    ):
        """Like run(), with factory args and log level taken from cli_setup_func().

        cli_setup_func returns (args, factory_args, factory_kwargs); args.log_level
        is used when present.
        """
        if cli_setup_func is None:
            self.run(worker_factory, worker_name, setup_logging=setup_logging)
            return

        args, factory_args, factory_kwargs = cli_setup_func()
        self.run(
            worker_factory,
            worker_name,
            setup_logging=setup_logging,
            log_level=getattr(args, "log_level", "INFO"),
            factory_args=factory_args,
            factory_kwargs=factory_kwargs,
        )
