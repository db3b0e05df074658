"""Worker fleet launcher.

Starts one worker process per ``.env*`` file in a directory. Workers run in
their own session and are never awaited by the launcher. Their output is
relayed line by line, tagged with the originating config file, and a
nonzero exit is logged but not acted upon.

Detached workers are not relayed: their stdout goes to /dev/null and
each worker keeps writing its own log file under ``log/logs/``.

Usage:
    python -m sweep.launcher            # launch and relay output
    python -m sweep.launcher --detach   # launch and return immediately
"""

from __future__ import annotations

import argparse
import logging
import os
import subprocess
import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path

from core.errors import ConfigDiscoveryEmpty
from bot.config import CONFIG_FILE_ENV, discover_config_files

logger = logging.getLogger(__name__)

WORKER_MODULE = "bot"


def worker_command() -> list[str]:
    return [sys.executable, "-m", WORKER_MODULE]


@dataclass
class WorkerHandle:
    """A launched worker. Creating it never blocks on the child."""

    config_file: str
    process: subprocess.Popen
    _threads: list[threading.Thread] = field(default_factory=list, repr=False)

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def tag(self) -> str:
        return f"[{self.config_file}]"

    def poll(self) -> int | None:
        return self.process.poll()

    def follow(self, timeout: float | None = None) -> None:
        """Block until the relay and exit-watch threads finish."""
        for thread in self._threads:
            thread.join(timeout)


def _pump_output(handle: WorkerHandle) -> None:
    stream = handle.process.stdout
    if stream is None:
        return
    for line in iter(stream.readline, ""):
        print(f"{handle.tag} {line.rstrip()}", flush=True)
    stream.close()


def _watch_exit(handle: WorkerHandle) -> None:
    code = handle.process.wait()
    if code == 0:
        logger.info(f"{handle.tag} worker (pid {handle.pid}) exited with code 0")
    else:
        logger.warning(f"{handle.tag} worker (pid {handle.pid}) exited with code {code}")


def launch_worker(
    config_file: Path,
    cwd: Path,
    command: list[str] | None = None,
    relay: bool = True,
) -> WorkerHandle:
    """Start one detached worker bound to ``config_file``. Does not wait.

    With ``relay=False`` the output is discarded and no relay thread is
    started, so nothing depends on the launcher staying alive.
    """
    env = {**os.environ, CONFIG_FILE_ENV: config_file.name}
    process = subprocess.Popen(
        command or worker_command(),
        cwd=cwd,
        env=env,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE if relay else subprocess.DEVNULL,
        stderr=subprocess.STDOUT,
        text=True,
        bufsize=1,
        start_new_session=True,
    )
    handle = WorkerHandle(config_file=config_file.name, process=process)
    if not relay:
        logger.info(f"Started worker with {config_file.name} detached (PID: {process.pid})")
        return handle

    for target in (_pump_output, _watch_exit):
        thread = threading.Thread(
            target=target,
            args=(handle,),
            name=f"{target.__name__}-{config_file.name}",
            daemon=True,
        )
        thread.start()
        handle._threads.append(thread)

    logger.info(f"Started worker with {config_file.name} in the background (PID: {process.pid})")
    return handle


def discover_candidates(directory: Path) -> list[Path]:
    """Config files to launch, sorted by name.

    Raises:
        ConfigDiscoveryEmpty: no candidate in ``directory``
    """
    config_files = discover_config_files(directory)
    if not config_files:
        raise ConfigDiscoveryEmpty(f"No .env files found in {directory}")
    return config_files


def launch_fleet(
    directory: Path,
    command: list[str] | None = None,
    relay: bool = True,
) -> list[WorkerHandle]:
    """Launch one worker per config file in ``directory``.

    Returns:
        Handles of started workers; empty if no config file was found
    """
    try:
        config_files = discover_candidates(directory)
    except ConfigDiscoveryEmpty as e:
        logger.info(str(e))
        return []

    return [launch_worker(path, directory, command, relay) for path in config_files]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Launch one sentiment worker per .env* file",
    )
    parser.add_argument(
        "--dir",
        type=Path,
        default=Path.cwd(),
        help="Directory holding the .env* files (default: current directory)",
    )
    parser.add_argument(
        "--detach",
        action="store_true",
        help="Return right after launching instead of relaying worker output",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    args = parse_args(argv)

    handles = launch_fleet(args.dir, relay=not args.detach)
    if handles and not args.detach:
        try:
            for handle in handles:
                handle.follow()
        except KeyboardInterrupt:
            logger.info("Launcher interrupted; workers keep running")
    return 0


if __name__ == "__main__":
    sys.exit(main())
