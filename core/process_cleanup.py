#!/usr/bin/env python3

"""
Browser process cleanup.

A hung or crashed session can leave chromedriver and browser processes
behind. These helpers find the driver service process of a WebDriver and
terminate its whole tree, so teardown never leaks processes.
"""

import logging
from typing import Any, Optional

import psutil

logger = logging.getLogger(__name__)

BROWSER_PROCESS_NAMES: tuple[str, ...] = (
    "chrome",
    "chromium",
    "chromedriver",
    "firefox",
    "geckodriver",
    "msedge",
    "msedgedriver",
)


def driver_service_pid(driver: Any) -> Optional[int]:
    """Return the PID of the driver service process started for ``driver``, if any."""
    service = getattr(driver, "service", None)
    process = getattr(service, "process", None)
    pid = getattr(process, "pid", None)
    return pid if isinstance(pid, int) and pid > 0 else None


def kill_process_tree(pid: int, timeout: float = 3.0) -> int:
    """
    Terminate a process and all of its children.

    Processes that ignore SIGTERM for ``timeout`` seconds are killed.

    Returns:
        Number of processes that were signalled.
    """
    try:
        parent = psutil.Process(pid)
        procs = [*parent.children(recursive=True), parent]
    except psutil.NoSuchProcess:
        return 0
    except psutil.AccessDenied:
        logger.warning(f"Access denied inspecting process {pid}")
        return 0

    signalled: list[psutil.Process] = []
    for proc in procs:
        try:
            proc.terminate()
            signalled.append(proc)
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue

    _, alive = psutil.wait_procs(signalled, timeout=timeout)
    for proc in alive:
        try:
            proc.kill()
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue

    logger.debug(f"Terminated {len(signalled)} process(es) rooted at pid {pid} ({len(alive)} killed)")
    return len(signalled)


def count_browser_processes(names: tuple[str, ...] = BROWSER_PROCESS_NAMES) -> int:
    """Count running processes whose name looks like a browser or driver."""
    count = 0
    for proc in psutil.process_iter(["name"]):
        try:
            name = (proc.info.get("name") or "").lower()
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            continue
        if any(name.startswith(candidate) for candidate in names):
            count += 1
    return count


__all__ = ["BROWSER_PROCESS_NAMES", "count_browser_processes", "driver_service_pid", "kill_process_tree"]
