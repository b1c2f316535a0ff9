"""Exit code translation for the CI layer.

rpminspect status codes:
    0  inspections passed
    1  inspections failed
    2  program errored in some way
    3  inspections passed with warnings

The CI recognizes exactly these. Anything else (crashed subprocesses,
signal deaths, unexpected exceptions) is reported as an infrastructure
error. The translation happens once, around the whole CLI, through
exit_code_guard().
"""

from __future__ import annotations

import logging
import signal
from collections.abc import Iterator
from contextlib import contextmanager
from types import FrameType

from rpminspect_runner.errors import InfrastructureError, RunnerError
from rpminspect_runner.types import INFRA_ERROR, ExitCode

logger = logging.getLogger(__name__)

PASSTHROUGH_CODES = frozenset(int(code) for code in ExitCode)
HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM, signal.SIGHUP)


class Terminated(InfrastructureError):
    """Raised from a signal handler when the CI kills the driver."""

    def __init__(self, signum: int) -> None:
        super().__init__(
            f"Terminated by signal {signal.Signals(signum).name}",
            code="terminated",
        )
        self.signum = signum


def translate_exit_code(code: int | None) -> int:
    """Map any status to one the CI understands.

    Args:
        code: Exit status; None means success.

    Returns:
        ``code`` if it is 0-3, the infrastructure error code otherwise.
    """
    if code is None:
        return int(ExitCode.SUCCESS)
    if code in PASSTHROUGH_CODES:
        return code
    logger.warning("Translating unexpected exit code %s to %d", code, INFRA_ERROR)
    return int(INFRA_ERROR)


def _raise_terminated(signum: int, frame: FrameType | None) -> None:
    raise Terminated(signum)


def install_signal_handlers(
    signals: tuple[signal.Signals, ...] = HANDLED_SIGNALS,
) -> None:
    """Turn termination signals into Terminated exceptions."""
    for signum in signals:
        signal.signal(signum, _raise_terminated)


@contextmanager
def exit_code_guard() -> Iterator[None]:
    """Exit with a translated code whatever happens inside the block.

    Raises:
        SystemExit: Always, with a code in 0-3, unless the block returns
            normally.
    """
    try:
        yield
    except SystemExit as e:
        if e.code is None or isinstance(e.code, int):
            raise SystemExit(translate_exit_code(e.code)) from None
        logger.error("Exiting: %s", e.code)
        raise SystemExit(int(INFRA_ERROR)) from None
    except KeyboardInterrupt:
        logger.error("Interrupted")
        raise SystemExit(int(INFRA_ERROR)) from None
    except RunnerError as e:
        logger.error("%s (%s)", e, e.code)
        raise SystemExit(translate_exit_code(e.exit_code)) from None
    except Exception:
        logger.exception("Unexpected error")
        raise SystemExit(int(INFRA_ERROR)) from None


__all__ = [
    "HANDLED_SIGNALS",
    "PASSTHROUGH_CODES",
    "Terminated",
    "exit_code_guard",
    "install_signal_handlers",
    "translate_exit_code",
]
