import logging
import sys
from functools import partial, wraps
from typing import Callable, Optional


def in_debug() -> bool:
    """Determine if debugging is enabled.

    :return: True if the root logger is set to DEBUG
    """
    return logging.getLogger().level <= logging.DEBUG


def describe_os_error(exc: OSError) -> str:
    """Describe an OS error, naming the file or command it concerns.

    A missing objdump or dpkg-gensymbols and failing writes into the staging
    directories show up as e.g. "objdump: No such file or directory".
    """
    if exc.filename is not None and exc.strerror:
        if exc.filename2 is not None:
            return f"{exc.filename} -> {exc.filename2}: {exc.strerror}"
        return f"{exc.filename}: {exc.strerror}"
    return str(exc)


def handle_expected_exceptions(
    func: Optional[Callable] = None,
    *,
    ignore_exceptions: tuple[type[BaseException], ...] = (BrokenPipeError,),
    report_exit_exceptions: tuple[type[BaseException], ...] = (OSError,),
) -> Callable:
    """Wrap a command so that expected failures end the run with a short message.

    Failing external tools and write errors surface as OSError and stop the
    run with "Error: <file>: <reason>". A closed output pipe (e.g. piping
    gen-provides into head) is ignored. In debug mode, the exceptions are
    propagated with their tracebacks.

    :param ignore_exceptions: Exceptions to be ignored
    :param report_exit_exceptions: Exceptions to be reported with exit
    """
    if not func:
        return partial(
            handle_expected_exceptions,
            ignore_exceptions=ignore_exceptions,
            report_exit_exceptions=report_exit_exceptions,
        )

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ignore_exceptions:
            if in_debug():
                raise
        except report_exit_exceptions as exc:
            if in_debug():
                raise
            if isinstance(exc, OSError):
                sys.exit(f"Error: {describe_os_error(exc)}")
            sys.exit(f"Error: {exc}")

    return wrapper
