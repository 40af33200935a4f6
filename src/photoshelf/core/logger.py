"""Console and diagnostics logging for Photoshelf.

Console output goes through rich: warnings always, everything else only in
verbose mode. In web mode every entry is also kept in the in-memory buffer
served by /api/logs.
"""

from typing import Any, Optional

from rich.console import Console
from rich.markup import escape

from photoshelf.web.state import log_buffer

_console = Console()
_verbose = False
_web_mode = False


def set_verbose(enabled: bool) -> None:
    global _verbose
    _verbose = enabled


def set_web_mode(enabled: bool) -> None:
    """Also record entries in the diagnostics buffer."""
    global _web_mode
    _web_mode = enabled


def _shorten(value: Any, limit: int) -> str:
    text = str(value)
    return text if len(text) <= limit else text[: limit - 3] + "..."


def _emit(level: str, message: str, data: Optional[dict] = None) -> None:
    if _web_mode:
        log_buffer.add(level, message, data)

    if level == "warning":
        _console.print(f"  [yellow]⚠ {escape(message)}[/yellow]")
    elif _verbose:
        _console.print(f"  [dim]{escape(message)}[/dim]")


def log_call(service: str, method: str, **kwargs: Any) -> None:
    """Logs a service call with its parameters.

    Args:
        service: Service name (e.g. "RecordStore")
        method: Method name (e.g. "load")
        **kwargs: Call parameters, None values are skipped
    """
    params = {key: value for key, value in kwargs.items() if value is not None}
    shown = ", ".join(f"{key}={_shorten(value, 50)}" for key, value in params.items())
    _emit(
        "call",
        f"→ {service}.{method}({shown})",
        {"service": service, "method": method, "params": {key: str(value) for key, value in params.items()}},
    )


def log_result(service: str, method: str, result: Any) -> None:
    _emit(
        "result",
        f"← {service}.{method} = {_shorten(result, 80)}",
        {"service": service, "method": method, "result": str(result)},
    )


def log_info(message: str) -> None:
    _emit("info", message)


def log_warning(message: str) -> None:
    """Logs a warning; shown on the console even without verbose mode."""
    _emit("warning", message)
