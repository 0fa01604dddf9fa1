from inspect import FullArgSpec, getfile, getfullargspec, getsourcelines
from os.path import basename
from time import time
from typing import Any, Callable

from src.platform.logging.loguru_io_config import (
    MASK,
    SENSITIVE_KEYWORDS,
    SENSITIVE_PATTERN,
    TRUNCATE_LENGTH,
    call_depth_var,
    chain_start_time_var,
)


def get_chain_start_time() -> float:
    if not (start_time := chain_start_time_var.get()):
        start_time = time()
        chain_start_time_var.set(start_time)
    return start_time


def build_call_target_func_path(func: Callable[..., Any]) -> str:
    target = getattr(func, '__func__', func)
    try:
        lineno = getsourcelines(target)[1]
    except (OSError, TypeError):
        lineno = 0
    return f'{basename(getfile(target))}::{func.__qualname__}:{lineno}'


def reset_call_depth() -> None:
    layer = max(call_depth_var.get() - 1, 0)
    call_depth_var.set(layer)
    if not layer:
        chain_start_time_var.set(0)


def normalize_args_kwargs(
    func: Callable[..., Any], *args: Any, **kwargs: Any
) -> tuple[tuple[Any, ...], dict[Any, Any]]:
    """Drop kwargs the wrapped function does not accept (FastAPI passes extras)."""
    if hasattr(func, '__wrapped__'):
        func = func.__wrapped__  # type: ignore
    full_arg_spec: FullArgSpec = getfullargspec(func)

    if not full_arg_spec.varkw:
        kw_list: list[str] = full_arg_spec.args + full_arg_spec.kwonlyargs
        kwargs = {k: v for k, v in kwargs.items() if k in kw_list}

    return args, kwargs


def mask_sensitive(data: Any) -> Any:
    data_str = str(data)
    new_data_str = SENSITIVE_PATTERN.sub(rf"\1\2'{MASK}'", data_str)
    return data if data_str == new_data_str else new_data_str


def should_mask_keyword(keyword: Any, value: Any) -> Any:
    return MASK if keyword in SENSITIVE_KEYWORDS else value


def truncate_content(data: Any) -> Any:
    if isinstance(data, str) and len(data) > TRUNCATE_LENGTH:
        return f'{data[:TRUNCATE_LENGTH]}...<truncated {len(data) - TRUNCATE_LENGTH} chars>'
    return data
