from __future__ import annotations

import time
from collections import deque
from pathlib import Path

from ..errors import CalcIOError, FunctionArgumentOverflowError
from ..types import ExpectedTypes, Integer, String
from .table import FunctionArgument, register_function

CATEGORY = "system"

@register_function("time", category=CATEGORY,
                   description="Returns a unix timestamp for the current system time")
def std_time(_fn, _node, _state, _args):
    return Integer(int(time.time()))

@register_function("tail", category=CATEGORY,
                   description="Returns the last [lines] lines from a given file",
                   arguments=[
                       FunctionArgument("filename", ExpectedTypes.STRING),
                       FunctionArgument("lines", ExpectedTypes.INT, optional=True),
                   ])
def std_tail(fn, node, _state, args):
    path = Path(args.required("filename").as_string())
    count = args.optional_or("lines", Integer(1)).as_int()
    if count is None or count < 0:
        raise FunctionArgumentOverflowError(node, 2, fn.signature())

    try:
        with path.open(encoding="utf-8") as f:
            lines = deque((line.rstrip("\r\n") for line in f), maxlen=count)
    except OSError as e:
        raise CalcIOError(node, f"could not read {path}: {e.strerror or e}") from e

    return String("\n".join(lines))
