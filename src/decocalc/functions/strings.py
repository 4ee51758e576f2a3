from __future__ import annotations

import base64
import re
from urllib.parse import quote, unquote

from ..errors import FunctionArgumentOverflowError, ValueParsingError
from ..types import Array, Boolean, ExpectedTypes, Integer, Object, String
from .table import FunctionArgument, register_function

CATEGORY = "strings"

@register_function("contains", category=CATEGORY,
                   description="Returns true if array or string [source] contains [s]",
                   arguments=[FunctionArgument("source"), FunctionArgument("s")])
def std_contains(_fn, _node, _state, args):
    source = args.required("source")
    needle = args.required("s")

    match source:
        case Array(items):
            return Boolean(needle in items)
        case Object(entries):
            return Boolean(needle in entries)
        case _:
            return Boolean(needle.as_string() in source.as_string())

@register_function("concat", category=CATEGORY,
                   description="Concatenate a set of strings",
                   arguments=[FunctionArgument("s", ExpectedTypes.STRING, optional=True, plural=True)])
def std_concat(_fn, _node, _state, args):
    return String("".join(v.as_string() for v in args.plural("s")))

@register_function("strlen", category=CATEGORY,
                   description="Returns the length of the string s",
                   arguments=[FunctionArgument("s", ExpectedTypes.STRING)])
def std_strlen(_fn, _node, _state, args):
    return Integer(len(args.required("s").as_string()))

@register_function("uppercase", category=CATEGORY,
                   description="Converts the string s to uppercase",
                   arguments=[FunctionArgument("s", ExpectedTypes.STRING)])
def std_uppercase(_fn, _node, _state, args):
    return String(args.required("s").as_string().upper())

@register_function("lowercase", category=CATEGORY,
                   description="Converts the string s to lowercase",
                   arguments=[FunctionArgument("s", ExpectedTypes.STRING)])
def std_lowercase(_fn, _node, _state, args):
    return String(args.required("s").as_string().lower())

@register_function("trim", category=CATEGORY,
                   description="Trim whitespace from a string",
                   arguments=[FunctionArgument("s", ExpectedTypes.STRING)])
def std_trim(_fn, _node, _state, args):
    return String(args.required("s").as_string().strip())

@register_function("substr", category=CATEGORY,
                   description="Returns a substring from s, beginning at [start], and going to the end, or for [length] characters",
                   arguments=[
                       FunctionArgument("s", ExpectedTypes.STRING),
                       FunctionArgument("start", ExpectedTypes.INT),
                       FunctionArgument("length", ExpectedTypes.INT, optional=True),
                   ])
def std_substr(fn, node, _state, args):
    s = args.required("s").as_string()
    start = args.required("start").as_int()
    if start is None or not 0 <= start <= len(s):
        raise FunctionArgumentOverflowError(node, 2, fn.signature())

    length_arg = args.optional("length")
    length = len(s) - start if length_arg is None else length_arg.as_int()
    if length is None or length < 0 or start + length > len(s):
        raise FunctionArgumentOverflowError(node, 3, fn.signature())

    return String(s[start:start + length])

@register_function("regex", category=CATEGORY,
                   description="Returns a regular expression match from [subject], or false",
                   arguments=[
                       FunctionArgument("pattern", ExpectedTypes.STRING),
                       FunctionArgument("subject", ExpectedTypes.STRING),
                       FunctionArgument("group", ExpectedTypes.INT, optional=True),
                   ])
def std_regex(_fn, node, _state, args):
    pattern = args.required("pattern").as_string()
    subject = args.required("subject").as_string()
    group = args.optional_or("group", Integer(0)).as_int() or 0

    try:
        compiled = re.compile(pattern)
    except re.error as e:
        raise ValueParsingError(node, pattern, "regular expression") from e

    match = compiled.search(subject)
    if match is None or group > compiled.groups or group < 0:
        return Boolean(False)

    found = match.group(group)
    return Boolean(False) if found is None else String(found)

@register_function("urlencode", category=CATEGORY,
                   description="Escape characters in a string for use in a URL",
                   arguments=[FunctionArgument("input", ExpectedTypes.STRING)])
def std_urlencode(_fn, _node, _state, args):
    return String(quote(args.required("input").as_string(), safe=""))

@register_function("urldecode", category=CATEGORY,
                   description="Decode urlencoded character escape sequences in a string",
                   arguments=[FunctionArgument("input", ExpectedTypes.STRING)])
def std_urldecode(_fn, node, _state, args):
    text = args.required("input").as_string()
    try:
        return String(unquote(text, errors="strict"))
    except UnicodeDecodeError as e:
        raise ValueParsingError(node, text, "urlencoded string") from e

@register_function("atob", category=CATEGORY,
                   description="Convert a string into a base64 encoded string",
                   arguments=[FunctionArgument("input", ExpectedTypes.STRING)])
def std_atob(_fn, _node, _state, args):
    raw = args.required("input").as_string().encode("utf-8")
    return String(base64.b64encode(raw).decode("ascii"))

@register_function("btoa", category=CATEGORY,
                   description="Convert a base64 encoded string to an ascii encoded string",
                   arguments=[FunctionArgument("input", ExpectedTypes.STRING)])
def std_btoa(_fn, node, _state, args):
    text = args.required("input").as_string()
    try:
        return String(base64.b64decode(text, validate=True).decode("utf-8"))
    except ValueError as e:
        raise ValueParsingError(node, text, "base64 string") from e
