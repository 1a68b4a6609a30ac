import itertools

# please leave this copyright notice in binary distributions.
license = """
rawargs/text.py
part of the rawargs software package
Copyright 2021 by Larry Hastings
All rights reserved.

Permission is hereby granted, free of charge, to any person obtaining a
copy of this software and associated documentation files (the "Software"),
to deal in the Software without restriction, including without limitation
the rights to use, copy, modify, merge, publish, distribute, sublicense,
and/or sell copies of the Software, and to permit persons to whom the
Software is furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included
in all copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT.
IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM,
DAMAGES OR OTHER LIABILITY, WHETHER IN AN ACTION OF CONTRACT,
TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE
OR THE USE OR OTHER DEALINGS IN THE SOFTWARE.
"""


error_prefix = "ERROR: "


def format_error(error, *, prefix=error_prefix):
    """
    Formats one (possibly multi-line) error message.

    The first line is prefixed with "prefix", every
    subsequent line with the same number of spaces,
    so the message reads as one aligned block:

        ERROR: Can't parse 'sideways'.
               Possible values: (left|down|up|right)

    Empty lines are dropped.
    """
    lines = [line for line in error.split("\n") if line]
    indent = " " * len(prefix)
    prefixes = itertools.chain((prefix,), itertools.repeat(indent))
    return "\n".join(p + line for p, line in zip(prefixes, lines))


def join_errors(errors, *, prefix=error_prefix):
    """
    Formats every error in "errors" with format_error()
    and joins them with newlines, preserving order.
    """
    return "\n".join(format_error(error, prefix=prefix) for error in errors)
