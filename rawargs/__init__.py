#!/usr/bin/env python3

"A small declarative engine that binds command-line tokens to the fields of a raw command value."
__version__ = "0.1.0"


# please leave this copyright notice in binary distributions.
license = """
rawargs/__init__.py
part of the rawargs software package
Copyright 2021-2023 by Larry Hastings
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


from big.itertools import PushbackIterator
import collections.abc
import dataclasses
import enum
import inspect
import typing
from types import MappingProxyType

from .text import join_errors


help_tokens = frozenset(("-h", "--help"))


class RawArgsBaseException(Exception):
    pass

class ConfigurationError(RawArgsBaseException):
    """
    Raised when the rawargs API is used improperly.
    """
    pass

class UsageError(RawArgsBaseException):
    """
    Raised by a parse function to reject the token(s)
    it was handed.  ArgParser turns it into a Failure.
    """
    pass

class MissingValueError(ConfigurationError):
    """
    Raised when a field is read through get_with_default()
    but has neither a value nor a declared default.
    """
    pass


##
## Parsed
##
## The result of parsing the token(s) for one field.
## Either Success(value) or Failure(message).
##

class Parsed:
    __slots__ = ()

    success = False

    def get_or_none(self, errors):
        """
        Returns the parsed value.  On failure, appends the
        failure message to the list "errors" and returns None.
        """
        raise NotImplementedError()


class Success(Parsed):
    __slots__ = ('value',)

    success = True

    def __init__(self, value):
        self.value = value

    def __repr__(self):
        return f"<Success {self.value!r}>"

    def __eq__(self, other):
        if not isinstance(other, Success):
            return NotImplemented
        return self.value == other.value

    def __hash__(self):
        return hash((Success, self.value))

    def get_or_none(self, errors):
        return self.value


class Failure(Parsed):
    __slots__ = ('message',)

    def __init__(self, message):
        if not (message and isinstance(message, str)):
            raise ValueError("Failure message must be a non-empty str")
        self.message = message

    def __repr__(self):
        return f"<Failure {self.message!r}>"

    def __eq__(self, other):
        if not isinstance(other, Failure):
            return NotImplemented
        return self.message == other.message

    def __hash__(self):
        return hash((Failure, self.message))

    def get_or_none(self, errors):
        errors.append(self.message)
        return None


def or_failure(value, message):
    """
    Returns Success(value), unless value is None,
    in which case returns Failure(message).

    message may also be a zero-argument callable
    returning the message; it's only called on failure.
    """
    if value is not None:
        return Success(value)
    if callable(message):
        message = message()
    return Failure(message)


##
## ParsedCmd
##
## The outcome of parsing a whole command-line.
## Exactly one of:
##     cmd      the populated raw command value
##     help     the command's help text
##     failure  a non-empty list of error messages
##

class ParsedCmd:
    __slots__ = ('kind', 'value', 'help_text', 'errors')

    def __init__(self, kind, value=None, help_text=None, errors=()):
        self.kind = kind
        self.value = value
        self.help_text = help_text
        self.errors = tuple(errors)

    @classmethod
    def cmd(cls, value):
        if value is None:
            raise ValueError("ParsedCmd.cmd() requires a value, not None")
        return cls("cmd", value=value)

    @classmethod
    def help(cls, text):
        if not isinstance(text, str):
            raise ValueError(f"ParsedCmd.help() requires a str, not {text!r}")
        return cls("help", help_text=text)

    @classmethod
    def failure(cls, errors):
        if isinstance(errors, str):
            errors = [errors]
        errors = tuple(errors)
        if not errors:
            raise ValueError("ParsedCmd.failure() requires at least one error")
        return cls("failure", errors=errors)

    @property
    def is_cmd(self):
        return self.kind == "cmd"

    @property
    def is_help(self):
        return self.kind == "help"

    @property
    def is_failure(self):
        return self.kind == "failure"

    @property
    def error(self):
        "All the error messages joined into one printable string, or None."
        if not self.errors:
            return None
        return join_errors(self.errors)

    def map(self, mapper):
        """
        Returns a new ParsedCmd with mapper applied to the cmd value.
        help and failure outcomes pass through unchanged.
        mapper must not return None.
        """
        return self.flat_map(lambda value: ParsedCmd.cmd(mapper(value)))

    def flat_map(self, mapper):
        """
        Calls mapper with the cmd value; mapper must itself
        return a ParsedCmd.  help and failure outcomes
        short-circuit; mapper isn't called.
        """
        if self.is_cmd:
            return mapper(self.value)
        return self

    def unwrap(self):
        """
        Returns a 3-tuple (cmd, help, error).
        Exactly one of the three is not None.
        """
        return (self.value, self.help_text, self.error)

    def __eq__(self, other):
        if not isinstance(other, ParsedCmd):
            return NotImplemented
        return (
            (self.kind == other.kind)
            and (self.value == other.value)
            and (self.help_text == other.help_text)
            and (self.errors == other.errors)
            )

    def __hash__(self):
        return hash((self.kind, self.value, self.help_text, self.errors))

    def __repr__(self):
        if self.is_cmd:
            return f"<ParsedCmd cmd {self.value!r}>"
        if self.is_help:
            return f"<ParsedCmd help {self.help_text!r}>"
        return f"<ParsedCmd failure {list(self.errors)!r}>"


##
## ArgParser
##
## A "binder": pairs one field of a raw command value
## with a function that consumes command-line tokens
## and produces the value for that field.
##
## The parse function can have any of four shapes:
##
##     def parse():                 # consumes nothing (e.g. a boolean flag)
##     def parse(token):            # consumes only the current token
##     def parse(tokens:Iterator):  # consumes only subsequent tokens
##     def parse(token, tokens):    # consumes both
##
## "tokens" is a big.itertools.PushbackIterator over the
## remaining command-line.  The parse function may take as
## many tokens from it as it likes, and push back any it
## took but didn't want.
##
## ArgParser normalizes all four to the (token, tokens) shape.
##

iterator_annotations = (
    PushbackIterator,
    collections.abc.Iterator,
    typing.Iterator,
    )

def _is_iterator_annotation(annotation):
    if annotation in iterator_annotations:
        return True
    return typing.get_origin(annotation) in iterator_annotations


def _normalize_parse(parse):
    if isinstance(parse, type):
        # int, float, pathlib.Path, an enum class...
        # constructing one from the token is the conversion.
        return lambda token, tokens: parse(token)
    try:
        signature = inspect.signature(parse)
    except (TypeError, ValueError):
        # builtin functions aren't always introspectable.
        # they take a single str, so that's what they get.
        return lambda token, tokens: parse(token)

    parameters = [p for p in signature.parameters.values()
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
            and (p.default is inspect.Parameter.empty)]
    if len(parameters) == 0:
        return lambda token, tokens: parse()
    if len(parameters) == 1:
        if _is_iterator_annotation(parameters[0].annotation):
            return lambda token, tokens: parse(tokens)
        return lambda token, tokens: parse(token)
    if len(parameters) == 2:
        return parse
    raise ConfigurationError(f"parse function {parse!r} must take 0, 1, or 2 required positional parameters, not {len(parameters)}")


def _run_parse(parse, token, tokens):
    try:
        result = parse(token, tokens)
    except UsageError as e:
        return Failure(str(e) or f"Can't parse '{token}'")
    except ValueError:
        return Failure(f"Can't parse '{token}'")
    if isinstance(result, Parsed):
        return result
    return Success(result)


class ArgParser:
    """
    Binds the field named "field" of a raw command value
    to the parse function "parse".

    parse can return a Parsed object, or a plain value
    (treated as Success(value)).  It may also raise
    UsageError or ValueError to reject its input.
    """

    __slots__ = ('field', 'parse', 'callable')

    def __init__(self, field, parse):
        if not (field and isinstance(field, str)):
            raise ConfigurationError(f"ArgParser field must be a non-empty str, not {field!r}")
        if not callable(parse):
            raise ConfigurationError(f"ArgParser parse function {parse!r} isn't callable")
        self.field = field
        self.callable = parse
        self.parse = _normalize_parse(parse)

    def __repr__(self):
        name = getattr(self.callable, "__name__", None) or repr(self.callable)
        return f"<ArgParser {self.field} {name}>"

    def __call__(self, token, tokens):
        "Runs the parse function and always returns a Parsed."
        return _run_parse(self.parse, token, tokens)

    def transform(self, raw, token, tokens, errors):
        """
        Consumes token (and maybe more from tokens),
        and returns a copy of raw with our field set.
        A failed parse leaves the field absent and appends
        its message to errors.
        """
        value = self(token, tokens).get_or_none(errors)
        return dataclasses.replace(raw, **{self.field: value})


def true_bool_flag(field):
    "An ArgParser for a presence-only switch: sets field to True."
    def true():
        return Success(True)
    return ArgParser(field, true)


def oparg(parse):
    """
    Wraps a single-token parse function so it consumes
    the token *following* the option flag, e.g.

        "--count": ArgParser("count", oparg(int))
    """
    parse = _normalize_parse(parse)
    def oparg(token, tokens):
        value = next(tokens, None)
        if value is None:
            return Failure(f"'{token}' must be followed by a value")
        return _run_parse(parse, value, tokens)
    return oparg


##
## enums
##

def enum_literal(member):
    "The command-line spelling of an enum member."
    value = member.value
    if isinstance(value, str):
        return value
    return member.name

def union_literal(enum_type):
    return "(" + "|".join(enum_literal(member) for member in enum_type) + ")"

def parse_enum(token, enum_type):
    """
    Returns Success(member) for the member of enum_type
    spelled "token".  Otherwise returns a Failure
    listing every legal spelling, in declaration order.
    """
    for member in enum_type:
        if enum_literal(member) == token:
            return Success(member)
    return Failure(f"Can't parse '{token}'.\nPossible values: {union_literal(enum_type)}")

def enum_parser(enum_type):
    "Returns a single-token parse function for enum_type."
    def parse(token):
        return parse_enum(token, enum_type)
    parse.__name__ = f"parse_{enum_type.__name__}"
    return parse


class CardinalDirection(enum.Enum):
    left = "left"
    down = "down"
    up = "up"
    right = "right"

def parse_cardinal_direction(direction):
    return parse_enum(direction, CardinalDirection)


##
## the registry
##

@dataclasses.dataclass(frozen=True)
class CmdStaticInfo:
    help: str
    kind: typing.Any
    allow_in_config: bool


class CmdParser:
    """
    Everything rawargs knows about one raw command type:
    its static info, its options (flag -> ArgParser),
    its positional arguments (in binding order),
    and the defaults for fields callers expect populated.

    Build these with cmd_parser().  Immutable once built.
    """

    __slots__ = ('info', 'options', 'arguments', 'defaults')

    def __init__(self, info, options, arguments, defaults):
        object.__setattr__(self, 'info', info)
        object.__setattr__(self, 'options', MappingProxyType(dict(options)))
        object.__setattr__(self, 'arguments', tuple(arguments))
        object.__setattr__(self, 'defaults', MappingProxyType(dict(defaults)))

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __repr__(self):
        return f"<CmdParser kind={self.info.kind!r} options={sorted(self.options)} arguments={len(self.arguments)}>"

    def get_with_default(self, raw, field):
        """
        Returns raw's value for field, falling back to
        the default declared for field in this parser.
        """
        value = getattr(raw, field)
        if value is not None:
            return value
        try:
            return self.defaults[field]
        except KeyError:
            raise MissingValueError(f"{type(raw).__name__}.{field} must provide a default value") from None


def _field_names(raw_type):
    if not dataclasses.is_dataclass(raw_type):
        raise ConfigurationError(f"raw command type {raw_type!r} must be a dataclass")
    return {field.name for field in dataclasses.fields(raw_type)}


def cmd_parser(kind, allow_in_config, help, options, arguments, *, raw_type=None, defaults=None):
    """
    Builds the CmdParser for a raw command type.

    options maps option flags (e.g. "--verbose") to ArgParser
    objects.  It may be a mapping, or an iterable of
    (flag, ArgParser) pairs; with pairs, a repeated flag
    raises ConfigurationError.

    arguments is a sequence of ArgParser objects, bound
    to positional arguments in order.

    If raw_type is specified, every field named by a binder
    or by defaults must be a field of raw_type.
    """
    if isinstance(options, collections.abc.Mapping):
        options = dict(options)
    else:
        pairs = list(options)
        options = {}
        for flag, arg_parser in pairs:
            if flag in options:
                raise ConfigurationError(f"option {flag!r} specified twice")
            options[flag] = arg_parser

    for flag, arg_parser in options.items():
        if not (flag and isinstance(flag, str)):
            raise ConfigurationError(f"option flag must be a non-empty str, not {flag!r}")
        if flag in help_tokens:
            raise ConfigurationError(f"option {flag!r} is reserved for help")
        if not isinstance(arg_parser, ArgParser):
            raise ConfigurationError(f"option {flag!r} must map to an ArgParser, not {arg_parser!r}")

    arguments = tuple(arguments)
    for arg_parser in arguments:
        if not isinstance(arg_parser, ArgParser):
            raise ConfigurationError(f"positional argument parsers must be ArgParser objects, not {arg_parser!r}")

    defaults = dict(defaults or {})

    if raw_type is not None:
        names = _field_names(raw_type)
        bound = [p.field for p in options.values()]
        bound.extend(p.field for p in arguments)
        bound.extend(defaults)
        for field in bound:
            if field not in names:
                raise ConfigurationError(f"{raw_type.__name__} has no field {field!r}")

    return CmdParser(
        info=CmdStaticInfo(help=help, kind=kind, allow_in_config=allow_in_config),
        options=options,
        arguments=arguments,
        defaults=defaults,
        )


##
## raw command values
##

class StaticInfo:
    """
    Descriptor: reading "info" on a raw command class
    (or an instance of one) returns the CmdStaticInfo
    from its parser.
    """
    def __get__(self, instance, owner):
        return get_parser(owner).info


class RawCmdArgs:
    """
    Optional base class for raw command dataclasses.

    Subclasses must be frozen dataclasses whose fields
    all default to None, and must set the class attribute
    "parser" to the CmdParser built for them:

        @dataclasses.dataclass(frozen=True)
        class MoveCmdArgs(RawCmdArgs):
            direction: CardinalDirection = None

        MoveCmdArgs.parser = cmd_parser(...)
    """

    parser = None

    info = StaticInfo()

    def get_with_default(self, field):
        return get_parser(type(self)).get_with_default(self, field)


def get_parser(raw_type):
    parser = getattr(raw_type, "parser", None)
    if not isinstance(parser, CmdParser):
        raise ConfigurationError(f"{raw_type!r} has no CmdParser; set {getattr(raw_type, '__name__', raw_type)}.parser")
    return parser


def allowed_in_config(raw_types):
    """
    Returns the raw command types (in order) whose
    static info says they may be used in a config file.
    """
    return [raw_type for raw_type in raw_types if get_parser(raw_type).info.allow_in_config]


##
## the loop
##

def parse_raw_cmd_args(raw, args, *, parser=None, log=None):
    """
    Parses the command-line "args" (a sequence of str)
    into the raw command value "raw", which should have
    every field absent (None).

    Returns a ParsedCmd:
        * help, if "-h" or "--help" appears anywhere we read,
        * failure, if any errors were recorded,
        * cmd otherwise, holding the populated raw value.

    If parser isn't specified, uses type(raw).parser.

    log is an optional big.Log; if specified, parsing
    events are recorded in it.
    """
    if parser is None:
        parser = get_parser(type(raw))
    elif not isinstance(parser, CmdParser):
        raise ConfigurationError(f"parser must be a CmdParser, not {parser!r}")

    tokens = PushbackIterator(args)
    errors = []
    argument_index = 0
    seen = set()

    if log is not None:
        log.enter(f"parse {type(raw).__name__}")
    try:
        while tokens:
            token = next(tokens)

            if token in help_tokens:
                if log is not None:
                    log(f"help {token!r}")
                return ParsedCmd.help(parser.info.help)

            arg_parser = parser.options.get(token)
            if arg_parser is not None:
                if log is not None:
                    log(f"option {token!r} -> {arg_parser.field}")
                if token in seen:
                    errors.append(f"Duplicated option '{token}'")
                seen.add(token)
                raw = arg_parser.transform(raw, token, tokens, errors)
                continue

            if argument_index < len(parser.arguments):
                arg_parser = parser.arguments[argument_index]
                if log is not None:
                    log(f"argument {argument_index} {token!r} -> {arg_parser.field}")
                raw = arg_parser.transform(raw, token, tokens, errors)
                argument_index += 1
                continue

            if log is not None:
                log(f"unknown argument {token!r}")
            errors.append(f"Unknown argument '{token}'")
            break
    finally:
        if log is not None:
            log.exit()

    if errors:
        return ParsedCmd.failure(errors)
    return ParsedCmd.cmd(raw)
