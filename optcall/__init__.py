#!/usr/bin/env python3

"Map command-line tokens to callbacks, POSIX, GNU, or MS-DOS style."
__version__ = "0.1.0"


# please leave this copyright notice in binary distributions.
license = """
optcall/__init__.py
part of the optcall software package
Copyright 2017-2026 by the optcall authors
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

# set to 1 to print the event log after every parse
want_prints = 0


import big.all as big
from big.itertools import PushbackIterator
import collections
from collections import defaultdict
import enum
import string
import sys



class OptionError(Exception):
    """
    Base class for every error optcall raises about
    an option registration or a command-line.

    "option" is the offending option name (or
    registration token), if there is one.
    """
    def __init__(self, message, option=None):
        super().__init__(message)
        self.option = option

class InvalidOptionError(OptionError):
    """
    Raised when an option is malformed: an empty name,
    or a character the dialect doesn't allow.  Raised
    both when registering options and when parsing.
    """
    pass

class UnrecognizedOptionError(OptionError):
    """
    Raised when a well-formed option on the command-line
    doesn't match any registered option.
    """
    pass


##
## Character classes.  All of them are ASCII-only;
## str.isalnum() would happily accept "é", we don't.
##
alphanumerics = frozenset(string.ascii_letters + string.digits)
gnu_option_characters = alphanumerics | frozenset("-")
graphical_characters = frozenset(chr(i) for i in range(0x21, 0x7f))


def first_illegal_character(s, legal):
    "Returns the first character in s not in legal, or None."
    for c in s:
        if c not in legal:
            return c
    return None


class Option(collections.namedtuple("Option", ["token", "callback"])):
    """
    A single registration: when "token" appears on the
    command-line, call "callback" with the option's
    argument (always a str, possibly empty).
    """
    __slots__ = ()

    def __repr__(self):
        name = getattr(self.callback, "__qualname__", None) or repr(self.callback)
        return f"<Option {self.token!r} -> {name}>"


##
## Validating registration tokens.
## These run once per option, when the OptionTable is built,
## so a bad registration fails before any parsing happens.
##

def _require_str_token(token):
    if not isinstance(token, str):
        raise InvalidOptionError(f"option token must be a str, not {type(token).__name__}", option=token)
    if not token:
        raise InvalidOptionError("option token must not be empty", option=token)

def validate_posix_token(token):
    _require_str_token(token)
    if len(token) != 1:
        raise InvalidOptionError(f"{token!r} isn't a legal POSIX option, POSIX options must be exactly one character", option=token)
    if token not in alphanumerics:
        raise InvalidOptionError(f"{token!r} isn't a legal POSIX option, POSIX options must be an ASCII letter or digit", option=token)

def validate_gnu_token(token):
    _require_str_token(token)
    c = first_illegal_character(token, gnu_option_characters)
    if c is not None:
        raise InvalidOptionError(f"{token!r} isn't a legal GNU option, {c!r} isn't an ASCII letter, digit, or hyphen", option=token)

def validate_dos_token(token):
    _require_str_token(token)
    c = first_illegal_character(token, graphical_characters)
    if c is not None:
        raise InvalidOptionError(f"{token!r} isn't a legal DOS switch, {c!r} isn't a graphical character", option=token)


##
## Tokenizers.
##
## Each one is a generator, taking the raw command-line
## tokens and yielding (option, argument) pairs in the order
## they appear.  Since they're lazy, the parser dispatches each
## pair as it's yielded, and an error later in the command-line
## only surfaces after the earlier callbacks have already run.
##

class OptionPair(collections.namedtuple("OptionPair", ["option", "argument"])):
    """
    An (option, argument) pair produced by a tokenizer.

    Unpacks like any 2-tuple.  "spelling" is the option
    the way the user typed it ("-v", "--verbose", "/v"),
    for error messages.
    """

    def __new__(cls, option, argument, spelling=None):
        self = super().__new__(cls, option, argument)
        self.spelling = spelling
        return self


def _lookahead(iterator):
    """
    Returns the argument the next token would supply
    to the options in the current token: the next token
    itself, unless it starts with a dash (or there isn't
    one), in which case "".

    Never consumes the next token.  It's still scanned
    on its own on the next iteration.
    """
    try:
        a = next(iterator)
    except StopIteration:
        return ""
    iterator.push(a)
    if a.startswith("-"):
        return ""
    return a

def _is_dash_option(token):
    return (len(token) >= 2) and token.startswith("-")


def tokenize_posix(tokens):
    """
    POSIX short options: "-a", and bundled, "-abc".

    Every option in a token gets the same argument, the next
    token (if it doesn't start with a dash).  "--" ends option
    processing; everything after it is ignored.
    """
    iterator = PushbackIterator(tokens)
    for token in iterator:
        argument = _lookahead(iterator)
        if not _is_dash_option(token):
            continue
        if token == "--":
            break
        options = token[1:]
        c = first_illegal_character(options, alphanumerics)
        if c is not None:
            raise InvalidOptionError(f"{token!r} isn't a legal option, {c!r} isn't an ASCII letter or digit", option=c)
        for option in options:
            yield OptionPair(option, argument, "-" + option)


def tokenize_gnu(tokens):
    """
    GNU options: everything POSIX supports, plus long options,
    "--long" and "--long=value".  A value split off with "=" wins
    over the next token.  Only long options split on "=".
    """
    iterator = PushbackIterator(tokens)
    for token in iterator:
        argument = _lookahead(iterator)
        if not _is_dash_option(token):
            continue
        if token == "--":
            break

        if token.startswith("--"):
            option, equals, split_value = token[2:].partition("=")
            if equals:
                # note: split_value can be an empty string! "--f="
                argument = split_value
            options = [(option, "--" + option)]
        else:
            ## "-abc" is EXACTLY EQUIVALENT TO "-a -b -c",
            ## with every option sharing the same argument.
            options = [(option, "-" + option) for option in token[1:]]

        # each one is checked just before it runs,
        # so "-a!" runs -a and then fails on "!".
        for option, spelling in options:
            if not option:
                raise InvalidOptionError(f"{token!r} isn't a legal option, the option name is empty", option=option)
            c = first_illegal_character(option, gnu_option_characters)
            if c is not None:
                raise InvalidOptionError(f"{token!r} isn't a legal option, {c!r} isn't an ASCII letter, digit, or hyphen", option=option)
            yield OptionPair(option, argument, spelling)


def tokenize_dos(tokens):
    """
    MS-DOS switches: "/s" and "/s:value".  No lookahead,
    every switch is self-contained.  Tokens that aren't
    switches are skipped.

    The switch name must be ASCII alphanumerics, except
    for the special switch "/?".  The value must be
    entirely graphical characters.
    """
    for token in tokens:
        if not ((len(token) >= 2) and token.startswith("/")):
            continue
        option, colon, argument = token[1:].partition(":")
        if not option:
            raise InvalidOptionError(f"{token!r} isn't a legal switch, the switch name is empty", option=option)
        if option != "?":
            c = first_illegal_character(option, alphanumerics)
            if c is not None:
                raise InvalidOptionError(f"{token!r} isn't a legal switch, {c!r} isn't an ASCII letter or digit", option=option)
        c = first_illegal_character(argument, graphical_characters)
        if c is not None:
            raise InvalidOptionError(f"{token!r} isn't a legal switch, {c!r} isn't allowed in a switch value", option=option)
        yield OptionPair(option, argument, "/" + option)


class Dialect(enum.Enum):
    POSIX = "posix"
    GNU = "gnu"
    DOS = "dos"

    def validate_token(self, token):
        _token_validators[self](token)

    def tokenize(self, tokens):
        return _tokenizers[self](tokens)

    def denormalize(self, option):
        "Returns option the way the user would have typed it."
        if self is Dialect.DOS:
            return "/" + option
        if (self is Dialect.GNU) and (len(option) > 1):
            return "--" + option
        return "-" + option

_token_validators = {
    Dialect.POSIX: validate_posix_token,
    Dialect.GNU: validate_gnu_token,
    Dialect.DOS: validate_dos_token,
    }

_tokenizers = {
    Dialect.POSIX: tokenize_posix,
    Dialect.GNU: tokenize_gnu,
    Dialect.DOS: tokenize_dos,
    }


class OptionTable:
    """
    An immutable, ordered collection of Options,
    all validated for one Dialect.

    "options" is an iterable of Option objects or
    (token, callback) pairs.  Validation is all-or-nothing:
    the first bad registration raises, and there's no table.

    Registering the same token more than once is fine;
    all the callbacks run, in registration order.
    """

    def __init__(self, dialect, options):
        dialect = Dialect(dialect)
        normalized = []
        for o in options:
            if not isinstance(o, Option):
                try:
                    token, callback = o
                except (TypeError, ValueError):
                    raise ValueError(f"{o!r} isn't an Option or a (token, callback) pair") from None
                o = Option(token, callback)
            dialect.validate_token(o.token)
            if not callable(o.callback):
                raise ValueError(f"callback for {o.token!r} isn't callable: {o.callback!r}")
            normalized.append(o)

        callbacks = defaultdict(list)
        for o in normalized:
            callbacks[o.token].append(o.callback)

        self._dialect = dialect
        self._options = tuple(normalized)
        self._callbacks = {token: tuple(l) for token, l in callbacks.items()}

    @property
    def dialect(self):
        return self._dialect

    @property
    def options(self):
        return self._options

    def callbacks_for(self, token):
        return self._callbacks.get(token, ())

    def __len__(self):
        return len(self._options)

    def __iter__(self):
        return iter(self._options)

    def __getitem__(self, index):
        return self._options[index]

    def __contains__(self, token):
        return token in self._callbacks

    def __repr__(self):
        tokens = " ".join(repr(o.token) for o in self._options)
        return f"<OptionTable {self._dialect.value} [{tokens}]>"


class Dispatcher:
    """
    Runs every callback registered for an option,
    in registration order, passing in the argument.

    If nothing's registered for the option, either
    ignores it (if permit_unrecognized_options is true)
    or raises UnrecognizedOptionError.
    """

    def __init__(self, table, *, permit_unrecognized_options=False, log=None):
        self.table = table
        self.permit_unrecognized_options = permit_unrecognized_options
        self.log = log if log is not None else big.Log()

    def __call__(self, option, argument, spelling=None):
        callbacks = self.table.callbacks_for(option)
        if not callbacks:
            if self.permit_unrecognized_options:
                self.log(f"ignore {option!r}")
                return
            if spelling is None:
                spelling = self.table.dialect.denormalize(option)
            raise UnrecognizedOptionError(f"unrecognized option {spelling}", option=option)

        self.log(f"dispatch {option!r} argument={argument!r}")
        for callback in callbacks:
            callback(argument)


class Parser:
    """
    Base class for the three command-line parsers.
    Don't instantiate this directly; use PosixParser,
    GnuParser, DosParser, or Parser.for_dialect().

    Options are passed in as positional arguments, each
    either an Option or a (token, callback) pair:

        parser = GnuParser(
            Option("verbose", on_verbose),
            ("o", on_output),
            )
        parser.parse(sys.argv[1:])

    permit_unrecognized_options can be changed between
    calls to parse().  Each parse() call reads it exactly
    once, when it starts; changing it from inside a callback
    only affects later calls.
    """

    dialect = None

    def __init__(self, *options, permit_unrecognized_options=False):
        if self.dialect is None:
            raise TypeError(f"{type(self).__name__} has no dialect, use PosixParser, GnuParser, DosParser, or Parser.for_dialect()")
        self.table = OptionTable(self.dialect, options)
        self.permit_unrecognized_options = permit_unrecognized_options
        self.log = big.Log()

    @staticmethod
    def for_dialect(dialect, *options, **kwargs):
        cls = _parser_classes[Dialect(dialect)]
        return cls(*options, **kwargs)

    def __repr__(self):
        return f"<{type(self).__name__} {len(self.table)} options permit_unrecognized_options={self.permit_unrecognized_options}>"

    def parse(self, tokens):
        """
        Scans tokens (an iterable of str, e.g. sys.argv[1:])
        and runs the callbacks for every option found, in order.

        Raises InvalidOptionError or UnrecognizedOptionError
        at the first bad option.  Callbacks that already ran
        stay run.
        """
        if isinstance(tokens, str):
            raise TypeError("tokens must be an iterable of str, not a str")

        self.log = log = big.Log()
        log("parse start")

        dispatcher = Dispatcher(self.table,
            permit_unrecognized_options=self.permit_unrecognized_options,
            log=log)

        log.enter(f"tokenize {self.dialect.value}")
        try:
            for pair in self.dialect.tokenize(tokens):
                dispatcher(pair.option, pair.argument, spelling=pair.spelling)
        finally:
            log.exit()

        log("parse complete")
        if want_prints:
            log.print()

    def main(self, args=None):
        if args is None:
            args = sys.argv[1:]
        try:
            self.parse(args)
        except OptionError as e:
            print(f"error: {e}", file=sys.stderr)
            sys.exit(-1)
        sys.exit(0)


class PosixParser(Parser):
    "Parses POSIX-style short options: -a -bc -d value."
    dialect = Dialect.POSIX

class GnuParser(Parser):
    "Parses GNU-style options: -a -bc --long --long=value."
    dialect = Dialect.GNU

class DosParser(Parser):
    "Parses MS-DOS-style switches: /a /b:value /?."
    dialect = Dialect.DOS

_parser_classes = {
    Dialect.POSIX: PosixParser,
    Dialect.GNU: GnuParser,
    Dialect.DOS: DosParser,
    }


# old names
CLIException = OptionError
CLIOption = Option
CLIParser = Parser
POSIXCLIParser = PosixParser
GNUCLIParser = GnuParser
MSDOSCLIParser = MSDOSParser = DosParser
