from re import RegexFlag, compile
from re import error as RegexError
from string import ascii_letters, digits
from typing import AbstractSet, Iterator, MutableSequence, Pattern, Sequence, Tuple

from .lexer import EOF, context_from, next_char, pushback_chars, raise_err, token_parser
from .types import (
    Choice,
    EChar,
    Format,
    FormatItem,
    Index,
    Node,
    ParserCtx,
    Placeholder,
    Regex,
    TabStop,
    Token,
    TokenStream,
    Transform,
    Variable,
)

#
# O(n) single pass LSP Parser:
# https://github.com/microsoft/language-server-protocol/blob/master/snippetSyntax.md
#


"""
any         ::= tabstop | placeholder | choice | transform | variable | text
tabstop     ::= '$' int | '${' int '}'
placeholder ::= '${' int ':' any '}'
choice      ::= '${' int '|' text (',' text)* '|}'
transform   ::= '${' int '/' regex '/' (format | text)* '/' options '}'
variable    ::= '$' var | '${' var }'
                | '${' var ':' any '}'
                | '${' var '/' regex '/' (format | text)* '/' options '}'
format      ::= '$' int | '${' int '}'
                | '${' int ':' '/upcase' | '/downcase' | '/capitalize'
                              | '/camelcase' | '/pascalcase' '}'
                | '${' int ':+' if '}'
                | '${' int ':?' if ':' else '}'
                | '${' int ':-' else '}' | '${' int ':' else '}'
regex       ::= JavaScript Regular Expression value (ctor-string)
options     ::= JavaScript Regular Expression option (ctor-options)
var         ::= [_a-zA-Z] [_a-zA-Z0-9]*
int         ::= [0-9]+
text        ::= .*
"""


_ESC_CHARS = {"\\", "$", "}"}
_CHOICE_ESC_CHARS = _ESC_CHARS | {",", "|"}
_FMT_ESC_CHARS = _ESC_CHARS | {"/", ":"}
_INT_CHARS = {*digits}
_VAR_BEGIN_CHARS = {*ascii_letters, "_"}
_VAR_CHARS = {*digits, *ascii_letters, "_"}
_RE_FLAGS = {
    "i": RegexFlag.IGNORECASE,
    "m": RegexFlag.MULTILINE,
    "s": RegexFlag.DOTALL,
}
_REGEX_FLAG_CHARS = {*_RE_FLAGS, "g", "u"}
_CASES = {"upcase", "downcase", "capitalize", "camelcase", "pascalcase"}


# unknown escapes are literal backslashes
def _lex_escape(context: ParserCtx, *, escapable_chars: AbstractSet[str]) -> str:
    pos, char = next_char(context)
    assert char == "\\"

    pos, char = next_char(context)
    if char in escapable_chars:
        return char
    else:
        pushback_chars(context, (pos, char))
        return "\\"


def _lex_int(context: ParserCtx) -> int:
    idx_acc: MutableSequence[str] = []

    for pos, char in context:
        if char in _INT_CHARS:
            idx_acc.append(char)
        else:
            pushback_chars(context, (pos, char))
            break

    return int("".join(idx_acc))


def _lex_name(context: ParserCtx) -> str:
    name_acc: MutableSequence[str] = []

    for pos, char in context:
        if char in _VAR_CHARS:
            name_acc.append(char)
        else:
            pushback_chars(context, (pos, char))
            break

    return "".join(name_acc)


# choice      ::= '${' int '|' text (',' text)* '|}'
def _lex_choice(context: ParserCtx) -> Sequence[str]:
    pos, char = next_char(context)
    assert char == "|"

    choices: MutableSequence[str] = []
    acc: MutableSequence[str] = []
    for pos, char in context:
        if char == "\\":
            pushback_chars(context, (pos, char))
            acc.append(_lex_escape(context, escapable_chars=_CHOICE_ESC_CHARS))
        elif char == ",":
            choices.append("".join(acc))
            acc.clear()
        elif char == "|":
            pos, char = next_char(context)
            if char == "}":
                choices.append("".join(acc))
                return tuple(choices)
            else:
                raise_err(
                    text=context.text,
                    pos=pos,
                    condition="after |",
                    expected=("}",),
                    actual=char,
                )
        else:
            acc.append(char)

    raise_err(
        text=context.text,
        pos=EOF,
        condition="while parsing choice",
        expected=("|}",),
        actual="",
    )


# regex
def _lex_regex(context: ParserCtx) -> Iterator[EChar]:
    for pos, char in context:
        if char == "\\":
            n_pos, n_char = next_char(context)
            if n_char == "/":
                yield n_pos, n_char
            else:
                yield pos, char
                if n_char:
                    yield n_pos, n_char

        elif char == "/":
            break

        else:
            yield pos, char
    else:
        raise_err(
            text=context.text,
            pos=EOF,
            condition="while parsing regex",
            expected=("/",),
            actual="",
        )


# options
def _lex_options(context: ParserCtx) -> Tuple[RegexFlag, bool]:
    flag, glob = 0, False
    for pos, char in context:
        if char in _REGEX_FLAG_CHARS:
            flag |= _RE_FLAGS.get(char, 0)
            glob |= char == "g"

        elif char == "}":
            return RegexFlag(flag), glob

        else:
            raise_err(
                text=context.text,
                pos=pos,
                condition="while parsing regex flags",
                expected=_REGEX_FLAG_CHARS,
                actual=char,
            )

    raise_err(
        text=context.text,
        pos=EOF,
        condition="while parsing regex flags",
        expected=("}",),
        actual="",
    )


def _lex_until(context: ParserCtx, *, stop: str) -> str:
    acc: MutableSequence[str] = []
    for pos, char in context:
        if char == "\\":
            pushback_chars(context, (pos, char))
            acc.append(_lex_escape(context, escapable_chars=_FMT_ESC_CHARS))
        elif char == stop:
            return "".join(acc)
        else:
            acc.append(char)

    raise_err(
        text=context.text,
        pos=EOF,
        condition="while parsing format",
        expected=(stop,),
        actual="",
    )


# ':' '/upcase' | '/downcase' | '/capitalize' | '/camelcase' | '/pascalcase' '}'
# ':+' if '}'
# ':?' if ':' else '}'
# ':-' else '}' | ':' else '}'
def _lex_fmt_back(context: ParserCtx, group: int) -> Format:
    pos, char = next_char(context)
    assert char == ":"

    pos, char = next_char(context)
    if char == "/":
        case = _lex_until(context, stop="}")
        if case not in _CASES:
            raise_err(
                text=context.text,
                pos=pos,
                condition="while parsing format case",
                expected=sorted(_CASES),
                actual=case,
            )
        return Format(group=group, case=case, if_text=None, else_text=None)

    elif char == "+":
        if_text = _lex_until(context, stop="}")
        return Format(group=group, case=None, if_text=if_text, else_text=None)

    elif char == "?":
        if_text = _lex_until(context, stop=":")
        else_text = _lex_until(context, stop="}")
        return Format(group=group, case=None, if_text=if_text, else_text=else_text)

    elif char == "-":
        else_text = _lex_until(context, stop="}")
        return Format(group=group, case=None, if_text=None, else_text=else_text)

    else:
        pushback_chars(context, (pos, char))
        else_text = _lex_until(context, stop="}")
        return Format(group=group, case=None, if_text=None, else_text=else_text)


# format      ::= '$' int | '${' int '}' | '${' int ':' ... '}'
def _lex_fmt_group(context: ParserCtx) -> Format:
    pos, char = next_char(context)
    if char == "{":
        pos, char = next_char(context)
        if char not in _INT_CHARS:
            raise_err(
                text=context.text,
                pos=pos,
                condition="while parsing format",
                expected=("0-9",),
                actual=char,
            )

        pushback_chars(context, (pos, char))
        group = _lex_int(context)

        pos, char = next_char(context)
        if char == "}":
            return Format(group=group, case=None, if_text=None, else_text=None)
        elif char == ":":
            pushback_chars(context, (pos, char))
            return _lex_fmt_back(context, group=group)
        else:
            raise_err(
                text=context.text,
                pos=pos,
                condition="after ${int",
                expected=("}", ":"),
                actual=char,
            )
    else:
        pushback_chars(context, (pos, char))
        group = _lex_int(context)
        return Format(group=group, case=None, if_text=None, else_text=None)


# (format | text)* '/'
def _lex_fmt(context: ParserCtx) -> Iterator[FormatItem]:
    acc: MutableSequence[str] = []

    for pos, char in context:
        if char == "\\":
            pushback_chars(context, (pos, char))
            acc.append(_lex_escape(context, escapable_chars=_FMT_ESC_CHARS))

        elif char == "/":
            break

        elif char == "$":
            n_pos, n_char = next_char(context)
            pushback_chars(context, (n_pos, n_char))
            if n_char == "{" or n_char in _INT_CHARS:
                if acc:
                    yield "".join(acc)
                    acc.clear()
                yield _lex_fmt_group(context)
            else:
                acc.append(char)

        else:
            acc.append(char)
    else:
        raise_err(
            text=context.text,
            pos=EOF,
            condition="while parsing format",
            expected=("/",),
            actual="",
        )

    if acc:
        yield "".join(acc)


def _compile(
    context: ParserCtx,
    *,
    origin: Index,
    regex: Sequence[EChar],
    flag: RegexFlag,
) -> Pattern[str]:
    re = "".join(c for _, c in regex)
    try:
        return compile(re, flags=flag)
    except RegexError as e:
        if regex:
            (head_idx, _), *_ = regex
        else:
            head_idx = origin
        positions = {i: pos for i, (pos, _) in enumerate(regex)}
        pos = positions.get(e.pos, head_idx) if e.pos is not None else head_idx
        raise_err(
            text=context.text,
            pos=pos,
            condition=f"while compiling regex -- {re}",
            expected=(),
            actual=str(e),
        )


# '/' regex '/' (format | text)* '/' options '}'
def _lex_transform(context: ParserCtx) -> Regex:
    origin, char = next_char(context)
    assert char == "/"

    regex = tuple(_lex_regex(context))
    fmt = tuple(_lex_fmt(context))
    flag, glob = _lex_options(context)
    pattern = _compile(context, origin=origin, regex=regex, flag=flag)
    return Regex(pattern=pattern, fmt=fmt, glob=glob)


# ${...}
def _lex_inner_scope(context: ParserCtx, origin: Index) -> Token:
    pos, char = next_char(context)
    assert char == "{"

    pos, char = next_char(context)
    if char in _INT_CHARS:
        pushback_chars(context, (pos, char))
        idx = _lex_int(context)

        pos, char = next_char(context)
        if char == "}":
            # tabstop     ::= '${' int '}'
            return TabStop(idx=idx)
        elif char == ":":
            # placeholder ::= '${' int ':' any '}'
            children = token_parser(_lex(context, nested=True, origin=origin))
            return Placeholder(idx=idx, children=children)
        elif char == "|":
            # choice      ::= '${' int '|' text (',' text)* '|}'
            pushback_chars(context, (pos, char))
            return Choice(idx=idx, choices=_lex_choice(context))
        elif char == "/":
            # transform   ::= '${' int '/' regex '/' (format | text)* '/' options '}'
            pushback_chars(context, (pos, char))
            return Transform(idx=idx, regex=_lex_transform(context))
        else:
            raise_err(
                text=context.text,
                pos=pos,
                condition="while parsing (tabstop | placeholder | choice | transform)",
                expected=("0-9", "}", ":", "|", "/"),
                actual=char,
            )

    elif char in _VAR_BEGIN_CHARS:
        pushback_chars(context, (pos, char))
        name = _lex_name(context)

        pos, char = next_char(context)
        if char == "}":
            return Variable(name=name, children=None, regex=None)
        elif char == ":":
            children = token_parser(_lex(context, nested=True, origin=origin))
            return Variable(name=name, children=children, regex=None)
        elif char == "/":
            pushback_chars(context, (pos, char))
            return Variable(name=name, children=None, regex=_lex_transform(context))
        else:
            # not a variable, ie. `${obj.name}` in a js template string
            pushback_chars(context, (pos, char))
            return "${" + name

    else:
        raise_err(
            text=context.text,
            pos=pos,
            condition="after ${",
            expected=("_", "0-9", "a-z", "A-Z"),
            actual=char,
        )


# $...
def _lex_scope(context: ParserCtx) -> TokenStream:
    origin, char = next_char(context)
    assert char == "$"

    pos, char = next_char(context)
    pushback_chars(context, (pos, char))
    if char == "{":
        yield _lex_inner_scope(context, origin=origin)
    elif char in _INT_CHARS:
        # tabstop     ::= '$' int
        yield TabStop(idx=_lex_int(context))
    elif char in _VAR_BEGIN_CHARS:
        # variable    ::= '$' var
        yield Variable(name=_lex_name(context), children=None, regex=None)
    else:
        yield "$"


# any         ::= tabstop | placeholder | choice | transform | variable | text
def _lex(context: ParserCtx, nested: bool, origin: Index) -> TokenStream:
    for pos, char in context:
        if char == "\\":
            pushback_chars(context, (pos, char))
            yield _lex_escape(context, escapable_chars=_ESC_CHARS)
        elif nested and char == "}":
            break
        elif char == "$":
            pushback_chars(context, (pos, char))
            yield from _lex_scope(context)
        else:
            yield char
    else:
        if nested:
            raise_err(
                text=context.text,
                pos=origin,
                condition="unbalanced ${...",
                expected=("}",),
                actual="",
            )


def tokenizer(snippet: str) -> Sequence[Node]:
    context = context_from(snippet)
    return token_parser(_lex(context, nested=False, origin=EOF))
