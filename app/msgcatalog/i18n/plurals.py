"""Plural rule evaluation.

Compiles the C-like plural expression found in `Plural-Forms` headers into
a small expression tree evaluated directly for each cardinal.

Supported grammar, lowest precedence first:

    ternary    := or ("?" ternary ":" ternary)?
    or         := and ("||" and)*
    and        := equality ("&&" equality)*
    equality   := relational (("==" | "!=") relational)*
    relational := additive (("<" | "<=" | ">" | ">=") additive)*
    additive   := term (("+" | "-") term)*
    term       := unary (("*" | "/" | "%") unary)*
    unary      := "!" unary | primary
    primary    := INTEGER | "n" | "(" ternary ")"

Usage:
    rule = get_plural_rule("fr")
    rule.nplurals      # 2
    rule(0), rule(2)   # 0, 1

    nplurals, rule = parse_plural_forms("nplurals=2; plural=(n > 1);", "fr")
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Iterator, List, Mapping, Optional, Tuple, Union

from msgcatalog.i18n.errors import RuleSyntaxError

DEFAULT_PLURAL_FORMS = "nplurals=2; plural=(n == 1 ? 0 : 1);"

# Common languages; locale-specific entries win over language-only ones.
PLURAL_FORMS: dict[str, str] = {
    "ar": "nplurals=6; plural=(n==0 ? 0 : n==1 ? 1 : n==2 ? 2 : n%100>=3 && n%100<=10 ? 3 : n%100>=11 ? 4 : 5);",
    "bg": "nplurals=2; plural=(n != 1);",
    "cs": "nplurals=3; plural=(n==1 ? 0 : n>=2 && n<=4 ? 1 : 2);",
    "da": "nplurals=2; plural=(n != 1);",
    "de": "nplurals=2; plural=(n != 1);",
    "el": "nplurals=2; plural=(n != 1);",
    "en": "nplurals=2; plural=(n != 1);",
    "es": "nplurals=2; plural=(n != 1);",
    "fi": "nplurals=2; plural=(n != 1);",
    "fr": "nplurals=2; plural=(n > 1);",
    "ga": "nplurals=5; plural=(n==1 ? 0 : n==2 ? 1 : n<7 ? 2 : n<11 ? 3 : 4);",
    "he": "nplurals=2; plural=(n != 1);",
    "hu": "nplurals=2; plural=(n != 1);",
    "it": "nplurals=2; plural=(n != 1);",
    "ja": "nplurals=1; plural=0;",
    "ko": "nplurals=1; plural=0;",
    "lt": "nplurals=3; plural=(n%10==1 && n%100!=11 ? 0 : n%10>=2 && (n%100<10 || n%100>=20) ? 1 : 2);",
    "lv": "nplurals=3; plural=(n%10==1 && n%100!=11 ? 0 : n != 0 ? 1 : 2);",
    "nb": "nplurals=2; plural=(n != 1);",
    "nl": "nplurals=2; plural=(n != 1);",
    "pl": "nplurals=3; plural=(n==1 ? 0 : n%10>=2 && n%10<=4 && (n%100<10 || n%100>=20) ? 1 : 2);",
    "pt": "nplurals=2; plural=(n != 1);",
    "pt_BR": "nplurals=2; plural=(n > 1);",
    "ro": "nplurals=3; plural=(n==1 ? 0 : (n==0 || (n%100 > 0 && n%100 < 20)) ? 1 : 2);",
    "ru": "nplurals=3; plural=(n%10==1 && n%100!=11 ? 0 : n%10>=2 && n%10<=4 && (n%100<10 || n%100>=20) ? 1 : 2);",
    "sk": "nplurals=3; plural=(n==1 ? 0 : n>=2 && n<=4 ? 1 : 2);",
    "sl": "nplurals=4; plural=(n%100==1 ? 0 : n%100==2 ? 1 : n%100==3 || n%100==4 ? 2 : 3);",
    "sr": "nplurals=3; plural=(n%10==1 && n%100!=11 ? 0 : n%10>=2 && n%10<=4 && (n%100<10 || n%100>=20) ? 1 : 2);",
    "sv": "nplurals=2; plural=(n != 1);",
    "th": "nplurals=1; plural=0;",
    "tr": "nplurals=2; plural=(n > 1);",
    "uk": "nplurals=3; plural=(n%10==1 && n%100!=11 ? 0 : n%10>=2 && n%10<=4 && (n%100<10 || n%100>=20) ? 1 : 2);",
    "vi": "nplurals=1; plural=0;",
    "zh": "nplurals=1; plural=0;",
}

_TWO_CHAR_OPERATORS = ("==", "!=", ">=", "<=", "&&", "||")
_ONE_CHAR_OPERATORS = "+-*/%<>!?:()"


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Token:
    kind: str  # "int", "var", "op", "end"
    text: str
    position: int


def tokenize(expression: str, locale: Optional[str] = None) -> List[Token]:
    """Split a plural expression into tokens.

    Raises:
        RuleSyntaxError: On characters outside the expression language.
    """
    tokens: List[Token] = []
    i = 0
    length = len(expression)
    while i < length:
        ch = expression[i]
        if ch.isspace():
            i += 1
            continue
        if ch.isdigit():
            start = i
            while i < length and expression[i].isdigit():
                i += 1
            tokens.append(Token("int", expression[start:i], start))
            continue
        if ch.isalpha() or ch == "_":
            start = i
            while i < length and (expression[i].isalnum() or expression[i] == "_"):
                i += 1
            word = expression[start:i]
            if word != "n":
                raise RuleSyntaxError(
                    "unknown identifier", locale=locale, token=word, position=start
                )
            tokens.append(Token("var", word, start))
            continue
        pair = expression[i : i + 2]
        if pair in _TWO_CHAR_OPERATORS:
            tokens.append(Token("op", pair, i))
            i += 2
            continue
        if ch in _ONE_CHAR_OPERATORS:
            tokens.append(Token("op", ch, i))
            i += 1
            continue
        raise RuleSyntaxError(
            "unexpected character", locale=locale, token=ch, position=i
        )
    tokens.append(Token("end", "", length))
    return tokens


# ---------------------------------------------------------------------------
# Expression tree
# ---------------------------------------------------------------------------


def _truncating_div(a: int, b: int) -> int:
    if b == 0:
        return 0
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b > 0) else -quotient


def _truncating_mod(a: int, b: int) -> int:
    if b == 0:
        return 0
    return a - b * _truncating_div(a, b)


@dataclass(frozen=True)
class Constant:
    value: int

    def evaluate(self, n: int) -> int:
        return self.value


@dataclass(frozen=True)
class Variable:
    def evaluate(self, n: int) -> int:
        return n


@dataclass(frozen=True)
class Unary:
    operand: "Node"

    def evaluate(self, n: int) -> int:
        return 0 if self.operand.evaluate(n) else 1


@dataclass(frozen=True)
class Binary:
    op: str
    left: "Node"
    right: "Node"

    def evaluate(self, n: int) -> int:
        op = self.op
        if op == "&&":
            return 1 if self.left.evaluate(n) and self.right.evaluate(n) else 0
        if op == "||":
            return 1 if self.left.evaluate(n) or self.right.evaluate(n) else 0
        a = self.left.evaluate(n)
        b = self.right.evaluate(n)
        if op == "+":
            return a + b
        if op == "-":
            return a - b
        if op == "*":
            return a * b
        if op == "/":
            return _truncating_div(a, b)
        if op == "%":
            return _truncating_mod(a, b)
        if op == "==":
            return int(a == b)
        if op == "!=":
            return int(a != b)
        if op == "<":
            return int(a < b)
        if op == "<=":
            return int(a <= b)
        if op == ">":
            return int(a > b)
        return int(a >= b)


@dataclass(frozen=True)
class Conditional:
    condition: "Node"
    if_true: "Node"
    if_false: "Node"

    def evaluate(self, n: int) -> int:
        if self.condition.evaluate(n):
            return self.if_true.evaluate(n)
        return self.if_false.evaluate(n)


Node = Union[Constant, Variable, Unary, Binary, Conditional]


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class _Parser:
    """Recursive-descent parser over a token list."""

    _LEVELS = (
        ("||",),
        ("&&",),
        ("==", "!="),
        ("<", "<=", ">", ">="),
        ("+", "-"),
        ("*", "/", "%"),
    )

    def __init__(self, tokens: List[Token], locale: Optional[str]):
        self.tokens = tokens
        self.index = 0
        self.locale = locale

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def _error(self, message: str) -> RuleSyntaxError:
        token = self.current
        return RuleSyntaxError(
            message, locale=self.locale, token=token.text, position=token.position
        )

    def _accept(self, *ops: str) -> Optional[str]:
        token = self.current
        if token.kind == "op" and token.text in ops:
            self.index += 1
            return token.text
        return None

    def _expect(self, op: str) -> None:
        if self._accept(op) is None:
            raise self._error(f"expected {op!r}")

    def parse(self) -> Node:
        node = self._ternary()
        if self.current.kind != "end":
            raise self._error("unexpected token")
        return node

    def _ternary(self) -> Node:
        condition = self._binary(0)
        if self._accept("?") is None:
            return condition
        if_true = self._ternary()
        self._expect(":")
        if_false = self._ternary()
        return Conditional(condition, if_true, if_false)

    def _binary(self, level: int) -> Node:
        if level == len(self._LEVELS):
            return self._unary()
        operators = self._LEVELS[level]
        node = self._binary(level + 1)
        while True:
            op = self._accept(*operators)
            if op is None:
                return node
            node = Binary(op, node, self._binary(level + 1))

    def _unary(self) -> Node:
        if self._accept("!") is not None:
            return Unary(self._unary())
        return self._primary()

    def _primary(self) -> Node:
        token = self.current
        if token.kind == "int":
            self.index += 1
            return Constant(int(token.text))
        if token.kind == "var":
            self.index += 1
            return Variable()
        if self._accept("(") is not None:
            node = self._ternary()
            self._expect(")")
            return node
        if token.kind == "end":
            raise self._error("unexpected end of expression")
        raise self._error("unexpected token")


def parse_expression(expression: str, locale: Optional[str] = None) -> Node:
    """Parse a plural expression into an expression tree.

    Raises:
        RuleSyntaxError: If the expression is malformed.
    """
    return _Parser(tokenize(expression, locale), locale).parse()


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PluralRule:
    """A compiled plural rule: form count plus cardinal -> form index.

    Callable as `rule(n)`; unpacks as `(nplurals, rule)`.

    Attributes:
        nplurals: Number of distinct plural forms.
        expression: Source text of the plural expression.
        tree: Parsed expression tree.
    """

    nplurals: int
    expression: str
    tree: Node

    def __call__(self, n: int) -> int:
        """Return the form index for cardinal `n`.

        Results outside [0, nplurals) map to form 0.

        Raises:
            ValueError: If n is negative.
        """
        n = int(n)
        if n < 0:
            raise ValueError(f"Plural rules accept non-negative integers, got {n}")
        index = self.tree.evaluate(n)
        if 0 <= index < self.nplurals:
            return index
        return 0

    def __iter__(self) -> Iterator[object]:
        yield self.nplurals
        yield self

    @property
    def header(self) -> str:
        """Plural-Forms header value for this rule."""
        return f"nplurals={self.nplurals}; plural={self.expression};"


@lru_cache(maxsize=256)
def _compile(header: str) -> PluralRule:
    fields: dict[str, Tuple[str, int]] = {}
    offset = 0
    for part in header.split(";"):
        stripped = part.strip()
        if stripped:
            name, sep, value = stripped.partition("=")
            if not sep:
                raise RuleSyntaxError(
                    "expected name=value", token=stripped, position=offset
                )
            value_offset = offset + part.index("=") + 1
            fields[name.strip().lower()] = (value.strip(), value_offset)
        offset += len(part) + 1

    if "nplurals" not in fields:
        raise RuleSyntaxError("missing nplurals")
    if "plural" not in fields:
        raise RuleSyntaxError("missing plural expression")

    raw_count, count_offset = fields["nplurals"]
    if not raw_count.isdigit() or int(raw_count) < 1:
        raise RuleSyntaxError(
            "nplurals must be a positive integer", token=raw_count, position=count_offset
        )

    expression, expression_offset = fields["plural"]
    try:
        tree = parse_expression(expression)
    except RuleSyntaxError as e:
        position = e.position + expression_offset if e.position >= 0 else -1
        raise RuleSyntaxError(e.detail, token=e.token, position=position) from e
    return PluralRule(nplurals=int(raw_count), expression=expression, tree=tree)


def parse_plural_forms(header: str, locale: Optional[str] = None) -> PluralRule:
    """Compile a `Plural-Forms` header value.

    Args:
        header: Header value, e.g. "nplurals=2; plural=(n > 1);".
        locale: Locale the rule belongs to (used in error messages).

    Returns:
        Compiled PluralRule.

    Raises:
        RuleSyntaxError: If the header or its expression is malformed.
    """
    try:
        return _compile(header.strip())
    except RuleSyntaxError as e:
        raise RuleSyntaxError(
            e.detail, locale=locale, token=e.token, position=e.position
        ) from None


def normalize_locale(locale: str) -> str:
    """Normalize a locale identifier to `ll` or `ll_CC` form."""
    parts = (locale or "").replace("-", "_").split(".")[0].split("@")[0].split("_")
    if len(parts) == 1:
        return parts[0].lower()
    return f"{parts[0].lower()}_{parts[1].upper()}"


def plural_forms_for(
    locale: Optional[str], overrides: Optional[Mapping[str, str]] = None
) -> str:
    """Find the Plural-Forms header configured for a locale.

    Lookup order: overrides (exact, normalized, language), built-in table
    (normalized, language), then the universal two-form default.
    """
    if not locale:
        return DEFAULT_PLURAL_FORMS
    normalized = normalize_locale(locale)
    language = normalized.split("_")[0]
    for table in (overrides or {}, PLURAL_FORMS):
        for candidate in (locale, normalized, language):
            if candidate in table:
                return table[candidate]
    return DEFAULT_PLURAL_FORMS


def get_plural_rule(
    locale: Optional[str], overrides: Optional[Mapping[str, str]] = None
) -> PluralRule:
    """Return the compiled plural rule for a locale.

    Locales with no configured rule get `nplurals=2; plural=(n == 1 ? 0 : 1);`.

    Raises:
        RuleSyntaxError: If the configured rule for this locale is malformed.
    """
    return parse_plural_forms(plural_forms_for(locale, overrides), locale)


DEFAULT_RULE = parse_plural_forms(DEFAULT_PLURAL_FORMS)
