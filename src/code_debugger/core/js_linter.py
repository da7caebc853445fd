"""In-process JavaScript linter built on a tree-sitter syntax tree.

The linter implements a small set of ESLint-compatible rules with the same
rule names, configuration shape and message wording, so the explanation table
and any client that understands ESLint output keep working:

    linter = JavaScriptLinter({"semi": ["error", "always"], "no-undef": "error"})
    report = linter.lint_text("let x = 5")
    report.messages[0].message  # "Missing semicolon."
    report.output               # "let x = 5;"

Messages always describe the submitted text. Fixes from every fixable rule are
applied in passes of non-overlapping edits until nothing changes, and the
result is exposed as ``LintReport.output``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, NamedTuple

import structlog
import tree_sitter_javascript
from tree_sitter import Language, Node, Parser, Tree

from code_debugger.utils.async_helpers import LinterConfigError

log = structlog.get_logger()

JS_LANGUAGE = Language(tree_sitter_javascript.language())

SEVERITY_OFF = 0
SEVERITY_WARN = 1
SEVERITY_ERROR = 2

_SEVERITY_NAMES: dict[Any, int] = {
    "off": SEVERITY_OFF,
    "warn": SEVERITY_WARN,
    "error": SEVERITY_ERROR,
    0: SEVERITY_OFF,
    1: SEVERITY_WARN,
    2: SEVERITY_ERROR,
}

# ES2021 builtins plus the Node.js/CommonJS environment
GLOBALS = frozenset(
    {
        # ECMAScript
        "AggregateError", "Array", "ArrayBuffer", "Atomics", "BigInt", "BigInt64Array",
        "BigUint64Array", "Boolean", "DataView", "Date", "decodeURI", "decodeURIComponent",
        "encodeURI", "encodeURIComponent", "Error", "escape", "eval", "EvalError",
        "FinalizationRegistry", "Float32Array", "Float64Array", "Function", "globalThis",
        "Infinity", "Int8Array", "Int16Array", "Int32Array", "Intl", "isFinite", "isNaN",
        "JSON", "Map", "Math", "NaN", "Number", "Object", "parseFloat", "parseInt",
        "Promise", "Proxy", "RangeError", "ReferenceError", "Reflect", "RegExp", "Set",
        "SharedArrayBuffer", "String", "Symbol", "SyntaxError", "TypeError", "Uint8Array",
        "Uint8ClampedArray", "Uint16Array", "Uint32Array", "undefined", "unescape",
        "URIError", "WeakMap", "WeakRef", "WeakSet", "arguments",
        # Node.js
        "AbortController", "AbortSignal", "atob", "btoa", "Blob", "Buffer",
        "BroadcastChannel", "clearImmediate", "clearInterval", "clearTimeout", "console",
        "crypto", "Event", "EventTarget", "exports", "fetch", "FormData", "global",
        "Headers", "MessageChannel", "MessageEvent", "MessagePort", "module",
        "performance", "process", "queueMicrotask", "Request", "require", "Response",
        "setImmediate", "setInterval", "setTimeout", "structuredClone", "TextDecoder",
        "TextEncoder", "URL", "URLSearchParams", "__dirname", "__filename",
    }
)  # fmt: skip

FUNCTION_SCOPES = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "function_expression",
        "function",
        "generator_function",
        "arrow_function",
        "method_definition",
    }
)
BLOCK_SCOPES = frozenset(
    {"statement_block", "for_statement", "for_in_statement", "catch_clause", "switch_body"}
)

# Statements that end with a semicolon (or an automatically inserted one)
SEMI_STATEMENTS = frozenset(
    {
        "expression_statement",
        "lexical_declaration",
        "variable_declaration",
        "return_statement",
        "throw_statement",
        "break_statement",
        "continue_statement",
        "do_statement",
        "debugger_statement",
        "import_statement",
        "export_statement",
        "field_definition",
    }
)

# Nodes whose first token must sit at the expected indentation
INDENT_ANCHORS = frozenset(
    SEMI_STATEMENTS
    | {
        "if_statement",
        "for_statement",
        "for_in_statement",
        "while_statement",
        "try_statement",
        "switch_statement",
        "labeled_statement",
        "statement_block",
        "function_declaration",
        "generator_function_declaration",
        "class_declaration",
        "method_definition",
        "field_definition",
        "switch_case",
        "switch_default",
        "else_clause",
        "catch_clause",
        "finally_clause",
    }
)
INDENT_BLOCKS = frozenset({"statement_block", "class_body", "switch_body"})
BRACELESS_BODIES = {
    "if_statement": "consequence",
    "for_statement": "body",
    "for_in_statement": "body",
    "while_statement": "body",
    "do_statement": "body",
}

DECLARATION_NAMES = {
    "function_declaration": "function",
    "generator_function_declaration": "function",
    "class_declaration": "class",
}

JSX_NAME_PARENTS = frozenset(
    {
        "jsx_opening_element",
        "jsx_closing_element",
        "jsx_self_closing_element",
        "jsx_attribute",
        "jsx_namespace_name",
        "nested_identifier",
    }
)


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class Fix:
    """Replace the UTF-8 byte range ``[start, end)`` with ``text``."""

    start: int
    end: int
    text: bytes


@dataclass(frozen=True)
class LintMessage:
    """One problem found by the linter. Positions are 1-based."""

    rule_id: str | None
    severity: int
    message: str
    line: int
    column: int
    end_line: int | None = None
    end_column: int | None = None
    fatal: bool = False
    fix: Fix | None = field(default=None, compare=False)


@dataclass(frozen=True)
class LintReport:
    """Messages for the submitted text and the auto-fixed output."""

    messages: tuple[LintMessage, ...]
    output: str


# =============================================================================
# Tree helpers
# =============================================================================


def _walk(root: Node) -> Iterator[Node]:
    """Yield every node in document order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def _first_leaf(node: Node) -> Node:
    while node.children:
        node = node.children[0]
    return node


def _enclosing(node: Node, types: frozenset[str]) -> Node:
    """Nearest strict ancestor whose type is in ``types``, else the root."""
    current = node.parent
    while current is not None:
        if current.type in types or current.parent is None:
            return current
        current = current.parent
    return node


def _has_ancestor(node: Node, type_name: str) -> bool:
    current = node.parent
    while current is not None:
        if current.type == type_name:
            return True
        current = current.parent
    return False


def _same(a: Node | None, b: Node) -> bool:
    return a is not None and a.id == b.id


def _pattern_identifiers(node: Node | None) -> Iterator[Node]:
    """Yield the identifiers a binding pattern declares."""
    if node is None:
        return
    if node.type in ("identifier", "shorthand_property_identifier_pattern"):
        yield node
    elif node.type in ("assignment_pattern", "object_assignment_pattern"):
        yield from _pattern_identifiers(node.child_by_field_name("left"))
    elif node.type == "pair_pattern":
        yield from _pattern_identifiers(node.child_by_field_name("value"))
    elif node.type in ("object_pattern", "array_pattern", "formal_parameters", "rest_pattern"):
        for child in node.named_children:
            yield from _pattern_identifiers(child)


def _import_identifiers(node: Node) -> Iterator[Node]:
    """Yield the local names an import statement binds."""
    for clause in node.named_children:
        if clause.type != "import_clause":
            continue
        for part in clause.named_children:
            if part.type == "identifier":
                yield part
            elif part.type == "namespace_import":
                yield from (c for c in part.named_children if c.type == "identifier")
            elif part.type == "named_imports":
                for spec in part.named_children:
                    if spec.type != "import_specifier":
                        continue
                    local = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
                    if local is not None and local.type == "identifier":
                        yield local


def _unterminated_quote(line: str) -> int | None:
    """Return the index of a quote left open at the end of ``line``."""
    quote = None
    start = 0
    i = 0
    while i < len(line):
        ch = line[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in "'\"":
            quote, start = ch, i
        elif ch == "`" or line.startswith("//", i):
            break
        i += 1
    return start if quote else None


# =============================================================================
# Lint context and scope analysis
# =============================================================================


@dataclass
class _Binding:
    name: str
    node: Node
    kind: str
    assigned: bool = False
    exported: bool = False
    read: bool = False
    last_write: Node | None = None


class _ScopeAnalysis:
    """Declarations and references for one syntax tree."""

    def __init__(self, ctx: _LintContext) -> None:
        self._ctx = ctx
        self.scopes: dict[int, dict[str, _Binding]] = {}
        self.parameters: list[list[_Binding]] = []
        self.undefined: list[Node] = []
        self._declared_ids: set[int] = set()
        self._collect_declarations()
        self._collect_references()

    @property
    def bindings(self) -> Iterator[_Binding]:
        for scope in self.scopes.values():
            yield from scope.values()

    def _declare(
        self,
        scope: Node,
        ident: Node,
        kind: str,
        assigned: bool = False,
        exported: bool = False,
    ) -> _Binding:
        self._declared_ids.add(ident.id)
        names = self.scopes.setdefault(scope.id, {})
        name = self._ctx.text(ident)
        binding = names.get(name)
        if binding is None:
            binding = _Binding(name=name, node=ident, kind=kind)
            names[name] = binding
        binding.assigned = binding.assigned or assigned
        binding.exported = binding.exported or exported
        return binding

    def _collect_declarations(self) -> None:
        root = self._ctx.tree.root_node
        lexical_scopes = FUNCTION_SCOPES | BLOCK_SCOPES
        for node in self._ctx.nodes:
            kind = node.type
            exported = node.parent is not None and node.parent.type == "export_statement"

            if kind in ("variable_declaration", "lexical_declaration"):
                # var is function scoped, let and const are block scoped
                scope_types = FUNCTION_SCOPES if kind == "variable_declaration" else lexical_scopes
                scope = _enclosing(node, scope_types)
                for declarator in node.named_children:
                    if declarator.type != "variable_declarator":
                        continue
                    has_value = declarator.child_by_field_name("value") is not None
                    for ident in _pattern_identifiers(declarator.child_by_field_name("name")):
                        self._declare(scope, ident, "variable", has_value, exported)

            elif kind in DECLARATION_NAMES:
                name = node.child_by_field_name("name")
                if name is not None:
                    scope = _enclosing(node, lexical_scopes)
                    self._declare(scope, name, DECLARATION_NAMES[kind], exported=exported)

            elif kind in ("function_expression", "function", "generator_function", "class"):
                name = node.child_by_field_name("name")
                if name is not None:
                    self._declare(node, name, "self")

            elif kind == "catch_clause":
                for ident in _pattern_identifiers(node.child_by_field_name("parameter")):
                    self._declare(node, ident, "catch")

            elif kind == "for_in_statement":
                declaration_kind = node.child_by_field_name("kind")
                if declaration_kind is not None:
                    if declaration_kind.type == "var":
                        scope = _enclosing(node, FUNCTION_SCOPES)
                    else:
                        scope = node
                    for ident in _pattern_identifiers(node.child_by_field_name("left")):
                        self._declare(scope, ident, "variable", assigned=True)

            elif kind == "import_statement":
                for ident in _import_identifiers(node):
                    self._declare(root, ident, "import")

            if kind in FUNCTION_SCOPES:
                params = node.child_by_field_name("parameters")
                if params is None:
                    params = node.child_by_field_name("parameter")
                self.parameters.append(
                    [self._declare(node, ident, "param") for ident in _pattern_identifiers(params)]
                )

    def resolve(self, node: Node, name: str) -> _Binding | None:
        """Find the binding a reference refers to, innermost scope first."""
        current = node.parent
        while current is not None:
            names = self.scopes.get(current.id)
            if names and name in names:
                return names[name]
            current = current.parent
        return None

    def _is_reference(self, node: Node) -> bool:
        if node.id in self._declared_ids:
            return False
        parent = node.parent
        if parent is None:
            return False
        if parent.type in JSX_NAME_PARENTS:
            return False
        if parent.type == "export_specifier" and _same(parent.child_by_field_name("alias"), node):
            return False
        return not _has_ancestor(node, "import_statement")

    @staticmethod
    def _is_typeof_operand(node: Node) -> bool:
        parent = node.parent
        if parent is None or parent.type != "unary_expression":
            return False
        operator = parent.child_by_field_name("operator")
        return operator is not None and operator.type == "typeof"

    @staticmethod
    def _is_write_only(node: Node) -> bool:
        parent = node.parent
        if parent is None:
            return False
        if parent.type == "assignment_expression":
            return _same(parent.child_by_field_name("left"), node)
        statement = parent.parent
        if statement is None or statement.type != "expression_statement":
            return False
        if parent.type == "augmented_assignment_expression":
            return _same(parent.child_by_field_name("left"), node)
        if parent.type == "update_expression":
            return _same(parent.child_by_field_name("argument"), node)
        return False

    def _collect_references(self) -> None:
        for node in self._ctx.nodes:
            if node.type not in ("identifier", "shorthand_property_identifier"):
                continue
            if not self._is_reference(node):
                continue
            name = self._ctx.text(node)
            binding = self.resolve(node, name)
            if binding is None:
                if name not in GLOBALS and not self._is_typeof_operand(node):
                    self.undefined.append(node)
                continue
            if self._is_write_only(node):
                binding.assigned = True
                binding.last_write = node
            else:
                binding.read = True


class _LintContext:
    """Source text, tree and message sink shared by the rules of one pass."""

    def __init__(self, data: bytes, tree: Tree) -> None:
        self.data = data
        self.tree = tree
        self.lines = data.split(b"\n")
        self.line_offsets: list[int] = []
        offset = 0
        for line in self.lines:
            self.line_offsets.append(offset)
            offset += len(line) + 1
        self.nodes = list(_walk(tree.root_node))
        self.messages: list[LintMessage] = []
        self.rule_id: str | None = None
        self.severity = SEVERITY_ERROR
        self._scope: _ScopeAnalysis | None = None

    @property
    def scope(self) -> _ScopeAnalysis:
        if self._scope is None:
            self._scope = _ScopeAnalysis(self)
        return self._scope

    def text(self, node: Node) -> str:
        return self.data[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def line_text(self, row: int) -> str:
        return self.lines[row].decode("utf-8", errors="replace")

    def position(self, point: tuple[int, int]) -> tuple[int, int]:
        """Convert a (row, byte column) point to a 1-based (line, column)."""
        row, byte_column = point[0], point[1]
        line = self.lines[row] if row < len(self.lines) else b""
        return row + 1, len(line[:byte_column].decode("utf-8", errors="replace")) + 1

    def leading_whitespace(self, row: int) -> bytes:
        line = self.lines[row]
        return line[: len(line) - len(line.lstrip(b" \t"))]

    def starts_line(self, node: Node) -> bool:
        row, column = node.start_point[0], node.start_point[1]
        return self.lines[row][:column].strip() == b""

    def report(
        self,
        message: str,
        start: tuple[int, int],
        end: tuple[int, int] | None = None,
        fix: Fix | None = None,
    ) -> None:
        line, column = self.position(start)
        end_line, end_column = self.position(end) if end is not None else (None, None)
        self.messages.append(
            LintMessage(
                rule_id=self.rule_id,
                severity=self.severity,
                message=message,
                line=line,
                column=column,
                end_line=end_line,
                end_column=end_column,
                fix=fix,
            )
        )


# =============================================================================
# Rules
# =============================================================================


class _Rule(NamedTuple):
    parse_options: Callable[[tuple[Any, ...]], Any]
    check: Callable[[_LintContext, Any], None]


def _no_options(options: tuple[Any, ...]) -> None:
    return None


def _choice(options: tuple[Any, ...], allowed: tuple[str, ...], default: str) -> str:
    value = options[0] if options else default
    if value not in allowed:
        raise ValueError(f"Value {value!r} should be one of {', '.join(allowed)}")
    return str(value)


def _parse_semi(options: tuple[Any, ...]) -> str:
    return _choice(options, ("always", "never"), "always")


def _check_semi(ctx: _LintContext, mode: str) -> None:
    for node in ctx.nodes:
        if node.type not in SEMI_STATEMENTS or not node.children:
            continue
        parent = node.parent
        if parent is not None and parent.type in ("for_statement", "for_in_statement"):
            continue
        if node.type == "export_statement":
            if node.child_by_field_name("declaration") is not None:
                continue
            value = node.child_by_field_name("value")
            if value is not None and value.type in ("function_expression", "function", "class"):
                continue
        last = next((c for c in reversed(node.children) if c.type != "comment"), None)
        if last is None:
            continue
        if node.type == "field_definition" and last.type != ";":
            # A class field's semicolon is a sibling in the class body
            following = node.next_sibling
            while following is not None and following.type == "comment":
                following = following.next_sibling
            last = following if following is not None and following.type == ";" else node

        if mode == "always" and last.type != ";":
            at_end = last.end_byte >= len(ctx.data)
            end_point = last.end_point
            ctx.report(
                "Missing semicolon.",
                end_point,
                None if at_end else (end_point[0], end_point[1] + 1),
                Fix(last.end_byte, last.end_byte, b";"),
            )
        elif mode == "never" and last.type == ";":
            following = ctx.data[last.end_byte :].lstrip()
            if following[:1] in (b"[", b"(", b"/", b"+", b"-", b"`"):
                continue
            ctx.report("Extra semicolon.", last.start_point, last.end_point,
                       Fix(last.start_byte, last.end_byte, b""))


class _QuoteOptions(NamedTuple):
    quote: str
    avoid_escape: bool
    allow_template_literals: bool


_QUOTE_CHARS = {"single": "'", "double": '"', "backtick": "`"}
_QUOTE_NAMES = {"single": "singlequote", "double": "doublequote", "backtick": "backtick"}


def _parse_quotes(options: tuple[Any, ...]) -> _QuoteOptions:
    style = _choice(options, ("single", "double", "backtick"), "double")
    extra = options[1] if len(options) > 1 else {}
    if extra == "avoid-escape":
        extra = {"avoidEscape": True}
    if not isinstance(extra, Mapping):
        raise ValueError(f"Unexpected quotes option {extra!r}")
    return _QuoteOptions(
        quote=style,
        avoid_escape=bool(extra.get("avoidEscape", False)),
        allow_template_literals=bool(extra.get("allowTemplateLiterals", False)),
    )


def _requote(raw: str, quote: str) -> str:
    """Rewrite a string literal with a different quote character."""
    old = raw[0]
    body = raw[1:-1]
    out: list[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            escaped = body[i + 1]
            out.append(escaped if escaped == old and escaped != quote else ch + escaped)
            i += 2
            continue
        if ch == quote or (quote == "`" and ch == "$" and body[i + 1 : i + 2] == "{"):
            out.append("\\" + ch)
        else:
            out.append(ch)
        i += 1
    return quote + "".join(out) + quote


def _check_quotes(ctx: _LintContext, options: _QuoteOptions) -> None:
    quote = _QUOTE_CHARS[options.quote]
    message = f"Strings must use {_QUOTE_NAMES[options.quote]}."
    for node in ctx.nodes:
        if node.type == "string":
            if node.parent is not None and node.parent.type == "jsx_attribute":
                continue
        elif node.type == "template_string":
            if quote == "`" or options.allow_template_literals:
                continue
            parent = node.parent
            if parent is not None and parent.type == "call_expression":
                continue
            if any(c.type == "template_substitution" for c in node.named_children):
                continue
            if node.start_point[0] != node.end_point[0]:
                continue
        else:
            continue

        raw = ctx.text(node)
        if len(raw) < 2 or raw[0] == quote:
            continue
        if options.avoid_escape and quote in raw[1:-1]:
            continue
        fixed = _requote(raw, quote).encode("utf-8")
        ctx.report(message, node.start_point, node.end_point,
                   Fix(node.start_byte, node.end_byte, fixed))


class _IndentOptions(NamedTuple):
    char: bytes
    width: int
    switch_case: int


def _parse_indent(options: tuple[Any, ...]) -> _IndentOptions:
    size = options[0] if options else 4
    extra = options[1] if len(options) > 1 else {}
    if not isinstance(extra, Mapping):
        raise ValueError(f"Unexpected indent option {extra!r}")
    switch_case = extra.get("SwitchCase", 0)
    if not isinstance(switch_case, int) or switch_case < 0:
        raise ValueError("SwitchCase must be a non-negative integer")
    if size == "tab":
        return _IndentOptions(b"\t", 1, switch_case)
    if isinstance(size, bool) or not isinstance(size, int) or size < 0:
        raise ValueError(f"Indent size must be a non-negative integer or 'tab', got {size!r}")
    return _IndentOptions(b" ", size, switch_case)


def _describe_indent(expected: int, char: bytes, actual: bytes) -> str:
    unit = "tab" if char == b"\t" else "space"
    expected_text = f"{expected} {unit}{'' if expected == 1 else 's'}"
    spaces = actual.count(b" ")
    tabs = actual.count(b"\t")
    if spaces and tabs:
        found = (
            f"{spaces} space{'' if spaces == 1 else 's'} "
            f"and {tabs} tab{'' if tabs == 1 else 's'}"
        )
    elif spaces:
        found = str(spaces) if unit == "space" else f"{spaces} space{'' if spaces == 1 else 's'}"
    elif tabs:
        found = str(tabs) if unit == "tab" else f"{tabs} tab{'' if tabs == 1 else 's'}"
    else:
        found = "0"
    return f"Expected indentation of {expected_text} but found {found}."


def _check_indent(ctx: _LintContext, options: _IndentOptions) -> None:
    expected_by_row: dict[int, int] = {}

    def level(row: int) -> int:
        if row in expected_by_row:
            return expected_by_row[row]
        return len(ctx.leading_whitespace(row))

    def base(node: Node) -> int | None:
        parent = node.parent
        if parent is None:
            return None
        if parent.type == "program":
            return 0
        if node.type in ("else_clause", "catch_clause", "finally_clause"):
            return level(parent.start_point[0])
        if parent.type in INDENT_BLOCKS:
            opening = level(parent.start_point[0])
            if node.type == "}":
                return opening
            steps = options.switch_case if parent.type == "switch_body" else 1
            return opening + steps * options.width
        if parent.type in ("switch_case", "switch_default"):
            return level(parent.start_point[0]) + options.width
        body_field = BRACELESS_BODIES.get(parent.type)
        if parent.type == "else_clause" or (
            body_field is not None and _same(parent.child_by_field_name(body_field), node)
        ):
            if node.type != "statement_block":
                return level(parent.start_point[0]) + options.width
        return None

    for node in ctx.nodes:
        parent = node.parent
        is_closing_brace = node.type == "}" and parent is not None and parent.type in INDENT_BLOCKS
        if node.type not in INDENT_ANCHORS and not is_closing_brace:
            continue
        row = node.start_point[0]
        if row in expected_by_row or not ctx.starts_line(node):
            continue
        expected = base(node)
        if expected is None:
            continue
        expected_by_row[row] = expected

        actual = ctx.leading_whitespace(row)
        wanted = options.char * expected
        if actual == wanted:
            continue
        start = ctx.line_offsets[row]
        ctx.report(
            _describe_indent(expected, options.char, actual),
            (row, 0),
            (row, len(actual)),
            Fix(start, start + len(actual), wanted),
        )


def _check_no_unused_vars(ctx: _LintContext, options: None) -> None:
    scope = ctx.scope
    reported: set[int] = set()

    for params in scope.parameters:
        last_used = max((i for i, b in enumerate(params) if b.read), default=-1)
        for binding in params[last_used + 1 :]:
            if not binding.read and id(binding) not in reported:
                reported.add(id(binding))
                _report_unused(ctx, binding)
    param_ids = {id(b) for params in scope.parameters for b in params}

    for binding in scope.bindings:
        if binding.read or binding.exported or binding.kind == "self":
            continue
        if id(binding) in param_ids:
            continue
        _report_unused(ctx, binding)


def _report_unused(ctx: _LintContext, binding: _Binding) -> None:
    target = binding.last_write or binding.node
    if binding.assigned:
        message = f"'{binding.name}' is assigned a value but never used."
    else:
        message = f"'{binding.name}' is defined but never used."
    ctx.report(message, target.start_point, target.end_point)


def _check_no_undef(ctx: _LintContext, options: None) -> None:
    for node in ctx.scope.undefined:
        ctx.report(f"'{ctx.text(node)}' is not defined.", node.start_point, node.end_point)


def _check_no_console(ctx: _LintContext, options: None) -> None:
    for node in ctx.nodes:
        if node.type != "member_expression":
            continue
        obj = node.child_by_field_name("object")
        if obj is None or obj.type != "identifier" or ctx.text(obj) != "console":
            continue
        if ctx.scope.resolve(obj, "console") is not None:
            continue
        ctx.report("Unexpected console statement.", node.start_point, node.end_point)


def _check_no_trailing_spaces(ctx: _LintContext, options: None) -> None:
    # Trailing whitespace inside a multi-line template literal is content
    protected: set[int] = set()
    for node in ctx.nodes:
        if node.type == "template_string":
            protected.update(range(node.start_point[0], node.end_point[0]))

    for row, raw in enumerate(ctx.lines):
        if row in protected:
            continue
        line = raw[:-1] if raw.endswith(b"\r") else raw
        stripped = line.rstrip(b" \t")
        if len(stripped) == len(line):
            continue
        start = ctx.line_offsets[row] + len(stripped)
        ctx.report(
            "Trailing spaces not allowed.",
            (row, len(stripped)),
            (row, len(line)),
            Fix(start, start + len(line) - len(stripped), b""),
        )


def _parse_eol_last(options: tuple[Any, ...]) -> str:
    return _choice(options, ("always", "never"), "always")


def _check_eol_last(ctx: _LintContext, mode: str) -> None:
    data = ctx.data
    if not data:
        return
    last_row = len(ctx.lines) - 1
    if mode == "always" and not data.endswith(b"\n"):
        end = (last_row, len(ctx.lines[last_row]))
        ctx.report("Newline required at end of file but not found.", end, None,
                   Fix(len(data), len(data), b"\n"))
    elif mode == "never" and data.endswith(b"\n"):
        trimmed = data.rstrip(b"\r\n")
        row = trimmed.count(b"\n")
        ctx.report("Newline not allowed at end of file.", (row, len(ctx.lines[row])), None,
                   Fix(len(trimmed), len(data), b""))


RULES: dict[str, _Rule] = {
    "semi": _Rule(_parse_semi, _check_semi),
    "quotes": _Rule(_parse_quotes, _check_quotes),
    "indent": _Rule(_parse_indent, _check_indent),
    "no-unused-vars": _Rule(_no_options, _check_no_unused_vars),
    "no-undef": _Rule(_no_options, _check_no_undef),
    "no-console": _Rule(_no_options, _check_no_console),
    "no-trailing-spaces": _Rule(_no_options, _check_no_trailing_spaces),
    "eol-last": _Rule(_parse_eol_last, _check_eol_last),
}


# =============================================================================
# Linter
# =============================================================================


class _ConfiguredRule(NamedTuple):
    name: str
    severity: int
    options: Any
    rule: _Rule


def _normalize_rule(name: str, setting: Any) -> _ConfiguredRule | None:
    if name not in RULES:
        raise LinterConfigError(f"Definition for rule '{name}' was not found.")

    if isinstance(setting, (list, tuple)):
        if not setting:
            raise LinterConfigError(f"Configuration for rule '{name}' is empty.")
        level, options = setting[0], tuple(setting[1:])
    else:
        level, options = setting, ()

    known = isinstance(level, (str, int)) and not isinstance(level, bool)
    if not known or level not in _SEVERITY_NAMES:
        raise LinterConfigError(
            f"Configuration for rule '{name}' is invalid: Severity should be one of "
            f"the following: 0 = off, 1 = warn, 2 = error (you passed '{level}')."
        )
    severity = _SEVERITY_NAMES[level]
    if severity == SEVERITY_OFF:
        return None

    rule = RULES[name]
    try:
        parsed = rule.parse_options(options)
    except ValueError as e:
        raise LinterConfigError(f"Configuration for rule '{name}' is invalid: {e}") from e
    return _ConfiguredRule(name, severity, parsed, rule)


def apply_fixes(data: bytes, fixes: list[Fix]) -> tuple[bytes, int]:
    """Apply non-overlapping fixes in source order.

    A fix that starts at or before the end of the previously applied one is
    skipped; a later pass picks it up.

    Returns:
        The new text and the number of fixes applied.
    """
    out: list[bytes] = []
    cursor = 0
    last_end = -1
    applied = 0
    for fix in sorted(fixes, key=lambda f: (f.start, f.end)):
        if fix.start <= last_end:
            continue
        out.append(data[cursor : fix.start])
        out.append(fix.text)
        cursor = fix.end
        last_end = fix.end
        applied += 1
    out.append(data[cursor:])
    return b"".join(out), applied


class JavaScriptLinter:
    """Lints JavaScript source held in memory.

    The rule configuration is validated once, at construction, and shared by
    every call. Instances are safe to share between concurrent requests; each
    call builds its own parser and syntax tree.
    """

    # Upper bound on fix passes, as ESLint does
    MAX_FIX_PASSES = 10

    def __init__(self, rules: Mapping[str, Any]) -> None:
        """Initialize the linter.

        Args:
            rules: ESLint-style rule settings, e.g. ``{"semi": ["error", "always"]}``.

        Raises:
            LinterConfigError: If a rule is unknown or its setting is invalid.
        """
        configured = (_normalize_rule(name, setting) for name, setting in rules.items())
        self._rules = [rule for rule in configured if rule is not None]

    @property
    def active_rules(self) -> tuple[str, ...]:
        """Names of the rules that are not turned off."""
        return tuple(rule.name for rule in self._rules)

    def _parse(self, data: bytes) -> Tree:
        return Parser(JS_LANGUAGE).parse(data)

    def _parse_error(self, ctx: _LintContext) -> LintMessage:
        """Describe the first syntax error in the tree."""
        root = ctx.tree.root_node
        culprit: Node | None = None
        for node in ctx.nodes:
            if node.type == "ERROR" or node.is_missing:
                if culprit is None or node.start_byte < culprit.start_byte:
                    culprit = node
        if culprit is None:
            culprit = root

        row = culprit.start_point[0]
        for candidate_row in range(row, max(culprit.end_point[0], row) + 1):
            if candidate_row >= len(ctx.lines):
                break
            column = _unterminated_quote(ctx.line_text(candidate_row))
            if column is not None:
                return self._fatal("Unterminated string constant", candidate_row + 1, column + 1)

        line, column = ctx.position(culprit.start_point)
        if culprit.is_missing or culprit.start_byte >= len(ctx.data.rstrip()):
            following = ctx.data[culprit.start_byte :].strip()
            if not following:
                return self._fatal("Unexpected end of input", line, column)

        token = ctx.text(_first_leaf(culprit)).split()
        if culprit.is_missing:
            rest = ctx.data[culprit.start_byte :].decode("utf-8", errors="replace").split()
            token = rest[:1]
        if token and len(token[0]) <= 20:
            return self._fatal(f"Unexpected token {token[0]}", line, column)
        return self._fatal("Unexpected token", line, column)

    @staticmethod
    def _fatal(description: str, line: int, column: int) -> LintMessage:
        return LintMessage(
            rule_id=None,
            severity=SEVERITY_ERROR,
            message=f"Parsing error: {description}",
            line=line,
            column=column,
            fatal=True,
        )

    def _verify(self, data: bytes) -> tuple[list[LintMessage], bool]:
        """Run every configured rule once.

        Returns:
            The messages, sorted by position, and whether the text parsed.
        """
        tree = self._parse(data)
        ctx = _LintContext(data, tree)
        if tree.root_node.has_error:
            return [self._parse_error(ctx)], False

        for rule in self._rules:
            ctx.rule_id = rule.name
            ctx.severity = rule.severity
            rule.rule.check(ctx, rule.options)
        ctx.messages.sort(key=lambda m: (m.line, m.column))
        return ctx.messages, True

    def lint_text(self, source: str) -> LintReport:
        """Lint source text and compute its auto-fixed form.

        Args:
            source: JavaScript source code.

        Returns:
            A LintReport whose messages describe ``source`` and whose output is
            the text after all applicable fixes (``source`` itself when nothing
            was fixable or the text does not parse).
        """
        data = source.encode("utf-8")
        messages, parsed = self._verify(data)

        output = data
        fixes = [m.fix for m in messages if m.fix is not None]
        passes = 0
        while parsed and fixes and passes < self.MAX_FIX_PASSES:
            candidate, applied = apply_fixes(output, fixes)
            if not applied or candidate == output:
                break
            next_messages, parsed = self._verify(candidate)
            if not parsed:
                log.warning("javascript_fix_broke_syntax", passes=passes)
                break
            output = candidate
            fixes = [m.fix for m in next_messages if m.fix is not None]
            passes += 1

        return LintReport(
            messages=tuple(messages),
            output=output.decode("utf-8", errors="replace"),
        )
