"""Wire installed files into the project's entry files.

Each ``autoRegister`` entry of a module names an entry file, an anchor token
and an alias. The entry file is parsed with tree-sitter's TypeScript grammar;
the first line comment containing the anchor locates the registration, and
two things are upserted:

1. A default import binding the alias to the installed file
2. A registration: a chained ``.use(alias)`` call (plugins) or a route group
   statement after the anchor line (routes)

Existing import bindings are scanned first so that re-running an install
never duplicates an import or a registration. An entry file without the
anchor is left untouched.

Edits are spliced into the UTF-8 source at node byte offsets, so everything
outside the inserted text keeps its formatting.
"""

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

from monolith_kit.errors import InjectionMarkerNotFound
from monolith_kit.models.config import RecordedRegistration
from monolith_kit.models.install import InjectionResult
from monolith_kit.models.registry import Registration

logger = logging.getLogger(__name__)

DEFAULT_ROUTES_STATEMENT = "app.group({alias}, { prefix: '/{prefix}' });"

STRIPPED_EXTENSIONS = (".ts", ".tsx", ".mts", ".js", ".jsx", ".mjs")

TYPESCRIPT = Language(tree_sitter_typescript.language_typescript())
TSX = Language(tree_sitter_typescript.language_tsx())

JSX_EXTENSIONS = (".tsx", ".jsx")

# Nodes whose named children are statements
STATEMENT_CONTAINERS = ("program", "statement_block")

# Nodes the call-chain search does not descend into
NESTED_SCOPES = ("arguments", "arrow_function", "function_expression", "class_body")


@dataclass(frozen=True)
class PendingRegistration:
    """A materialized file waiting to be registered."""

    registration: Registration
    target_file: Path  # Absolute path of the installed file


@dataclass(frozen=True)
class ImportBinding:
    """A local name bound by an import declaration."""

    alias: str
    path: str
    start: int  # UTF-8 byte offsets of the whole declaration
    end: int
    binding_count: int  # Names bound by the whole declaration


def language_for(entry_file: Path) -> Language:
    """Grammar for an entry file; JSX-capable files use the TSX grammar."""
    if entry_file.suffix in JSX_EXTENSIONS:
        return TSX
    return TYPESCRIPT


def parse_source(source: bytes, language: Language = TYPESCRIPT) -> Tree:
    return Parser(language).parse(source)


def _text(source: bytes, node: Node) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8")


def _walk(node: Node) -> Iterator[Node]:
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def _line_start(source: bytes, offset: int) -> int:
    return source.rfind(b"\n", 0, offset) + 1


def _indent_at(source: bytes, offset: int) -> bytes:
    start = _line_start(source, offset)
    line = source[start:offset]
    return line[: len(line) - len(line.lstrip(b" \t"))]


def _import_statements(tree: Tree) -> list[Node]:
    return [node for node in tree.root_node.named_children if node.type == "import_statement"]


def _import_names(source: bytes, statement: Node) -> list[str]:
    clause = next((c for c in statement.named_children if c.type == "import_clause"), None)
    if clause is None:
        return []

    names: list[str] = []
    for child in clause.named_children:
        if child.type == "identifier":
            names.append(_text(source, child))
        elif child.type == "namespace_import":
            names.extend(_text(source, n) for n in child.named_children if n.type == "identifier")
        elif child.type == "named_imports":
            for specifier in child.named_children:
                if specifier.type != "import_specifier":
                    continue
                bound = specifier.child_by_field_name("alias")
                if bound is None:
                    bound = specifier.child_by_field_name("name")
                if bound is not None:
                    names.append(_text(source, bound))
    return names


def _bindings(source: bytes, tree: Tree) -> dict[str, ImportBinding]:
    bindings: dict[str, ImportBinding] = {}
    for statement in _import_statements(tree):
        specifier = statement.child_by_field_name("source")
        if specifier is None:
            continue
        names = _import_names(source, statement)
        for name in names:
            bindings.setdefault(
                name,
                ImportBinding(
                    alias=name,
                    path=_text(source, specifier)[1:-1],
                    start=statement.start_byte,
                    end=statement.end_byte,
                    binding_count=len(names),
                ),
            )
    return bindings


def parse_import_bindings(
    content: str, language: Language = TYPESCRIPT
) -> dict[str, ImportBinding]:
    """Collect the local names bound by top-level import declarations.

    Handles default (``import a from``), named (``import { a, b as c } from``)
    and namespace (``import * as ns from``) forms, their combinations, and
    ``import type``. Side-effect imports bind nothing. The first declaration
    binding a name wins.
    """
    source = content.encode("utf-8")
    return _bindings(source, parse_source(source, language))


def module_specifier(entry_file: Path, target_file: Path) -> str:
    """Relative import path from ``entry_file`` to ``target_file``.

    The path uses forward slashes, has its script extension stripped, and
    always starts with ``./`` or ``../``.
    """
    relative_text = os.path.relpath(target_file.resolve(), entry_file.resolve().parent)
    relative = PurePosixPath(Path(relative_text).as_posix())
    if relative.suffix in STRIPPED_EXTENSIONS:
        relative = relative.with_suffix("")
    text = str(relative)
    if not text.startswith("."):
        text = f"./{text}"
    return text


def find_marker(source: bytes, tree: Tree, anchor: str) -> Node | None:
    """First ``//`` comment node whose text contains ``anchor``."""
    needle = anchor.encode("utf-8")
    matches = [
        node
        for node in _walk(tree.root_node)
        if node.type == "comment"
        and source[node.start_byte : node.end_byte].startswith(b"//")
        and needle in source[node.start_byte : node.end_byte]
    ]
    return min(matches, key=lambda node: node.start_byte, default=None)


def _marked_statement(marker: Node) -> Node | None:
    """Statement holding the marker, or the one following a comment-only line."""
    node = marker
    while node.parent is not None and node.parent.type not in STATEMENT_CONTAINERS:
        node = node.parent
    if node is not marker:
        return node

    previous = marker.prev_named_sibling
    if (
        previous is not None
        and previous.type != "comment"
        and previous.end_point[0] == marker.start_point[0]
    ):
        return previous

    following = marker.next_named_sibling
    while following is not None and following.type == "comment":
        following = following.next_named_sibling
    return following


def _chain_head(statement: Node) -> Node | None:
    """Outermost call expression of a statement, outside nested arguments and bodies."""
    stack = [statement]
    while stack:
        node = stack.pop()
        if node.type == "call_expression":
            return node
        if node.type in NESTED_SCOPES:
            continue
        stack.extend(reversed(node.named_children))
    return None


def _use_calls(source: bytes, head: Node) -> list[tuple[Node, Node]]:
    """``.use(...)`` calls along a call chain with their ``use`` property node.

    The last call in the source comes first.
    """
    calls: list[tuple[Node, Node]] = []
    node: Node | None = head
    while node is not None:
        if node.type == "call_expression":
            callee = node.child_by_field_name("function")
            if callee is not None and callee.type == "member_expression":
                prop = callee.child_by_field_name("property")
                if prop is not None and _text(source, prop) == "use":
                    calls.append((node, prop))
            node = callee
        elif node.type == "member_expression":
            node = node.child_by_field_name("object")
        else:
            node = None
    return calls


def _passes_alias(source: bytes, call: Node, alias: str) -> bool:
    arguments = call.child_by_field_name("arguments")
    if arguments is None:
        return False
    values = [c for c in arguments.named_children if c.type != "comment"]
    return len(values) == 1 and values[0].type == "identifier" and _text(source, values[0]) == alias


def _insert_plugin_use(source: bytes, marker: Node, alias: str) -> tuple[bytes, bool]:
    """Append ``.use(alias)`` after the last ``.use(...)`` of the marked chain.

    Returns:
        Tuple of (new source, already registered)

    Raises:
        InjectionMarkerNotFound: If no ``.use()`` chain is at the marker
    """
    statement = _marked_statement(marker)
    if statement is None:
        raise InjectionMarkerNotFound("no statement follows the marker")

    head = _chain_head(statement)
    calls = _use_calls(source, head) if head is not None else []
    if not calls:
        raise InjectionMarkerNotFound("no .use() chain at the marker")

    if any(_passes_alias(source, call, alias) for call, _ in calls):
        return source, True

    last, prop = calls[0]
    leading = source[_line_start(source, prop.start_byte) : prop.start_byte]
    if leading.strip() == b".":
        indent = _indent_at(source, prop.start_byte)
    else:
        indent = _indent_at(source, statement.start_byte) + b"  "

    insertion = b"\n" + indent + f".use({alias})".encode("utf-8")
    return source[: last.end_byte] + insertion + source[last.end_byte :], False


def routes_statement(registration: Registration) -> str:
    """Statement registering a routes alias under its path prefix."""
    template = registration.statement or DEFAULT_ROUTES_STATEMENT
    return template.replace("{alias}", registration.import_alias).replace(
        "{prefix}", registration.route_prefix
    )


def _insert_routes_statement(source: bytes, marker: Node, statement: str) -> tuple[bytes, bool]:
    """Insert ``statement`` on the line after the marker.

    Returns:
        Tuple of (new source, already registered)
    """
    wanted = statement.strip().encode("utf-8")
    if any(line.strip() == wanted for line in source.splitlines()):
        return source, True

    line = _indent_at(source, marker.start_byte) + wanted + b"\n"
    line_end = source.find(b"\n", marker.end_byte)
    if line_end == -1:
        return source + b"\n" + line, False
    return source[: line_end + 1] + line + source[line_end + 1 :], False


def _insert_import(source: bytes, tree: Tree, alias: str, path: str) -> bytes:
    statements = _import_statements(tree)
    quote = "'"
    if statements:
        first_source = statements[0].child_by_field_name("source")
        if first_source is not None:
            quote = _text(source, first_source)[0]
    declaration = f"import {alias} from {quote}{path}{quote};".encode("utf-8")

    if not statements:
        return declaration + b"\n" + source

    line_end = source.find(b"\n", statements[-1].end_byte)
    if line_end == -1:
        return source + b"\n" + declaration + b"\n"
    return source[: line_end + 1] + declaration + b"\n" + source[line_end + 1 :]


def insert_import(content: str, alias: str, path: str, language: Language = TYPESCRIPT) -> str:
    """Add ``import alias from 'path';`` after the last import declaration.

    The quote character follows the file's first import; with no imports the
    declaration goes at the top.
    """
    source = content.encode("utf-8")
    return _insert_import(source, parse_source(source, language), alias, path).decode("utf-8")


def inject_registration(
    content: str,
    entry_file: Path,
    pending: PendingRegistration,
) -> tuple[str, InjectionResult]:
    """Upsert one registration into the entry file content.

    The content is returned unchanged when the alias is already wired, when
    the alias is bound to a different module, when the anchor is missing, or
    when the edit would leave a file that parsed cleanly with syntax errors.
    """
    registration = pending.registration
    alias = registration.import_alias
    import_path = module_specifier(entry_file, pending.target_file)
    language = language_for(entry_file)

    source = content.encode("utf-8")
    tree = parse_source(source, language)
    existing = _bindings(source, tree).get(alias)
    if existing is not None and existing.path != import_path:
        warning = (
            f"{entry_file.name}: {alias} is already imported from "
            f"{existing.path}, not registering {import_path}"
        )
        return content, InjectionResult(entry_file, alias, "skipped", warning=warning)

    marker = find_marker(source, tree, registration.anchor)
    if marker is None:
        marker_error = InjectionMarkerNotFound(
            f"Marker '{registration.anchor}' not found in {entry_file.name}, "
            f"register {alias} manually"
        )
        return content, InjectionResult(entry_file, alias, "skipped", warning=str(marker_error))

    statement: str | None = None
    try:
        if registration.kind == "plugin":
            updated, present = _insert_plugin_use(source, marker, alias)
        else:
            statement = routes_statement(registration)
            updated, present = _insert_routes_statement(source, marker, statement)
    except InjectionMarkerNotFound as e:
        warning = f"Cannot register {alias} in {entry_file.name}: {e}"
        return content, InjectionResult(entry_file, alias, "skipped", warning=warning)

    if existing is None:
        updated = _insert_import(updated, parse_source(updated, language), alias, import_path)
        present = False

    if not tree.root_node.has_error and parse_source(updated, language).root_node.has_error:
        warning = f"Cannot register {alias} in {entry_file.name}: the result does not parse"
        return content, InjectionResult(entry_file, alias, "skipped", warning=warning)

    action = "already_registered" if present else "registered"
    logger.debug("%s %s in %s", action, alias, entry_file)
    return updated.decode("utf-8"), InjectionResult(
        entry_file, alias, action, import_path=import_path, statement=statement
    )


def register_files(
    pending: list[PendingRegistration],
    install_path: Path,
) -> list[InjectionResult]:
    """Register installed files in their entry files.

    Entries are grouped by entry file (``install_path / inject_in``); each
    entry file is read once and written once, only if it changed.
    """
    grouped: dict[Path, list[PendingRegistration]] = {}
    for item in pending:
        entry_file = (install_path / item.registration.inject_in).resolve()
        grouped.setdefault(entry_file, []).append(item)

    results: list[InjectionResult] = []
    for entry_file, items in grouped.items():
        original = entry_file.read_text(encoding="utf-8") if entry_file.exists() else ""
        content = original
        for item in items:
            content, result = inject_registration(content, entry_file, item)
            results.append(result)

        if content != original:
            entry_file.parent.mkdir(parents=True, exist_ok=True)
            entry_file.write_text(content, encoding="utf-8")
            logger.debug("Updated entry file %s", entry_file)

    return results


def _remove_import(source: bytes, tree: Tree, alias: str, import_path: str) -> bytes:
    binding = _bindings(source, tree).get(alias)
    if binding is None or binding.path != import_path or binding.binding_count != 1:
        return source
    end = binding.end
    if source[end : end + 1] == b"\n":
        end += 1
    return source[: binding.start] + source[end:]


def _remove_plugin_use(source: bytes, tree: Tree, alias: str) -> bytes:
    """Drop the first ``.use(alias)`` call from its chain, with its own line."""
    for node in _walk(tree.root_node):
        if node.type != "call_expression" or not _passes_alias(source, node, alias):
            continue
        callee = node.child_by_field_name("function")
        if callee is None or callee.type != "member_expression":
            continue
        target = callee.child_by_field_name("object")
        prop = callee.child_by_field_name("property")
        if target is None or prop is None or _text(source, prop) != "use":
            continue

        line_start = _line_start(source, prop.start_byte)
        if source[line_start : prop.start_byte].strip() == b".":
            start = max(line_start - 1, target.end_byte)
        else:
            start = source.rfind(b".", target.end_byte, prop.start_byte)
        return source[:start] + source[node.end_byte :]
    return source


def unregister_files(
    registrations: tuple[RecordedRegistration, ...], project_root: Path
) -> list[Path]:
    """Remove recorded imports and registrations from their entry files.

    Only declarations that still match what was recorded are removed.

    Returns:
        Entry files that were changed
    """
    changed: list[Path] = []
    for recorded in registrations:
        entry_file = project_root / recorded.entry_file
        if not entry_file.exists():
            continue
        language = language_for(entry_file)
        original = entry_file.read_bytes()
        source = _remove_import(
            original, parse_source(original, language), recorded.alias, recorded.import_path
        )

        if recorded.kind == "plugin":
            source = _remove_plugin_use(source, parse_source(source, language), recorded.alias)
        elif recorded.statement:
            wanted = recorded.statement.strip().encode("utf-8")
            lines = source.splitlines(keepends=True)
            source = b"".join(line for line in lines if line.strip() != wanted)

        if source != original:
            entry_file.write_bytes(source)
            changed.append(entry_file)
            logger.debug("Unregistered %s from %s", recorded.alias, entry_file)
    return changed
