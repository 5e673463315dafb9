"""Tests for entry file registration."""

from pathlib import Path

from monolith_kit.models.config import RecordedRegistration
from monolith_kit.models.registry import Registration
from monolith_kit.operations.inject import (
    PendingRegistration,
    find_marker,
    inject_registration,
    insert_import,
    module_specifier,
    parse_import_bindings,
    parse_source,
    register_files,
    routes_statement,
    unregister_files,
)
from tests.test_utils.project_setup import (
    ENTRY_FILE,
    plugin_registration,
    routes_registration,
    write_entry_file,
)

PLUGIN_REGISTERED = """import { Elysia } from 'elysia';
import { cors } from '@elysiajs/cors';
import authPlugin from './modules/auth/auth';

const app = new Elysia()
  // @monolith:plugins
  .use(cors())
  .use(authPlugin)
  .listen(3000);

// @monolith:routes

export type App = typeof app;
"""


def _entry(project: Path) -> Path:
    return project / "src" / "index.ts"


def _plugin(project: Path) -> PendingRegistration:
    return PendingRegistration(
        Registration.model_validate(plugin_registration("authPlugin")),
        project / "src" / "modules" / "auth" / "auth.ts",
    )


def _routes(project: Path) -> PendingRegistration:
    return PendingRegistration(
        Registration.model_validate(routes_registration("usersRoutes")),
        project / "src" / "modules" / "users" / "users.routes.ts",
    )


def test_parse_import_bindings() -> None:
    """Test default, named, aliased, namespace and type-only imports."""
    content = (
        "import Default, { a, b as c } from './x';\n"
        'import * as ns from "./ns";\n'
        "import type { T } from './types';\n"
        "import {\n  multi,\n  line,\n} from './multi';\n"
        "import './side-effect';\n"
    )

    bindings = parse_import_bindings(content)

    assert set(bindings) == {"Default", "a", "c", "ns", "T", "multi", "line"}
    assert bindings["c"].path == "./x"
    assert bindings["Default"].binding_count == 3
    assert bindings["ns"].binding_count == 1
    assert bindings["line"].path == "./multi"


def test_module_specifier(tmp_path: Path) -> None:
    """Test relative specifiers with ./ prefix and no script extension."""
    entry = tmp_path / "src" / "index.ts"

    assert module_specifier(entry, tmp_path / "src" / "auth" / "auth.ts") == "./auth/auth"
    assert module_specifier(entry, tmp_path / "lib" / "db.mjs") == "../lib/db"
    assert module_specifier(entry, tmp_path / "src" / "a.routes.ts") == "./a.routes"
    assert module_specifier(entry, tmp_path / "src" / "data.json") == "./data.json"


def test_find_marker_only_matches_line_comments() -> None:
    """Test the anchor must appear inside a line comment."""
    source = (
        b"const marker = '@monolith:plugins';\n"
        b"/* @monolith:plugins */\n"
        b"  // @monolith:plugins\n"
    )
    tree = parse_source(source)

    marker = find_marker(source, tree, "@monolith:plugins")
    assert marker is not None
    assert marker.start_point[0] == 2
    assert find_marker(source, tree, "@monolith:routes") is None


def test_insert_import_keeps_quote_style() -> None:
    """Test the new import follows the last import using the file's quotes."""
    content = 'import { Elysia } from "elysia";\n\nconst app = 1;\n'

    updated = insert_import(content, "authPlugin", "./auth")

    assert updated == (
        'import { Elysia } from "elysia";\nimport authPlugin from "./auth";\n\nconst app = 1;\n'
    )
    assert insert_import("const a = 1;\n", "x", "./x") == "import x from './x';\nconst a = 1;\n"


def test_plugin_registration(tmp_path: Path) -> None:
    """Test one import and one chained .use() call are added."""
    updated, result = inject_registration(ENTRY_FILE, _entry(tmp_path), _plugin(tmp_path))

    assert updated == PLUGIN_REGISTERED
    assert result.action == "registered"
    assert result.import_path == "./modules/auth/auth"
    assert result.warning is None


def test_plugin_registration_is_idempotent(tmp_path: Path) -> None:
    """Test re-running against a registered file changes nothing."""
    updated, result = inject_registration(PLUGIN_REGISTERED, _entry(tmp_path), _plugin(tmp_path))

    assert updated == PLUGIN_REGISTERED
    assert result.action == "already_registered"
    assert updated.count("import authPlugin") == 1
    assert updated.count(".use(authPlugin)") == 1


def test_import_without_registration_adds_only_the_call(tmp_path: Path) -> None:
    """Test an existing matching import is reused."""
    content = ENTRY_FILE.replace(
        "import { cors } from '@elysiajs/cors';\n",
        "import { cors } from '@elysiajs/cors';\nimport authPlugin from './modules/auth/auth';\n",
    )

    updated, result = inject_registration(content, _entry(tmp_path), _plugin(tmp_path))

    assert updated == PLUGIN_REGISTERED
    assert result.action == "registered"


def test_conflicting_alias_is_skipped(tmp_path: Path) -> None:
    """Test an alias bound to another module is not registered."""
    content = "import authPlugin from './legacy/auth';\n" + ENTRY_FILE

    updated, result = inject_registration(content, _entry(tmp_path), _plugin(tmp_path))

    assert updated == content
    assert result.action == "skipped"
    assert result.warning == (
        "index.ts: authPlugin is already imported from ./legacy/auth, "
        "not registering ./modules/auth/auth"
    )


def test_missing_marker_leaves_file_unchanged(tmp_path: Path) -> None:
    """Test an entry file without the anchor is untouched with a warning."""
    content = "import { Elysia } from 'elysia';\n\nnew Elysia().listen(3000);\n"

    updated, result = inject_registration(content, _entry(tmp_path), _plugin(tmp_path))

    assert updated == content
    assert result.action == "skipped"
    assert result.warning == (
        "Marker '@monolith:plugins' not found in index.ts, register authPlugin manually"
    )


def test_marker_without_use_chain_is_skipped(tmp_path: Path) -> None:
    """Test a plugin anchor that is not followed by a .use() chain."""
    content = "// @monolith:plugins\nconst app = new Elysia();\n"

    updated, result = inject_registration(content, _entry(tmp_path), _plugin(tmp_path))

    assert updated == content
    assert result.warning == "Cannot register authPlugin in index.ts: no .use() chain at the marker"


def test_routes_registration(tmp_path: Path) -> None:
    """Test the route group statement goes on the line after the anchor."""
    updated, result = inject_registration(ENTRY_FILE, _entry(tmp_path), _routes(tmp_path))

    assert "import usersRoutes from './modules/users/users.routes';\n" in updated
    assert "// @monolith:routes\napp.group(usersRoutes, { prefix: '/users' });\n" in updated
    assert result.statement == "app.group(usersRoutes, { prefix: '/users' });"

    again, second = inject_registration(updated, _entry(tmp_path), _routes(tmp_path))
    assert again == updated
    assert second.action == "already_registered"


def test_routes_statement_override() -> None:
    """Test a registry-provided statement with placeholders."""
    registration = Registration.model_validate(
        {**routes_registration("ordersRoutes"), "statement": "app.use({alias}); // /{prefix}"}
    )

    assert routes_statement(registration) == "app.use(ordersRoutes); // /orders"


def test_register_files_writes_once(tmp_path: Path) -> None:
    """Test both registrations land in the entry file in one write."""
    entry = write_entry_file(tmp_path)

    results = register_files([_plugin(tmp_path), _routes(tmp_path)], tmp_path)

    assert [r.action for r in results] == ["registered", "registered"]
    content = entry.read_text(encoding="utf-8")
    assert content.count("import authPlugin") == 1
    assert content.count("import usersRoutes") == 1
    assert ".use(authPlugin)" in content


def test_register_files_does_not_write_unchanged_file(tmp_path: Path) -> None:
    """Test a file without anchors is not rewritten."""
    entry = write_entry_file(tmp_path, "export {};\n")
    mtime = entry.stat().st_mtime_ns

    results = register_files([_plugin(tmp_path)], tmp_path)

    assert results[0].action == "skipped"
    assert entry.stat().st_mtime_ns == mtime
    assert entry.read_text(encoding="utf-8") == "export {};\n"


def test_unregister_restores_entry_file(tmp_path: Path) -> None:
    """Test recorded imports and registrations are removed."""
    entry = write_entry_file(tmp_path)
    results = register_files([_plugin(tmp_path), _routes(tmp_path)], tmp_path)
    recorded = tuple(
        RecordedRegistration(
            entry_file="src/index.ts",
            alias=r.alias,
            import_path=r.import_path or "",
            kind="plugin" if r.alias == "authPlugin" else "routes",
            statement=r.statement,
        )
        for r in results
    )

    changed = unregister_files(recorded, tmp_path)

    assert changed == [tmp_path / "src" / "index.ts", tmp_path / "src" / "index.ts"]
    assert entry.read_text(encoding="utf-8") == ENTRY_FILE


def test_unregister_keeps_shared_import_declarations(tmp_path: Path) -> None:
    """Test a declaration binding other names is left in place."""
    entry = write_entry_file(tmp_path, "import authPlugin, { helper } from './auth';\n")
    recorded = (
        RecordedRegistration(
            entry_file="src/index.ts", alias="authPlugin", import_path="./auth", kind="plugin"
        ),
    )

    assert unregister_files(recorded, tmp_path) == []
    assert entry.read_text(encoding="utf-8") == "import authPlugin, { helper } from './auth';\n"


HANDLER_ENTRY = """import { Elysia } from 'elysia';
import { cors } from '@elysiajs/cors';

const app = new Elysia()
  // @monolith:plugins
  .get('/health', () => {
    return { ok: true };
  })
  .use(cors())
  .listen(3000);
"""

SWAGGER_ENTRY = """import { Elysia } from 'elysia';
import { swagger } from '@elysiajs/swagger';

export const app = new Elysia()
  // @monolith:plugins
  .use(swagger({ documentation: { info: { title: 'API :)' } } }))
  .listen(3000);
"""

SWAGGER_REGISTERED = """import { Elysia } from 'elysia';
import { swagger } from '@elysiajs/swagger';
import authPlugin from './modules/auth/auth';

export const app = new Elysia()
  // @monolith:plugins
  .use(swagger({ documentation: { info: { title: 'API :)' } } }))
  .use(authPlugin)
  .listen(3000);
"""


def test_plugin_follows_last_use_after_route_handler(tmp_path: Path) -> None:
    """Test a multi-line handler between the marker and the .use() calls."""
    updated, result = inject_registration(HANDLER_ENTRY, _entry(tmp_path), _plugin(tmp_path))

    assert result.action == "registered"
    assert "  .use(cors())\n  .use(authPlugin)\n  .listen(3000);\n" in updated
    assert "    return { ok: true };\n  })\n  .use(cors())" in updated
    assert not parse_source(updated.encode("utf-8")).root_node.has_error


def test_plugin_after_call_with_paren_in_string(tmp_path: Path) -> None:
    """Test parentheses inside string literals do not end the .use() call."""
    updated, result = inject_registration(SWAGGER_ENTRY, _entry(tmp_path), _plugin(tmp_path))

    assert result.action == "registered"
    assert updated == SWAGGER_REGISTERED
    assert not parse_source(updated.encode("utf-8")).root_node.has_error


def test_plugin_on_single_line_chain(tmp_path: Path) -> None:
    """Test a trailing marker comment on a one-line chain."""
    content = "const app = new Elysia().use(cors()).listen(3000); // @monolith:plugins\n"

    updated, result = inject_registration(content, _entry(tmp_path), _plugin(tmp_path))

    assert result.action == "registered"
    assert updated == (
        "import authPlugin from './modules/auth/auth';\n"
        "const app = new Elysia().use(cors())\n"
        "  .use(authPlugin).listen(3000); // @monolith:plugins\n"
    )


def test_nested_use_in_arguments_is_not_the_chain(tmp_path: Path) -> None:
    """Test a .use() inside a call argument does not count as registered."""
    content = (
        "const app = new Elysia()\n"
        "  // @monolith:plugins\n"
        "  .use(new Elysia({ prefix: '/v1' }).use(authPlugin))\n"
        "  .listen(3000);\n"
    )

    updated, result = inject_registration(content, _entry(tmp_path), _plugin(tmp_path))

    assert result.action == "registered"
    assert "  .use(new Elysia({ prefix: '/v1' }).use(authPlugin))\n  .use(authPlugin)\n" in updated


def test_unregister_restores_entry_with_string_parens(tmp_path: Path) -> None:
    """Test removal only drops the registered call from a non-trivial chain."""
    entry = write_entry_file(tmp_path, SWAGGER_REGISTERED)
    recorded = (
        RecordedRegistration(
            entry_file="src/index.ts",
            alias="authPlugin",
            import_path="./modules/auth/auth",
            kind="plugin",
        ),
    )

    assert unregister_files(recorded, tmp_path) == [entry]
    assert entry.read_text(encoding="utf-8") == SWAGGER_ENTRY


def test_non_ascii_content_is_preserved(tmp_path: Path) -> None:
    """Test byte-offset edits keep multi-byte characters intact."""
    content = ENTRY_FILE.replace("const app", "// café ✓\nconst app")

    updated, _ = inject_registration(content, _entry(tmp_path), _plugin(tmp_path))

    assert updated == PLUGIN_REGISTERED.replace("const app", "// café ✓\nconst app")
