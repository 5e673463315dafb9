"""Dependency resolution over the registry's ``requires`` graph."""

from monolith_kit.models.install import ResolutionResult
from monolith_kit.models.registry import Registry


def resolve_dependencies(module_name: str, registry: Registry) -> ResolutionResult:
    """Walk the ``requires`` graph of a module depth-first.

    A module found on the current path is reported as circular and that
    branch stops. A module absent from the registry is reported as missing.
    A module already expanded through another path is not expanded again.
    Collection continues after a problem so the caller sees every issue.

    Args:
        module_name: Module whose requirements are resolved
        registry: Registry to resolve against

    Returns:
        ResolutionResult; ``satisfied`` is in depth-first discovery order and
        starts with ``module_name`` when it exists in the registry.
    """
    satisfied: list[str] = []
    missing: list[str] = []
    circular: list[str] = []
    visited: set[str] = set()

    def visit(name: str, path: tuple[str, ...]) -> None:
        if name in path:
            if name not in circular:
                circular.append(name)
            return
        if name in visited:
            return
        visited.add(name)

        module = registry.get(name)
        if module is None:
            missing.append(name)
            return

        satisfied.append(name)
        for required in module.requires:
            visit(required, (*path, name))

    visit(module_name, ())
    return ResolutionResult(satisfied=satisfied, missing=missing, circular=circular)


def install_order(module_name: str, registry: Registry) -> list[str]:
    """Modules ``module_name`` depends on, dependencies first, itself last.

    Only meaningful for a resolution without missing or circular entries;
    problem nodes are left out.
    """
    order: list[str] = []
    seen: set[str] = set()

    def visit(name: str, path: tuple[str, ...]) -> None:
        if name in seen or name in path:
            return
        module = registry.get(name)
        if module is None:
            return
        for required in module.requires:
            visit(required, (*path, name))
        seen.add(name)
        order.append(name)

    visit(module_name, ())
    return order
