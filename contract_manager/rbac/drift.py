# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Compare route guards with the seeded catalog, and find unguarded routes.

Guards built by ``with_rbac`` carry their requirement list as
``required_permissions``. Both checks read it from the dependency tree of
each registered route, so only guards that are actually mounted count.
"""

from collections import defaultdict
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from fastapi.dependencies.models import Dependant
from fastapi.routing import APIRoute

from contract_manager.api.deps import get_current_user
from contract_manager.rbac.types import is_valid_permission

# Route prefixes that must never be reachable without a guard
CRITICAL_PREFIXES = ("/admin", "/audit", "/contracts", "/rbac", "/users")


def _dependency_calls(dependant: Dependant) -> Iterator:
    for sub in dependant.dependencies:
        if sub.call is not None:
            yield sub.call
        yield from _dependency_calls(sub)


def _api_routes(routes: Iterable) -> Iterator[APIRoute]:
    return (route for route in routes if isinstance(route, APIRoute))


def declared_permissions(routes: Iterable) -> dict[str, frozenset[str]]:
    """Map each permission required by a mounted guard to the declaring modules."""
    declared: dict[str, set[str]] = defaultdict(set)
    for route in _api_routes(routes):
        for call in _dependency_calls(route.dependant):
            required = getattr(call, "required_permissions", None)
            if required is None:
                continue
            for name in required:
                declared[name].add(route.endpoint.__module__)
    return {name: frozenset(sources) for name, sources in declared.items()}


def _is_guarded(route: APIRoute) -> bool:
    for call in _dependency_calls(route.dependant):
        if call is get_current_user or hasattr(call, "required_permissions"):
            return True
    return False


def _is_critical(path: str, prefixes: Iterable[str]) -> bool:
    return any(path == p or path.startswith(p + "/") for p in prefixes)


def find_unguarded_routes(
    routes: Iterable, prefixes: Iterable[str] = CRITICAL_PREFIXES
) -> list[str]:
    """List ``METHOD /path`` for critical routes with neither a guard nor identity.

    ``prefixes`` are matched against route paths as mounted on ``routes``.
    """
    prefixes = tuple(prefixes)
    unguarded = []
    for route in _api_routes(routes):
        if not _is_critical(route.path, prefixes) or _is_guarded(route):
            continue
        for method in sorted(route.methods):
            unguarded.append(f"{method} {route.path}")
    return unguarded


@dataclass
class DriftReport:
    """Differences between guard requirements and the catalog.

    ``p0_critical`` lists permissions a guard requires but nobody can hold,
    ``p2_unused`` lists seeded permissions no guard asks for and ``invalid``
    lists requirement strings that are not well-formed permissions.
    """

    p0_critical: list[str] = field(default_factory=list)
    p2_unused: list[str] = field(default_factory=list)
    invalid: list[str] = field(default_factory=list)
    sources: dict[str, list[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.p0_critical and not self.invalid

    def summary(self) -> str:
        return (
            f"{len(self.p0_critical)} critical (P0), "
            f"{len(self.invalid)} invalid, "
            f"{len(self.p2_unused)} unused (P2)"
        )


def check_drift(
    declared: Iterable[str] | dict[str, Iterable[str]],
    seeded: Iterable[str],
) -> DriftReport:
    """Classify the difference between declared and seeded permissions."""
    if isinstance(declared, dict):
        sources = {name: sorted(where) for name, where in declared.items()}
    else:
        sources = {name: [] for name in declared}
    seeded_names = set(seeded)

    report = DriftReport()
    for name in sorted(sources):
        if not is_valid_permission(name):
            report.invalid.append(name)
        elif name not in seeded_names:
            report.p0_critical.append(name)
    report.p2_unused = sorted(seeded_names - set(sources))
    report.sources = {
        name: sources[name] for name in report.p0_critical + report.invalid
    }
    return report
