"""
OpenAPI Mocker Contract Checks

Non-fatal checks run over a loaded contract. Nothing reported here stops
the server; the resolution rules already decide every case. The checks
point out where those rules may surprise a contract author:

- Overlapping path templates (the first declared one always wins)
- Keyed examples without a "default" or legacy example (unmatched
  requests get a 404)
- Operations without any response (every request gets a 404)
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from ..contract.models import ContractModel, ExampleSetKind
from .routes import Route, RouteTable


@dataclass(frozen=True)
class ContractWarning:
    """A single finding."""

    code: str
    method: str
    path: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary."""
        return {
            'code': self.code,
            'method': self.method,
            'path': self.path,
            'message': self.message
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.method} {self.path}: {self.message}"


def routes_overlap(first: Route, second: Route) -> bool:
    """
    Check whether some concrete path could match both routes.

    Two routes overlap when they have the same method and segment count and
    no position holds two different literals. Segments with embedded
    placeholders are treated as able to match anything.
    """
    if first.method != second.method or len(first.segments) != len(second.segments):
        return False

    for a, b in zip(first.segments, second.segments):
        if a.is_literal and b.is_literal and a.text != b.text:
            return False
        if a.is_literal and not b.is_literal and b.match(a.text) is None:
            return False
        if b.is_literal and not a.is_literal and a.match(b.text) is None:
            return False

    return True


def find_overlapping_routes(table: RouteTable) -> List[ContractWarning]:
    warnings = []
    routes = table.routes

    for i, later in enumerate(routes):
        for earlier in routes[:i]:
            if routes_overlap(earlier, later):
                warnings.append(ContractWarning(
                    code='overlapping-template',
                    method=later.method.upper(),
                    path=later.template,
                    message=f"overlaps {earlier.template}, which is declared first and wins"
                ))
                break

    return warnings


def find_missing_fallbacks(contract: ContractModel) -> List[ContractWarning]:
    warnings = []

    for operation in contract.operations():
        method = operation.method.upper()

        if not operation.responses:
            warnings.append(ContractWarning(
                code='no-responses',
                method=method,
                path=operation.path,
                message="declares no responses; every request resolves to 404"
            ))
            continue

        for status, response in operation.responses.items():
            for content_type, media in response.content.items():
                examples = media.examples
                if examples.kind is ExampleSetKind.KEYED and not examples.has_fallback:
                    warnings.append(ContractWarning(
                        code='no-fallback-example',
                        method=method,
                        path=operation.path,
                        message=(
                            f"response {status} ({content_type}) has keyed examples but no "
                            f"'default' or 'example'; unmatched requests resolve to 404"
                        )
                    ))

    return warnings


def check_contract(contract: ContractModel, table: Optional[RouteTable] = None) -> List[ContractWarning]:
    """
    Run all contract checks.

    Args:
        contract: Loaded contract
        table: Compiled route table (will compile if None)

    Returns:
        Warnings in contract order, overlaps first
    """
    if table is None:
        table = RouteTable.compile(contract)
    return find_overlapping_routes(table) + find_missing_fallbacks(contract)
