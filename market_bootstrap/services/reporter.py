"""Verification reporting — enumerate the banks of a reconciled group."""
from __future__ import annotations

from ..models import BankReport, Group


class VerificationReporter:
    """Turn reconciled group state into report records.

    Records follow the order the chain client exposed the banks in; no
    sorting is applied here.
    """

    def report(self, group: Group) -> list[BankReport]:
        return [
            BankReport(
                name=bank.name,
                token_index=bank.token_index,
                address=bank.address,
                mint=bank.mint,
                oracle=bank.oracle,
            )
            for bank in group.banks
        ]

    @staticmethod
    def render(reports: list[BankReport]) -> str:
        if not reports:
            return "No banks registered."
        return "\n".join(r.describe() for r in reports)
