"""Helpers shared by the CLI command modules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeVar

import click

from ims.domain.results import LedgerFailure, Rejected
from ims.infrastructure.bootstrap import Container

T = TypeVar("T")


@dataclass
class CliState:
    container: Container
    actor: str | None


pass_state = click.make_pass_decorator(CliState)


def unwrap(result: T | Rejected | LedgerFailure) -> T:
    """Return a successful result or abort the command with its message."""
    if isinstance(result, Rejected):
        raise click.ClickException(f"[{result.code}] {result.message}")
    if isinstance(result, LedgerFailure):
        raise click.ClickException(f"[{result.code}] {result.message}")
    return result
