"""Splitting of account lists so that bulk statements stay within the parameter limit."""

from __future__ import annotations

from typing import Sequence, TypeVar

MAX_POSTGRESQL_PARAMS = 65535

T = TypeVar("T")


def split_accounts(accounts: Sequence[T], params_number: int) -> list[list[T]]:
    """Split accounts into batches, each using at most the maximum number of query parameters.

    The first batch holds up to ``MAX_POSTGRESQL_PARAMS // params_number`` items, the following
    ones one fewer; there are always ``len(accounts) // per_batch + 1`` batches at least, so the
    trailing batch may be empty.
    """
    if params_number <= 0:
        raise ValueError("params_number must be positive")
    per_batch = MAX_POSTGRESQL_PARAMS // params_number
    if per_batch < 2:
        raise ValueError(f"too many parameters per account: {params_number}")

    batches: list[list[T]] = [[] for _ in range(len(accounts) // per_batch + 1)]
    batch_index = 0
    for index, account in enumerate(accounts):
        if batch_index == len(batches):
            batches.append([])
        batches[batch_index].append(account)
        if index > 0 and index % (per_batch - 1) == 0:
            batch_index += 1
    return batches