"""Fetching AUR package information in batched, concurrent requests."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Sequence

from yay import text
from yay.query.aur_warnings import AURWarnings
from yay.query.source import AURQueryError
from yay.query.types import AURPackage
from yay.text import tr


def aur_info(
    aur_client: Any,
    names: Sequence[str],
    warnings: AURWarnings,
    split_n: int,
) -> list[AURPackage]:
    """Query the AUR for names in chunks of split_n, run concurrently.

    aur_client must offer ``info(names)``. Missing, orphaned and out-of-date
    packages are recorded in warnings. Raises AURQueryError if any request fails.
    """
    names = list(names)
    chunks = [names[start:start + split_n] for start in range(0, len(names), split_n)]

    def request(chunk: list[str]) -> list[AURPackage]:
        text.debugln("AUR RPC:", chunk)
        return list(aur_client.info(chunk))

    info: list[AURPackage] = []
    errors: list[BaseException] = []
    if chunks:
        with ThreadPoolExecutor(max_workers=len(chunks)) as pool:
            futures = [pool.submit(request, chunk) for chunk in chunks]
            for future in futures:
                try:
                    info.extend(future.result())
                except Exception as exc:
                    errors.append(exc)

    if errors:
        raise AURQueryError(errors)

    seen = {pkg.name: pkg for pkg in info}

    for name in names:
        ignored = name in warnings.ignore
        pkg = seen.get(name)
        if pkg is None:
            if not ignored:
                warnings.missing.append(name)
            continue

        if pkg.maintainer == "" and not ignored:
            warnings.orphans.append(name)

        if pkg.out_of_date != 0 and not ignored:
            warnings.out_of_date.append(name)

    return info


def aur_info_print(aur_client: Any, names: Sequence[str], split_n: int) -> list[AURPackage]:
    """Query the AUR for names and print the warnings found."""
    text.operation_infoln(tr("Querying AUR..."))
    warnings = AURWarnings(None)
    info = aur_info(aur_client, names, warnings, split_n)
    warnings.print()
    return info