"""
Argos Package Planning

Decides which Argos Translate packages a language pair needs. Works on any
objects with `from_code` / `to_code` attributes, so it has no dependency
on argostranslate itself.

The index mostly ships pairs to and from English. A pair without a direct
package (e.g. it -> es) is installed as two legs through PIVOT_LANGUAGE,
and Argos chains them when translating.
"""

from typing import List, Optional, Sequence, Tuple

from src.errors import ModelUnavailable


PIVOT_LANGUAGE = "en"


def find_package(packages: Sequence, from_code: str, to_code: str) -> Optional[object]:
    """First package translating from_code -> to_code, or None."""
    return next(
        (p for p in packages if p.from_code == from_code and p.to_code == to_code),
        None
    )


def plan_packages(
    available: Sequence,
    installed: Sequence,
    source: str,
    target: str
) -> List[Tuple[str, str]]:
    """
    Pick the (from, to) packages to download so source -> target can be translated.

    A direct package is preferred. Otherwise both legs through the pivot
    language are used, skipping any leg that is already installed.

    Args:
        available: Packages offered by the index
        installed: Packages already installed
        source: Source language code
        target: Target language code

    Returns:
        Pairs to download, in install order (empty if nothing is missing)

    Raises:
        ModelUnavailable: If neither a direct package nor both pivot legs exist
    """
    if find_package(installed, source, target) is not None:
        return []
    if find_package(available, source, target) is not None:
        return [(source, target)]

    if PIVOT_LANGUAGE in (source, target):
        raise ModelUnavailable(source, target, "no package in index")

    legs = [(source, PIVOT_LANGUAGE), (PIVOT_LANGUAGE, target)]
    missing = [leg for leg in legs if find_package(installed, *leg) is None]
    for from_code, to_code in missing:
        if find_package(available, from_code, to_code) is None:
            raise ModelUnavailable(source, target, f"no package {from_code}->{to_code} in index")
    return missing
