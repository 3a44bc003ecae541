"""Path template placeholder validation."""

from __future__ import annotations

from collections.abc import Iterable

from .config import PATH_PLACEHOLDER_PATTERN
from .errors import DeclarationError


def extract_placeholders(path: str) -> list[str]:
    """Return the `{token}` names in `path`, in template order."""
    return PATH_PLACEHOLDER_PATTERN.findall(path)


def validate_path_params(
    path: str,
    path_param_names: Iterable[str],
    *,
    method_name: str | None = None,
) -> None:
    """
    Require a one-to-one match between placeholders and path parameters.

    A placeholder without a parameter and a parameter without a placeholder
    are both errors, as is a parameter name declared twice.

    Raises:
        DeclarationError: naming the first offending token.
    """
    placeholders = extract_placeholders(path)
    declared = list(path_param_names)
    where = f" for method {method_name}" if method_name else ""

    seen: set[str] = set()
    for name in declared:
        if name in seen:
            raise DeclarationError(
                f"Path parameter {name} is declared more than once{where}",
                method_name=method_name,
            )
        seen.add(name)

    mismatched = set(placeholders).symmetric_difference(declared)
    if not mismatched:
        return

    # Placeholders in template order first, then declarations in order
    first_invalid = next(
        name for name in (*placeholders, *declared) if name in mismatched
    )
    raise DeclarationError(
        f"Unable to find both a placeholder {{{first_invalid}}} and a "
        f'PathParam("{first_invalid}") for parameter {first_invalid}{where}',
        method_name=method_name,
    )
