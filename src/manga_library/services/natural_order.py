"""Case-insensitive natural ordering for human-authored names."""

from natsort import natsort_keygen, ns

natural_sort_key = natsort_keygen(alg=ns.IGNORECASE)
"""Sort key: digit runs compare by value, letters ignore case ("ch 9" < "Ch 10")."""


def compare_natural(first: str, second: str) -> int:
    """Three-way natural comparison: negative, zero or positive."""
    first_key = natural_sort_key(first)
    second_key = natural_sort_key(second)
    return (first_key > second_key) - (first_key < second_key)
