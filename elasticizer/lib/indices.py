from typing import List, Sequence, Union

NameList = Union[str, Sequence[str]]

# ---------------- Logical -> physical index names ---------------

# Callers only ever see logical names ("logs"). The engine gets the physical
# name, which is the configured namespace prefix + logical name
# ("staging.logs"), so several environments can share one cluster.


def prefix_index(prefix: str, logical: NameList) -> Union[str, List[str]]:
    """
    Prepend `prefix` to one logical index name or to each name in a sequence.

    The shape is preserved: a string gives a string, a sequence gives a list.
    """
    if isinstance(logical, str):
        return f"{prefix}{logical}"
    return [f"{prefix}{name}" for name in logical]


class IndexNameResolver:
    def __init__(self, prefix: str = "") -> None:
        self.prefix = prefix or ""

    def resolve(self, logical: NameList) -> Union[str, List[str]]:
        return prefix_index(self.prefix, logical)


# ---------------- Path parsing ----------------------------------


def split_indices(raw: str) -> NameList:
    """
    Turn the `{index}` path segment into one name or a list of names.

    "logs" -> "logs"; "logs,audit" -> ["logs", "audit"]. Empty items are
    dropped so a trailing comma does not produce a bare prefix; a segment of
    nothing but commas gives an empty list, which callers must reject.
    """
    if "," not in raw:
        return raw
    return [name.strip() for name in raw.split(",") if name.strip()]
