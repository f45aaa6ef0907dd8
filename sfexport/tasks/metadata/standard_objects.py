from typing import Iterable, List, Union

# Tag and history objects hang off other objects and can't be retrieved
# on their own.
EXCLUDED_SUFFIXES = ("__Tag", "__Tags", "__History")


def resolve_standard_objects(names: Union[str, Iterable[str]]) -> List[str]:
    """Return the standard object names that must be listed explicitly
    under CustomObject, in input order.

    Accepts the raw newline-delimited CLI output or a sequence of names.
    """
    if isinstance(names, str):
        names = names.splitlines()
    return [
        name
        for name in (n.strip() for n in names)
        if name and not name.endswith(EXCLUDED_SUFFIXES)
    ]
