""" Utilities for sfexport Core"""

import copy
import typing as T

from sfexport.core.exceptions import ConfigMergeError


def process_bool_arg(arg: T.Union[int, str, None]):
    """Determine True/False from argument.

    There are a few true-ish and false-ish strings,
        but "True" and "False" are the canonical ones.
    """
    if isinstance(arg, (int, bool)):
        return bool(arg)
    elif arg is None:
        return False
    elif isinstance(arg, str):
        if arg.lower() in ["yes", "y", "true", "on", "1"]:
            return True
        elif arg.lower() in ["no", "n", "false", "off", "0"]:
            return False
    raise TypeError(f"Cannot interpret as boolean: `{arg}`")


def dictmerge(a, b, name=None):
    """Deeply merge two ``dict``s that consist of lists, dicts, and scalars.
    This function (recursively) merges ``b`` INTO ``a``, does not copy any values, and returns ``a``.

    Lists in ``b`` replace lists in ``a``, so a user config can restate
    the metadata type list without inheriting the packaged one.
    NOTE: tuples and arbitrary objects are NOT handled and will raise TypeError"""

    key = None

    if b is None:
        return a

    try:
        if a is None or isinstance(a, (bytes, int, str, float, list)):
            a = copy.deepcopy(b)
        elif isinstance(a, dict):
            if isinstance(b, dict):
                for key in b:
                    if key in a:
                        a[key] = dictmerge(a[key], b[key], name)
                    else:
                        a[key] = copy.deepcopy(b[key])
            else:
                raise TypeError(
                    f'Cannot merge non-dict of type "{type(b)}" into dict "{a}"'
                )
        else:
            raise TypeError(
                f'dictmerge does not supporting merging "{type(b)}" into "{type(a)}"'
            )
    except TypeError as e:
        raise ConfigMergeError(
            f'TypeError "{e}" in key "{key}" when merging "{type(b)}" into "{type(a)}"',
            config_name=name,
        )
    return a
