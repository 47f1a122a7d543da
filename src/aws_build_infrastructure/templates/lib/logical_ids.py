import hashlib
import re

type LogicalId = str

HIDDEN_ID = "Default"
HIDDEN_FROM_HUMAN_ID = "Resource"
PATH_SEP = "/"
HASH_LEN = 8
MAX_HUMAN_LEN = 240

_NON_ALPHANUMERIC = re.compile(r"[^A-Za-z0-9]")


class EmptyConstructPathError(Exception):
    def __init__(self):
        super().__init__("Unable to calculate a unique id for an empty set of components")


def _remove_non_alphanumeric(value: str) -> str:
    return _NON_ALPHANUMERIC.sub("", value)


def _remove_consecutive_duplicates(components: list[str]) -> list[str]:
    deduped: list[str] = []
    for component in components:
        if deduped and deduped[-1] == component:
            continue
        deduped.append(component)
    return deduped


def _path_hash(components: list[str]) -> str:
    digest = hashlib.md5(PATH_SEP.join(components).encode("utf-8")).hexdigest()  # noqa: S324 # not used for security, only to make the id unique and stable
    return digest[:HASH_LEN].upper()


def make_logical_id(*path: str) -> LogicalId:
    """Generate a CloudFormation logical ID from the construct path.

    A single component is used as-is (minus any non-alphanumeric characters), so top level constructs keep
    readable ids. Deeper paths get a human readable prefix plus a short hash of the full path, so two paths
    which collapse to the same human part still produce distinct ids.
    """
    components = [component for component in path if component != HIDDEN_ID]
    if not components:
        raise EmptyConstructPathError
    if len(components) == 1:
        candidate = _remove_non_alphanumeric(components[0])
        if len(candidate) <= MAX_HUMAN_LEN:
            return candidate
    human = "".join(
        _remove_non_alphanumeric(component)
        for component in _remove_consecutive_duplicates(components)
        if component != HIDDEN_FROM_HUMAN_ID
    )[:MAX_HUMAN_LEN]
    return f"{human}{_path_hash(components)}"
