"""Writes the package.xml that tells the Metadata API what to retrieve.

Each metadata type gets one of three expansions:

* folder-based types (Report, Dashboard, EmailTemplate, Document) list
  every folder and every ``Folder/Item`` in it, because the Metadata API
  doesn't accept a wildcard for them;
* CustomObject lists each standard object by name, then ``*``;
* everything else is just ``*``.
"""
import io
from dataclasses import dataclass
from logging import getLogger
from typing import Dict, Iterable, Optional, Sequence
from xml.sax.saxutils import escape

from sfexport.core.enums import StrEnum
from sfexport.core.exceptions import ManifestStateError
from sfexport.tasks.metadata.folders import FolderCategory, FolderIndex

logger = getLogger(__name__)

METADATA_NAMESPACE = "http://soap.sforce.com/2006/04/metadata"
WILDCARD = "*"
CUSTOM_OBJECT = "CustomObject"

FOLDER_TYPES: Dict[str, FolderCategory] = {
    "Report": FolderCategory.report,
    "Dashboard": FolderCategory.dashboard,
    "EmailTemplate": FolderCategory.email,
    "Document": FolderCategory.document,
}


class EmptyFolderPolicy(StrEnum):
    "What to write for a folder-based type when there are no folders"
    empty = "empty"
    wildcard = "wildcard"
    omit = "omit"


class ManifestState(StrEnum):
    not_started = "NotStarted"
    in_progress = "InProgress"
    finalized = "Finalized"


@dataclass(frozen=True)
class FolderScoped:
    category: FolderCategory

    def members(self, folder_index: FolderIndex, standard_objects: Sequence[str]):
        for folder in folder_index.folders(self.category):
            yield folder.developer_name
            for member in folder.members:
                yield f"{folder.developer_name}/{member.file_name}"


@dataclass(frozen=True)
class CustomObject:
    def members(self, folder_index: FolderIndex, standard_objects: Sequence[str]):
        # Standard objects aren't matched by the wildcard
        yield from standard_objects
        yield WILDCARD


@dataclass(frozen=True)
class Wildcard:
    def members(self, folder_index: FolderIndex, standard_objects: Sequence[str]):
        yield WILDCARD


def expansion_rules(folder_index: FolderIndex) -> dict:
    """Map metadata type name to its expansion rule.

    A folder-based type whose category isn't indexed isn't in the table,
    so it falls back to the wildcard.
    """
    indexed = set(folder_index.categories)
    rules = {
        name: FolderScoped(category)
        for name, category in FOLDER_TYPES.items()
        if category in indexed
    }
    rules[CUSTOM_OBJECT] = CustomObject()
    return rules


def rule_for_type(name: str, rules: dict):
    return rules.get(name, Wildcard())


class ManifestBuilder:
    """Write a package.xml to a text stream one element at a time.

    Call `start()`, then `add_type()` for each type, then `finalize()`.
    """

    def __init__(self, stream, api_version: str):
        self.stream = stream
        self.api_version = api_version
        self.state = ManifestState.not_started
        self.type_count = 0

    def start(self):
        self._check_state(ManifestState.not_started, "start")
        self.stream.write('<?xml version="1.0" encoding="UTF-8"?>\n')
        self.stream.write(f'<Package xmlns="{METADATA_NAMESPACE}">\n')
        self.state = ManifestState.in_progress

    def add_type(self, name: str, members: Iterable[str]) -> int:
        """Write a <types> block. Returns the number of members written."""
        self._check_state(ManifestState.in_progress, "add a type to")
        self.stream.write("  <types>\n")
        count = 0
        for member in members:
            self.stream.write(f"    <members>{escape(member)}</members>\n")
            count += 1
        self.stream.write(f"    <name>{escape(name)}</name>\n")
        self.stream.write("  </types>\n")
        self.type_count += 1
        return count

    def finalize(self):
        self._check_state(ManifestState.in_progress, "finalize")
        self.stream.write(f"  <version>{escape(str(self.api_version))}</version>\n")
        self.stream.write("</Package>\n")
        self.state = ManifestState.finalized

    def _check_state(self, expected: ManifestState, action: str):
        if self.state is not expected:
            raise ManifestStateError(
                f"Can't {action} a manifest that is {self.state} (expected {expected})"
            )


def write_manifest(
    stream,
    types: Sequence[str],
    folder_index: FolderIndex,
    standard_objects: Sequence[str],
    api_version: str,
    empty_folder_policy: EmptyFolderPolicy = EmptyFolderPolicy.empty,
) -> int:
    """Write a complete manifest for `types`, in order, to `stream`.

    Returns the number of <types> blocks written.
    """
    empty_folder_policy = EmptyFolderPolicy(empty_folder_policy)
    rules = expansion_rules(folder_index)
    builder = ManifestBuilder(stream, api_version)
    builder.start()
    for name in types:
        rule = rule_for_type(name, rules)
        members = rule.members(folder_index, standard_objects)
        if isinstance(rule, FolderScoped):
            members = list(members)
            if not members:
                logger.info(f"No {rule.category} folders found for {name}")
                if empty_folder_policy is EmptyFolderPolicy.omit:
                    continue
                if empty_folder_policy is EmptyFolderPolicy.wildcard:
                    members = [WILDCARD]
        count = builder.add_type(name, members)
        logger.debug(f"Added {count} member(s) for {name}")
    builder.finalize()
    return builder.type_count


def build_manifest(
    path,
    types: Sequence[str],
    folder_index: FolderIndex,
    standard_objects: Sequence[str],
    api_version: str,
    empty_folder_policy: EmptyFolderPolicy = EmptyFolderPolicy.empty,
) -> int:
    """Write the manifest to the file at `path`. Returns the number of <types> blocks."""
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        return write_manifest(
            f, types, folder_index, standard_objects, api_version, empty_folder_policy
        )


def render_manifest(
    types: Sequence[str],
    folder_index: Optional[FolderIndex] = None,
    standard_objects: Sequence[str] = (),
    api_version: str = "43.0",
    empty_folder_policy: EmptyFolderPolicy = EmptyFolderPolicy.empty,
) -> str:
    stream = io.StringIO()
    write_manifest(
        stream,
        types,
        folder_index or FolderIndex(),
        standard_objects,
        api_version,
        empty_folder_policy,
    )
    return stream.getvalue()

