"""Index of the org's folders and the reports, dashboards, email templates
and documents filed in them.

Folder-based metadata has to be named folder by folder in a package.xml,
so the index keeps, per folder category, the folders in the order they
were queried and the items found in each.
"""
from logging import getLogger
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from sfexport.core.enums import StrEnum

logger = getLogger(__name__)


class FolderCategory(StrEnum):
    "The values of Folder.Type that hold retrievable metadata"
    report = "Report"
    dashboard = "Dashboard"
    email = "Email"
    document = "Document"


FOLDER_QUERY = (
    "SELECT Id, Name, DeveloperName, Type, NamespacePrefix "
    "FROM Folder WHERE DeveloperName != null"
)

# sObject queried for the items of each category, and the field on it
# that holds the id of the containing folder.
FOLDER_ITEM_SOURCES = {
    FolderCategory.report: ("Report", "OwnerId"),
    FolderCategory.dashboard: ("Dashboard", "FolderId"),
    FolderCategory.email: ("EmailTemplate", "FolderId"),
    FolderCategory.document: ("Document", "FolderId"),
}

# Field holding the file extension that is part of an item's metadata
# name, as in Folder/logo.png
ITEM_EXTENSION_FIELDS = {
    FolderCategory.document: "Type",
}


def item_query(category: FolderCategory) -> str:
    sobject, folder_field = FOLDER_ITEM_SOURCES[category]
    fields = ["Id", "DeveloperName", folder_field]
    if category in ITEM_EXTENSION_FIELDS:
        fields.append(ITEM_EXTENSION_FIELDS[category])
    return f"SELECT {', '.join(fields)} FROM {sobject}"


class MemberRecord(BaseModel):
    "A report, dashboard, email template or document"

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    developer_name: str = Field(alias="DeveloperName")
    folder_id: str
    extension: Optional[str] = None

    @property
    def file_name(self) -> str:
        "The item's name inside its folder in a package.xml"
        if self.extension:
            return f"{self.developer_name}.{self.extension}"
        return self.developer_name


class FolderRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="Id")
    developer_name: str = Field(alias="DeveloperName")
    category: FolderCategory = Field(alias="Type")
    namespace_prefix: Optional[str] = Field(None, alias="NamespacePrefix")
    members: List[MemberRecord] = Field(default_factory=list)


class FolderIndex:
    """Folders by category, then by folder id.

    Only the categories passed in are indexed; folders of any other type
    are skipped without complaint.
    """

    def __init__(self, categories: Iterable[FolderCategory] = tuple(FolderCategory)):
        self._folders: Dict[FolderCategory, Dict[str, FolderRecord]] = {
            FolderCategory(category): {} for category in categories
        }

    @classmethod
    def from_records(
        cls,
        records: Iterable[dict],
        categories: Iterable[FolderCategory] = tuple(FolderCategory),
    ) -> "FolderIndex":
        index = cls(categories)
        for record in records:
            index.add_folder(record)
        return index

    @property
    def categories(self) -> List[FolderCategory]:
        return list(self._folders)

    def add_folder(self, record: dict) -> Optional[FolderRecord]:
        """Index a raw Folder record. Returns the indexed folder, or None if skipped."""
        folders = self._category_bucket(record.get("Type"))
        if folders is None:
            return None
        folder_id = record["Id"]
        if folder_id not in folders:
            folders[folder_id] = FolderRecord.model_validate(record)
        return folders[folder_id]

    def add_members(
        self, category: FolderCategory, records: Iterable[dict], folder_field: str
    ) -> int:
        """File raw item records under their folders, keeping input order.

        Items whose folder isn't indexed (personal folders, for example)
        are dropped. Returns the number of items filed.
        """
        folders = self._folders.get(category, {})
        extension_field = ITEM_EXTENSION_FIELDS.get(category)
        added = 0
        for record in records:
            folder = folders.get(record.get(folder_field))
            if folder is None:
                logger.debug(
                    f"Skipping {category} {record.get('DeveloperName')}: "
                    f"folder {record.get(folder_field)} isn't indexed"
                )
                continue
            folder.members.append(
                MemberRecord(
                    developer_name=record["DeveloperName"],
                    folder_id=record[folder_field],
                    extension=record.get(extension_field) if extension_field else None,
                )
            )
            added += 1
        return added

    def folders(self, category: FolderCategory) -> List[FolderRecord]:
        "Folders of a category in the order they were indexed"
        return list(self._folders.get(category, {}).values())

    def _category_bucket(self, folder_type):
        try:
            category = FolderCategory(folder_type)
        except ValueError:
            return None
        return self._folders.get(category)
