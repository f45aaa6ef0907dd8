import os

from sfexport.core.config import load_settings
from sfexport.core.exceptions import TaskOptionsError
from sfexport.core.sfdx import SfdxBackend
from sfexport.core.tasks import BaseTask
from sfexport.core.utils import process_bool_arg
from sfexport.tasks.metadata.catalog import CatalogStrategy, get_metadata_types
from sfexport.tasks.metadata.folders import (
    FOLDER_ITEM_SOURCES,
    FOLDER_QUERY,
    FolderIndex,
    item_query,
)
from sfexport.tasks.metadata.manifest import EmptyFolderPolicy, build_manifest
from sfexport.tasks.metadata.standard_objects import resolve_standard_objects

MANIFEST_FILENAME = "package.xml"


class ExportMetadata(BaseTask):
    task_docs = """
    Builds a package.xml naming all of an org's metadata, including every
    report, dashboard, email template and document folder and the
    standard objects, then retrieves it with the sf CLI as
    unpackaged.zip in the output directory.
    """

    task_options = {
        "username": {
            "description": "Username or alias of an org authorized with the sf CLI",
            "required": True,
        },
        "directory": {
            "description": "Output directory, created if it doesn't exist. Defaults to the current directory."
        },
        "api_version": {
            "description": "Metadata API version for the manifest. Defaults to the configured version."
        },
        "catalog": {
            "description": "static to use the curated list of metadata types, "
            "dynamic to ask the org which types it supports."
        },
        "empty_folder_policy": {
            "description": "empty, wildcard or omit: what to write for a folder-based "
            "type when the org has no folders of that kind."
        },
        "manifest_only": {
            "description": "If True, write package.xml but don't retrieve. Defaults to False."
        },
        "config": {"description": "Path to a YAML settings file"},
    }

    def _init_options(self, options, kwargs):
        super()._init_options(options, kwargs)
        self.settings = load_settings(self.options.get("config"))

        self.options["directory"] = self.options.get("directory") or "."
        self.options["api_version"] = str(
            self.options.get("api_version") or self.settings.api_version
        )
        self.options["manifest_only"] = process_bool_arg(
            self.options.get("manifest_only", False)
        )
        try:
            self.options["catalog"] = CatalogStrategy(
                self.options.get("catalog") or self.settings.catalog.strategy
            )
        except ValueError:
            raise TaskOptionsError(
                f"Invalid catalog `{self.options['catalog']}`: "
                f"must be one of {', '.join(CatalogStrategy)}"
            )
        try:
            self.options["empty_folder_policy"] = EmptyFolderPolicy(
                self.options.get("empty_folder_policy")
                or self.settings.manifest.empty_folder_policy
            )
        except ValueError:
            raise TaskOptionsError(
                f"Invalid empty_folder_policy `{self.options['empty_folder_policy']}`: "
                f"must be one of {', '.join(EmptyFolderPolicy)}"
            )

    def _init_task(self):
        self.directory = self.options["directory"]
        if not os.path.isdir(self.directory):
            os.makedirs(self.directory)
        self.manifest_path = os.path.join(self.directory, MANIFEST_FILENAME)
        self.backend = SfdxBackend(
            self.options["username"],
            api_version=self.options["api_version"],
            logger=self.logger,
        )

    def _run_task(self):
        self.logger.info("Exporting metadata")
        folder_index = self._get_folder_index()
        standard_objects = resolve_standard_objects(
            self.backend.list_standard_objects()
        )
        self.logger.info(f"Found {len(standard_objects)} standard objects")
        types = get_metadata_types(
            self.options["catalog"],
            backend=self.backend,
            static_types=self.settings.catalog.types,
        )

        type_count = build_manifest(
            self.manifest_path,
            types,
            folder_index,
            standard_objects,
            self.options["api_version"],
            self.options["empty_folder_policy"],
        )
        self.logger.info(
            f"Wrote {type_count} metadata types to {self.manifest_path}"
        )
        self.return_values = {
            "manifest_path": self.manifest_path,
            "archive_path": None,
            "types": type_count,
        }
        if self.options["manifest_only"]:
            return

        self.logger.info("Extracting metadata")
        archive_path = self.backend.retrieve(self.manifest_path, self.directory)
        self.return_values["archive_path"] = archive_path
        self.logger.info(f"Metadata written to {archive_path}")

    def _get_folder_index(self) -> FolderIndex:
        folder_index = FolderIndex.from_records(self.backend.query(FOLDER_QUERY))
        for category in folder_index.categories:
            _, folder_field = FOLDER_ITEM_SOURCES[category]
            records = self.backend.query(item_query(category))
            added = folder_index.add_members(category, records, folder_field)
            self.logger.info(
                f"Found {len(folder_index.folders(category))} {category} folders "
                f"containing {added} items"
            )
        return folder_index
