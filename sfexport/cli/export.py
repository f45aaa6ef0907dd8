import click

from sfexport.tasks.export import ExportMetadata
from sfexport.tasks.metadata.catalog import CatalogStrategy
from sfexport.tasks.metadata.manifest import EmptyFolderPolicy


@click.command(
    name="export",
    help="Build a package.xml naming all of an org's metadata and retrieve it with the sf CLI",
)
@click.option(
    "-u",
    "--username",
    "--sfdx-user",
    envvar="SFEXPORT_USERNAME",
    help="Username or alias of an org authorized with the sf CLI. Can also be set with SFEXPORT_USERNAME.",
)
@click.option(
    "-d",
    "--directory",
    default=".",
    show_default=True,
    type=click.Path(file_okay=False),
    help="Output directory. Created if it doesn't exist.",
)
@click.option("--api-version", help="Metadata API version for package.xml")
@click.option(
    "--catalog",
    type=click.Choice([s.value for s in CatalogStrategy]),
    help="Use the curated list of metadata types (static) or ask the org (dynamic)",
)
@click.option(
    "--empty-folders",
    "empty_folder_policy",
    type=click.Choice([p.value for p in EmptyFolderPolicy]),
    help="What to write for a folder-based type when the org has no folders of that kind",
)
@click.option(
    "--manifest-only",
    is_flag=True,
    help="Write package.xml without retrieving the metadata",
)
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a YAML settings file",
)
def export(
    username,
    directory,
    api_version,
    catalog,
    empty_folder_policy,
    manifest_only,
    config,
):
    if not username:
        raise click.UsageError("Missing -u (--username) parameter")

    task = ExportMetadata(
        username=username,
        directory=directory,
        api_version=api_version,
        catalog=catalog,
        empty_folder_policy=empty_folder_policy,
        manifest_only=manifest_only,
        config=config,
    )
    return task()
