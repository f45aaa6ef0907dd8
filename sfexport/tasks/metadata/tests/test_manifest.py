import io

import pytest
from lxml import etree

from sfexport.core.exceptions import ManifestStateError
from sfexport.tasks.metadata.folders import FolderCategory, FolderIndex
from sfexport.tasks.metadata.manifest import (
    METADATA_NAMESPACE,
    CustomObject,
    EmptyFolderPolicy,
    FolderScoped,
    ManifestBuilder,
    ManifestState,
    Wildcard,
    build_manifest,
    expansion_rules,
    render_manifest,
    rule_for_type,
)

NS = {"md": METADATA_NAMESPACE}


def parse_types(xml):
    """Return [(name, [members])] in document order."""
    root = etree.fromstring(xml.encode("utf-8"))
    return [
        (
            types.findtext("md:name", namespaces=NS),
            [m.text for m in types.findall("md:members", namespaces=NS)],
        )
        for types in root.findall("md:types", namespaces=NS)
    ]


@pytest.fixture
def scenario_index():
    index = FolderIndex.from_records(
        [{"Id": "F1", "DeveloperName": "MyReports", "Type": "Report"}]
    )
    index.add_members(
        FolderCategory.report, [{"DeveloperName": "Q1", "OwnerId": "F1"}], "OwnerId"
    )
    return index


class TestManifestBuilder:
    def test_document(self):
        stream = io.StringIO()
        builder = ManifestBuilder(stream, "43.0")
        builder.start()
        assert builder.add_type("ApexClass", ["*"]) == 1
        builder.finalize()

        assert stream.getvalue() == (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<Package xmlns="http://soap.sforce.com/2006/04/metadata">\n'
            "  <types>\n"
            "    <members>*</members>\n"
            "    <name>ApexClass</name>\n"
            "  </types>\n"
            "  <version>43.0</version>\n"
            "</Package>\n"
        )
        assert builder.state is ManifestState.finalized
        assert builder.type_count == 1

    def test_no_types(self):
        stream = io.StringIO()
        builder = ManifestBuilder(stream, "43.0")
        builder.start()
        builder.finalize()
        root = etree.fromstring(stream.getvalue().encode("utf-8"))
        assert [child.tag for child in root] == [f"{{{METADATA_NAMESPACE}}}version"]

    def test_add_type_before_start(self):
        builder = ManifestBuilder(io.StringIO(), "43.0")
        with pytest.raises(ManifestStateError):
            builder.add_type("ApexClass", ["*"])

    def test_finalize_before_start(self):
        with pytest.raises(ManifestStateError):
            ManifestBuilder(io.StringIO(), "43.0").finalize()

    def test_add_type_after_finalize(self):
        builder = ManifestBuilder(io.StringIO(), "43.0")
        builder.start()
        builder.finalize()
        with pytest.raises(ManifestStateError):
            builder.add_type("ApexClass", ["*"])
        with pytest.raises(ManifestStateError):
            builder.start()

    def test_escapes_names(self):
        stream = io.StringIO()
        builder = ManifestBuilder(stream, "43.0")
        builder.start()
        builder.add_type("Report", ["R&D", "R&D/Q1<2>"])
        builder.finalize()
        assert "<members>R&amp;D/Q1&lt;2&gt;</members>" in stream.getvalue()
        assert parse_types(stream.getvalue()) == [("Report", ["R&D", "R&D/Q1<2>"])]


class TestExpansionRules:
    def test_rule_table(self):
        rules = expansion_rules(FolderIndex())
        assert rule_for_type("Report", rules) == FolderScoped(FolderCategory.report)
        assert rule_for_type("Dashboard", rules) == FolderScoped(FolderCategory.dashboard)
        assert rule_for_type("EmailTemplate", rules) == FolderScoped(FolderCategory.email)
        assert rule_for_type("Document", rules) == FolderScoped(FolderCategory.document)
        assert rule_for_type("CustomObject", rules) == CustomObject()
        assert rule_for_type("ApexClass", rules) == Wildcard()

    def test_unindexed_folder_type_is_wildcard(self):
        rules = expansion_rules(FolderIndex(categories=[FolderCategory.report]))
        assert rule_for_type("Report", rules) == FolderScoped(FolderCategory.report)
        assert rule_for_type("Document", rules) == Wildcard()


class TestRenderManifest:
    def test_scenario(self, scenario_index):
        xml = render_manifest(
            ["ApexClass", "CustomObject", "Report"],
            scenario_index,
            ["Account"],
        )
        assert parse_types(xml) == [
            ("ApexClass", ["*"]),
            ("CustomObject", ["Account", "*"]),
            ("Report", ["MyReports", "MyReports/Q1"]),
        ]

    def test_wildcard_per_type(self):
        types = ["ApexClass", "ApexPage", "Flow", "Workflow"]
        xml = render_manifest(types, FolderIndex(categories=[]), [])
        assert parse_types(xml) == [(name, ["*"]) for name in types]

    def test_custom_object_without_standard_objects(self):
        assert parse_types(render_manifest(["CustomObject"])) == [("CustomObject", ["*"])]

    def test_version_is_last(self):
        xml = render_manifest(["ApexClass"], api_version="52.0")
        root = etree.fromstring(xml.encode("utf-8"))
        assert root[-1].tag == f"{{{METADATA_NAMESPACE}}}version"
        assert root[-1].text == "52.0"

    def test_members_precede_name(self, scenario_index):
        xml = render_manifest(["Report", "CustomObject"], scenario_index, ["Account"])
        root = etree.fromstring(xml.encode("utf-8"))
        for types in root.findall("md:types", namespaces=NS):
            tags = [etree.QName(child).localname for child in types]
            assert tags[-1] == "name"
            assert set(tags[:-1]) == {"members"}

    def test_all_folder_types(self, folder_index):
        folder_index.add_members(
            FolderCategory.dashboard,
            [{"DeveloperName": "Overview", "FolderId": "00l000000000002"}],
            "FolderId",
        )
        folder_index.add_members(
            FolderCategory.email,
            [
                {"DeveloperName": "Welcome", "FolderId": "00l000000000003"},
                {"DeveloperName": "Stray", "FolderId": "00D000000000001"},
            ],
            "FolderId",
        )
        folder_index.add_members(
            FolderCategory.document,
            [{"DeveloperName": "Logo", "FolderId": "00l000000000004", "Type": "png"}],
            "FolderId",
        )
        xml = render_manifest(
            ["Dashboard", "Document", "EmailTemplate", "Report"], folder_index
        )
        assert parse_types(xml) == [
            ("Dashboard", ["ExecDashboards", "ExecDashboards/Overview"]),
            ("Document", ["Logos", "Logos/Logo.png"]),
            ("EmailTemplate", ["Templates", "Templates/Welcome"]),
            ("Report", ["SalesReports", "MarketingReports"]),
        ]

    def test_deterministic(self, scenario_index):
        args = (["ApexClass", "CustomObject", "Report"], scenario_index, ["Account"])
        assert render_manifest(*args) == render_manifest(*args)


class TestEmptyFolderPolicy:
    types = ["ApexClass", "Report", "Dashboard"]

    def test_empty(self):
        xml = render_manifest(self.types, FolderIndex())
        assert parse_types(xml) == [("ApexClass", ["*"]), ("Report", []), ("Dashboard", [])]

    def test_wildcard(self):
        xml = render_manifest(
            self.types, FolderIndex(), empty_folder_policy=EmptyFolderPolicy.wildcard
        )
        assert parse_types(xml) == [
            ("ApexClass", ["*"]),
            ("Report", ["*"]),
            ("Dashboard", ["*"]),
        ]

    def test_omit(self):
        xml = render_manifest(self.types, FolderIndex(), empty_folder_policy="omit")
        assert parse_types(xml) == [("ApexClass", ["*"])]

    def test_policy_ignored_when_folders_exist(self, scenario_index):
        xml = render_manifest(
            ["Report"], scenario_index, empty_folder_policy=EmptyFolderPolicy.wildcard
        )
        assert parse_types(xml) == [("Report", ["MyReports", "MyReports/Q1"])]


def test_build_manifest(tmp_path, scenario_index):
    path = tmp_path / "package.xml"
    count = build_manifest(
        path, ["ApexClass", "CustomObject", "Report"], scenario_index, ["Account"], "43.0"
    )
    assert count == 3
    content = path.read_text(encoding="utf-8")
    assert content == render_manifest(
        ["ApexClass", "CustomObject", "Report"], scenario_index, ["Account"], "43.0"
    )
    assert content.endswith("</Package>\n")
