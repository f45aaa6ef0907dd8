import pytest

from sfexport.tasks.metadata.folders import FolderIndex


@pytest.fixture
def folder_records():
    return [
        {
            "attributes": {"type": "Folder"},
            "Id": "00l000000000001",
            "Name": "Sales Reports",
            "DeveloperName": "SalesReports",
            "Type": "Report",
            "NamespacePrefix": None,
        },
        {
            "Id": "00l000000000002",
            "Name": "Exec Dashboards",
            "DeveloperName": "ExecDashboards",
            "Type": "Dashboard",
            "NamespacePrefix": None,
        },
        {
            "Id": "00l000000000003",
            "Name": "Templates",
            "DeveloperName": "Templates",
            "Type": "Email",
            "NamespacePrefix": "ns",
        },
        {
            "Id": "00l000000000004",
            "Name": "Logos",
            "DeveloperName": "Logos",
            "Type": "Document",
            "NamespacePrefix": None,
        },
        {
            "Id": "00l000000000005",
            "Name": "Quick Text",
            "DeveloperName": "QuickText",
            "Type": "QuickText",
            "NamespacePrefix": None,
        },
        {
            "Id": "00l000000000006",
            "Name": "Marketing Reports",
            "DeveloperName": "MarketingReports",
            "Type": "Report",
            "NamespacePrefix": None,
        },
    ]


@pytest.fixture
def folder_index(folder_records):
    return FolderIndex.from_records(folder_records)
