import json
import os
import tempfile
from unittest import mock

from traction_rec_import.config import ImportSettings

PROGRAMS = [
    {
        "attributes": {"type": "TREX1__Program__c"},
        "Id": "a0P000000000001",
        "Name": "Aquatics",
        "TREX1__Description__c": "Swim lessons for all ages",
        "TREX1__Available__c": True,
    },
    {
        "Id": "a0P000000000002",
        "Name": "Youth Sports",
        "TREX1__Description__c": None,
        "TREX1__Available__c": False,
    },
]

CATEGORIES = [
    {
        "Id": "a0C000000000001",
        "Name": "Swim Lessons",
        "TREX1__Program__c": "a0P000000000001",
    }
]

CLASSES = [
    {
        "Id": "a0K000000000001",
        "Name": "Preschool Swim",
        "TREX1__Description__c": "Ages 3-5",
        "TREX1__Program_Category__c": "a0C000000000001",
    }
]

SESSIONS = [
    {
        "Id": "a0S000000000001",
        "Name": "Preschool Swim - Monday Morning",
        "TREX1__Course__c": "a0K000000000001",
        "TREX1__Location__r": {"attributes": {}, "Name": "Downtown YMCA"},
        "TREX1__Capacity__c": 8,
        "TREX1__Number_of_Spots_Available__c": 3,
        "TREX1__Price__c": 45.5,
        "TREX1__Registration_URL__c": "https://example.com/register/1",
        "TREX1__Start_Date__c": "2024-02-05",
        "TREX1__End_Date__c": "2024-03-25",
        "TREX1__Start_Time__c": "09:30:00.000Z",
        "TREX1__End_Time__c": "10:00:00.000Z",
        "TREX1__Day_of_Week__c": "Monday",
    },
    {
        "Id": "a0S000000000002",
        "Name": "Preschool Swim - Wednesday Evening",
        "TREX1__Course__c": "a0K000000000001",
        "TREX1__Start_Time__c": "17:00:00.000Z",
        "TREX1__End_Time__c": "17:30:00.000Z",
        "TREX1__Day_of_Week__c": "Wednesday",
    },
]


def write_snapshot(
    root,
    name="20240101000000",
    programs=PROGRAMS,
    categories=CATEGORIES,
    classes=CLASSES,
    sessions=SESSIONS,
):
    """
    Write a snapshot directory under ``root``. Passing None for one of the
    record lists leaves its file out.
    """
    directory = os.path.join(root, name)
    os.makedirs(directory, exist_ok=True)
    files = {
        "programs.json": programs,
        "categories.json": categories,
        "classes.json": classes,
        "sessions.json": sessions,
    }
    for filename, records in files.items():
        if records is not None:
            with open(os.path.join(directory, filename), "w") as f:
                json.dump(records, f)
    return directory


class SnapshotDirectoryMixin:
    """
    Gives each test an empty JSON directory and ImportSettings pointing at it.
    """

    def setUp(self):
        super().setUp()
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.json_directory = tmp.name
        self.import_settings = ImportSettings(
            import_enabled=True,
            fetcher_enabled=True,
            backup_enabled=True,
            backup_limit=3,
            json_directory=self.json_directory,
        )


def idle_engine(names=("traction_rec_programs", "traction_rec_sessions")):
    engine = mock.Mock()
    engine.status.return_value = {name: "idle" for name in names}
    return engine
