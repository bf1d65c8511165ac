"""
Pulls programs, categories, classes and sessions from Traction Rec and writes
them as a snapshot directory the importer can pick up.

A snapshot is written into a hidden working directory (``.20240131235959``)
and only renamed to its final name once every file is in place, so the
importer never sees a partial snapshot.
"""

import json
import os
import shutil
from logging import getLogger

from django.utils import timezone

from traction_rec.logging import TractionRecLogger

from .client import TractionRecClient
from .config import SNAPSHOT_DIRECTORY_FORMAT, ImportSettings

logger = getLogger(__name__)
structured_logger = TractionRecLogger.get_logger(__name__)

PROGRAMS_QUERY = (
    "SELECT Id, Name, TREX1__Description__c, TREX1__Available__c "
    "FROM TREX1__Program__c"
)
CATEGORIES_QUERY = (
    "SELECT Id, Name, TREX1__Description__c, TREX1__Program__c "
    "FROM TREX1__Program_Category__c"
)
CLASSES_QUERY = (
    "SELECT Id, Name, TREX1__Description__c, TREX1__Program_Category__c "
    "FROM TREX1__Course__c"
)
SESSIONS_QUERY = (
    "SELECT Id, Name, TREX1__Description__c, TREX1__Course__c, "
    "TREX1__Location__r.Name, TREX1__Capacity__c, "
    "TREX1__Number_of_Spots_Available__c, TREX1__Price__c, "
    "TREX1__Registration_URL__c, TREX1__Start_Date__c, TREX1__End_Date__c, "
    "TREX1__Start_Time__c, TREX1__End_Time__c, TREX1__Day_of_Week__c "
    "FROM TREX1__Course_Session__c WHERE TREX1__Available__c = true"
)


class TractionRecFetcher:
    def __init__(self, import_settings=None, client=None, now=None):
        if import_settings is None:
            import_settings = ImportSettings.load()
        self.settings = import_settings
        self._client = client
        self.directory_name = (now or timezone.now()).strftime(
            SNAPSHOT_DIRECTORY_FORMAT
        )
        self._working_directory = None

    @property
    def client(self):
        if self._client is None:
            self._client = TractionRecClient.from_settings()
        return self._client

    def is_enabled(self):
        return bool(self.settings.fetcher_enabled)

    def get_json_directory(self):
        """
        Return the final path of this fetcher's snapshot directory.
        """
        return os.path.join(self.settings.json_directory, self.directory_name)

    def get_working_directory(self):
        if self._working_directory is None:
            path = os.path.join(self.settings.json_directory, "." + self.directory_name)
            os.makedirs(path, exist_ok=True)
            self._working_directory = path
        return self._working_directory

    def save_json(self, records, filename):
        path = os.path.join(self.get_working_directory(), filename)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(records, f, indent=2)
        logger.info("Wrote %d records to %s", len(records), path)
        return path

    def fetch_program_and_categories(self):
        self.save_json(self.client.execute_query(PROGRAMS_QUERY), "programs.json")
        self.save_json(self.client.execute_query(CATEGORIES_QUERY), "categories.json")

    def fetch_classes(self):
        self.save_json(self.client.execute_query(CLASSES_QUERY), "classes.json")

    def fetch_sessions(self):
        self.save_json(self.client.execute_query(SESSIONS_QUERY), "sessions.json")

    def publish(self):
        """
        Move the finished working directory to its final, importable name.
        """
        directory = self.get_json_directory()
        os.rename(self.get_working_directory(), directory)
        self._working_directory = None
        return directory

    def fetch(self):
        """
        Fetch everything and publish the snapshot. Returns its directory.
        """
        try:
            self.fetch_program_and_categories()
            self.fetch_classes()
            self.fetch_sessions()
        except Exception:
            shutil.rmtree(self.get_working_directory(), ignore_errors=True)
            self._working_directory = None
            raise
        directory = self.publish()
        structured_logger.info(
            "Traction Rec snapshot fetched.",
            event_code="fetch_finished",
            snapshot_directory=directory,
        )
        return directory
