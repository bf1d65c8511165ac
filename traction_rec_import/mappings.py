"""
Snapshot migrations: how each JSON file of a snapshot directory maps onto the
catalog models.

Each migration reads one file, upserts every record by its Traction Rec ``Id``
and can optionally delete catalog rows whose ``Id`` is no longer present in
the source. Records use the Salesforce field names returned by the Traction
Rec REST API; nested relationship objects (``TREX1__Location__r``) arrive as
dicts.
"""

import json
import os
from decimal import Decimal, InvalidOperation
from logging import getLogger

from django.utils.dateparse import parse_date, parse_time

from catalog.models import Program, ProgramCategory, ProgramClass, Session

from .config import MIGRATE_GROUP
from .exceptions import SnapshotFormatError

logger = getLogger(__name__)

DELETE_CHUNK_SIZE = 500


def _chunks(values, size):
    for i in range(0, len(values), size):
        yield values[i : i + size]


def _text(value):
    if value is None:
        return ""
    return str(value).strip()


def _related_name(record, relation, field="Name"):
    related = record.get(relation) or {}
    return _text(related.get(field))


def _time(value):
    if not value:
        return None
    # Salesforce sends times as 09:30:00.000Z
    return parse_time(value.rstrip("Z"))


def _date(value):
    if not value:
        return None
    return parse_date(value)


def _decimal(value):
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise SnapshotFormatError("Invalid decimal value: %r" % value)


def _integer(value):
    if value is None or value == "":
        return None
    return int(value)


class SnapshotMigration:
    name = None
    source_file = None
    model = None
    weight = 0
    group = MIGRATE_GROUP

    def __repr__(self):
        return "%s(name=%s)" % (self.__class__.__name__, self.name)

    def load_records(self, directory):
        """
        Return the list of records in this migration's file, or None when the
        snapshot does not contain the file.
        """
        path = os.path.join(directory, self.source_file)
        if not os.path.exists(path):
            return None

        try:
            with open(path, encoding="utf-8") as f:
                records = json.load(f)
        except ValueError as exc:
            raise SnapshotFormatError("%s is not valid JSON: %s" % (path, exc))

        if not isinstance(records, list):
            raise SnapshotFormatError("%s does not contain a JSON array" % path)

        return records

    def source_id(self, record):
        try:
            source_id = record["Id"]
        except (KeyError, TypeError):
            raise SnapshotFormatError(
                "%s record without an Id: %r" % (self.name, record)
            )
        if not source_id:
            raise SnapshotFormatError("%s record with an empty Id" % self.name)
        return source_id

    def transform(self, record):
        """
        Return the model field values for ``record``, excluding ``source_id``.
        """
        raise NotImplementedError

    def import_record(self, record):
        obj, created = self.model.objects.update_or_create(
            source_id=self.source_id(record), defaults=self.transform(record)
        )
        self.after_save(obj, record, created)
        return obj

    def after_save(self, obj, record, created):
        pass

    def delete_missing(self, source_ids):
        """
        Delete every row whose ``source_id`` is not in ``source_ids``.

        Returns the number of rows deleted.
        """
        existing = set(self.model.objects.values_list("source_id", flat=True))
        missing = sorted(existing - set(source_ids))
        deleted = 0
        for chunk in _chunks(missing, DELETE_CHUNK_SIZE):
            deleted += self.model.objects.filter(source_id__in=chunk).delete()[1].get(
                self.model._meta.label, 0
            )
        if deleted:
            logger.info("%s deleted %d rows missing from the source", self, deleted)
        return deleted

    def rollback(self):
        """
        Delete every row this migration created. Returns the number of rows
        deleted.
        """
        return self.model.objects.all().delete()[1].get(self.model._meta.label, 0)

    def related(self, model, source_id):
        if not source_id:
            return None
        return model.objects.filter(source_id=source_id).first()


class ProgramMigration(SnapshotMigration):
    name = "traction_rec_programs"
    source_file = "programs.json"
    model = Program
    weight = 10

    def transform(self, record):
        return {
            "title": _text(record.get("Name")),
            "description": _text(record.get("TREX1__Description__c")),
            "available": bool(record.get("TREX1__Available__c", True)),
        }


class ProgramCategoryMigration(SnapshotMigration):
    name = "traction_rec_categories"
    source_file = "categories.json"
    model = ProgramCategory
    weight = 20

    def transform(self, record):
        return {
            "title": _text(record.get("Name")),
            "description": _text(record.get("TREX1__Description__c")),
            "program": self.related(Program, record.get("TREX1__Program__c")),
        }


class ProgramClassMigration(SnapshotMigration):
    name = "traction_rec_classes"
    source_file = "classes.json"
    model = ProgramClass
    weight = 30

    def transform(self, record):
        return {
            "title": _text(record.get("Name")),
            "description": _text(record.get("TREX1__Description__c")),
            "category": self.related(
                ProgramCategory, record.get("TREX1__Program_Category__c")
            ),
        }


class SessionMigration(SnapshotMigration):
    name = "traction_rec_sessions"
    source_file = "sessions.json"
    model = Session
    weight = 40

    def transform(self, record):
        return {
            "title": _text(record.get("Name")),
            "description": _text(record.get("TREX1__Description__c")),
            "program_class": self.related(ProgramClass, record.get("TREX1__Course__c")),
            "location": _related_name(record, "TREX1__Location__r"),
            "capacity": _integer(record.get("TREX1__Capacity__c")),
            "spots_available": _integer(
                record.get("TREX1__Number_of_Spots_Available__c")
            ),
            "price": _decimal(record.get("TREX1__Price__c")),
            "registration_url": _text(record.get("TREX1__Registration_URL__c")),
        }

    def schedule(self, record):
        values = {
            "start_date": _date(record.get("TREX1__Start_Date__c")),
            "end_date": _date(record.get("TREX1__End_Date__c")),
            "start_time": _time(record.get("TREX1__Start_Time__c")),
            "end_time": _time(record.get("TREX1__End_Time__c")),
            "days": _text(record.get("TREX1__Day_of_Week__c")),
        }
        if not any(values.values()):
            return []
        return [values]

    def after_save(self, obj, record, created):
        # The previous schedule is left detached for the database clean-up
        obj.replace_times(self.schedule(record))


SNAPSHOT_MIGRATIONS = [
    ProgramMigration,
    ProgramCategoryMigration,
    ProgramClassMigration,
    SessionMigration,
]
