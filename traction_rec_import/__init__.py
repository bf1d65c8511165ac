"""
Design
======

The importer pulls program, category, class and session data from Traction Rec
and loads it into the catalog app.

General goals:

* All state is stored in the database and visible for reporting
* Jobs are separate, independently scheduled processes (management commands,
  Celery beat or queue workers). Only one import may run at a time, across
  processes, so the import lock lives in a durable cache backend
* Maintenance sweeps never fail the calling process; they log and stop

The import process works like this:

1. The fetcher queries Traction Rec and writes ``programs.json``,
   ``categories.json``, ``classes.json`` and ``sessions.json`` into a new
   snapshot directory named after the fetch time (``YYYYMMDDHHMMSS``). The
   directory is written under a hidden working name and renamed once every
   file is in place, so a half-written snapshot is never imported.
2. The import checks that it is enabled, takes the import lock and checks that
   no migration in the group is running or stuck.
3. Every snapshot directory without a completed SnapshotImport record is run
   through the migration engine, oldest first. A failing directory is recorded
   and logged and the remaining directories are still imported.
4. The lock is released on every exit path. A lock left behind by a crashed
   process never expires on its own and must be cleared with
   ``manage.py tr_reset_lock``.
5. Snapshot directories stay where they are after import. The clean-up job
   keeps only the newest ``traction_rec_backup_limit`` of them, and the
   database clean-up job removes session times orphaned by re-imported or
   deleted sessions.
"""
