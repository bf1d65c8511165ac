from datetime import time

from django.test import TestCase

from catalog.models import Program, Session, SessionTime


class SessionTimesTests(TestCase):
    def setUp(self):
        self.session = Session.objects.create(
            source_id="a0S000000000001", title="Lap Swim"
        )

    def test_str(self):
        self.assertEqual(str(self.session), "Lap Swim")
        self.assertEqual(
            str(Program.objects.create(source_id="a0P000000000001", title="Aquatics")),
            "Aquatics",
        )

    def test_replace_times(self):
        times = self.session.replace_times(
            [{"start_time": time(9, 0), "end_time": time(10, 0), "days": "Monday"}]
        )

        self.assertEqual(len(times), 1)
        session_time = self.session.times.get()
        self.assertEqual(session_time.parent_type, "session")
        self.assertEqual(session_time.parent_id, str(self.session.pk))
        self.assertEqual(session_time.parent_field_name, "times")
        self.assertFalse(session_time.is_orphaned)

    def test_replace_times_detaches_previous(self):
        self.session.replace_times([{"days": "Monday"}])
        self.session.replace_times([{"days": "Tuesday"}, {"days": "Thursday"}])

        self.assertEqual(
            sorted(self.session.times.values_list("days", flat=True)),
            ["Thursday", "Tuesday"],
        )
        orphan = SessionTime.objects.get(days="Monday")
        self.assertTrue(orphan.is_orphaned)

    def test_detach_times(self):
        self.session.replace_times([{"days": "Monday"}, {"days": "Friday"}])
        self.assertEqual(self.session.detach_times(), 2)
        self.assertFalse(self.session.times.exists())

    def test_times_of_other_sessions_are_untouched(self):
        other = Session.objects.create(source_id="a0S000000000002", title="Open Swim")
        other.replace_times([{"days": "Sunday"}])

        self.session.replace_times([{"days": "Monday"}])
        self.session.detach_times()

        self.assertEqual(other.times.count(), 1)
