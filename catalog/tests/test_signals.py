from django.test import TestCase

from catalog.models import Session, SessionTime


class SessionDeleteSignalTests(TestCase):
    def test_deleting_session_orphans_times(self):
        session = Session.objects.create(source_id="a0S000000000001", title="Swim")
        session.replace_times([{"days": "Monday"}, {"days": "Wednesday"}])

        session.delete()

        self.assertEqual(SessionTime.objects.count(), 2)
        self.assertTrue(all(t.is_orphaned for t in SessionTime.objects.all()))

    def test_queryset_delete_orphans_times(self):
        for i in range(2):
            Session.objects.create(
                source_id="a0S00000000000%d" % i, title="Swim %d" % i
            ).replace_times([{"days": "Friday"}])

        Session.objects.all().delete()

        self.assertEqual(
            SessionTime.objects.filter(
                parent_id__isnull=True, parent_type__isnull=True
            ).count(),
            2,
        )
