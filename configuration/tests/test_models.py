import json

from django.test import TestCase

from configuration.models import Configuration


class TestConfiguration(TestCase):
    def test_str(self):
        config = Configuration.objects.create(
            key="test-key", value="Test value", data_type=Configuration.DataType.TEXT
        )
        self.assertEqual(str(config), "test-key")

    def test_text(self):
        config = Configuration.objects.create(
            key="test-key", value="traction_rec_import"
        )
        self.assertEqual(config.get_value(), "traction_rec_import")

        config2 = Configuration.objects.create(
            key="test-key2", value="", data_type=Configuration.DataType.TEXT
        )
        self.assertEqual(config2.get_value(), "")

    def test_number(self):
        config = Configuration.objects.create(
            key="test-key", value="15", data_type=Configuration.DataType.NUMBER
        )
        self.assertEqual(config.get_value(), 15)

        config2 = Configuration.objects.create(
            key="test-key2", value="2.5", data_type=Configuration.DataType.NUMBER
        )
        self.assertEqual(config2.get_value(), 2.5)

        config3 = Configuration.objects.create(
            key="test-key3", value="fifteen", data_type=Configuration.DataType.NUMBER
        )
        self.assertEqual(config3.get_value(), 0)

    def test_boolean(self):
        for index, value in enumerate(("True", "true", " TRUE ", "1", "yes", "on")):
            config = Configuration.objects.create(
                key=f"true-{index}",
                value=value,
                data_type=Configuration.DataType.BOOLEAN,
            )
            self.assertIs(config.get_value(), True, value)

        for index, value in enumerate(("False", "0", "", "Test value")):
            config = Configuration.objects.create(
                key=f"false-{index}",
                value=value,
                data_type=Configuration.DataType.BOOLEAN,
            )
            self.assertIs(config.get_value(), False, value)

    def test_json(self):
        config = Configuration.objects.create(
            key="test-key",
            value='{"key" : "value"}',
            data_type=Configuration.DataType.JSON,
        )
        self.assertEqual(config.get_value(), {"key": "value"})

        config2 = Configuration.objects.create(
            key="test-key2", value="", data_type=Configuration.DataType.JSON
        )
        self.assertRaises(json.decoder.JSONDecodeError, config2.get_value)


class TestSeededConfiguration(TestCase):
    def test_traction_rec_keys_are_seeded(self):
        values = {
            config.key: config.get_value()
            for config in Configuration.objects.filter(key__startswith="traction_rec_")
        }
        self.assertEqual(
            values,
            {
                "traction_rec_import_enabled": False,
                "traction_rec_fetcher_enabled": False,
                "traction_rec_backup_enabled": True,
                "traction_rec_backup_limit": 15,
                "traction_rec_migrate_group": "traction_rec_import",
            },
        )
