import unittest

import stack_status
from stack_status import StackStatus


class TestStackStatus(unittest.TestCase):
    def test_all_flags_false(self):
        self.assertEqual(StackStatus.OPEN, stack_status.derive_status(dict()))
        flags = {"is_regressed": False, "is_hidden": False, "disable_notifications": False, "is_fixed": False}
        self.assertEqual(StackStatus.OPEN, stack_status.derive_status(flags))

    def test_regressed_outranks_fixed(self):
        self.assertEqual(StackStatus.REGRESSED,
                         stack_status.derive_status({"is_regressed": True, "is_fixed": True}))

    def test_hidden_outranks_fixed(self):
        self.assertEqual(StackStatus.IGNORED, stack_status.derive_status({"is_hidden": True, "is_fixed": True}))

    def test_disable_notifications(self):
        self.assertEqual(StackStatus.IGNORED, stack_status.derive_status({"disable_notifications": True}))
        self.assertEqual(StackStatus.REGRESSED,
                         stack_status.derive_status({"disable_notifications": True, "is_regressed": True}))

    def test_fixed(self):
        self.assertEqual(StackStatus.FIXED, stack_status.derive_status({"is_fixed": True}))

    def test_flags_must_be_true(self):
        # The script compares with "== true", so truthy non-boolean values do not count
        self.assertEqual(StackStatus.OPEN, stack_status.derive_status({"is_fixed": "true", "is_hidden": 1}))

    def test_status_values(self):
        self.assertEqual("ignored", StackStatus.IGNORED.value)
        self.assertEqual(StackStatus.SNOOZED, StackStatus("snoozed"))

    def test_script_matches_precedence(self):
        script = stack_status.STATUS_SCRIPT
        # Each flag appears in the script in the same order as the precedence list, with the same status
        positions = list()
        for flag, status in stack_status.STATUS_PRECEDENCE:
            clause = f"if (ctx._source.{flag} == true) {{ ctx._source.status = '{status.value}'; }}"
            self.assertIn(clause, script)
            positions.append(script.index(clause))
        self.assertEqual(sorted(positions), positions)
        self.assertTrue(script.endswith("else { ctx._source.status = 'open'; }"))

    def test_field_specs(self):
        self.assertEqual({"status": "keyword", "snooze_until_utc": "date"}, stack_status.STATUS_FIELD_SPECS)


if __name__ == '__main__':
    unittest.main()
