from django.test import SimpleTestCase

from algorithms.blood_compatibility import (
    BLOOD_TYPES,
    compatible_donors_for,
    compatible_recipients_for,
    is_compatible,
    sorted_types,
)
from algorithms.exceptions import InvalidBloodType


class CompatibilityTableTests(SimpleTestCase):

    def test_tables_agree_in_both_directions(self):
        for recipient in BLOOD_TYPES:
            for donor in compatible_donors_for(recipient):
                self.assertIn(recipient, compatible_recipients_for(donor))

    def test_universal_donor_and_recipient(self):
        self.assertEqual(compatible_donors_for('O-'), {'O-'})
        self.assertEqual(compatible_donors_for('AB+'), set(BLOOD_TYPES))
        self.assertEqual(compatible_recipients_for('O-'), set(BLOOD_TYPES))
        self.assertEqual(compatible_recipients_for('AB+'), {'AB+'})

    def test_a_positive_rules(self):
        self.assertEqual(compatible_donors_for('A+'), {'A+', 'A-', 'O+', 'O-'})
        self.assertEqual(compatible_recipients_for('A+'), {'A+', 'AB+'})
        self.assertTrue(is_compatible('O-', 'A+'))
        self.assertFalse(is_compatible('B+', 'A+'))

    def test_unknown_type_is_rejected(self):
        for bad in ('C+', 'a+', '', None):
            with self.assertRaises(InvalidBloodType):
                compatible_donors_for(bad)
        with self.assertRaises(InvalidBloodType):
            compatible_recipients_for('AB')

    def test_tables_are_read_only(self):
        donors = compatible_donors_for('A-')
        with self.assertRaises(AttributeError):
            donors.add('B+')

    def test_sorted_types_uses_canonical_order(self):
        self.assertEqual(sorted_types({'O-', 'A-', 'AB-', 'B-'}), ['A-', 'B-', 'AB-', 'O-'])
