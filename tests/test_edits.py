import unittest

from klausurplan.models import ClassTimetable, Exam, Week, Weekday
from klausurplan.scheduling.edits import (
    default_selection, merge_timetables, move_exam, remove_subject, toggle_class_day_block, toggle_day_block,
    toggle_pin, toggle_week_block, toggle_week_type,
)
from klausurplan.scheduling.validation import validate_move

MON, TUE, WED = Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY


class TestExamEdits(unittest.TestCase):

    def setUp(self):
        self.exams = [
            Exam(id='a', class_name='10A', subject='Math', is_pinned=True, assigned_week_id='W1', assigned_day=MON),
            Exam(id='b', class_name='10A', subject='German'),
        ]

    def test_moving_pinned_exam_keeps_pin(self):
        moved = move_exam(self.exams, 'a', 'W2', TUE)
        self.assertEqual((moved[0].assigned_week_id, moved[0].assigned_day), ('W2', TUE))
        self.assertTrue(moved[0].is_pinned)
        self.assertEqual(self.exams[0].assigned_week_id, 'W1')

    def test_move_to_unassigned(self):
        moved = move_exam(self.exams, 'a', None, None)
        self.assertFalse(moved[0].is_assigned)
        self.assertIs(moved[1], self.exams[1])

    def test_move_with_half_slot_rejected(self):
        with self.assertRaises(ValueError):
            move_exam(self.exams, 'b', 'W1', None)

    def test_toggle_pin(self):
        toggled = toggle_pin(self.exams, 'b')
        self.assertTrue(toggled[1].is_pinned)
        self.assertFalse(toggle_pin(toggled, 'b')[1].is_pinned)


class TestBlockEdits(unittest.TestCase):

    def test_toggle_day_block(self):
        original = {'W1': {MON: True}}
        updated = toggle_day_block(original, 'W1', TUE)
        self.assertEqual(updated, {'W1': {MON: True, TUE: True}})
        self.assertEqual(original, {'W1': {MON: True}})
        self.assertFalse(toggle_day_block(updated, 'W1', MON)['W1'][MON])

    def test_toggle_class_day_block(self):
        original = {}
        updated = toggle_class_day_block(original, '10A', 'W1', MON)
        self.assertTrue(updated['10A']['W1'][MON])
        self.assertEqual(original, {})
        again = toggle_class_day_block(updated, '10A', 'W1', MON)
        self.assertFalse(again['10A']['W1'][MON])
        self.assertTrue(updated['10A']['W1'][MON])

    def test_week_toggles(self):
        weeks = [Week('W1', 10, 2025), Week('W2', 11, 2025)]
        blocked = toggle_week_block(weeks, 'W2')
        self.assertTrue(blocked[1].is_blocked)
        self.assertFalse(weeks[1].is_blocked)
        self.assertEqual(toggle_week_type(weeks, 'W1')[0].week_type, 'B')
        self.assertEqual(toggle_week_type(toggle_week_type(weeks, 'W1'), 'W1')[0].week_type, 'A')


class TestTimetableEdits(unittest.TestCase):

    def test_merge_replaces_by_name_and_appends(self):
        a = ClassTimetable('10A', {MON: ['Math']})
        b = ClassTimetable('10B', {MON: ['Art']})
        a2 = ClassTimetable('10A', {TUE: ['German']})
        c = ClassTimetable('10C', {MON: ['Music']})
        merged = merge_timetables([a, b], [a2, c])
        self.assertEqual([t.class_name for t in merged], ['10A', '10B', '10C'])
        self.assertIs(merged[0], a2)

    def test_remove_subject_from_day(self):
        a = ClassTimetable('10A', {MON: ['Math', 'English'], TUE: ['Math']}, weekly_subjects_b={MON: ['Math']})
        b = ClassTimetable('10B', {MON: ['Math']})
        updated = remove_subject([a, b], '10A', MON, 'Math')
        self.assertEqual(updated[0].subjects_on(MON), ['English'])
        self.assertEqual(updated[0].subjects_on(TUE), ['Math'])
        self.assertEqual(updated[0].weekly_subjects_b, {MON: ['Math']})
        self.assertIs(updated[1], b)
        self.assertEqual(a.subjects_on(MON), ['Math', 'English'])

    def test_remove_subject_keeps_second_entry(self):
        t = ClassTimetable('10A', {MON: ['Math', 'Math']})
        self.assertEqual(remove_subject([t], '10A', MON, 'Math')[0].subjects_on(MON), ['Math'])

    def test_remove_unknown_subject_is_noop(self):
        t = ClassTimetable('10A', {MON: ['Math']})
        self.assertIs(remove_subject([t], '10A', MON, 'Art')[0], t)
        self.assertIs(remove_subject([t], '10C', MON, 'Math')[0], t)

    def test_removed_day_no_longer_placeable(self):
        t = ClassTimetable('10A', {MON: ['Math'], WED: ['Math']})
        edited = remove_subject([t], '10A', MON, 'Math')[0]
        exam = Exam(id='e', class_name='10A', subject='Math')
        self.assertFalse(validate_move(exam, 'W1', MON, [], edited, {}).valid)
        self.assertTrue(validate_move(exam, 'W1', WED, [], edited, {}).valid)

    def test_default_selection_is_all_distinct_subjects(self):
        t = ClassTimetable('10A', {MON: ['Math', 'Math', 'English'], TUE: ['German', 'Math']})
        self.assertEqual(default_selection([t]), {'10A': ['Math', 'English', 'German']})


if __name__ == '__main__':
    unittest.main()
