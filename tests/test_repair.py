import random
import unittest

from klausurplan.algorithms.repair import auto_fix
from klausurplan.models import ClassTimetable, Exam, Week, Weekday
from klausurplan.scheduling.validation import day_collisions_ok, week_cap_ok

MON, TUE, WED, THU, FRI = Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY, Weekday.THURSDAY, Weekday.FRIDAY


class InOrder:

    def shuffle(self, seq):
        pass


def timetable():
    return ClassTimetable('10A', {MON: ['Math'], TUE: ['German'], WED: ['English'], THU: [], FRI: []})


def exam(id, subject, week=None, day=None, pinned=False, class_name='10A'):
    return Exam(id=id, class_name=class_name, subject=subject, is_pinned=pinned,
                assigned_week_id=week, assigned_day=day)


class TestAutoFix(unittest.TestCase):

    def test_scenario_b_third_exam_stays_unassigned(self):
        exams = [
            exam('a', 'Math', 'W1', MON, pinned=True),
            exam('b', 'German', 'W1', TUE, pinned=True),
            exam('c', 'English'),
        ]
        fixed = auto_fix(exams, [timetable()], [Week('W1', 10, 2025)], {}, rng=random.Random(0))
        self.assertEqual(len(fixed), 3)
        self.assertEqual(fixed[2].id, 'c')
        self.assertFalse(fixed[2].is_assigned)

    def test_scenario_b_unpinned_first_come_first_served(self):
        exams = [exam('a', 'Math', 'W1', MON), exam('b', 'German', 'W1', TUE), exam('c', 'English')]
        fixed = auto_fix(exams, [timetable()], [Week('W1', 10, 2025)], {}, rng=random.Random(0))
        self.assertEqual([e.id for e in fixed], ['a', 'b', 'c'])
        self.assertEqual((fixed[0].assigned_week_id, fixed[0].assigned_day), ('W1', MON))
        self.assertEqual((fixed[1].assigned_week_id, fixed[1].assigned_day), ('W1', TUE))
        self.assertFalse(fixed[2].is_assigned)

    def test_scenario_c_pin_overrides_block_and_occupies_slot(self):
        weeks = [Week('W1', 10, 2025)]
        pinned = exam('p', 'English', 'W1', MON, pinned=True)
        tt = ClassTimetable('10A', {MON: ['Math', 'English']})
        fixed = auto_fix([pinned, exam('m', 'Math')], [tt], weeks, {'W1': {MON: True}})
        self.assertIs(fixed[0], pinned)
        self.assertEqual((fixed[0].assigned_week_id, fixed[0].assigned_day), ('W1', MON))
        self.assertFalse(fixed[1].is_assigned)

    def test_pinned_slot_counts_for_collision(self):
        tt = ClassTimetable('10A', {MON: ['Math', 'English']})
        pinned = exam('p', 'English', 'W1', MON, pinned=True)
        fixed = auto_fix([exam('m', 'Math', 'W1', MON), pinned], [tt], [Week('W1', 10, 2025)], {})
        self.assertEqual([e.id for e in fixed], ['p', 'm'])
        self.assertFalse(fixed[1].is_assigned)

    def test_pinned_exams_count_toward_cap(self):
        weeks = [Week('W1', 10, 2025), Week('W2', 11, 2025)]
        exams = [
            exam('p1', 'Math', 'W1', MON, pinned=True),
            exam('p2', 'German', 'W1', TUE, pinned=True),
            exam('e', 'English', 'W1', WED),
        ]
        fixed = auto_fix(exams, [timetable()], weeks, {}, rng=random.Random(5))
        self.assertEqual((fixed[2].assigned_week_id, fixed[2].assigned_day), ('W2', WED))

    def test_fully_pinned_set_is_unchanged(self):
        exams = [
            exam('a', 'Math', 'W1', FRI, pinned=True),
            exam('b', 'German', pinned=True),
            exam('c', 'English', 'W9', MON, pinned=True),
        ]
        fixed = auto_fix(exams, [timetable()], [Week('W1', 10, 2025)], {'W1': {FRI: True}})
        self.assertEqual(fixed, exams)
        self.assertTrue(all(a is b for a, b in zip(fixed, exams)))

    def test_pinned_first_then_input_order(self):
        exams = [
            exam('u1', 'Math', 'W1', MON),
            exam('p1', 'German', 'W1', TUE, pinned=True),
            exam('u2', 'English'),
        ]
        fixed = auto_fix(exams, [timetable()], [Week('W1', 10, 2025), Week('W2', 11, 2025)], {})
        self.assertEqual([e.id for e in fixed], ['p1', 'u1', 'u2'])

    def test_unknown_class_kept_unassigned(self):
        exams = [exam('x', 'Math', 'W1', MON, class_name='gone'), exam('a', 'Math')]
        fixed = auto_fix(exams, [timetable()], [Week('W1', 10, 2025)], {})
        self.assertEqual(len(fixed), 2)
        self.assertEqual(fixed[0].id, 'x')
        self.assertFalse(fixed[0].is_assigned)
        self.assertTrue(fixed[1].is_assigned)

    def test_moves_exams_out_of_newly_blocked_week(self):
        weeks = [Week('W1', 10, 2025, is_blocked=True), Week('W2', 11, 2025)]
        fixed = auto_fix([exam('a', 'Math', 'W1', MON)], [timetable()], weeks, {}, rng=InOrder())
        self.assertEqual((fixed[0].assigned_week_id, fixed[0].assigned_day), ('W2', MON))

    def test_input_list_untouched(self):
        exams = [exam('a', 'Math', 'W1', MON), exam('b', 'German', 'W1', TUE)]
        before = list(exams)
        auto_fix(exams, [timetable()], [Week('W2', 11, 2025)], {})
        self.assertEqual(exams, before)

    def test_length_and_invariants_preserved(self):
        rng = random.Random(11)
        tt = ClassTimetable('10A', {MON: ['Math', 'Art'], TUE: ['German', 'Art'], WED: ['English'],
                                    THU: ['Math', 'Biology'], FRI: ['German', 'Biology']})
        weeks = [Week(f'W{i}', i, 2025) for i in range(1, 4)]
        exams = [exam(str(i), s) for i, s in enumerate(['Math', 'Art', 'German', 'English', 'Biology',
                                                          'Math', 'German', 'Art'])]
        exams[0] = exam('0', 'Math', 'W2', MON, pinned=True)
        fixed = auto_fix(exams, [tt], weeks, {}, rng=rng)
        self.assertEqual(len(fixed), len(exams))
        self.assertEqual(sorted(e.id for e in fixed), sorted(e.id for e in exams))
        self.assertTrue(week_cap_ok(fixed))
        self.assertTrue(day_collisions_ok(fixed))


if __name__ == '__main__':
    unittest.main()
