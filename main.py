import argparse
import logging
import random
from datetime import date

from klausurplan.algorithms.greedy import distribute_exams
from klausurplan.algorithms.repair import auto_fix
from klausurplan.dates import weeks_between
from klausurplan.io_utils import PlannerState, load_state, load_timetables, save_exams_csv, save_state
from klausurplan.models import PdfSettings, PlacementParams
from klausurplan.scheduling.edits import default_selection, merge_timetables
from klausurplan.scheduling.evaluation import summary


def _parse_date(s: str) -> date:
    try:
        return date.fromisoformat(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO date: {s!r}")


def build_state(args) -> PlannerState:
    state = load_state(args.state) if args.state else PlannerState()
    if args.timetables:
        imported = load_timetables(args.timetables)
        state.classes = merge_timetables(state.classes, imported)
        selection = default_selection(imported)
        state.selected_subjects = {**state.selected_subjects, **selection}
    if args.start or args.end:
        if not (args.start and args.end):
            raise SystemExit("--start and --end must be given together")
        state.weeks = weeks_between(args.start, args.end)
    return state


def main():
    p = argparse.ArgumentParser(description="Klausurplan – exam week planner")
    # Inputs
    p.add_argument('--state', type=str, help='Planner JSON document (classes, weeks, exams, blocks, selection)')
    p.add_argument('--timetables', type=str, help='Timetable JSON to import (object or list with className/subjects)')
    p.add_argument('--start', type=_parse_date, help='First day of the exam period (YYYY-MM-DD)')
    p.add_argument('--end', type=_parse_date, help='Last day of the exam period (YYYY-MM-DD)')

    # Algo
    p.add_argument('--mode', type=str, default='distribute', help='distribute | autofix')
    p.add_argument('--max_per_week', type=int, default=2)
    p.add_argument('--duration', type=int, default=90, help='Duration of new exams in minutes')
    p.add_argument('--seed', type=int, default=None, help='Seed for the weekday shuffle')

    # Output
    p.add_argument('--out_state', type=str, default='klausurplan.json')
    p.add_argument('--out_csv', type=str, default=None)
    p.add_argument('--out_pdf', type=str, default=None)
    p.add_argument('--pdf_title', type=str, default='Klausurplanung')
    p.add_argument('--makeup_info', type=str, default=None)
    p.add_argument('--grades_due', type=str, default=None)
    p.add_argument('-v', '--verbose', action='store_true')
    args = p.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    if not (args.state or args.timetables):
        raise SystemExit("Provide --state or --timetables")
    try:
        state = build_state(args)
    except (OSError, ValueError) as e:
        raise SystemExit(f"Could not read input: {e}")
    if not state.weeks:
        raise SystemExit("No weeks to plan; give --start/--end or a --state with weeks")

    params = PlacementParams(max_per_week=args.max_per_week, duration_minutes=args.duration, seed=args.seed)
    rng = random.Random(params.seed)

    if args.mode == 'distribute':
        state.exams = distribute_exams(state.classes, state.weeks, state.blocked_days, state.selected_subjects,
                                       state.blocked_class_days, rng=rng, max_per_week=params.max_per_week,
                                       duration_minutes=params.duration_minutes)
    elif args.mode == 'autofix':
        if not state.exams:
            raise SystemExit("Nothing to fix: the state has no exams. Run --mode distribute first.")
        state.exams = auto_fix(state.exams, state.classes, state.weeks, state.blocked_days,
                               state.blocked_class_days, rng=rng, max_per_week=params.max_per_week)
    else:
        raise SystemExit("Unknown --mode. Use distribute | autofix")

    print(summary(state.exams, state.classes, state.weeks, state.blocked_days,
                  state.blocked_class_days, params.max_per_week))

    save_state(args.out_state, state)
    saved = [args.out_state]
    if args.out_csv:
        save_exams_csv(args.out_csv, state.exams, state.weeks)
        saved.append(args.out_csv)
    if args.out_pdf:
        from klausurplan.pdf_export import export_to_pdf
        export_to_pdf(state, args.out_pdf, PdfSettings(title=args.pdf_title, makeup_exam_info=args.makeup_info,
                                                       grades_due_date=args.grades_due))
        saved.append(args.out_pdf)
    print(f"Saved: {', '.join(saved)}")


if __name__ == '__main__':
    main()
